from math import isclose

import pytest

from docegestao.domain.formulas import (
    calcular_cmv,
    cmv_percentual,
    custo_unidade_ingrediente,
    custo_unitario,
    margem_percentual,
    margem_sobre_faturamento,
    percentual_meta,
    ponto_equilibrio,
    preco_ideal,
)


def test_custo_unidade_ingrediente():
    # 1 kg de farinha (1000 g) por R$ 5,00 -> R$ 0,005/g
    assert isclose(custo_unidade_ingrediente(5.0, 1000), 0.005)
    assert custo_unidade_ingrediente(5.0, 0) == 0.0
    assert custo_unidade_ingrediente(5.0, None) == 0.0


@pytest.mark.parametrize("rendimento", [0, None, -2])
def test_custo_unitario_rendimento_invalido_conta_como_um(rendimento):
    assert custo_unitario(12.0, rendimento) == 12.0


def test_custo_unitario_divide_pelo_rendimento():
    assert isclose(custo_unitario(3.5, 7), 0.5)


def test_margem_e_cmv_percentual():
    assert isclose(margem_percentual(10.0, 4.0), 60.0)
    assert isclose(cmv_percentual(10.0, 4.0), 40.0)


@pytest.mark.parametrize("preco,custo", [(0, 4.0), (-1, 4.0), (10.0, 0), (10.0, -1)])
def test_margem_zero_sem_preco_ou_custo(preco, custo):
    assert margem_percentual(preco, custo) == 0.0
    assert cmv_percentual(preco, custo) == 0.0


def test_margem_negativa_quando_custo_supera_preco():
    assert isclose(margem_percentual(4.0, 5.0), -25.0)


def test_preco_ideal():
    # custo 4, margem 60% -> 4 / 0.4 = 10
    assert isclose(preco_ideal(4.0, 60), 10.0)
    assert preco_ideal(0.0, 60) == 0.0
    assert preco_ideal(4.0, 100) == 0.0


def test_calcular_cmv_respeita_percentual_zero():
    assert isclose(calcular_cmv(10000, 30), 3000.0)
    assert calcular_cmv(10000, 0) == 0.0


def test_margem_sobre_faturamento():
    assert isclose(margem_sobre_faturamento(2500, 10000), 25.0)
    assert margem_sobre_faturamento(-500, 0) == 0.0
    assert margem_sobre_faturamento(100, -10) == 0.0


def test_ponto_equilibrio_sem_faturamento_retorna_custos_fixos():
    assert ponto_equilibrio(0, 0, 1000, 0, 0) == 1000


def test_ponto_equilibrio_caso_normal():
    # variavel_total = 2000 + 1000; mc = 9000 - 3000 = 6000; indice = 0.6
    pe = ponto_equilibrio(10000, 9000, 3000, 2000, 1000)
    assert isclose(pe, 5000.0)


def test_ponto_equilibrio_liquido_nao_cobre_variaveis():
    assert ponto_equilibrio(10000, 2500, 3000, 2000, 1000) == 3000


@pytest.mark.parametrize(
    "acumulado,alvo,esperado",
    [(0, 1000, 0.0), (250, 1000, 25.0), (1000, 1000, 100.0), (1500, 1000, 100.0), (10, 0, 0.0)],
)
def test_percentual_meta_limitado_a_cem(acumulado, alvo, esperado):
    assert isclose(percentual_meta(acumulado, alvo), esperado)

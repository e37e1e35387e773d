from math import isclose

import pytest

from docegestao.domain.models import Configuracoes
from docegestao.domain.taxas import calcular_taxa, calcular_valor_liquido, taxa_percentual
from docegestao.infra.repositories import configuracoes_padrao


CONFIG = Configuracoes(taxas={"pix": 0.99, "debito": 1.5, "credito": 3.5})


@pytest.mark.parametrize("forma", ["dinheiro", "pix", "debito", "credito"])
@pytest.mark.parametrize("valor", [0.0, 1.0, 37.9, 1000.0])
def test_liquido_mais_taxa_igual_bruto(forma, valor):
    taxa = calcular_taxa(CONFIG, forma, valor)
    liquido = calcular_valor_liquido(CONFIG, forma, valor)
    assert isclose(liquido + taxa, valor, abs_tol=1e-9)
    assert taxa >= 0


def test_dinheiro_nunca_tem_taxa():
    config = Configuracoes(taxas={"dinheiro": 10.0})
    assert calcular_taxa(config, "dinheiro", 100.0) == 0.0
    assert taxa_percentual(config, "dinheiro") == 0.0


def test_credito_com_taxa_padrao():
    config = configuracoes_padrao()
    assert isclose(calcular_taxa(config, "credito", 100.0), 3.5)
    assert isclose(calcular_valor_liquido(config, "credito", 100.0), 96.5)
    assert calcular_taxa(config, "pix", 100.0) == 0.0


def test_forma_sem_taxa_configurada_vale_zero():
    config = Configuracoes(taxas={"credito": 3.5})
    assert calcular_taxa(config, "debito", 50.0) == 0.0
    assert calcular_valor_liquido(config, "debito", 50.0) == 50.0


def test_valor_negativo_passa_pela_mesma_conta():
    assert isclose(calcular_taxa(CONFIG, "credito", -100.0), -3.5)
    assert isclose(calcular_valor_liquido(CONFIG, "credito", -100.0), -96.5)

from datetime import date

import pytest

from docegestao.domain.models import ContaPagar, Meta
from docegestao.domain.policies import (
    data_validade_producao,
    meses_restantes,
    meta_ativa,
    status_conta,
    status_margem,
    status_validade,
)

HOJE = date(2025, 3, 15)


@pytest.mark.parametrize(
    "validade,esperado",
    [
        (date(2025, 3, 14), ("vencido", -1)),
        (date(2025, 3, 15), ("proximo", 0)),
        (date(2025, 3, 17), ("proximo", 2)),
        (date(2025, 3, 18), ("valido", 3)),
        (None, ("valido", None)),
    ],
)
def test_status_validade(validade, esperado):
    assert status_validade(validade, HOJE) == esperado


@pytest.mark.parametrize(
    "margem,esperado",
    [(65.0, "bom"), (60.0, "bom"), (42.0, "atencao"), (41.9, "ruim"), (-10.0, "ruim")],
)
def test_status_margem(margem, esperado):
    assert status_margem(margem, 60.0) == esperado


def test_status_conta():
    def conta(venc, pago=False):
        return ContaPagar(id="c", descricao="Luz", categoria_id=None, valor=100.0, data_vencimento=venc, pago=pago)

    assert status_conta(conta(date(2025, 3, 1), pago=True), HOJE) == "paga"
    assert status_conta(conta(date(2025, 3, 14)), HOJE) == "vencida"
    assert status_conta(conta(HOJE), HOJE) == "vence_hoje"
    assert status_conta(conta(date(2025, 3, 16)), HOJE) == "pendente"


def test_meta_ativa_ate_atingir_o_alvo():
    assert meta_ativa(999.99, 1000) is True
    assert meta_ativa(1000, 1000) is False
    assert meta_ativa(1200, 1000) is False


def test_meses_restantes():
    meta = Meta(id="m", tipo="investimento", nome="Forno", valor_meta=5000, data_fim=date(2025, 6, 14))
    assert meses_restantes(meta, HOJE) == 2
    assert meses_restantes(meta, date(2025, 7, 1)) == 0
    sem_fim = Meta(id="m", tipo="investimento", nome="Forno", valor_meta=5000)
    assert meses_restantes(sem_fim, HOJE) is None


def test_data_validade_producao():
    assert data_validade_producao(date(2025, 2, 27), 3) == date(2025, 3, 2)
    assert data_validade_producao(date(2025, 2, 27), None) is None
    assert data_validade_producao(date(2025, 2, 27), 0) is None

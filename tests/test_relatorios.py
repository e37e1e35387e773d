from datetime import date

import pytest

from docegestao.infra import logger
from docegestao.usecases.cadastros import criar_categoria_conta, salvar_ingrediente
from docegestao.usecases.caixa import registrar_transacao
from docegestao.usecases.configuracao import adicionar_custo
from docegestao.usecases.contas import adicionar_conta
from docegestao.usecases.metas import criar_meta
from docegestao.usecases.relatorios import (
    painel,
    relatorio_despesas_categoria,
    relatorio_evolucao,
    resultado,
)


def _seed(db_path):
    adicionar_custo("fixo", "Aluguel", 1000.0, db_path=db_path)
    registrar_transacao("receita", "Encomenda", 2000.0, forma_pagamento="pix", data="2025-03-05", db_path=db_path)
    registrar_transacao("receita", "Bolo", 100.0, forma_pagamento="credito", data="2025-03-15", db_path=db_path)
    registrar_transacao("receita", "Doces", 1000.0, forma_pagamento="dinheiro", data="2025-04-10", db_path=db_path)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "docegestao_test.sqlite")


def test_painel_do_mes(db_path):
    _seed(db_path)
    cat = criar_categoria_conta("Insumos", db_path=db_path)
    registrar_transacao("despesa", "Embalagens", 50.0, data="2025-03-10", categoria_id=cat["id"], db_path=db_path)
    adicionar_conta("Internet", 99.9, "2025-03-20", db_path=db_path)
    adicionar_conta("Luz", 120.0, "2025-03-15", db_path=db_path)
    salvar_ingrediente({"nome": "Farinha", "quantidade_embalagem": 1000, "unidade": "g",
                        "preco_embalagem": 6.0, "estoque_atual": 0, "estoque_minimo": 1}, db_path=db_path)
    criar_meta("Forno novo", 5000.0, tipo="investimento", data_inicio="2025-01-01", db_path=db_path)

    p = painel(hoje=date(2025, 3, 15), db_path=db_path)
    assert p["mes"] == "2025-03"
    assert p["faturamento_dia"] == pytest.approx(100.0)
    assert p["faturamento_mes"] == pytest.approx(2100.0)
    assert p["faturamento_liquido_mes"] == pytest.approx(2096.5)
    assert p["despesas_mes"] == pytest.approx(50.0)
    assert p["cmv"] == pytest.approx(630.0)
    assert p["custos_fixos"] == pytest.approx(1000.0)
    assert p["lucro_prejuizo"] == pytest.approx(2096.5 - 630.0 - 1000.0 - 50.0)
    # a janela de vencimento começa amanhã
    assert [c["descricao"] for c in p["contas_vencendo"]] == ["Internet"]
    assert [i["nome"] for i in p["estoque_baixo"]] == ["Farinha"]
    assert [m["nome"] for m in p["metas"]] == ["Forno novo"]
    assert p["por_forma_pagamento"] == {"pix": 2000.0, "credito": 100.0}


def test_resultado_com_ponto_de_equilibrio(db_path):
    _seed(db_path)
    r = resultado("2025-04", db_path=db_path)
    assert r["mes"] == "2025-04"
    assert r["faturamento"] == pytest.approx(1000.0)
    assert r["cmv"] == pytest.approx(300.0)
    assert r["lucro"] == pytest.approx(-300.0)
    assert r["margem"] == pytest.approx(-30.0)
    # índice de contribuição (1000 - 300) / 1000 = 0,7
    assert r["ponto_equilibrio"] == pytest.approx(1000.0 / 0.7)


def test_resultado_sem_faturamento(db_path):
    adicionar_custo("fixo", "Aluguel", 1000.0, db_path=db_path)
    r = resultado("2025-01", db_path=db_path)
    assert r["margem"] == 0.0
    assert r["ponto_equilibrio"] == pytest.approx(1000.0)


def test_relatorio_evolucao(db_path):
    _seed(db_path)
    cols, rows, msg = relatorio_evolucao("2025-02", "2025-04", db_path=db_path)
    assert msg is None
    assert cols[0] == "Mês"
    assert [r[0] for r in rows] == ["2025-02", "2025-03", "2025-04", "Total"]
    total = rows[-1]
    assert total[1] == pytest.approx(3100.0)
    # custos fixos entram uma vez por mês
    assert total[4] == pytest.approx(3000.0)
    assert total[7] is None


def test_relatorios_nao_gravam_log_com_logging_desligado(db_path, tmp_path, monkeypatch):
    arquivo = tmp_path / "system.log"
    monkeypatch.setattr(logger, "ENABLE_LOGGING", False)
    monkeypatch.setattr(logger, "ENABLE_OUTPUT", False)
    monkeypatch.setattr(logger, "system_logger", logger.setup_logger("docegestao.test.relatorios", str(arquivo)))
    _seed(db_path)

    resultado("2025-03", db_path=db_path)
    relatorio_evolucao("2025-02", "2025-04", db_path=db_path)
    assert not arquivo.exists()


def test_relatorio_evolucao_intervalo_invertido(db_path):
    cols, rows, msg = relatorio_evolucao("2025-04", "2025-02", db_path=db_path)
    assert rows == []
    assert "Intervalo vazio" in msg


def test_relatorio_despesas_categoria(db_path):
    adicionar_custo("fixo", "Aluguel", 1000.0, db_path=db_path)
    cat = criar_categoria_conta("Insumos", db_path=db_path)
    registrar_transacao("despesa", "Açúcar", 250.0, data="2025-03-10", categoria_id=cat["id"], db_path=db_path)
    registrar_transacao("despesa", "Sem categoria", 999.0, data="2025-03-10", db_path=db_path)

    cols, rows, msg = relatorio_despesas_categoria("2025-03", "2025-04", db_path=db_path)
    assert cols == ["Categoria", "Valor", "% do total"]
    assert msg is None
    assert rows[0][:2] == ["Custos Fixos", pytest.approx(2000.0)]
    assert rows[1][0] == "Insumos"
    assert rows[1][2] == pytest.approx(250.0 / 2250.0 * 100.0)


def test_relatorio_despesas_vazio(db_path):
    _, rows, msg = relatorio_despesas_categoria("2025-03", "2025-03", db_path=db_path)
    assert rows == []
    assert msg == "Nenhuma despesa no período."

"""
Tests for the cash book (caixa) and bills payable (contas) use cases
against a temporary SQLite database.
"""

from datetime import date

import pandas as pd
import pytest

from docegestao.usecases.cadastros import criar_categoria_conta
from docegestao.usecases.caixa import (
    excluir_transacao,
    importar_transacoes_xlsx,
    registrar_transacao,
    resumo_do_dia,
)
from docegestao.usecases.configuracao import atualizar_configuracoes
from docegestao.usecases.contas import (
    adicionar_conta,
    alternar_pagamento,
    excluir_conta,
    gastos_categorias,
    listar_contas,
)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "docegestao_test.sqlite")


def test_registrar_transacao_calcula_taxa_com_padroes(db_path):
    rec = registrar_transacao("receita", "Bolo de pote", 100.0, forma_pagamento="credito",
                              data="2025-03-05", db_path=db_path)
    assert rec["taxa_descontada"] == pytest.approx(3.5)
    assert rec["valor_liquido"] == pytest.approx(96.5)
    assert rec["data"] == "2025-03-05"

    pix = registrar_transacao("receita", "Brigadeiros", 50.0, forma_pagamento="pix", data="2025-03-05",
                              db_path=db_path)
    assert pix["taxa_descontada"] == 0.0
    assert pix["valor_liquido"] == 50.0


def test_taxa_gravada_nao_muda_com_nova_configuracao(db_path):
    registrar_transacao("receita", "Torta", 200.0, forma_pagamento="debito", data="2025-03-05", db_path=db_path)
    atualizar_configuracoes(taxa_debito=5.0, db_path=db_path)
    registrar_transacao("receita", "Torta", 200.0, forma_pagamento="debito", data="2025-03-05", db_path=db_path)

    taxas = sorted(t["taxa_descontada"] for t in resumo_do_dia(date(2025, 3, 5), db_path=db_path)["transacoes"])
    assert taxas == pytest.approx([3.0, 10.0])


def test_registrar_transacao_invalida(db_path):
    with pytest.raises(ValueError, match="tipo"):
        registrar_transacao("transferencia", "X", 10.0, db_path=db_path)
    with pytest.raises(ValueError, match="forma_pagamento"):
        registrar_transacao("receita", "X", 10.0, forma_pagamento="boleto", db_path=db_path)
    with pytest.raises(ValueError, match="descrição"):
        registrar_transacao("receita", "  ", 10.0, db_path=db_path)


def test_resumo_do_dia(db_path):
    registrar_transacao("receita", "Bolo", 100.0, forma_pagamento="credito", data="2025-03-05", db_path=db_path)
    registrar_transacao("receita", "Doces", 40.0, forma_pagamento="dinheiro", data="2025-03-05", db_path=db_path)
    registrar_transacao("despesa", "Gás", 90.0, data="2025-03-05", db_path=db_path)
    outro = registrar_transacao("receita", "Ontem", 500.0, data="2025-03-04", db_path=db_path)

    r = resumo_do_dia(date(2025, 3, 5), db_path=db_path)
    assert r["data"] == "2025-03-05"
    assert r["faturamento"] == pytest.approx(140.0)
    assert r["despesas"] == pytest.approx(90.0)
    assert r["saldo"] == pytest.approx(50.0)
    assert r["receitas_por_forma"]["credito"] == pytest.approx(100.0)
    assert len(r["transacoes"]) == 3

    excluir_transacao(outro["id"], db_path=db_path)
    assert resumo_do_dia(date(2025, 3, 4), db_path=db_path)["faturamento"] == 0.0
    with pytest.raises(ValueError):
        excluir_transacao(outro["id"], db_path=db_path)


def test_importar_transacoes_xlsx(db_path, tmp_path):
    path = tmp_path / "caixa.xlsx"
    pd.DataFrame({
        "Data": ["05/03/2025", "05/03/2025", "05/03/2025"],
        "Tipo": ["Venda", "Venda", "transferência"],
        "Descrição": ["Bolo", "Sem valor", "Outro"],
        "Valor": ["R$ 100,00", "abc", "10"],
        "Forma de Pagamento": ["Crédito", "pix", "dinheiro"],
    }).to_excel(path, index=False)

    res = importar_transacoes_xlsx(str(path), db_path=db_path)
    assert res["importadas"] == 1
    assert [e["linha"] for e in res["erros"]] == [3, 4]
    assert "valor" in res["erros"][0]["erro"]

    (t,) = resumo_do_dia(date(2025, 3, 5), db_path=db_path)["transacoes"]
    assert t["forma_pagamento"] == "credito"
    assert t["valor_liquido"] == pytest.approx(96.5)


def test_importar_transacoes_xlsx_data_invalida_vira_erro(db_path, tmp_path):
    path = tmp_path / "caixa.xlsx"
    pd.DataFrame({
        "Data": ["32/13/2025", None],
        "Tipo": ["Venda", "Venda"],
        "Descrição": ["Bolo", "Sem data"],
        "Valor": ["100", "20"],
        "Forma de Pagamento": ["pix", "pix"],
    }).to_excel(path, index=False)

    res = importar_transacoes_xlsx(str(path), db_path=db_path)
    # célula vazia assume hoje; data ilegível não
    assert res["importadas"] == 1
    (erro,) = res["erros"]
    assert erro["linha"] == 2
    assert "data" in erro["erro"]

    (t,) = resumo_do_dia(date.today(), db_path=db_path)["transacoes"]
    assert t["descricao"] == "Sem data"


def test_contas_status_e_pagamento(db_path):
    cat = criar_categoria_conta("Energia", tipo="fixa", limite_gasto=100.0, db_path=db_path)
    luz = adicionar_conta("Luz", 120.0, "2025-03-10", categoria_id=cat["id"], db_path=db_path)
    adicionar_conta("Internet", 99.9, "2025-03-12", db_path=db_path)
    adicionar_conta("Aluguel", 1500.0, "2025-04-05", db_path=db_path)

    hoje = date(2025, 3, 12)
    lista = listar_contas(mes="2025-03", hoje=hoje, db_path=db_path)
    assert lista["mes"] == "2025-03"
    assert {c["descricao"]: c["status"] for c in lista["contas"]} == {"Luz": "vencida", "Internet": "vence_hoje"}
    assert lista["total_pago"] == 0.0

    pago = alternar_pagamento(luz["id"], hoje=hoje, db_path=db_path)
    assert pago["pago"] is True
    assert pago["data_pagamento"] == "2025-03-12"

    lista = listar_contas(mes="2025-03", hoje=hoje, db_path=db_path)
    assert lista["total_pago"] == pytest.approx(120.0)
    assert lista["total_pendente"] == pytest.approx(99.9)
    assert next(c for c in lista["contas"] if c["descricao"] == "Luz")["categoria"] == "Energia"

    desfeito = alternar_pagamento(luz["id"], hoje=hoje, db_path=db_path)
    assert desfeito["pago"] is False
    assert desfeito["data_pagamento"] is None


def test_conta_invalida(db_path):
    with pytest.raises(ValueError, match="vencimento"):
        adicionar_conta("Luz", 120.0, None, db_path=db_path)
    with pytest.raises(ValueError, match="valor"):
        adicionar_conta("Luz", -1, "2025-03-10", db_path=db_path)
    with pytest.raises(ValueError):
        excluir_conta("nao-existe", db_path=db_path)


def test_gastos_categorias_com_limite(db_path):
    cat = criar_categoria_conta("Energia", tipo="fixa", limite_gasto=100.0, db_path=db_path)
    criar_categoria_conta("Marketing", db_path=db_path)
    luz = adicionar_conta("Luz", 120.0, "2025-03-10", categoria_id=cat["id"], db_path=db_path)
    alternar_pagamento(luz["id"], hoje=date(2025, 3, 10), db_path=db_path)
    registrar_transacao("despesa", "Gerador", 30.0, data="2025-03-11", categoria_id=cat["id"], db_path=db_path)

    energia, marketing = gastos_categorias("2025-03", db_path=db_path)
    assert energia["nome"] == "Energia"
    assert energia["gasto"] == pytest.approx(150.0)
    assert energia["percentual_limite"] == pytest.approx(150.0)
    assert energia["excedido"] is True
    assert marketing["gasto"] == 0.0
    assert marketing["limite"] is None
    assert marketing["excedido"] is False

from datetime import date, datetime
from math import isclose

import pytest

from docegestao.domain.models import (
    CategoriaConta,
    Configuracoes,
    ContaPagar,
    CustoItem,
    Ingrediente,
    Meta,
    SistemaData,
    TransacaoDiaria,
)
from docegestao.domain.periodos import (
    contas_vencendo,
    despesas_por_categoria,
    filtrar_por_periodo,
    gastos_por_categoria,
    painel_mensal,
    resultado_mensal,
    resultados_periodo,
    resumo_diario,
    totais_periodo,
)


HOJE = date(2025, 3, 15)


def _t(id_, data, tipo, valor, forma="dinheiro", liquido=None, categoria_id=None):
    return TransacaoDiaria(
        id=id_, data=data, tipo=tipo, descricao=id_, valor=valor, forma_pagamento=forma,
        taxa_descontada=valor - (valor if liquido is None else liquido),
        valor_liquido=valor if liquido is None else liquido, categoria_id=categoria_id,
    )


def _conta(id_, vencimento, valor=100.0, pago=False, pagamento=None, categoria_id=None):
    return ContaPagar(id=id_, descricao=id_, categoria_id=categoria_id, valor=valor,
                      data_vencimento=vencimento, pago=pago, data_pagamento=pagamento)


def _config(cmv=30.0, fixos=1000.0, variaveis=500.0):
    return Configuracoes(
        taxas={"pix": 0.0, "debito": 1.5, "credito": 3.5},
        cmv_percentual_padrao=cmv,
        custos_fixos=[CustoItem(id="f1", nome="Aluguel", valor=fixos)] if fixos else [],
        custos_variaveis=[CustoItem(id="v1", nome="Gás", valor=variaveis)] if variaveis else [],
    )


@pytest.fixture
def dados():
    return SistemaData(
        transacoes=[
            _t("hoje", date(2025, 3, 15), "receita", 100.0),
            _t("cartao", date(2025, 3, 10), "receita", 200.0, forma="credito", liquido=193.0),
            _t("gasto", date(2025, 3, 12), "despesa", 50.0, categoria_id="c1"),
            _t("gasto-sem-cat", date(2025, 3, 12), "despesa", 20.0),
            _t("fev", date(2025, 2, 28), "receita", 999.0),
            _t("abr", date(2025, 4, 1), "receita", 500.0),
        ],
        contas_pagar=[
            _conta("paga-marco", date(2025, 3, 1), 80.0, pago=True, pagamento=date(2025, 3, 5), categoria_id="c1"),
            _conta("paga-fev", date(2025, 2, 10), 70.0, pago=True, pagamento=date(2025, 2, 20)),
            _conta("vence-hoje", date(2025, 3, 15)),
            _conta("vence-20", date(2025, 3, 20)),
            _conta("vence-22", date(2025, 3, 22)),
            _conta("vence-23", date(2025, 3, 23)),
        ],
        categorias_conta=[CategoriaConta(id="c1", nome="Insumos", limite_gasto=100.0)],
        ingredientes=[
            Ingrediente(id="i1", nome="Farinha", quantidade_embalagem=1000, unidade="g", preco_embalagem=5.0,
                        estoque_atual=2, estoque_minimo=5),
            Ingrediente(id="i2", nome="Açúcar", quantidade_embalagem=1000, unidade="g", preco_embalagem=4.0,
                        estoque_atual=5, estoque_minimo=5),
            Ingrediente(id="i3", nome="Leite", quantidade_embalagem=1, unidade="L", preco_embalagem=6.0,
                        estoque_atual=6, estoque_minimo=5),
        ],
        metas=[
            Meta(id="m1", tipo="faturamento", nome="Março", valor_meta=1000.0, valor_acumulado=500.0),
            Meta(id="m2", tipo="investimento", nome="Forno", valor_meta=1000.0, valor_acumulado=1500.0),
            Meta(id="m3", tipo="investimento", nome="Batedeira", valor_meta=800.0, valor_acumulado=800.0, ativa=False),
        ],
        configuracoes=_config(),
    )


def test_filtrar_por_periodo_inclusivo_e_por_dia():
    ts = [
        _t("a", date(2025, 3, 1), "receita", 1.0),
        _t("b", datetime(2025, 3, 31, 23, 59), "receita", 1.0),
        _t("c", "2025-04-01T00:30:00Z", "receita", 1.0),
    ]
    ids = [t.id for t in filtrar_por_periodo(ts, date(2025, 3, 1), date(2025, 3, 31))]
    assert ids == ["a", "b"]


def test_resumo_diario(dados):
    r = resumo_diario(dados, date(2025, 3, 12))
    assert r.faturamento == 0.0
    assert r.despesas == 70.0
    assert r.saldo == -70.0

    r = resumo_diario(dados, "2025-03-15")
    assert r.faturamento == 100.0
    assert r.receitas_por_forma == {"dinheiro": 100.0}


def test_painel_mensal(dados):
    d = painel_mensal(dados, HOJE)
    assert d.faturamento_dia == 100.0
    assert d.faturamento_mes == 300.0
    assert d.faturamento_liquido_mes == 293.0
    # despesas: 50 + 20 das transações + 80 da conta paga em março
    assert d.despesas_mes == 150.0
    assert d.custos_fixos == 1000.0
    assert d.custos_variaveis == 500.0
    assert isclose(d.cmv, 90.0)
    assert isclose(d.lucro_prejuizo, 293.0 - 90.0 - 1000.0 - 500.0 - 150.0)
    assert isclose(d.margem_lucro, d.lucro_prejuizo / 300.0 * 100.0)
    assert d.resumo_por_forma_pagamento == {"dinheiro": 100.0, "credito": 200.0}


def test_painel_listas(dados):
    d = painel_mensal(dados, HOJE)
    assert [c.id for c in d.contas_vencendo] == ["vence-20", "vence-22"]
    assert [i.id for i in d.ingredientes_estoque_baixo] == ["i1", "i2"]
    progresso = {p.meta.id: p.percentual for p in d.progresso_metas}
    assert progresso == {"m1": 50.0, "m2": 100.0}


def test_painel_sem_faturamento_margem_zero():
    d = painel_mensal(SistemaData(configuracoes=_config()), HOJE)
    assert d.faturamento_mes == 0.0
    assert d.lucro_prejuizo == -1500.0
    assert d.margem_lucro == 0.0


def test_agregadores_idempotentes(dados):
    assert painel_mensal(dados, HOJE) == painel_mensal(dados, HOJE)
    assert resultado_mensal(dados, "2025-03") == resultado_mensal(dados, "2025-03")


def test_contas_vencendo_janela_de_sete_dias(dados):
    ids = [c.id for c in contas_vencendo(dados.contas_pagar, HOJE)]
    assert "vence-hoje" not in ids
    assert "vence-23" not in ids
    assert [c.id for c in contas_vencendo(dados.contas_pagar, HOJE, dias=8)] == ["vence-20", "vence-22", "vence-23"]


def test_resultado_mensal_ponto_equilibrio_normal():
    dados = SistemaData(
        transacoes=[_t("venda", date(2025, 5, 10), "receita", 10000.0, forma="credito", liquido=9000.0)],
        configuracoes=_config(cmv=10.0, fixos=3000.0, variaveis=2000.0),
    )
    r = resultado_mensal(dados, "2025-05")
    assert r.mes == "2025-05"
    assert r.faturamento == 10000.0
    assert r.faturamento_liquido == 9000.0
    assert isclose(r.cmv, 1000.0)
    assert isclose(r.lucro, 3000.0)
    assert isclose(r.margem, 30.0)
    assert isclose(r.ponto_equilibrio, 5000.0)


def test_resultado_mensal_sem_receita_ponto_equilibrio_e_custo_fixo():
    dados = SistemaData(configuracoes=_config(fixos=1000.0, variaveis=0))
    r = resultado_mensal(dados, "2025-05")
    assert r.ponto_equilibrio == 1000.0
    assert r.margem == 0.0
    assert r.lucro == -1000.0


def test_resultado_mensal_cmv_zero_configurado():
    dados = SistemaData(
        transacoes=[_t("venda", date(2025, 5, 10), "receita", 1000.0)],
        configuracoes=_config(cmv=0.0, fixos=0, variaveis=0),
    )
    r = resultado_mensal(dados, "2025-05")
    assert r.cmv == 0.0
    assert r.lucro == 1000.0


def test_resultados_periodo_e_totais(dados):
    resultados = resultados_periodo(dados, "2025-02", "2025-04")
    assert [r.mes for r in resultados] == ["2025-02", "2025-03", "2025-04"]
    assert [r.faturamento for r in resultados] == [999.0, 300.0, 500.0]
    totais = totais_periodo(resultados)
    assert totais["faturamento"] == 1799.0
    # custos mensais entram uma vez por mês
    assert totais["custos_fixos"] == 3000.0
    assert totais["custos_variaveis"] == 1500.0


def test_resultados_periodo_invertido_vazio(dados):
    assert resultados_periodo(dados, "2025-04", "2025-02") == []


def test_despesas_por_categoria(dados):
    linhas = despesas_por_categoria(dados, "2025-03", "2025-03")
    assert [(l["nome"], l["valor"]) for l in linhas] == [
        ("Custos Fixos", 1000.0),
        ("Custos Variáveis", 500.0),
        ("Insumos", 50.0),
    ]


def test_gastos_por_categoria_compara_limite(dados):
    (linha,) = gastos_por_categoria(dados, "2025-03")
    assert linha["nome"] == "Insumos"
    assert linha["gasto"] == 130.0
    assert linha["limite"] == 100.0
    assert isclose(linha["percentual_limite"], 130.0)
    assert linha["excedido"] is True

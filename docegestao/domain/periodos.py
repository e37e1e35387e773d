"""
Agregações por período: resumo do dia, painel do mês, resultado mensal
e séries para relatórios.

Regras gerais:
- Datas são comparadas por dia de calendário (``date``), inclusive nas
  duas pontas dos intervalos.
- Custos fixos e variáveis das configurações são um valor mensal fixo:
  entram uma vez por mês de calendário, qualquer que seja o mês
  consultado.
- O CMV é estimado como percentual configurado do faturamento bruto.
- As funções não alteram a fotografia recebida; chamá-las duas vezes
  sobre os mesmos dados produz o mesmo resultado.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from docegestao.config import DEFAULTS
from docegestao.domain.datas import ano_mes, intervalo_mes, meses_no_intervalo, para_data
from docegestao.domain.formulas import (
    calcular_cmv,
    margem_sobre_faturamento,
    percentual_meta,
    ponto_equilibrio,
)
from docegestao.domain.models import (
    Configuracoes,
    ContaPagar,
    DashboardData,
    ProgressoMeta,
    ResultadoMensal,
    ResumoDiario,
    SistemaData,
    TransacaoDiaria,
)


# ----------------------
# filtros
# ----------------------

def filtrar_por_periodo(
    transacoes: Iterable[TransacaoDiaria], inicio: Any, fim: Any
) -> List[TransacaoDiaria]:
    """Transações com data entre ``inicio`` e ``fim`` (inclusivo, por dia)."""
    ini = para_data(inicio)
    end = para_data(fim)
    return [t for t in transacoes if ini <= para_data(t.data) <= end]


def transacoes_do_dia(transacoes: Iterable[TransacaoDiaria], referencia: Any) -> List[TransacaoDiaria]:
    dia = para_data(referencia)
    return filtrar_por_periodo(transacoes, dia, dia)


def transacoes_do_mes(transacoes: Iterable[TransacaoDiaria], referencia: Any) -> List[TransacaoDiaria]:
    inicio, fim = intervalo_mes(referencia)
    return filtrar_por_periodo(transacoes, inicio, fim)


def _receitas(transacoes: Iterable[TransacaoDiaria]) -> List[TransacaoDiaria]:
    return [t for t in transacoes if t.tipo == "receita"]


def _despesas(transacoes: Iterable[TransacaoDiaria]) -> List[TransacaoDiaria]:
    return [t for t in transacoes if t.tipo == "despesa"]


def _por_forma(receitas: Iterable[TransacaoDiaria]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for t in receitas:
        out[t.forma_pagamento] = out.get(t.forma_pagamento, 0.0) + float(t.valor)
    return out


# ----------------------
# custos mensais
# ----------------------

def total_custos_fixos(config: Configuracoes) -> float:
    return sum(float(c.valor) for c in config.custos_fixos)


def total_custos_variaveis(config: Configuracoes) -> float:
    return sum(float(c.valor) for c in config.custos_variaveis)


def _cmv_config(config: Configuracoes) -> float:
    if config.cmv_percentual_padrao is None:
        return DEFAULTS.cmv_percentual
    return float(config.cmv_percentual_padrao)


def contas_pagas_no_mes(contas: Iterable[ContaPagar], referencia: Any) -> List[ContaPagar]:
    """Contas pagas cuja data de pagamento cai no mês de ``referencia``."""
    inicio, fim = intervalo_mes(referencia)
    out = []
    for c in contas:
        pagamento = para_data(c.data_pagamento)
        if c.pago and pagamento is not None and inicio <= pagamento <= fim:
            out.append(c)
    return out


def contas_vencendo(contas: Iterable[ContaPagar], hoje: date, dias: int = DEFAULTS.dias_contas_vencendo) -> List[ContaPagar]:
    """Contas em aberto que vencem depois de hoje e até ``hoje + dias``."""
    limite = hoje + timedelta(days=dias)
    out = [c for c in contas if not c.pago and hoje < para_data(c.data_vencimento) <= limite]
    out.sort(key=lambda c: para_data(c.data_vencimento))
    return out


# ----------------------
# 1) Resumo do dia
# ----------------------

def resumo_diario(dados: SistemaData, referencia: Any) -> ResumoDiario:
    """Faturamento bruto, despesas, saldo e receitas por forma no dia."""
    dia = para_data(referencia)
    do_dia = transacoes_do_dia(dados.transacoes, dia)
    receitas = _receitas(do_dia)
    faturamento = sum(float(t.valor) for t in receitas)
    despesas = sum(float(t.valor) for t in _despesas(do_dia))
    return ResumoDiario(
        data=dia,
        faturamento=faturamento,
        despesas=despesas,
        saldo=faturamento - despesas,
        receitas_por_forma=_por_forma(receitas),
    )


# ----------------------
# 2) Painel do mês
# ----------------------

def painel_mensal(dados: SistemaData, referencia: Any) -> DashboardData:
    """Visão do painel para o mês que contém ``referencia``.

    ``referencia`` também é o "hoje" usado no faturamento do dia e na
    janela de contas a vencer.
    """
    hoje = para_data(referencia)
    config = dados.configuracoes
    do_mes = transacoes_do_mes(dados.transacoes, hoje)
    receitas_mes = _receitas(do_mes)

    faturamento_dia = resumo_diario(dados, hoje).faturamento
    faturamento_mes = sum(float(t.valor) for t in receitas_mes)
    faturamento_liquido_mes = sum(float(t.valor_liquido) for t in receitas_mes)

    # Despesas: transações do tipo despesa + contas pagas no mês
    despesas_transacoes = sum(float(t.valor) for t in _despesas(do_mes))
    despesas_contas = sum(float(c.valor) for c in contas_pagas_no_mes(dados.contas_pagar, hoje))
    despesas_mes = despesas_transacoes + despesas_contas

    custos_fixos = total_custos_fixos(config)
    custos_variaveis = total_custos_variaveis(config)
    cmv = calcular_cmv(faturamento_mes, _cmv_config(config))

    lucro = faturamento_liquido_mes - cmv - custos_fixos - custos_variaveis - despesas_mes

    progresso = [
        ProgressoMeta(meta=m, percentual=percentual_meta(m.valor_acumulado, m.valor_meta))
        for m in dados.metas
        if m.ativa
    ]

    return DashboardData(
        faturamento_dia=faturamento_dia,
        faturamento_mes=faturamento_mes,
        faturamento_liquido_mes=faturamento_liquido_mes,
        despesas_mes=despesas_mes,
        custos_fixos=custos_fixos,
        custos_variaveis=custos_variaveis,
        cmv=cmv,
        lucro_prejuizo=lucro,
        margem_lucro=margem_sobre_faturamento(lucro, faturamento_mes),
        contas_vencendo=contas_vencendo(dados.contas_pagar, hoje),
        ingredientes_estoque_baixo=[
            i for i in dados.ingredientes
            if float(i.estoque_atual or 0.0) <= float(i.estoque_minimo or 0.0)
        ],
        progresso_metas=progresso,
        resumo_por_forma_pagamento=_por_forma(receitas_mes),
    )


# ----------------------
# 3) Resultado mensal (DRE simplificada)
# ----------------------

def resultado_mensal(dados: SistemaData, mes: Any) -> ResultadoMensal:
    """Resultado do mês: Receita líquida - CMV - CF - CV, com ponto de equilíbrio."""
    inicio, _fim = intervalo_mes(mes)
    config = dados.configuracoes
    receitas = _receitas(transacoes_do_mes(dados.transacoes, inicio))

    faturamento = sum(float(t.valor) for t in receitas)
    faturamento_liquido = sum(float(t.valor_liquido) for t in receitas)
    custos_fixos = total_custos_fixos(config)
    custos_variaveis = total_custos_variaveis(config)
    cmv = calcular_cmv(faturamento, _cmv_config(config))
    lucro = faturamento_liquido - cmv - custos_fixos - custos_variaveis

    return ResultadoMensal(
        mes=ano_mes(inicio),
        faturamento=faturamento,
        faturamento_liquido=faturamento_liquido,
        custos_fixos=custos_fixos,
        custos_variaveis=custos_variaveis,
        cmv=cmv,
        lucro=lucro,
        margem=margem_sobre_faturamento(lucro, faturamento),
        ponto_equilibrio=ponto_equilibrio(
            faturamento, faturamento_liquido, custos_fixos, custos_variaveis, cmv
        ),
    )


# ----------------------
# 4) Séries para relatórios
# ----------------------

def resultados_periodo(dados: SistemaData, mes_inicio: Any, mes_fim: Any) -> List[ResultadoMensal]:
    """Um ``ResultadoMensal`` por mês de ``mes_inicio`` a ``mes_fim``."""
    return [resultado_mensal(dados, m) for m in meses_no_intervalo(mes_inicio, mes_fim)]


def totais_periodo(resultados: Iterable[ResultadoMensal]) -> Dict[str, float]:
    campos = ("faturamento", "faturamento_liquido", "lucro", "custos_fixos", "custos_variaveis", "cmv")
    totais = {c: 0.0 for c in campos}
    for r in resultados:
        for c in campos:
            totais[c] += float(getattr(r, c))
    return totais


def despesas_por_categoria(dados: SistemaData, mes_inicio: Any, mes_fim: Any) -> List[Dict[str, Any]]:
    """Despesas do período agrupadas por categoria de conta.

    Transações de despesa sem categoria (ou com categoria inexistente)
    ficam de fora. Custos fixos e variáveis das configurações entram
    como duas linhas próprias, uma vez por mês do período.
    """
    meses = meses_no_intervalo(mes_inicio, mes_fim)
    if not meses:
        return []
    inicio, _ = intervalo_mes(meses[0])
    _, fim = intervalo_mes(meses[-1])
    cats = {c.id: c for c in dados.categorias_conta}

    agg: Dict[str, Dict[str, Any]] = {}
    for t in _despesas(filtrar_por_periodo(dados.transacoes, inicio, fim)):
        cat = cats.get(t.categoria_id) if t.categoria_id else None
        if cat is None:
            continue
        linha = agg.setdefault(cat.id, {"categoria_id": cat.id, "nome": cat.nome, "valor": 0.0, "cor": cat.cor})
        linha["valor"] += float(t.valor)

    fixos = total_custos_fixos(dados.configuracoes) * len(meses)
    if fixos > 0:
        agg["custos_fixos"] = {"categoria_id": "custos_fixos", "nome": "Custos Fixos", "valor": fixos, "cor": "#ef4444"}
    variaveis = total_custos_variaveis(dados.configuracoes) * len(meses)
    if variaveis > 0:
        agg["custos_variaveis"] = {
            "categoria_id": "custos_variaveis", "nome": "Custos Variáveis", "valor": variaveis, "cor": "#f97316",
        }

    return sorted(agg.values(), key=lambda r: r["valor"], reverse=True)


def gastos_por_categoria(dados: SistemaData, mes: Any) -> List[Dict[str, Any]]:
    """Gastos do mês por categoria (despesas + contas pagas que vencem no mês).

    Cada linha traz o limite de gasto da categoria e se ele foi excedido.
    """
    inicio, fim = intervalo_mes(mes)
    gastos: Dict[str, float] = defaultdict(float)
    for t in _despesas(filtrar_por_periodo(dados.transacoes, inicio, fim)):
        if t.categoria_id:
            gastos[t.categoria_id] += float(t.valor)
    for c in dados.contas_pagar:
        if c.pago and c.categoria_id and inicio <= para_data(c.data_vencimento) <= fim:
            gastos[c.categoria_id] += float(c.valor)

    out: List[Dict[str, Any]] = []
    for cat in dados.categorias_conta:
        gasto = gastos.get(cat.id, 0.0)
        limite: Optional[float] = float(cat.limite_gasto) if cat.limite_gasto else None
        out.append(
            {
                "categoria_id": cat.id,
                "nome": cat.nome,
                "tipo": cat.tipo,
                "gasto": gasto,
                "limite": limite,
                "percentual_limite": (gasto / limite * 100.0) if limite else None,
                "excedido": bool(limite) and gasto > limite,
            }
        )
    out.sort(key=lambda r: r["gasto"], reverse=True)
    return out

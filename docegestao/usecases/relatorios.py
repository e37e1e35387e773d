# docegestao/usecases/relatorios.py
"""
Painel e relatórios financeiros:
- painel do mês (faturamento, lucro, contas a vencer, estoque baixo, metas)
- resultado mensal com ponto de equilíbrio
- evolução mês a mês em um intervalo de ano-mês
- despesas por categoria no intervalo
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from docegestao.config import DB_PATH, USUARIO_PADRAO
from docegestao.domain.datas import ano_mes, para_iso
from docegestao.domain.periodos import (
    despesas_por_categoria,
    painel_mensal,
    resultado_mensal,
    resultados_periodo,
    totais_periodo,
)
from docegestao.infra.logger import log_system_event
from docegestao.infra.repositories import carregar_sistema
from docegestao.usecases.comum import preparar


# ----------------------
# 1) Painel
# ----------------------

def painel(hoje: Optional[date] = None, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> Dict[str, Any]:
    """Dados do painel no mês de ``hoje`` (padrão: data atual)."""
    hoje = hoje or date.today()
    log_system_event("painel_start", {"hoje": hoje.isoformat(), "usuario": usuario})
    try:
        preparar(db_path)
        d = painel_mensal(carregar_sistema(db_path, usuario), hoje)
        return {
            "mes": ano_mes(hoje),
            "faturamento_dia": d.faturamento_dia,
            "faturamento_mes": d.faturamento_mes,
            "faturamento_liquido_mes": d.faturamento_liquido_mes,
            "despesas_mes": d.despesas_mes,
            "custos_fixos": d.custos_fixos,
            "custos_variaveis": d.custos_variaveis,
            "cmv": d.cmv,
            "lucro_prejuizo": d.lucro_prejuizo,
            "margem_lucro": d.margem_lucro,
            "contas_vencendo": [
                {"id": c.id, "descricao": c.descricao, "valor": c.valor, "data_vencimento": para_iso(c.data_vencimento)}
                for c in d.contas_vencendo
            ],
            "estoque_baixo": [
                {"id": i.id, "nome": i.nome, "estoque_atual": i.estoque_atual, "estoque_minimo": i.estoque_minimo}
                for i in d.ingredientes_estoque_baixo
            ],
            "metas": [
                {"id": p.meta.id, "nome": p.meta.nome, "valor_meta": p.meta.valor_meta,
                 "valor_acumulado": p.meta.valor_acumulado, "percentual": p.percentual}
                for p in d.progresso_metas
            ],
            "por_forma_pagamento": dict(d.resumo_por_forma_pagamento),
        }
    except Exception as e:
        log_system_event("painel_error", {"error": str(e)}, level="error")
        raise


# ----------------------
# 2) Resultado mensal
# ----------------------

def resultado(mes: Optional[str] = None, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> Dict[str, Any]:
    """Resultado do mês ``YYYY-MM`` (padrão: mês atual)."""
    mes = mes or ano_mes(date.today())
    try:
        preparar(db_path)
        r = resultado_mensal(carregar_sistema(db_path, usuario), mes)
        log_system_event("relatorio_resultado", {"mes": r.mes, "lucro": round(r.lucro, 2)})
        return asdict(r)
    except Exception as e:
        log_system_event("resultado_error", {"mes": mes, "error": str(e)}, level="error")
        raise


# ----------------------
# 3) Evolução no período
# ----------------------

def relatorio_evolucao(
    mes_inicio: str,
    mes_fim: str,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Tuple[List[str], List[List[Any]], Optional[str]]:
    """
    Retorna colunas, linhas e mensagem para exibição tabular.
    Uma linha por mês do intervalo e uma linha final de totais.
    """
    log_system_event("relatorio_evolucao_start", {"de": mes_inicio, "ate": mes_fim})
    try:
        preparar(db_path)
        resultados = resultados_periodo(carregar_sistema(db_path, usuario), mes_inicio, mes_fim)
        cols = ["Mês", "Faturamento", "Fat. Líquido", "CMV", "Custos Fixos", "Custos Variáveis",
                "Lucro", "Margem %", "Ponto Equilíbrio"]
        if not resultados:
            return cols, [], "Intervalo vazio (mês inicial depois do final)."

        rows: List[List[Any]] = [
            [r.mes, r.faturamento, r.faturamento_liquido, r.cmv, r.custos_fixos, r.custos_variaveis,
             r.lucro, r.margem, r.ponto_equilibrio]
            for r in resultados
        ]
        t = totais_periodo(resultados)
        rows.append(["Total", t["faturamento"], t["faturamento_liquido"], t["cmv"], t["custos_fixos"],
                     t["custos_variaveis"], t["lucro"], None, None])
        log_system_event("relatorio_evolucao", {"meses": len(resultados)})
        return cols, rows, None
    except Exception as e:
        log_system_event("relatorio_evolucao_error", {"error": str(e)}, level="error")
        raise


# ----------------------
# 4) Despesas por categoria
# ----------------------

def relatorio_despesas_categoria(
    mes_inicio: str,
    mes_fim: str,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Tuple[List[str], List[List[Any]], Optional[str]]:
    log_system_event("relatorio_despesas_start", {"de": mes_inicio, "ate": mes_fim})
    try:
        preparar(db_path)
        linhas = despesas_por_categoria(carregar_sistema(db_path, usuario), mes_inicio, mes_fim)
        cols = ["Categoria", "Valor", "% do total"]
        if not linhas:
            return cols, [], "Nenhuma despesa no período."
        total = sum(r["valor"] for r in linhas)
        rows = [[r["nome"], r["valor"], (r["valor"] / total * 100.0) if total else 0.0] for r in linhas]
        return cols, rows, None
    except Exception as e:
        log_system_event("relatorio_despesas_error", {"error": str(e)}, level="error")
        raise

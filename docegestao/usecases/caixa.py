"""
UC: Caixa diário: lançamentos de receitas e despesas.

Obs.:
- Taxa e valor líquido são calculados no registro, com as taxas
  configuradas naquele momento, e ficam gravados no lançamento.
- Alterar as taxas depois não recalcula lançamentos antigos.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from docegestao.config import DB_PATH, USUARIO_PADRAO
from docegestao.domain.datas import para_iso
from docegestao.domain.models import FORMAS_PAGAMENTO, TIPOS_TRANSACAO, Configuracoes
from docegestao.domain.periodos import resumo_diario, transacoes_do_dia
from docegestao.domain.taxas import calcular_taxa
from docegestao.infra.logger import (
    log_caixa,
    log_database_operation,
    log_file_operation,
    log_system_event,
    log_transaction,
)
from docegestao.infra.repositories import (
    ConfiguracoesRepo,
    TransacaoRepo,
    carregar_sistema,
    configuracoes_from_row,
)
from docegestao.usecases.comum import dia, escolha, normalize_str, numero, preparar


def _montar_transacao(
    config: Configuracoes,
    tipo: Any,
    descricao: Any,
    valor: Any,
    forma_pagamento: Any,
    data: Any,
    categoria_id: Any,
) -> Dict[str, Any]:
    desc = normalize_str(descricao)
    if not desc:
        raise ValueError("descrição é obrigatória")
    tipo_ok = escolha(tipo, TIPOS_TRANSACAO, "tipo")
    forma = escolha(forma_pagamento or "dinheiro", FORMAS_PAGAMENTO, "forma_pagamento")
    bruto = numero(valor, "valor")
    taxa = calcular_taxa(config, forma, bruto)
    return {
        "data": dia(data),
        "tipo": tipo_ok,
        "descricao": desc,
        "valor": bruto,
        "forma_pagamento": forma,
        "taxa_descontada": taxa,
        "valor_liquido": bruto - taxa,
        "categoria_id": normalize_str(categoria_id),
    }


def registrar_transacao(
    tipo: str,
    descricao: str,
    valor: float,
    forma_pagamento: str = "dinheiro",
    data: Any = None,
    categoria_id: Optional[str] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """
    Registra um lançamento no caixa.

    Args:
        tipo: 'receita' ou 'despesa'
        descricao: texto livre
        valor: valor bruto
        forma_pagamento: dinheiro, pix, debito ou credito
        data: dia do lançamento (hoje se omitido)
        categoria_id: categoria de conta (para despesas)

    Returns:
        dict com id, taxa_descontada e valor_liquido gravados
    """
    preparar(db_path)
    try:
        config = configuracoes_from_row(ConfiguracoesRepo(db_path, usuario).get())
        rec = _montar_transacao(config, tipo, descricao, valor, forma_pagamento, data, categoria_id)
        rec["id"] = TransacaoRepo(db_path, usuario).insert(rec)

        log_database_operation("transacoes", "INSERT", 1, id=rec["id"])
        log_caixa("insert", rec["tipo"], rec["valor"], rec["forma_pagamento"],
                  taxa=rec["taxa_descontada"], valor_liquido=rec["valor_liquido"])
        rec["data"] = para_iso(rec["data"])
        log_transaction("registrar_transacao", {"tipo": rec["tipo"], "valor": rec["valor"]}, result=rec["id"])
        return rec
    except Exception as e:
        log_transaction("registrar_transacao", {"tipo": tipo, "valor": valor, "descricao": descricao}, error=str(e))
        log_system_event("registrar_transacao_error", {"error": str(e)}, level="error")
        raise


def excluir_transacao(transacao_id: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> None:
    preparar(db_path)
    repo = TransacaoRepo(db_path, usuario)
    row = repo.get(transacao_id)
    if row is None:
        raise ValueError(f"lançamento não encontrado: {transacao_id}")
    repo.delete(transacao_id)
    log_database_operation("transacoes", "DELETE", 1, id=transacao_id)
    log_caixa("delete", row["tipo"], row["valor"], row.get("forma_pagamento"))


def resumo_do_dia(
    referencia: Optional[date] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """Totais do dia e a lista de lançamentos."""
    preparar(db_path)
    ref = dia(referencia)
    dados = carregar_sistema(db_path, usuario)
    r = resumo_diario(dados, ref)
    return {
        "data": para_iso(r.data),
        "faturamento": r.faturamento,
        "despesas": r.despesas,
        "saldo": r.saldo,
        "receitas_por_forma": dict(r.receitas_por_forma),
        "transacoes": [
            {
                "id": t.id,
                "tipo": t.tipo,
                "descricao": t.descricao,
                "forma_pagamento": t.forma_pagamento,
                "valor": t.valor,
                "taxa_descontada": t.taxa_descontada,
                "valor_liquido": t.valor_liquido,
            }
            for t in transacoes_do_dia(dados.transacoes, ref)
        ],
    }


def importar_transacoes_xlsx(path: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> Dict[str, Any]:
    """
    Importa lançamentos de uma planilha (uma linha por lançamento).

    Linhas inválidas são puladas e reportadas; as válidas são gravadas
    com taxa e valor líquido calculados com as taxas atuais.

    Returns:
        ``{"importadas": n, "erros": [{"linha": i, "erro": msg}, ...]}``
    """
    from docegestao.adapters.planilhas import carregar_transacoes_xlsx

    preparar(db_path)
    log_system_event("importar_transacoes_started", {"path": path})
    try:
        linhas = carregar_transacoes_xlsx(path)
        config = configuracoes_from_row(ConfiguracoesRepo(db_path, usuario).get())

        validos: List[Dict[str, Any]] = []
        erros: List[Dict[str, Any]] = []
        for n, linha in enumerate(linhas, start=2):  # linha 1 = cabeçalho
            try:
                validos.append(
                    _montar_transacao(
                        config,
                        linha.get("tipo") or "receita",
                        linha.get("descricao"),
                        linha.get("valor"),
                        linha.get("forma_pagamento"),
                        linha.get("data"),
                        linha.get("categoria_id"),
                    )
                )
            except ValueError as e:
                erros.append({"linha": n, "erro": str(e)})

        TransacaoRepo(db_path, usuario).insert_many(validos)
        log_database_operation("transacoes", "INSERT", len(validos), origem=path)
        log_file_operation("import", path, rows_processed=len(linhas), importadas=len(validos), erros=len(erros))
        log_caixa("import", "lote", sum(r["valor"] for r in validos), None, linhas=len(validos))
        return {"importadas": len(validos), "erros": erros}
    except Exception as e:
        log_transaction("importar_transacoes", {"path": path}, error=str(e))
        log_system_event("importar_transacoes_error", {"error": str(e)}, level="error")
        raise

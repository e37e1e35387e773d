"""
UC: Contas a pagar.

- Marcar como paga grava a data de pagamento (dia de referência);
  desmarcar apaga a data.
- A listagem é por mês de vencimento, com status calculado no dia de
  referência.
- Gastos por categoria comparam o total do mês com o limite de gasto.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from docegestao.config import DB_PATH, USUARIO_PADRAO
from docegestao.domain.datas import ano_mes, intervalo_mes, para_iso
from docegestao.domain.periodos import gastos_por_categoria
from docegestao.domain.policies import status_conta
from docegestao.infra.logger import log_database_operation, log_system_event, log_transaction
from docegestao.infra.repositories import ContaPagarRepo, carregar_sistema
from docegestao.usecases.comum import dia, normalize_str, numero, preparar


def adicionar_conta(
    descricao: str,
    valor: float,
    data_vencimento: Any,
    categoria_id: Optional[str] = None,
    recorrente: bool = False,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    preparar(db_path)
    try:
        desc = normalize_str(descricao)
        if not desc:
            raise ValueError("descrição é obrigatória")
        if data_vencimento in (None, ""):
            raise ValueError("data de vencimento é obrigatória")
        rec = {
            "descricao": desc,
            "categoria_id": normalize_str(categoria_id),
            "valor": numero(valor, "valor", minimo=0),
            "data_vencimento": dia(data_vencimento),
            "pago": False,
            "data_pagamento": None,
            "recorrente": bool(recorrente),
        }
        rec["id"] = ContaPagarRepo(db_path, usuario).insert(rec)
        log_database_operation("contas_pagar", "INSERT", 1, id=rec["id"])
        log_transaction("adicionar_conta", {"descricao": desc, "valor": rec["valor"]}, result=rec["id"])
        rec["data_vencimento"] = para_iso(rec["data_vencimento"])
        return rec
    except Exception as e:
        log_transaction("adicionar_conta", {"descricao": descricao, "valor": valor}, error=str(e))
        log_system_event("adicionar_conta_error", {"error": str(e)}, level="error")
        raise


def alternar_pagamento(
    conta_id: str,
    hoje: Optional[date] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """Inverte o estado de pagamento da conta."""
    preparar(db_path)
    repo = ContaPagarRepo(db_path, usuario)
    row = repo.get(conta_id)
    if row is None:
        raise ValueError(f"conta não encontrada: {conta_id}")
    pago = not row["pago"]
    pagamento = (hoje or date.today()) if pago else None
    repo.update(conta_id, {"pago": pago, "data_pagamento": pagamento})
    log_database_operation("contas_pagar", "UPDATE", 1, id=conta_id, pago=pago)
    log_transaction("alternar_pagamento", {"id": conta_id}, result={"pago": pago})
    return {"id": conta_id, "descricao": row["descricao"], "pago": pago, "data_pagamento": para_iso(pagamento)}


def excluir_conta(conta_id: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> None:
    preparar(db_path)
    if ContaPagarRepo(db_path, usuario).delete(conta_id) == 0:
        raise ValueError(f"conta não encontrada: {conta_id}")
    log_database_operation("contas_pagar", "DELETE", 1, id=conta_id)


def listar_contas(
    mes: Optional[str] = None,
    hoje: Optional[date] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """
    Contas com vencimento no mês (padrão: mês de ``hoje``) e totais.

    Returns:
        ``{"mes", "contas": [...], "total", "total_pago", "total_pendente"}``
    """
    preparar(db_path)
    hoje = hoje or date.today()
    mes = mes or ano_mes(hoje)
    inicio, fim = intervalo_mes(mes)
    dados = carregar_sistema(db_path, usuario)
    cats = {c.id: c.nome for c in dados.categorias_conta}

    contas: List[Dict[str, Any]] = []
    for c in dados.contas_pagar:
        if not (inicio <= c.data_vencimento <= fim):
            continue
        contas.append(
            {
                "id": c.id,
                "descricao": c.descricao,
                "categoria": cats.get(c.categoria_id) if c.categoria_id else None,
                "valor": c.valor,
                "data_vencimento": para_iso(c.data_vencimento),
                "data_pagamento": para_iso(c.data_pagamento),
                "recorrente": c.recorrente,
                "status": status_conta(c, hoje),
            }
        )
    total = sum(c["valor"] for c in contas)
    pago = sum(c["valor"] for c in contas if c["status"] == "paga")
    return {
        "mes": ano_mes(inicio),
        "contas": contas,
        "total": total,
        "total_pago": pago,
        "total_pendente": total - pago,
    }


def gastos_categorias(
    mes: Optional[str] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> List[Dict[str, Any]]:
    """Gasto por categoria de conta no mês, com limite e excedente."""
    preparar(db_path)
    return gastos_por_categoria(carregar_sistema(db_path, usuario), mes or ano_mes(date.today()))

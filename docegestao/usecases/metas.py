"""
UC: Metas de faturamento e de investimento.

Uma meta fica ativa enquanto o valor acumulado não atinge o alvo; cada
contribuição recalcula esse estado. Metas concluídas podem ser
reativadas manualmente.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from docegestao.config import DB_PATH, USUARIO_PADRAO
from docegestao.domain.datas import para_data, para_iso
from docegestao.domain.formulas import percentual_meta
from docegestao.domain.models import TIPOS_META
from docegestao.domain.policies import meses_restantes, meta_ativa
from docegestao.infra.logger import log_database_operation, log_system_event, log_transaction
from docegestao.infra.repositories import MetaRepo, meta_from_row
from docegestao.usecases.comum import escolha, normalize_str, numero, preparar


def criar_meta(
    nome: str,
    valor_meta: float,
    tipo: str = "faturamento",
    data_inicio: Any = None,
    data_fim: Any = None,
    contribuicao_mensal: float = 0.0,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    preparar(db_path)
    try:
        nome_ok = normalize_str(nome)
        if not nome_ok:
            raise ValueError("nome é obrigatório")
        alvo = numero(valor_meta, "valor_meta")
        if alvo <= 0:
            raise ValueError("valor_meta deve ser > 0")
        inicio = para_data(data_inicio) or date.today()
        fim = para_data(data_fim)
        if fim is not None and fim < inicio:
            raise ValueError("data_fim anterior a data_inicio")
        rec = {
            "tipo": escolha(tipo, TIPOS_META, "tipo"),
            "nome": nome_ok,
            "valor_meta": alvo,
            "valor_acumulado": 0.0,
            "data_inicio": inicio,
            "data_fim": fim,
            "contribuicao_mensal": numero(contribuicao_mensal or 0, "contribuicao_mensal", minimo=0),
            "ativa": True,
        }
        rec["id"] = MetaRepo(db_path, usuario).insert(rec)
        log_database_operation("metas", "INSERT", 1, id=rec["id"])
        log_transaction("criar_meta", {"nome": nome_ok, "valor_meta": alvo}, result=rec["id"])
        return rec
    except Exception as e:
        log_transaction("criar_meta", {"nome": nome, "valor_meta": valor_meta}, error=str(e))
        log_system_event("criar_meta_error", {"error": str(e)}, level="error")
        raise


def contribuir(
    meta_id: str,
    valor: float,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """Soma ``valor`` ao acumulado e recalcula se a meta segue ativa."""
    preparar(db_path)
    repo = MetaRepo(db_path, usuario)
    try:
        row = repo.get(meta_id)
        if row is None:
            raise ValueError(f"meta não encontrada: {meta_id}")
        v = numero(valor, "valor")
        if v <= 0:
            raise ValueError("valor deve ser > 0")
        meta = meta_from_row(row)
        novo = meta.valor_acumulado + v
        ativa = meta_ativa(novo, meta.valor_meta)
        repo.update(meta_id, {"valor_acumulado": novo, "ativa": ativa})
        log_database_operation("metas", "UPDATE", 1, id=meta_id, valor_acumulado=novo)
        log_transaction("contribuir_meta", {"id": meta_id, "valor": v}, result={"acumulado": novo, "ativa": ativa})
        return {
            "id": meta_id,
            "nome": meta.nome,
            "valor_acumulado": novo,
            "ativa": ativa,
            "percentual": percentual_meta(novo, meta.valor_meta),
        }
    except Exception as e:
        log_transaction("contribuir_meta", {"id": meta_id, "valor": valor}, error=str(e))
        log_system_event("contribuir_meta_error", {"error": str(e)}, level="error")
        raise


def reativar_meta(meta_id: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> None:
    preparar(db_path)
    if MetaRepo(db_path, usuario).update(meta_id, {"ativa": True}) == 0:
        raise ValueError(f"meta não encontrada: {meta_id}")
    log_database_operation("metas", "UPDATE", 1, id=meta_id, ativa=True)


def excluir_meta(meta_id: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> None:
    preparar(db_path)
    if MetaRepo(db_path, usuario).delete(meta_id) == 0:
        raise ValueError(f"meta não encontrada: {meta_id}")
    log_database_operation("metas", "DELETE", 1, id=meta_id)


def listar_metas(
    hoje: Optional[date] = None,
    apenas_ativas: bool = False,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> List[Dict[str, Any]]:
    preparar(db_path)
    hoje = hoje or date.today()
    out: List[Dict[str, Any]] = []
    for row in MetaRepo(db_path, usuario).get_all():
        m = meta_from_row(row)
        if apenas_ativas and not m.ativa:
            continue
        out.append(
            {
                "id": m.id,
                "tipo": m.tipo,
                "nome": m.nome,
                "valor_meta": m.valor_meta,
                "valor_acumulado": m.valor_acumulado,
                "falta": max(0.0, m.valor_meta - m.valor_acumulado),
                "percentual": percentual_meta(m.valor_acumulado, m.valor_meta),
                "data_fim": para_iso(m.data_fim),
                "meses_restantes": meses_restantes(m, hoje),
                "contribuicao_mensal": m.contribuicao_mensal,
                "ativa": m.ativa,
            }
        )
    return out

"""
UC: Registrar produção e gerar a lista de compras.

- A validade da produção é a data de produção + ``validade_dias`` da ficha.
- O custo gravado é uma fotografia: ``custo_unidade`` da ficha × quantidade.
- A lista de compras considera todos os ingredientes/embalagens com
  estoque no mínimo ou abaixo dele.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from docegestao.config import DB_PATH, DEFAULTS, USUARIO_PADRAO
from docegestao.domain.compras import gerar_lista_compras, total_lista_compras
from docegestao.domain.datas import para_iso
from docegestao.domain.policies import data_validade_producao, status_validade
from docegestao.infra.logger import log_database_operation, log_system_event, log_transaction
from docegestao.infra.repositories import ProducaoRepo, carregar_sistema
from docegestao.usecases.comum import dia, normalize_str, numero, preparar


def registrar_producao(
    ficha_tecnica_id: str,
    quantidade: float,
    data_producao: Any = None,
    observacao: Optional[str] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """
    Registra um lote produzido.

    Returns:
        dict com id, datas de produção/validade (ISO) e custo total.
    """
    preparar(db_path)
    log_system_event("registrar_producao_started", {"ficha": ficha_tecnica_id, "quantidade": quantidade})
    try:
        qtd = numero(quantidade, "quantidade")
        if qtd <= 0:
            raise ValueError("quantidade deve ser > 0")

        dados = carregar_sistema(db_path, usuario)
        ficha = next((f for f in dados.fichas_tecnicas if f.id == ficha_tecnica_id), None)
        if ficha is None:
            raise ValueError(f"ficha não encontrada: {ficha_tecnica_id}")

        d = dia(data_producao)
        rec = {
            "ficha_tecnica_id": ficha.id,
            "quantidade_produzida": qtd,
            "data_producao": d,
            "data_validade": data_validade_producao(d, ficha.validade_dias),
            "custo_total": float(ficha.custo_unidade) * qtd,
            "observacao": normalize_str(observacao),
        }
        rec["id"] = ProducaoRepo(db_path, usuario).insert(rec)
        log_database_operation("producoes", "INSERT", 1, id=rec["id"], ficha=ficha.nome)

        out = {
            "id": rec["id"],
            "ficha": ficha.nome,
            "quantidade_produzida": qtd,
            "data_producao": para_iso(rec["data_producao"]),
            "data_validade": para_iso(rec["data_validade"]),
            "custo_total": rec["custo_total"],
        }
        log_transaction("registrar_producao", {"ficha": ficha.nome, "quantidade": qtd}, result=out)
        return out
    except Exception as e:
        log_transaction("registrar_producao", {"ficha": ficha_tecnica_id, "quantidade": quantidade}, error=str(e))
        log_system_event("registrar_producao_error", {"error": str(e)}, level="error")
        raise


def excluir_producao(producao_id: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> None:
    preparar(db_path)
    if ProducaoRepo(db_path, usuario).delete(producao_id) == 0:
        raise ValueError(f"produção não encontrada: {producao_id}")
    log_database_operation("producoes", "DELETE", 1, id=producao_id)


def listar_producoes(
    hoje: Optional[date] = None,
    status: Optional[str] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> List[Dict[str, Any]]:
    """Produções (mais recentes primeiro) com o status de validade em ``hoje``."""
    preparar(db_path)
    hoje = hoje or date.today()
    dados = carregar_sistema(db_path, usuario)
    nomes = {f.id: f.nome for f in dados.fichas_tecnicas}

    out: List[Dict[str, Any]] = []
    for p in dados.producoes:
        st, restantes = status_validade(p.data_validade, hoje, DEFAULTS.dias_alerta_validade)
        if status and st != status:
            continue
        out.append(
            {
                "id": p.id,
                "ficha": nomes.get(p.ficha_tecnica_id, "Produto removido"),
                "quantidade_produzida": p.quantidade_produzida,
                "data_producao": para_iso(p.data_producao),
                "data_validade": para_iso(p.data_validade),
                "dias_restantes": restantes,
                "status": st,
                "custo_total": p.custo_total,
            }
        )
    return out


def lista_compras(db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> Dict[str, Any]:
    """Itens a repor e o custo estimado total."""
    preparar(db_path)
    itens = gerar_lista_compras(carregar_sistema(db_path, usuario).ingredientes)
    return {
        "itens": [
            {
                "id": i.ingrediente_id,
                "nome": i.nome,
                "estoque_atual": i.quantidade_estoque,
                "estoque_minimo": i.estoque_minimo,
                "quantidade_comprar": i.quantidade_comprar,
                "unidade": i.unidade,
                "custo_estimado": i.custo_estimado,
            }
            for i in itens
        ],
        "total": total_lista_compras(itens),
    }

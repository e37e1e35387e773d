"""
UC: Precificação de produtos finais.

A margem ideal de um produto é a margem padrão da sua categoria; sem
categoria, vale a margem padrão das configurações. O preço ideal é o
que entrega essa margem sobre o custo por unidade gravado na ficha.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Any, Dict, Optional

from docegestao.config import DB_PATH, DEFAULTS, USUARIO_PADRAO
from docegestao.domain.formulas import cmv_percentual, margem_percentual, preco_ideal
from docegestao.domain.policies import status_margem
from docegestao.infra.logger import log_database_operation, log_system_event, log_transaction
from docegestao.infra.repositories import FichaTecnicaRepo, carregar_sistema, ficha_from_row
from docegestao.usecases.comum import numero, preparar


def atualizar_preco(
    ficha_id: str,
    preco_venda: float,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """Grava o novo preço de venda e recalcula margem e CMV do produto."""
    preparar(db_path)
    repo = FichaTecnicaRepo(db_path, usuario)
    try:
        row = repo.get(ficha_id)
        if row is None:
            raise ValueError(f"ficha não encontrada: {ficha_id}")
        ficha = ficha_from_row(row)
        if ficha.tipo != "produto_final":
            raise ValueError("só produtos finais têm preço de venda")
        preco = numero(preco_venda, "preco_venda", minimo=0)
        changes = {
            "preco_venda": preco,
            "margem_lucro": margem_percentual(preco, ficha.custo_unidade),
            "cmv_percentual": cmv_percentual(preco, ficha.custo_unidade),
        }
        repo.update(ficha_id, changes)
        log_database_operation("fichas_tecnicas", "UPDATE_PRECO", 1, id=ficha_id, preco=preco)
        log_transaction("atualizar_preco", {"id": ficha_id, "preco_venda": preco}, result=changes)
        return {"id": ficha_id, "nome": ficha.nome, "custo_unidade": ficha.custo_unidade, **changes}
    except Exception as e:
        log_transaction("atualizar_preco", {"id": ficha_id, "preco_venda": preco_venda}, error=str(e))
        log_system_event("atualizar_preco_error", {"error": str(e)}, level="error")
        raise


def analise_precos(
    categoria_id: Optional[str] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """
    Produtos finais agrupados por categoria, com margem, preço ideal e status.

    Returns:
        ``{"categorias": [{"nome", "margem_ideal", "margem_media",
        "produtos": [...]}, ...], "resumo": {"bom", "atencao", "ruim"}}``
    """
    preparar(db_path)
    dados = carregar_sistema(db_path, usuario)
    cats = {c.id: c for c in dados.categorias_produto}
    margem_config = dados.configuracoes.margem_lucro_padrao

    grupos: "OrderedDict[Optional[str], Dict[str, Any]]" = OrderedDict()
    resumo = {"bom": 0, "atencao": 0, "ruim": 0}
    for f in dados.fichas_tecnicas:
        if f.tipo != "produto_final":
            continue
        cat = cats.get(f.categoria_id) if f.categoria_id else None
        if categoria_id and (cat is None or cat.id != categoria_id):
            continue
        ideal = cat.margem_padrao if cat else margem_config
        chave = cat.id if cat else None
        grupo = grupos.setdefault(
            chave,
            {"categoria_id": chave, "nome": cat.nome if cat else "Sem categoria", "margem_ideal": ideal, "produtos": []},
        )
        status = status_margem(f.margem_lucro, ideal, DEFAULTS.fator_atencao_margem)
        resumo[status] += 1
        grupo["produtos"].append(
            {
                "id": f.id,
                "nome": f.nome,
                "custo_unidade": f.custo_unidade,
                "preco_venda": f.preco_venda,
                "margem_lucro": f.margem_lucro,
                "cmv_percentual": f.cmv_percentual,
                "preco_ideal": preco_ideal(f.custo_unidade, ideal),
                "status": status,
            }
        )

    for grupo in grupos.values():
        margens = [p["margem_lucro"] for p in grupo["produtos"]]
        grupo["margem_media"] = sum(margens) / len(margens) if margens else 0.0

    return {"categorias": list(grupos.values()), "resumo": resumo}

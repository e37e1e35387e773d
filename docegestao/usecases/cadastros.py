"""
UC: Cadastros básicos (ingredientes/embalagens, categorias de conta e
categorias de produto).

Obs.:
- O custo por unidade do ingrediente é sempre derivado do preço e da
  quantidade da embalagem ao gravar.
- Alterar o preço de um ingrediente não regrava as fichas que o usam;
  elas passam a aparecer em `listar_desatualizadas` até serem recalculadas.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from docegestao.config import DB_PATH, USUARIO_PADRAO
from docegestao.domain.formulas import custo_unidade_ingrediente
from docegestao.domain.models import TIPOS_CATEGORIA_CONTA, TIPOS_INGREDIENTE, UNIDADES
from docegestao.infra.logger import log_database_operation, log_system_event, log_transaction
from docegestao.infra.repositories import (
    CategoriaContaRepo,
    CategoriaProdutoRepo,
    IngredienteRepo,
    ingrediente_from_row,
)
from docegestao.usecases.comum import escolha, normalize_str, numero, preparar


# ----------------------
# Ingredientes
# ----------------------

def salvar_ingrediente(
    dados: Dict[str, Any],
    ingrediente_id: Optional[str] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """Cria (sem id) ou atualiza (com id) um ingrediente/embalagem."""
    preparar(db_path)
    repo = IngredienteRepo(db_path, usuario)
    try:
        atual = repo.get(ingrediente_id) if ingrediente_id else None
        if ingrediente_id and atual is None:
            raise ValueError(f"ingrediente não encontrado: {ingrediente_id}")
        base = {**(atual or {}), **{k: v for k, v in dados.items() if v is not None}}

        nome = normalize_str(base.get("nome"))
        if not nome:
            raise ValueError("nome é obrigatório")
        qtd = numero(base.get("quantidade_embalagem"), "quantidade_embalagem", minimo=0)
        preco = numero(base.get("preco_embalagem"), "preco_embalagem", minimo=0)
        rec = {
            "nome": nome,
            "quantidade_embalagem": qtd,
            "unidade": escolha(base.get("unidade") or "un", UNIDADES, "unidade"),
            "preco_embalagem": preco,
            "custo_unidade": custo_unidade_ingrediente(preco, qtd),
            "estoque_atual": numero(base.get("estoque_atual") or 0, "estoque_atual"),
            "estoque_minimo": numero(base.get("estoque_minimo") or 0, "estoque_minimo", minimo=0),
            "tipo": escolha(base.get("tipo") or "ingrediente", TIPOS_INGREDIENTE, "tipo"),
        }

        if atual:
            repo.update(ingrediente_id, rec)
            rec["id"] = ingrediente_id
            log_database_operation("ingredientes", "UPDATE", 1, id=ingrediente_id)
        else:
            rec["id"] = repo.insert(rec)
            log_database_operation("ingredientes", "INSERT", 1, id=rec["id"])

        log_transaction("salvar_ingrediente", {"nome": nome}, result=rec["id"])
        return rec
    except Exception as e:
        log_transaction("salvar_ingrediente", {"id": ingrediente_id, "dados": dados}, error=str(e))
        log_system_event("salvar_ingrediente_error", {"error": str(e)}, level="error")
        raise


def ajustar_estoque(
    ingrediente_id: str,
    estoque_atual: Optional[float] = None,
    variacao: Optional[float] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """Define o estoque (``estoque_atual``) ou soma ``variacao`` a ele (em embalagens)."""
    preparar(db_path)
    repo = IngredienteRepo(db_path, usuario)
    row = repo.get(ingrediente_id)
    if row is None:
        raise ValueError(f"ingrediente não encontrado: {ingrediente_id}")
    if estoque_atual is None and variacao is None:
        raise ValueError("informe o estoque atual ou a variação")

    novo = float(estoque_atual) if estoque_atual is not None else float(row.get("estoque_atual") or 0.0)
    if variacao is not None:
        novo += float(variacao)
    repo.update(ingrediente_id, {"estoque_atual": novo})
    log_database_operation("ingredientes", "UPDATE_ESTOQUE", 1, id=ingrediente_id, estoque=novo)
    return {"id": ingrediente_id, "nome": row["nome"], "estoque_anterior": row.get("estoque_atual"), "estoque_atual": novo}


def excluir_ingrediente(ingrediente_id: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> None:
    preparar(db_path)
    if IngredienteRepo(db_path, usuario).delete(ingrediente_id) == 0:
        raise ValueError(f"ingrediente não encontrado: {ingrediente_id}")
    log_database_operation("ingredientes", "DELETE", 1, id=ingrediente_id)


def listar_ingredientes(
    tipo: Optional[str] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> List[Dict[str, Any]]:
    preparar(db_path)
    out: List[Dict[str, Any]] = []
    for row in IngredienteRepo(db_path, usuario).get_all():
        ing = ingrediente_from_row(row)
        if tipo and ing.tipo != tipo:
            continue
        out.append(
            {
                "id": ing.id,
                "nome": ing.nome,
                "tipo": ing.tipo,
                "embalagem": f"{ing.quantidade_embalagem:g} {ing.unidade}",
                "preco_embalagem": ing.preco_embalagem,
                "custo_unidade": ing.custo_unidade,
                "estoque_atual": ing.estoque_atual,
                "estoque_minimo": ing.estoque_minimo,
                "estoque_baixo": ing.estoque_atual <= ing.estoque_minimo,
            }
        )
    return out


# ----------------------
# Categorias
# ----------------------

def criar_categoria_conta(
    nome: str,
    tipo: str = "variavel",
    limite_gasto: Optional[float] = None,
    cor: str = "#9ca3af",
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    preparar(db_path)
    nome_ok = normalize_str(nome)
    if not nome_ok:
        raise ValueError("nome é obrigatório")
    rec = {
        "nome": nome_ok,
        "tipo": escolha(tipo, TIPOS_CATEGORIA_CONTA, "tipo"),
        "limite_gasto": numero(limite_gasto, "limite_gasto", minimo=0, permite_none=True),
        "cor": cor,
    }
    rec["id"] = CategoriaContaRepo(db_path, usuario).insert(rec)
    log_database_operation("categorias_conta", "INSERT", 1, id=rec["id"])
    return rec


def listar_categorias_conta(db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> List[Dict[str, Any]]:
    preparar(db_path)
    return [
        {k: r.get(k) for k in ("id", "nome", "tipo", "limite_gasto", "cor")}
        for r in CategoriaContaRepo(db_path, usuario).get_all()
    ]


def excluir_categoria_conta(categoria_id: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> None:
    preparar(db_path)
    if CategoriaContaRepo(db_path, usuario).delete(categoria_id) == 0:
        raise ValueError(f"categoria não encontrada: {categoria_id}")
    log_database_operation("categorias_conta", "DELETE", 1, id=categoria_id)


def criar_categoria_produto(
    nome: str,
    margem_padrao: float,
    cor: str = "#9ca3af",
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    preparar(db_path)
    nome_ok = normalize_str(nome)
    if not nome_ok:
        raise ValueError("nome é obrigatório")
    rec = {"nome": nome_ok, "margem_padrao": numero(margem_padrao, "margem_padrao"), "cor": cor}
    rec["id"] = CategoriaProdutoRepo(db_path, usuario).insert(rec)
    log_database_operation("categorias_produto", "INSERT", 1, id=rec["id"])
    return rec


def listar_categorias_produto(db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> List[Dict[str, Any]]:
    preparar(db_path)
    return [
        {k: r.get(k) for k in ("id", "nome", "margem_padrao", "cor")}
        for r in CategoriaProdutoRepo(db_path, usuario).get_all()
    ]


def excluir_categoria_produto(categoria_id: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> None:
    preparar(db_path)
    if CategoriaProdutoRepo(db_path, usuario).delete(categoria_id) == 0:
        raise ValueError(f"categoria não encontrada: {categoria_id}")
    log_database_operation("categorias_produto", "DELETE", 1, id=categoria_id)

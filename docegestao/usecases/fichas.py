"""
UC: Fichas técnicas (receitas base e produtos finais).

Fluxo de gravação:
1) Valida tipo, receitas base (existem, são ``receita_base``, não são a
   própria ficha e não formam ciclo) e ingredientes referenciados. Na
   atualização só as referências informadas precisam existir.
2) Calcula o custo de cada item, o custo total (receitas base +
   ingredientes + embalagens) e o custo por unidade do rendimento.
3) Deriva margem e CMV a partir do preço de venda.
4) Grava e registra logs.

Obs.: o custo de uma receita base entra como está gravado. Quando uma
receita base ou um ingrediente muda, `listar_desatualizadas` aponta as
fichas afetadas e `recalcular_fichas` regrava todas em ordem de
dependência.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional, Set

from docegestao.config import DB_PATH, USUARIO_PADRAO
from docegestao.domain.custos import (
    cmv_percentual,
    custo_ficha,
    custo_item,
    custo_unitario,
    fichas_desatualizadas,
    margem_percentual,
    ordem_recalculo,
)
from docegestao.domain.models import TIPOS_FICHA, UNIDADES, FichaTecnica, ItemFicha, SistemaData
from docegestao.infra.logger import log_database_operation, log_system_event, log_transaction
from docegestao.infra.repositories import FichaTecnicaRepo, carregar_sistema
from docegestao.usecases.comum import escolha, normalize_str, numero, preparar


def _itens(
    raw: Optional[List[Any]],
    campo: str,
    dados: SistemaData,
    tipo_esperado: str,
    estrito: bool = True,
) -> List[ItemFicha]:
    """Fora do modo estrito, itens gravados cujo ingrediente sumiu ficam com custo 0."""
    ingredientes = {i.id: i for i in dados.ingredientes}
    out: List[ItemFicha] = []
    for item in raw or []:
        if isinstance(item, ItemFicha):
            item = {"ingrediente_id": item.ingrediente_id, "quantidade": item.quantidade, "unidade": item.unidade}
        ing_id = normalize_str(item.get("ingrediente_id"))
        ing = ingredientes.get(ing_id)
        if ing is None and estrito:
            raise ValueError(f"{campo}: ingrediente não encontrado: {ing_id}")
        if ing is not None and ing.tipo != tipo_esperado:
            raise ValueError(f"{campo}: '{ing.nome}' não é do tipo {tipo_esperado}")
        qtd = numero(item.get("quantidade"), f"{campo}.quantidade", minimo=0)
        unidade = item.get("unidade") or (ing.unidade if ing else "un")
        parcial = ItemFicha(ingrediente_id=ing_id, quantidade=qtd, unidade=unidade)
        escolha(parcial.unidade, UNIDADES, f"{campo}.unidade")
        out.append(replace(parcial, custo=custo_item(parcial, ingredientes)))
    return out


def _montar_ficha(
    dados_ficha: Dict[str, Any],
    ficha_id: str,
    dados: SistemaData,
    validar: Optional[Set[str]] = None,
) -> FichaTecnica:
    """
    ``validar`` limita a checagem de existência das referências às chaves
    informadas; referências já gravadas que ficaram pendentes são mantidas
    (custo 0). ``None`` valida todas.
    """
    def estrito(campo: str) -> bool:
        return validar is None or campo in validar

    nome = normalize_str(dados_ficha.get("nome"))
    if not nome:
        raise ValueError("nome é obrigatório")
    tipo = escolha(dados_ficha.get("tipo"), TIPOS_FICHA, "tipo")

    fichas = {f.id: f for f in dados.fichas_tecnicas}
    bases: List[str] = []
    for base_id in dados_ficha.get("receitas_base_ids") or []:
        base = fichas.get(base_id)
        if base is None and estrito("receitas_base_ids"):
            raise ValueError(f"receita base não encontrada: {base_id}")
        if base is not None and base.tipo != "receita_base":
            raise ValueError(f"'{base.nome}' não é uma receita base")
        if base_id == ficha_id:
            raise ValueError("uma ficha não pode usar a si mesma como receita base")
        if base_id not in bases:
            bases.append(base_id)

    validade = dados_ficha.get("validade_dias")
    tempo = dados_ficha.get("tempo_preparo")
    categoria_id = normalize_str(dados_ficha.get("categoria_id"))
    if estrito("categoria_id") and categoria_id and categoria_id not in {c.id for c in dados.categorias_produto}:
        raise ValueError(f"categoria de produto não encontrada: {categoria_id}")

    ficha = FichaTecnica(
        id=ficha_id,
        nome=nome,
        tipo=tipo,
        categoria_id=categoria_id,
        receitas_base_ids=bases,
        itens=_itens(dados_ficha.get("itens"), "itens", dados, "ingrediente", estrito("itens")),
        itens_embalagem=_itens(
            dados_ficha.get("itens_embalagem"), "itens_embalagem", dados, "embalagem", estrito("itens_embalagem")
        ),
        rendimento_quantidade=numero(dados_ficha.get("rendimento_quantidade") or 1, "rendimento_quantidade", minimo=0),
        rendimento_unidade=escolha(dados_ficha.get("rendimento_unidade") or "un", UNIDADES, "rendimento_unidade"),
        preco_venda=numero(dados_ficha.get("preco_venda") or 0, "preco_venda", minimo=0),
        validade_dias=int(numero(validade, "validade_dias", minimo=0)) if validade not in (None, "") else None,
        tempo_preparo=int(numero(tempo, "tempo_preparo", minimo=0)) if tempo not in (None, "") else None,
        descricao=normalize_str(dados_ficha.get("descricao")),
    )
    return _com_custos(ficha, dados)


def _com_custos(ficha: FichaTecnica, dados: SistemaData) -> FichaTecnica:
    total = custo_ficha(ficha, dados)
    unidade = custo_unitario(total, ficha.rendimento_quantidade)
    return replace(
        ficha,
        custo_total=total,
        custo_unidade=unidade,
        margem_lucro=margem_percentual(ficha.preco_venda, unidade),
        cmv_percentual=cmv_percentual(ficha.preco_venda, unidade),
    )


def _substituir(dados: SistemaData, ficha: FichaTecnica) -> SistemaData:
    outras = [f for f in dados.fichas_tecnicas if f.id != ficha.id]
    return replace(dados, fichas_tecnicas=outras + [ficha])


def _itens_db(itens: List[ItemFicha]) -> List[Dict[str, Any]]:
    return [
        {"ingrediente_id": i.ingrediente_id, "quantidade": i.quantidade, "unidade": i.unidade, "custo": i.custo}
        for i in itens
    ]


def _registro(ficha: FichaTecnica) -> Dict[str, Any]:
    return {
        "id": ficha.id,
        "nome": ficha.nome,
        "tipo": ficha.tipo,
        "categoria_id": ficha.categoria_id,
        "receitas_base_ids": list(ficha.receitas_base_ids),
        "itens": _itens_db(ficha.itens),
        "itens_embalagem": _itens_db(ficha.itens_embalagem),
        "rendimento_quantidade": ficha.rendimento_quantidade,
        "rendimento_unidade": ficha.rendimento_unidade,
        "custo_total": ficha.custo_total,
        "custo_unidade": ficha.custo_unidade,
        "preco_venda": ficha.preco_venda,
        "margem_lucro": ficha.margem_lucro,
        "cmv_percentual": ficha.cmv_percentual,
        "validade_dias": ficha.validade_dias,
        "tempo_preparo": ficha.tempo_preparo,
        "descricao": ficha.descricao,
    }


def salvar_ficha(
    dados_ficha: Dict[str, Any],
    ficha_id: Optional[str] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """
    Cria ou atualiza uma ficha técnica com custos resolvidos.

    Args:
        dados_ficha: nome, tipo, categoria_id, receitas_base_ids, itens
            (lista de ``{"ingrediente_id", "quantidade", "unidade"}``),
            itens_embalagem, rendimento_quantidade, rendimento_unidade,
            preco_venda, validade_dias, tempo_preparo, descricao.
        ficha_id: id da ficha a atualizar; ``None`` cria uma nova. Na
            atualização, chaves ausentes ou ``None`` mantêm o valor gravado.

    Returns:
        Registro gravado (inclui ``custo_total``, ``custo_unidade``,
        ``margem_lucro`` e ``cmv_percentual``).
    """
    preparar(db_path)
    repo = FichaTecnicaRepo(db_path, usuario)
    log_system_event("salvar_ficha_started", {"id": ficha_id, "nome": dados_ficha.get("nome")})
    try:
        dados = carregar_sistema(db_path, usuario)
        validar: Optional[Set[str]] = None
        if ficha_id:
            atual = repo.get(ficha_id)
            if atual is None:
                raise ValueError(f"ficha não encontrada: {ficha_id}")
            informados = {k: v for k, v in dados_ficha.items() if v is not None}
            validar = set(informados)
            # campos não informados mantêm o valor gravado
            dados_ficha = {**atual, **informados}

        ficha = _montar_ficha(dados_ficha, ficha_id or "", dados, validar)
        if ficha_id:
            # só uma ficha já gravada pode fechar um ciclo
            ordem_recalculo(_substituir(dados, ficha))
            rec = _registro(ficha)
            repo.update(ficha_id, rec)
            log_database_operation("fichas_tecnicas", "UPDATE", 1, id=ficha_id)
        else:
            rec = _registro(ficha)
            rec.pop("id")
            rec["id"] = repo.insert(rec)
            log_database_operation("fichas_tecnicas", "INSERT", 1, id=rec["id"])

        log_transaction(
            "salvar_ficha",
            {"nome": ficha.nome, "tipo": ficha.tipo},
            result={"id": rec["id"], "custo_total": ficha.custo_total, "custo_unidade": ficha.custo_unidade},
        )
        return rec
    except Exception as e:
        log_transaction("salvar_ficha", {"id": ficha_id, "dados": dados_ficha}, error=str(e))
        log_system_event("salvar_ficha_error", {"error": str(e)}, level="error")
        raise


def excluir_ficha(ficha_id: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> None:
    """Remove a ficha. Produtos que a usavam como base ficam com a referência pendente (custo 0)."""
    preparar(db_path)
    if FichaTecnicaRepo(db_path, usuario).delete(ficha_id) == 0:
        raise ValueError(f"ficha não encontrada: {ficha_id}")
    log_database_operation("fichas_tecnicas", "DELETE", 1, id=ficha_id)


def listar_fichas(
    tipo: Optional[str] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> List[Dict[str, Any]]:
    preparar(db_path)
    dados = carregar_sistema(db_path, usuario)
    categorias = {c.id: c.nome for c in dados.categorias_produto}
    return [
        {
            "id": f.id,
            "nome": f.nome,
            "tipo": f.tipo,
            "categoria": categorias.get(f.categoria_id) if f.categoria_id else None,
            "rendimento": f"{f.rendimento_quantidade:g} {f.rendimento_unidade}",
            "custo_total": f.custo_total,
            "custo_unidade": f.custo_unidade,
            "preco_venda": f.preco_venda,
            "margem_lucro": f.margem_lucro,
        }
        for f in dados.fichas_tecnicas
        if not tipo or f.tipo == tipo
    ]


def detalhar_ficha(ficha_id: str, db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> Dict[str, Any]:
    """Ficha com a composição do custo linha a linha (valores gravados)."""
    preparar(db_path)
    dados = carregar_sistema(db_path, usuario)
    fichas = {f.id: f for f in dados.fichas_tecnicas}
    ficha = fichas.get(ficha_id)
    if ficha is None:
        raise ValueError(f"ficha não encontrada: {ficha_id}")
    nomes = {i.id: i.nome for i in dados.ingredientes}

    linhas: List[Dict[str, Any]] = []
    for base_id in ficha.receitas_base_ids:
        base = fichas.get(base_id)
        linhas.append({
            "origem": "receita_base",
            "nome": base.nome if base else f"(removida) {base_id}",
            "quantidade": None,
            "unidade": None,
            "custo": base.custo_total if base else 0.0,
        })
    for origem, itens in (("ingrediente", ficha.itens), ("embalagem", ficha.itens_embalagem)):
        for i in itens:
            linhas.append({
                "origem": origem,
                "nome": nomes.get(i.ingrediente_id, f"(removido) {i.ingrediente_id}"),
                "quantidade": i.quantidade,
                "unidade": i.unidade,
                "custo": i.custo,
            })

    out = _registro(ficha)
    out["composicao"] = linhas
    return out


def listar_desatualizadas(db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> List[Dict[str, Any]]:
    preparar(db_path)
    return [
        {"id": d.ficha_id, "nome": d.nome, "custo_gravado": d.custo_gravado, "custo_atual": d.custo_atual}
        for d in fichas_desatualizadas(carregar_sistema(db_path, usuario))
    ]


def recalcular_fichas(db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> Dict[str, Any]:
    """
    Regrava custos de todas as fichas, receitas base antes dos produtos.

    Cada ficha recalculada substitui a anterior na fotografia em memória,
    de modo que os produtos já enxergam o custo novo das suas bases.

    Returns:
        ``{"recalculadas": n, "alteradas": [ids]}``
    """
    preparar(db_path)
    repo = FichaTecnicaRepo(db_path, usuario)
    log_system_event("recalcular_fichas_started", {"usuario": usuario})
    try:
        dados = carregar_sistema(db_path, usuario)
        ingredientes = {i.id: i for i in dados.ingredientes}
        fichas = {f.id: f for f in dados.fichas_tecnicas}
        alteradas: List[str] = []

        for fid in ordem_recalculo(dados):
            antiga = fichas[fid]
            nova = replace(
                antiga,
                itens=[replace(i, custo=custo_item(i, ingredientes)) for i in antiga.itens],
                itens_embalagem=[replace(i, custo=custo_item(i, ingredientes)) for i in antiga.itens_embalagem],
            )
            nova = _com_custos(nova, dados)
            dados = _substituir(dados, nova)
            fichas[fid] = nova
            if nova != antiga:
                repo.update(fid, _registro(nova))
                alteradas.append(fid)

        log_database_operation("fichas_tecnicas", "RECALCULO", len(alteradas))
        log_transaction("recalcular_fichas", {"usuario": usuario}, result={"alteradas": len(alteradas)})
        return {"recalculadas": len(fichas), "alteradas": alteradas}
    except Exception as e:
        log_transaction("recalcular_fichas", {"usuario": usuario}, error=str(e))
        log_system_event("recalcular_fichas_error", {"error": str(e)}, level="error")
        raise

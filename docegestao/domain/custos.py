"""
Custo de fichas técnicas.

O custo total de uma ficha soma, nesta ordem:

1. o ``custo_total`` **gravado** de cada receita base referenciada
   (um único nível: a receita base não é recalculada aqui);
2. ``quantidade * custo_unidade`` de cada ingrediente;
3. ``quantidade * custo_unidade`` de cada embalagem.

Referências inexistentes contribuem com zero. Como o custo da receita
base é uma fotografia feita ao salvá-la, alterações posteriores só
chegam aos produtos que a usam quando eles são salvos de novo;
``fichas_desatualizadas`` aponta esses casos e ``ordem_recalculo``
devolve a ordem em que precisam ser salvos.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from docegestao.domain.formulas import cmv_percentual, custo_unitario, margem_percentual
from docegestao.domain.models import FichaDesatualizada, FichaTecnica, Ingrediente, ItemFicha, SistemaData

__all__ = [
    "custo_item",
    "custo_ficha",
    "calcular_custo_ficha",
    "custo_unitario",
    "margem_percentual",
    "cmv_percentual",
    "fichas_desatualizadas",
    "ordem_recalculo",
]

TOLERANCIA = 0.005  # meio centavo


def custo_item(item: ItemFicha, ingredientes: Dict[str, Ingrediente]) -> float:
    ing = ingredientes.get(item.ingrediente_id)
    if ing is None:
        return 0.0
    return float(item.quantidade or 0.0) * float(ing.custo_unidade or 0.0)


def custo_ficha(ficha: FichaTecnica, dados: SistemaData) -> float:
    """Custo total de ``ficha`` (que pode ainda não estar gravada) sobre ``dados``."""
    fichas = {f.id: f for f in dados.fichas_tecnicas}
    ingredientes = {i.id: i for i in dados.ingredientes}

    total = 0.0
    for base_id in ficha.receitas_base_ids:
        base = fichas.get(base_id)
        if base is not None:
            total += float(base.custo_total or 0.0)
    for item in ficha.itens:
        total += custo_item(item, ingredientes)
    for item in ficha.itens_embalagem:
        total += custo_item(item, ingredientes)
    return total


def calcular_custo_ficha(dados: SistemaData, ficha_id: str) -> float:
    """Custo total da ficha gravada ``ficha_id``; 0 se ela não existir."""
    for ficha in dados.fichas_tecnicas:
        if ficha.id == ficha_id:
            return custo_ficha(ficha, dados)
    return 0.0


def fichas_desatualizadas(dados: SistemaData) -> List[FichaDesatualizada]:
    """Fichas cujo custo gravado difere do custo resolvido agora."""
    out: List[FichaDesatualizada] = []
    for ficha in dados.fichas_tecnicas:
        atual = custo_ficha(ficha, dados)
        if abs(atual - float(ficha.custo_total or 0.0)) > TOLERANCIA:
            out.append(
                FichaDesatualizada(
                    ficha_id=ficha.id,
                    nome=ficha.nome,
                    custo_gravado=float(ficha.custo_total or 0.0),
                    custo_atual=atual,
                )
            )
    return out


def ordem_recalculo(dados: SistemaData) -> List[str]:
    """Ids das fichas em ordem de dependência (receitas base primeiro).

    Referências a fichas inexistentes são ignoradas.

    Raises:
        ValueError: se houver um ciclo entre receitas base.
    """
    fichas = {f.id: f for f in dados.fichas_tecnicas}
    ordem: List[str] = []
    estado: Dict[str, int] = {}  # 1 = visitando, 2 = concluída

    def visitar(fid: str, caminho: List[str]) -> None:
        marca: Optional[int] = estado.get(fid)
        if marca == 2:
            return
        if marca == 1:
            ciclo = " -> ".join(fichas[x].nome for x in caminho[caminho.index(fid):] + [fid])
            raise ValueError(f"ciclo entre receitas base: {ciclo}")
        estado[fid] = 1
        for base_id in fichas[fid].receitas_base_ids:
            if base_id in fichas:
                visitar(base_id, caminho + [fid])
        estado[fid] = 2
        ordem.append(fid)

    for ficha in dados.fichas_tecnicas:
        visitar(ficha.id, [])
    return ordem

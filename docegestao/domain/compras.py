"""
Lista de compras a partir do estoque mínimo.

Estoques são contados em embalagens. Todo item com estoque atual menor
ou igual ao mínimo entra na lista com ``minimo - atual`` embalagens a
comprar; itens que resultam em zero ficam de fora. A lista é ordenada
pelo custo estimado (maior primeiro), priorizando o impacto no caixa.
"""

from __future__ import annotations

from typing import Iterable, List

from docegestao.domain.models import Ingrediente, ItemListaCompras


def gerar_lista_compras(ingredientes: Iterable[Ingrediente]) -> List[ItemListaCompras]:
    out: List[ItemListaCompras] = []
    for ing in ingredientes:
        atual = float(ing.estoque_atual or 0.0)
        minimo = float(ing.estoque_minimo or 0.0)
        if atual > minimo:
            continue
        comprar = max(0.0, minimo - atual)
        if comprar <= 0.0:
            continue
        out.append(
            ItemListaCompras(
                ingrediente_id=ing.id,
                nome=ing.nome,
                quantidade_estoque=atual,
                estoque_minimo=minimo,
                quantidade_comprar=comprar,
                unidade=ing.unidade,
                custo_estimado=comprar * float(ing.preco_embalagem or 0.0),
            )
        )
    out.sort(key=lambda i: i.custo_estimado, reverse=True)
    return out


def total_lista_compras(itens: Iterable[ItemListaCompras]) -> float:
    return sum(i.custo_estimado for i in itens)

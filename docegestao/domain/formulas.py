"""
Mathematical formulas for the financial engine.

These functions implement the arithmetic behind costing, pricing and
the monthly result: cost of goods sold as a share of revenue, unit
costs, margins and the break-even point. They are used by the
aggregators in ``periodos``, ``custos`` and ``compras``.

All functions are pure: they depend solely on their inputs and do
not modify any external state. Divisions by zero never raise; they
resolve to the documented fallback values instead.
"""

from math import isfinite
from typing import Optional, Union

Numero = Union[int, float]


def custo_unidade_ingrediente(preco_embalagem: Numero, quantidade_embalagem: Numero) -> float:
    """Cost of one unit of measure of an ingredient.

    ``preco_embalagem / quantidade_embalagem`` when the package quantity
    is positive, otherwise 0.
    """
    qtd = float(quantidade_embalagem or 0.0)
    if qtd <= 0.0:
        return 0.0
    return float(preco_embalagem or 0.0) / qtd


def custo_unitario(custo_total: Numero, rendimento: Optional[Numero]) -> float:
    """Unit cost of a recipe; a zero or missing yield counts as 1."""
    r = float(rendimento or 0.0)
    if r <= 0.0:
        r = 1.0
    return float(custo_total) / r


def margem_percentual(preco_venda: Numero, custo_unidade: Numero) -> float:
    """Profit margin over the sale price, in percent.

    Parameters
    ----------
    preco_venda: float
        Sale price of one unit.
    custo_unidade: float
        Cost of one unit.

    Returns
    -------
    float
        ``(preco - custo) / preco * 100``, or 0 when either the price or
        the cost is not positive.
    """
    preco = float(preco_venda or 0.0)
    custo = float(custo_unidade or 0.0)
    if preco <= 0.0 or custo <= 0.0:
        return 0.0
    return (preco - custo) / preco * 100.0


def cmv_percentual(preco_venda: Numero, custo_unidade: Numero) -> float:
    """Cost of goods as a share of the sale price (percent); same guard as the margin."""
    preco = float(preco_venda or 0.0)
    custo = float(custo_unidade or 0.0)
    if preco <= 0.0 or custo <= 0.0:
        return 0.0
    return custo / preco * 100.0


def preco_ideal(custo_unidade: Numero, margem_alvo: Numero) -> float:
    """Sale price that yields ``margem_alvo`` percent over the price.

    ``custo / (1 - margem / 100)``; 0 without a positive cost or when
    the target margin is 100% or more.
    """
    custo = float(custo_unidade or 0.0)
    fator = 1.0 - float(margem_alvo or 0.0) / 100.0
    if custo <= 0.0 or fator <= 0.0:
        return 0.0
    return custo / fator


def calcular_cmv(faturamento: Numero, cmv_percentual_config: Numero) -> float:
    """Cost of goods sold estimated as a percentage of gross revenue."""
    return float(faturamento) * (float(cmv_percentual_config or 0.0) / 100.0)


def margem_sobre_faturamento(lucro: Numero, faturamento: Numero) -> float:
    """Profit over gross revenue in percent, 0 without (positive) revenue."""
    fat = float(faturamento)
    if fat <= 0.0:
        return 0.0
    return float(lucro) / fat * 100.0


def ponto_equilibrio(
    faturamento: Numero,
    faturamento_liquido: Numero,
    custos_fixos: Numero,
    custos_variaveis: Numero,
    cmv: Numero,
) -> float:
    """Compute the break-even gross revenue.

    The variable burden is ``custos_variaveis + cmv``. When there is
    revenue and the net revenue exceeds that burden, the contribution
    index is::

        indice = (faturamento_liquido - variavel_total) / faturamento

    and the break-even point is ``custos_fixos / indice``. In every
    other case (no revenue, non-positive index, non-finite result)
    the fixed costs themselves are returned.
    """
    fat = float(faturamento)
    liq = float(faturamento_liquido)
    fixos = float(custos_fixos)
    variavel_total = float(custos_variaveis) + float(cmv)

    pe = fixos
    if fat > 0.0 and liq > variavel_total:
        margem_contribuicao = liq - variavel_total
        indice = margem_contribuicao / fat
        if indice > 0.0:
            pe = fixos / indice
    return pe if isfinite(pe) else fixos


def percentual_meta(valor_acumulado: Numero, valor_meta: Numero) -> float:
    """Goal completion in percent, capped at 100 (0 for a non-positive target)."""
    alvo = float(valor_meta or 0.0)
    if alvo <= 0.0:
        return 0.0
    return min(float(valor_acumulado or 0.0) / alvo * 100.0, 100.0)

"""
Taxas das formas de pagamento e valor líquido.

As taxas vêm de ``Configuracoes.taxas`` (percentuais por forma de
pagamento). Dinheiro nunca tem taxa; uma forma sem taxa configurada é
tratada como 0%. Valores zero ou negativos (estornos, correções) passam
pela mesma aritmética, sem erro.
"""

from __future__ import annotations

from typing import Union

from docegestao.domain.models import Configuracoes


def taxa_percentual(config: Configuracoes, forma_pagamento: str) -> float:
    """Percentual configurado para ``forma_pagamento`` (0 para dinheiro ou ausente)."""
    if forma_pagamento == "dinheiro":
        return 0.0
    try:
        return float((config.taxas or {}).get(forma_pagamento) or 0.0)
    except (TypeError, ValueError):
        return 0.0


def calcular_taxa(config: Configuracoes, forma_pagamento: str, valor: Union[int, float]) -> float:
    """Valor retido pela operadora: ``valor * taxa / 100``."""
    return float(valor) * (taxa_percentual(config, forma_pagamento) / 100.0)


def calcular_valor_liquido(config: Configuracoes, forma_pagamento: str, valor: Union[int, float]) -> float:
    """Valor bruto menos a taxa da forma de pagamento."""
    return float(valor) - calcular_taxa(config, forma_pagamento, valor)

"""
Utilidades de parsing e formatação de valores em pt-BR.

Este módulo interpreta os formatos digitados na CLI ou encontrados nas
planilhas do caixa: valores monetários ("R$ 1.234,56", "12,5", "-3"),
formas de pagamento escritas de vários jeitos ("Cartão de Crédito",
"PIX") e itens de ficha no formato ``<id>:<quantidade>[:<unidade>]``.
Também concentra a formatação de moeda, percentual e data usada nas
tabelas.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, Optional

_NUM_RE = re.compile(r"[-+]?[\d.,]+")

_FORMAS = {
    "dinheiro": "dinheiro",
    "especie": "dinheiro",
    "cash": "dinheiro",
    "pix": "pix",
    "debito": "debito",
    "cartao de debito": "debito",
    "cartao debito": "debito",
    "credito": "credito",
    "cartao de credito": "credito",
    "cartao credito": "credito",
    "cartao": "credito",
}

_TIPOS = {
    "receita": "receita",
    "entrada": "receita",
    "venda": "receita",
    "despesa": "despesa",
    "saida": "despesa",
    "gasto": "despesa",
}


def _sem_acento(s: str) -> str:
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    return "".join(acentos.get(ch, ch) for ch in s.strip().lower())


def parse_moeda(txt: Any) -> Optional[float]:
    """Interpreta um valor monetário.

    Aceita prefixo "R$", separador de milhar "." e decimal ",", ou o
    formato com ponto decimal. Números já numéricos passam direto.

    Exemplos:
        "R$ 1.234,56" → 1234.56
        "12,5"        → 12.5
        "1234.56"     → 1234.56
        "-R$ 10,00"   → -10.0

    Returns:
        O valor como float, ou None quando não há número no texto.
    """
    if txt is None:
        return None
    if isinstance(txt, (int, float)):
        return float(txt)
    s = str(txt).strip().replace("R$", "").replace(" ", "")
    if not s:
        return None
    negativo = s.startswith("-") or (s.startswith("(") and s.endswith(")"))
    m = _NUM_RE.search(s)
    if not m:
        return None
    num = m.group(0).lstrip("+-")
    if "," in num:
        num = num.replace(".", "").replace(",", ".")
    elif num.count(".") > 1:
        num = num.replace(".", "")
    try:
        val = float(num)
    except ValueError:
        return None
    return -val if negativo else val


def parse_forma_pagamento(txt: Any) -> Optional[str]:
    """Forma de pagamento canônica (dinheiro, pix, debito, credito) ou None."""
    if txt is None:
        return None
    return _FORMAS.get(_sem_acento(str(txt)))


def parse_tipo_transacao(txt: Any) -> Optional[str]:
    if txt is None:
        return None
    return _TIPOS.get(_sem_acento(str(txt)))


def parse_item(txt: str) -> Dict[str, Any]:
    """Item de ficha no formato ``<id>:<quantidade>[:<unidade>]``.

    Exemplo: ``"farinha-id:0,5:kg"`` → ``{"ingrediente_id": "farinha-id",
    "quantidade": 0.5, "unidade": "kg"}``.

    Raises:
        ValueError: se o texto não tiver id e quantidade válidos.
    """
    partes = [p.strip() for p in str(txt).split(":")]
    if len(partes) < 2 or not partes[0]:
        raise ValueError(f"item inválido: {txt!r} (use ID:QUANTIDADE[:UNIDADE])")
    qtd = parse_moeda(partes[1])
    if qtd is None:
        raise ValueError(f"quantidade inválida no item {txt!r}")
    item = {"ingrediente_id": partes[0], "quantidade": qtd}
    if len(partes) > 2 and partes[2]:
        item["unidade"] = partes[2]
    return item


def format_moeda(val: Optional[float]) -> str:
    """1234.5 → "R$ 1.234,50"."""
    if val is None:
        return "-"
    s = f"{abs(float(val)):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"-R$ {s}" if float(val) < 0 else f"R$ {s}"


def format_percentual(val: Optional[float]) -> str:
    if val is None:
        return "-"
    return f"{float(val):.1f}%".replace(".", ",")


def format_data(d: Optional[date]) -> str:
    """Data no formato DD/MM/AAAA ("-" quando ausente)."""
    if d is None:
        return "-"
    if isinstance(d, str):
        d = date.fromisoformat(d[:10])
    return d.strftime("%d/%m/%Y")

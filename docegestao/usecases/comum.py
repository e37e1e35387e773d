"""
Utilitários compartilhados pelos casos de uso: preparo do banco e
validação de entradas vindas da CLI ou de planilhas.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional

from docegestao.domain.datas import para_data
from docegestao.infra.migrations import apply_migrations


def preparar(db_path: str) -> None:
    """Garante o schema atualizado antes de ler ou gravar."""
    apply_migrations(db_path)


def normalize_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def escolha(valor: Any, opcoes: Iterable[str], campo: str) -> str:
    """Valida ``valor`` contra as opções aceitas (comparação exata)."""
    opcoes = tuple(opcoes)
    s = normalize_str(valor)
    if s not in opcoes:
        raise ValueError(f"{campo} inválido: {valor!r} (opções: {', '.join(opcoes)})")
    return s


def numero(valor: Any, campo: str, minimo: Optional[float] = None, permite_none: bool = False) -> Optional[float]:
    """Converte para float, validando o mínimo quando informado."""
    if valor is None or (isinstance(valor, str) and not valor.strip()):
        if permite_none:
            return None
        raise ValueError(f"{campo} é obrigatório")
    try:
        v = float(str(valor).replace(",", ".")) if isinstance(valor, str) else float(valor)
    except (TypeError, ValueError):
        raise ValueError(f"{campo} inválido: {valor!r}") from None
    if minimo is not None and v < minimo:
        raise ValueError(f"{campo} deve ser >= {minimo:g}")
    return v


def dia(valor: Any, padrao: Optional[date] = None) -> date:
    """Data informada ou ``padrao`` (hoje, se nada for informado)."""
    d = para_data(valor)
    if d is not None:
        return d
    return padrao or date.today()

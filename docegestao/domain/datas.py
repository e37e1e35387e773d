"""
Utilidades de datas de calendário.

Todo o motor de cálculo compara e desloca datas como ``datetime.date``:
um dia inteiro, sem hora e sem fuso horário. Strings ``YYYY-MM-DD``,
timestamps ISO (``2025-03-10T23:30:00Z``), ``datetime`` e ``date`` são
reduzidos ao dia de calendário que carregam no próprio texto, sem
conversão entre fusos.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Tuple


def para_data(val: Any) -> Optional[date]:
    """Converte ``val`` para ``date``.

    ``None`` e strings vazias resultam em ``None``. Strings em formato
    brasileiro (``DD/MM/AAAA``) também são aceitas.

    Raises:
        ValueError: se ``val`` não representar uma data.
    """
    if val is None:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    s = str(val).strip()
    if not s:
        return None
    # O dia de calendário são os 10 primeiros caracteres de um ISO
    if len(s) >= 10 and s[4] == "-" and s[7] == "-":
        return date.fromisoformat(s[:10])
    for fmt in ("%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"data inválida: {val!r}")


def para_iso(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d is not None else None


def parse_ano_mes(s: Any) -> Tuple[int, int]:
    """``"YYYY-MM"`` (ou qualquer data) -> ``(ano, mes)``."""
    if isinstance(s, (date, datetime)):
        return s.year, s.month
    txt = str(s).strip()
    try:
        y, m = txt[:7].split("-", 1)
        ano, mes = int(y), int(m)
    except ValueError:
        raise ValueError(f"mês inválido: {s!r} (use YYYY-MM)") from None
    if not 1 <= mes <= 12:
        raise ValueError(f"mês inválido: {s!r} (use YYYY-MM)")
    return ano, mes


def ano_mes(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def fim_mes(d: date) -> date:
    return d.replace(day=monthrange(d.year, d.month)[1])


def intervalo_mes(referencia: Any) -> Tuple[date, date]:
    """Primeiro e último dia do mês que contém ``referencia``."""
    ano, mes = parse_ano_mes(referencia)
    inicio = date(ano, mes, 1)
    return inicio, fim_mes(inicio)


def meses_no_intervalo(mes_inicio: Any, mes_fim: Any) -> List[str]:
    """Lista ``YYYY-MM`` de ``mes_inicio`` a ``mes_fim`` (inclusivo)."""
    ya, ma = parse_ano_mes(mes_inicio)
    yb, mb = parse_ano_mes(mes_fim)
    out: List[str] = []
    y, m = ya, ma
    while (y, m) <= (yb, mb):
        out.append(f"{y:04d}-{m:02d}")
        m += 1
        if m > 12:
            y, m = y + 1, 1
    return out


def adicionar_dias(d: date, dias: int) -> date:
    return d + timedelta(days=int(dias))


def dias_entre(inicio: date, fim: date) -> int:
    """Número de dias de calendário de ``inicio`` até ``fim``."""
    return (fim - inicio).days


def meses_completos_entre(inicio: date, fim: date) -> int:
    """Meses completos de ``inicio`` até ``fim`` (negativo se ``fim`` < ``inicio``)."""
    meses = (fim.year - inicio.year) * 12 + (fim.month - inicio.month)
    if meses > 0 and fim.day < inicio.day:
        meses -= 1
    elif meses < 0 and fim.day > inicio.day:
        meses += 1
    return meses

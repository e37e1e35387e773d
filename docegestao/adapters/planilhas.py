# docegestao/adapters/planilhas.py
"""
Loader de planilhas (XLSX) do caixa diário.

Essas funções:
- leem planilhas XLSX usando pandas;
- normalizam cabeçalhos (acentos, variações, sinônimos);
- retornam listas de dicionários com as chaves esperadas pelo caso de
  uso de importação (`importar_transacoes_xlsx`).

Observações:
- Datas são lidas com o dia primeiro (DD/MM/AAAA) e devolvidas como ISO.
- Valores aceitam o formato brasileiro ("R$ 1.234,56").
- Tipo e forma de pagamento são mapeados para os valores canônicos;
  textos desconhecidos são preservados para que a validação do caso de
  uso aponte a linha.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

import pandas as pd

from docegestao.adapters.parsers import parse_forma_pagamento, parse_moeda, parse_tipo_transacao


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _safe_get(row, key):
    """Lê um campo da linha tratando NA como None."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    s = str(val).strip()
    return s or None


def _to_date_iso(val: Any) -> Optional[str]:
    """Converte valor para data ISO (YYYY-MM-DD); texto não reconhecido volta como está."""
    if val is None or pd.isna(val):
        return None
    if isinstance(val, pd.Timestamp):
        return val.date().isoformat()
    s = str(val).strip()
    if not s:
        return None
    if re.match(r"^\d{4}-\d{2}-\d{2}", s):
        # ISO (inclusive timestamps exportados): só a parte da data
        return s[:10]
    d = pd.to_datetime(s, dayfirst=True, errors="coerce")
    if pd.isna(d):
        # texto original: a validação da linha aponta a data inválida
        return s
    return d.date().isoformat()


ALIASES = {
    "data": "data",
    "dia": "data",
    "data lancamento": "data",
    "data do lancamento": "data",

    "tipo": "tipo",
    "natureza": "tipo",
    "movimento": "tipo",

    "descricao": "descricao",
    "historico": "descricao",
    "produto": "descricao",
    "item": "descricao",

    "valor": "valor",
    "valor bruto": "valor",
    "total": "valor",

    "forma": "forma_pagamento",
    "forma pagamento": "forma_pagamento",
    "forma de pagamento": "forma_pagamento",
    "pagamento": "forma_pagamento",
    "meio de pagamento": "forma_pagamento",

    "categoria": "categoria_id",
    "categoria id": "categoria_id",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    new_cols = {}
    for col in df.columns:
        key = _slug(col)
        new_cols[col] = ALIASES.get(key, key)
    return df.rename(columns=new_cols)


# ---------------------------
# loader público (XLSX)
# ---------------------------

def carregar_transacoes_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de lançamentos do caixa.

    Campos de saída (chaves do dict por linha):
      - data: ISO date (YYYY-MM-DD), texto original se inválida, ou None se vazia
      - tipo: 'receita' | 'despesa' | texto original | None
      - descricao: str | None
      - valor: float | None
      - forma_pagamento: dinheiro/pix/debito/credito | texto original | None
      - categoria_id: str | None

    Linhas totalmente vazias são ignoradas.
    """
    df = pd.read_excel(path, dtype="string")
    df = _normalize_columns(df)
    df = df.dropna(how="all")
    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        tipo = _safe_get(row, "tipo")
        forma = _safe_get(row, "forma_pagamento")
        out.append(
            {
                "data": _to_date_iso(_safe_get(row, "data")),
                "tipo": parse_tipo_transacao(tipo) or tipo,
                "descricao": _safe_get(row, "descricao"),
                "valor": parse_moeda(_safe_get(row, "valor")),
                "forma_pagamento": parse_forma_pagamento(forma) or forma,
                "categoria_id": _safe_get(row, "categoria_id"),
            }
        )
    return out

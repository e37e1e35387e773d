# docegestao/infra/db.py
"""
Utilidades de conexão SQLite e de identificação de registros.
"""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator


@contextmanager
def connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    Context manager para abrir conexão SQLite com:
    - foreign_keys ON
    - row_factory = sqlite3.Row
    - commit ao sair (rollback em caso de exceção)
    """
    conn = sqlite3.connect(str(db_path))
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def new_id() -> str:
    """Identificador de registro (UUID4 em texto)."""
    return str(uuid.uuid4())


def agora_iso() -> str:
    """Carimbo de criação/atualização dos registros."""
    return datetime.now().isoformat(timespec="seconds")

# docegestao/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: tabelas base (todas com `user_id` para escopo por usuário)
V2: identidade do estabelecimento nas configurações + índices de consulta

Campos com listas (itens da ficha, receitas base, taxas, custos) são
gravados como JSON em colunas TEXT.
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Ingredientes e embalagens (estoque em embalagens)
    """
    CREATE TABLE IF NOT EXISTS ingredientes (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        nome TEXT NOT NULL,
        quantidade_embalagem REAL,
        unidade TEXT,
        preco_embalagem REAL,
        custo_unidade REAL,
        estoque_atual REAL DEFAULT 0,
        estoque_minimo REAL DEFAULT 0,
        tipo TEXT DEFAULT 'ingrediente', -- 'ingrediente' | 'embalagem'
        created_at TEXT,
        updated_at TEXT
    );
    """,
    # Fichas técnicas (receitas base e produtos finais)
    """
    CREATE TABLE IF NOT EXISTS fichas_tecnicas (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        nome TEXT NOT NULL,
        tipo TEXT NOT NULL, -- 'receita_base' | 'produto_final'
        categoria_id TEXT,
        receitas_base_ids TEXT, -- JSON: lista de ids
        itens TEXT, -- JSON: [{ingrediente_id, quantidade, unidade, custo}]
        itens_embalagem TEXT, -- JSON
        rendimento_quantidade REAL,
        rendimento_unidade TEXT,
        custo_total REAL,
        custo_unidade REAL,
        preco_venda REAL,
        margem_lucro REAL,
        cmv_percentual REAL,
        validade_dias INTEGER,
        tempo_preparo INTEGER,
        descricao TEXT,
        created_at TEXT,
        updated_at TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS categorias_produto (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        nome TEXT NOT NULL,
        margem_padrao REAL,
        cor TEXT,
        created_at TEXT,
        updated_at TEXT
    );
    """,
    # Produções (custo é fotografia no momento do registro)
    """
    CREATE TABLE IF NOT EXISTS producoes (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        ficha_tecnica_id TEXT,
        quantidade_produzida REAL,
        data_producao TEXT,
        data_validade TEXT,
        custo_total REAL,
        observacao TEXT,
        created_at TEXT,
        updated_at TEXT
    );
    """,
    # Caixa diário
    """
    CREATE TABLE IF NOT EXISTS transacoes (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        data TEXT NOT NULL,
        tipo TEXT NOT NULL, -- 'receita' | 'despesa'
        descricao TEXT,
        valor REAL,
        forma_pagamento TEXT,
        taxa_descontada REAL,
        valor_liquido REAL,
        categoria_id TEXT,
        created_at TEXT,
        updated_at TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS contas_pagar (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        descricao TEXT,
        categoria_id TEXT,
        valor REAL,
        data_vencimento TEXT,
        pago INTEGER DEFAULT 0,
        data_pagamento TEXT,
        recorrente INTEGER DEFAULT 0,
        created_at TEXT,
        updated_at TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS categorias_conta (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        nome TEXT NOT NULL,
        tipo TEXT, -- 'fixa' | 'variavel'
        limite_gasto REAL,
        cor TEXT,
        created_at TEXT,
        updated_at TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS metas (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        tipo TEXT, -- 'faturamento' | 'investimento'
        nome TEXT NOT NULL,
        valor_meta REAL,
        valor_acumulado REAL DEFAULT 0,
        data_inicio TEXT,
        data_fim TEXT,
        contribuicao_mensal REAL,
        ativa INTEGER DEFAULT 1,
        created_at TEXT,
        updated_at TEXT
    );
    """,
    # Configurações (uma linha por usuário)
    """
    CREATE TABLE IF NOT EXISTS configuracoes (
        user_id TEXT PRIMARY KEY,
        taxas TEXT, -- JSON: {"pix": 0, "debito": 1.5, "credito": 3.5}
        cmv_percentual_padrao REAL,
        margem_lucro_padrao REAL,
        custos_fixos TEXT, -- JSON: [{id, nome, valor}]
        custos_variaveis TEXT, -- JSON
        updated_at TEXT
    );
    """,
]

INDICES_V2: List[str] = [
    "CREATE INDEX IF NOT EXISTS idx_transacoes_user_data ON transacoes(user_id, data);",
    "CREATE INDEX IF NOT EXISTS idx_contas_user_venc ON contas_pagar(user_id, data_vencimento);",
    "CREATE INDEX IF NOT EXISTS idx_producoes_user_data ON producoes(user_id, data_producao);",
    "CREATE INDEX IF NOT EXISTS idx_ingredientes_user ON ingredientes(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_fichas_user ON fichas_tecnicas(user_id);",
]


def _ensure_column(conn, table: str, column: str, ddl: str) -> None:
    """Adiciona coluna se não existir."""
    cur = conn.execute(f"PRAGMA table_info({table});")
    cols = [r[1] for r in cur.fetchall()]  # r[1] é o nome da coluna
    if column not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {ddl};")


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    _ensure_column(conn, "configuracoes", "nome_estabelecimento", "nome_estabelecimento TEXT")
    _ensure_column(conn, "configuracoes", "logo_url", "logo_url TEXT")
    for sql in INDICES_V2:
        conn.execute(sql)


def apply_migrations(db_path: str) -> None:
    """Aplica migrações incrementais de acordo com PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2

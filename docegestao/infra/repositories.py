# docegestao/infra/repositories.py
"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Todas as consultas são filtradas por `user_id` (escopo por usuário).
Cada repositório oferece o contrato usado pelos casos de uso:
carregar tudo, buscar por id, inserir, atualizar e excluir por id.

Classes:
- IngredienteRepo
- FichaTecnicaRepo
- CategoriaProdutoRepo
- ProducaoRepo
- TransacaoRepo
- ContaPagarRepo
- CategoriaContaRepo
- MetaRepo
- ConfiguracoesRepo

Funções:
- carregar_sistema: monta a fotografia `SistemaData` de um usuário.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .db import agora_iso, connect, new_id
from docegestao.config import DEFAULTS
from docegestao.domain.datas import para_data
from docegestao.domain.models import (
    CategoriaConta,
    CategoriaProduto,
    Configuracoes,
    ContaPagar,
    CustoItem,
    FichaTecnica,
    Ingrediente,
    ItemFicha,
    Meta,
    Producao,
    SistemaData,
    TransacaoDiaria,
)


# -------------------------
# Helpers
# -------------------------

def _as_dict(row: Any) -> Dict[str, Any]:
    if isinstance(row, dict):
        return dict(row)
    if is_dataclass(row):
        return asdict(row)
    raise TypeError("row must be dict or dataclass")


def _to_db(val: Any, as_json: bool = False, as_bool: bool = False) -> Any:
    if as_json:
        return json.dumps(val if val is not None else [], ensure_ascii=False, default=str)
    if as_bool:
        return 1 if val else 0
    if isinstance(val, date):
        return val.isoformat()
    return val


def _from_db(val: Any, as_json: bool = False, as_bool: bool = False) -> Any:
    if as_json:
        if val is None or val == "":
            return None
        return json.loads(val)
    if as_bool:
        return bool(val)
    return val


# -------------------------
# Base
# -------------------------

class _TabelaRepo:
    """Repositório genérico de uma tabela com `id` TEXT e `user_id`."""

    tabela: str = ""
    colunas: Tuple[str, ...] = ()
    colunas_json: Tuple[str, ...] = ()
    colunas_bool: Tuple[str, ...] = ()
    ordem: str = "created_at"

    def __init__(self, db_path: str, user_id: str):
        self.db_path = db_path
        self.user_id = user_id

    def _encode(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return {
            k: _to_db(v, k in self.colunas_json, k in self.colunas_bool)
            for k, v in row.items()
            if k in self.colunas
        }

    def _decode(self, row) -> Dict[str, Any]:
        out = {}
        for k in row.keys():
            if k in ("user_id",):
                continue
            out[k] = _from_db(row[k], k in self.colunas_json, k in self.colunas_bool)
        return out

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            cur = c.execute(
                f"SELECT * FROM {self.tabela} WHERE user_id = ? ORDER BY {self.ordem}",
                (self.user_id,),
            )
            return [self._decode(r) for r in cur.fetchall()]

    def get(self, id_: str) -> Optional[Dict[str, Any]]:
        with connect(self.db_path) as c:
            row = c.execute(
                f"SELECT * FROM {self.tabela} WHERE id = ? AND user_id = ?",
                (id_, self.user_id),
            ).fetchone()
            return self._decode(row) if row else None

    def insert(self, row: Any) -> str:
        """Insere um registro e devolve o id (gerado se ausente)."""
        payload = self._encode(_as_dict(row))
        payload["id"] = payload.get("id") or new_id()
        payload["user_id"] = self.user_id
        payload["created_at"] = payload["updated_at"] = agora_iso()
        cols = list(payload.keys())
        with connect(self.db_path) as c:
            c.execute(
                f"INSERT INTO {self.tabela} ({','.join(cols)}) VALUES ({','.join(':' + k for k in cols)})",
                payload,
            )
        return payload["id"]

    def insert_many(self, rows: Iterable[Any]) -> List[str]:
        return [self.insert(r) for r in rows]

    def update(self, id_: str, changes: Dict[str, Any]) -> int:
        """Atualiza os campos informados; devolve o número de linhas afetadas."""
        payload = self._encode(changes)
        payload.pop("id", None)
        payload["updated_at"] = agora_iso()
        sets = ", ".join(f"{k} = :{k}" for k in payload)
        payload.update({"_id": id_, "_user_id": self.user_id})
        with connect(self.db_path) as c:
            cur = c.execute(
                f"UPDATE {self.tabela} SET {sets} WHERE id = :_id AND user_id = :_user_id",
                payload,
            )
            return cur.rowcount

    def delete(self, id_: str) -> int:
        with connect(self.db_path) as c:
            cur = c.execute(
                f"DELETE FROM {self.tabela} WHERE id = ? AND user_id = ?",
                (id_, self.user_id),
            )
            return cur.rowcount


# -------------------------
# Repositórios por entidade
# -------------------------

class IngredienteRepo(_TabelaRepo):
    tabela = "ingredientes"
    colunas = ("id", "nome", "quantidade_embalagem", "unidade", "preco_embalagem",
               "custo_unidade", "estoque_atual", "estoque_minimo", "tipo", "created_at", "updated_at")
    ordem = "nome"


class FichaTecnicaRepo(_TabelaRepo):
    tabela = "fichas_tecnicas"
    colunas = ("id", "nome", "tipo", "categoria_id", "receitas_base_ids", "itens", "itens_embalagem",
               "rendimento_quantidade", "rendimento_unidade", "custo_total", "custo_unidade",
               "preco_venda", "margem_lucro", "cmv_percentual", "validade_dias", "tempo_preparo",
               "descricao", "created_at", "updated_at")
    colunas_json = ("receitas_base_ids", "itens", "itens_embalagem")
    ordem = "nome"


class CategoriaProdutoRepo(_TabelaRepo):
    tabela = "categorias_produto"
    colunas = ("id", "nome", "margem_padrao", "cor", "created_at", "updated_at")
    ordem = "nome"


class ProducaoRepo(_TabelaRepo):
    tabela = "producoes"
    colunas = ("id", "ficha_tecnica_id", "quantidade_produzida", "data_producao", "data_validade",
               "custo_total", "observacao", "created_at", "updated_at")
    ordem = "data_producao DESC"


class TransacaoRepo(_TabelaRepo):
    tabela = "transacoes"
    colunas = ("id", "data", "tipo", "descricao", "valor", "forma_pagamento", "taxa_descontada",
               "valor_liquido", "categoria_id", "created_at", "updated_at")
    ordem = "data DESC, created_at DESC"


class ContaPagarRepo(_TabelaRepo):
    tabela = "contas_pagar"
    colunas = ("id", "descricao", "categoria_id", "valor", "data_vencimento", "pago",
               "data_pagamento", "recorrente", "created_at", "updated_at")
    colunas_bool = ("pago", "recorrente")
    ordem = "data_vencimento"


class CategoriaContaRepo(_TabelaRepo):
    tabela = "categorias_conta"
    colunas = ("id", "nome", "tipo", "limite_gasto", "cor", "created_at", "updated_at")
    ordem = "nome"


class MetaRepo(_TabelaRepo):
    tabela = "metas"
    colunas = ("id", "tipo", "nome", "valor_meta", "valor_acumulado", "data_inicio", "data_fim",
               "contribuicao_mensal", "ativa", "created_at", "updated_at")
    colunas_bool = ("ativa",)
    ordem = "created_at DESC"


# -------------------------
# Configurações (uma linha por usuário)
# -------------------------

class ConfiguracoesRepo:
    colunas_json = ("taxas", "custos_fixos", "custos_variaveis")

    def __init__(self, db_path: str, user_id: str):
        self.db_path = db_path
        self.user_id = user_id

    def get(self) -> Optional[Dict[str, Any]]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT * FROM configuracoes WHERE user_id = ?", (self.user_id,)).fetchone()
            if not row:
                return None
            return {
                k: _from_db(row[k], k in self.colunas_json)
                for k in row.keys()
                if k != "user_id"
            }

    def save(self, config: Any) -> None:
        """Grava (insere ou substitui) as configurações do usuário."""
        d = _as_dict(config)
        payload = {
            "user_id": self.user_id,
            "taxas": _to_db(d.get("taxas") or {}, as_json=True),
            "cmv_percentual_padrao": d.get("cmv_percentual_padrao"),
            "margem_lucro_padrao": d.get("margem_lucro_padrao"),
            "custos_fixos": _to_db(d.get("custos_fixos") or [], as_json=True),
            "custos_variaveis": _to_db(d.get("custos_variaveis") or [], as_json=True),
            "nome_estabelecimento": d.get("nome_estabelecimento"),
            "logo_url": d.get("logo_url"),
            "updated_at": agora_iso(),
        }
        with connect(self.db_path) as c:
            c.execute(
                """
                INSERT INTO configuracoes
                    (user_id, taxas, cmv_percentual_padrao, margem_lucro_padrao,
                     custos_fixos, custos_variaveis, nome_estabelecimento, logo_url, updated_at)
                VALUES
                    (:user_id, :taxas, :cmv_percentual_padrao, :margem_lucro_padrao,
                     :custos_fixos, :custos_variaveis, :nome_estabelecimento, :logo_url, :updated_at)
                ON CONFLICT(user_id) DO UPDATE SET
                    taxas=excluded.taxas,
                    cmv_percentual_padrao=excluded.cmv_percentual_padrao,
                    margem_lucro_padrao=excluded.margem_lucro_padrao,
                    custos_fixos=excluded.custos_fixos,
                    custos_variaveis=excluded.custos_variaveis,
                    nome_estabelecimento=excluded.nome_estabelecimento,
                    logo_url=excluded.logo_url,
                    updated_at=excluded.updated_at
                """,
                payload,
            )


# -------------------------
# Conversão linha -> modelo
# -------------------------

def _f(val: Any, default: float = 0.0) -> float:
    try:
        return float(val) if val is not None else default
    except (TypeError, ValueError):
        return default


def _itens(raw: Optional[List[Dict[str, Any]]]) -> List[ItemFicha]:
    return [
        ItemFicha(
            ingrediente_id=str(i.get("ingrediente_id")),
            quantidade=_f(i.get("quantidade")),
            unidade=i.get("unidade") or "un",
            custo=_f(i.get("custo")),
        )
        for i in (raw or [])
    ]


def ingrediente_from_row(r: Dict[str, Any]) -> Ingrediente:
    return Ingrediente(
        id=r["id"],
        nome=r["nome"],
        quantidade_embalagem=_f(r.get("quantidade_embalagem")),
        unidade=r.get("unidade") or "un",
        preco_embalagem=_f(r.get("preco_embalagem")),
        custo_unidade=_f(r.get("custo_unidade")),
        estoque_atual=_f(r.get("estoque_atual")),
        estoque_minimo=_f(r.get("estoque_minimo")),
        tipo=r.get("tipo") or "ingrediente",
    )


def ficha_from_row(r: Dict[str, Any]) -> FichaTecnica:
    return FichaTecnica(
        id=r["id"],
        nome=r["nome"],
        tipo=r["tipo"],
        categoria_id=r.get("categoria_id"),
        receitas_base_ids=[str(x) for x in (r.get("receitas_base_ids") or [])],
        itens=_itens(r.get("itens")),
        itens_embalagem=_itens(r.get("itens_embalagem")),
        rendimento_quantidade=_f(r.get("rendimento_quantidade"), 1.0),
        rendimento_unidade=r.get("rendimento_unidade") or "un",
        custo_total=_f(r.get("custo_total")),
        custo_unidade=_f(r.get("custo_unidade")),
        preco_venda=_f(r.get("preco_venda")),
        margem_lucro=_f(r.get("margem_lucro")),
        cmv_percentual=_f(r.get("cmv_percentual")),
        validade_dias=r.get("validade_dias"),
        tempo_preparo=r.get("tempo_preparo"),
        descricao=r.get("descricao"),
    )


def categoria_produto_from_row(r: Dict[str, Any]) -> CategoriaProduto:
    return CategoriaProduto(id=r["id"], nome=r["nome"], margem_padrao=_f(r.get("margem_padrao")),
                            cor=r.get("cor") or "#9ca3af")


def producao_from_row(r: Dict[str, Any]) -> Producao:
    return Producao(
        id=r["id"],
        ficha_tecnica_id=r.get("ficha_tecnica_id"),
        quantidade_produzida=_f(r.get("quantidade_produzida")),
        data_producao=para_data(r.get("data_producao")),
        data_validade=para_data(r.get("data_validade")),
        custo_total=_f(r.get("custo_total")),
        observacao=r.get("observacao"),
    )


def transacao_from_row(r: Dict[str, Any]) -> TransacaoDiaria:
    return TransacaoDiaria(
        id=r["id"],
        data=para_data(r.get("data")),
        tipo=r["tipo"],
        descricao=r.get("descricao") or "",
        valor=_f(r.get("valor")),
        forma_pagamento=r.get("forma_pagamento") or "dinheiro",
        taxa_descontada=_f(r.get("taxa_descontada")),
        valor_liquido=_f(r.get("valor_liquido")),
        categoria_id=r.get("categoria_id"),
    )


def conta_from_row(r: Dict[str, Any]) -> ContaPagar:
    return ContaPagar(
        id=r["id"],
        descricao=r.get("descricao") or "",
        categoria_id=r.get("categoria_id"),
        valor=_f(r.get("valor")),
        data_vencimento=para_data(r.get("data_vencimento")),
        pago=bool(r.get("pago")),
        data_pagamento=para_data(r.get("data_pagamento")),
        recorrente=bool(r.get("recorrente")),
    )


def categoria_conta_from_row(r: Dict[str, Any]) -> CategoriaConta:
    limite = r.get("limite_gasto")
    return CategoriaConta(
        id=r["id"],
        nome=r["nome"],
        tipo=r.get("tipo") or "variavel",
        limite_gasto=_f(limite) if limite is not None else None,
        cor=r.get("cor") or "#9ca3af",
    )


def meta_from_row(r: Dict[str, Any]) -> Meta:
    return Meta(
        id=r["id"],
        tipo=r.get("tipo") or "faturamento",
        nome=r["nome"],
        valor_meta=_f(r.get("valor_meta")),
        valor_acumulado=_f(r.get("valor_acumulado")),
        data_inicio=para_data(r.get("data_inicio")),
        data_fim=para_data(r.get("data_fim")),
        contribuicao_mensal=_f(r.get("contribuicao_mensal")),
        ativa=bool(r.get("ativa")),
    )


def _custos(raw: Optional[List[Dict[str, Any]]], prefixo: str) -> List[CustoItem]:
    # itens gravados sem id recebem um id estável pela posição
    return [
        CustoItem(id=str(c.get("id") or f"{prefixo}-{n}"), nome=c.get("nome") or "", valor=_f(c.get("valor")))
        for n, c in enumerate(raw or [], start=1)
    ]


def configuracoes_padrao() -> Configuracoes:
    return Configuracoes(
        taxas={"pix": DEFAULTS.taxa_pix, "debito": DEFAULTS.taxa_debito, "credito": DEFAULTS.taxa_credito},
        cmv_percentual_padrao=DEFAULTS.cmv_percentual,
        margem_lucro_padrao=DEFAULTS.margem_lucro,
    )


def configuracoes_from_row(r: Optional[Dict[str, Any]]) -> Configuracoes:
    if not r:
        return configuracoes_padrao()
    padrao = configuracoes_padrao()
    taxas = dict(padrao.taxas)
    taxas.update({k: _f(v) for k, v in (r.get("taxas") or {}).items()})
    cmv = r.get("cmv_percentual_padrao")
    margem = r.get("margem_lucro_padrao")
    return Configuracoes(
        taxas=taxas,
        cmv_percentual_padrao=_f(cmv) if cmv is not None else padrao.cmv_percentual_padrao,
        margem_lucro_padrao=_f(margem) if margem is not None else padrao.margem_lucro_padrao,
        custos_fixos=_custos(r.get("custos_fixos"), "fixo"),
        custos_variaveis=_custos(r.get("custos_variaveis"), "variavel"),
        nome_estabelecimento=r.get("nome_estabelecimento"),
        logo_url=r.get("logo_url"),
    )


# -------------------------
# Fotografia completa
# -------------------------

def carregar_sistema(db_path: str, user_id: str) -> SistemaData:
    """Carrega todos os registros do usuário como `SistemaData`."""
    return SistemaData(
        ingredientes=[ingrediente_from_row(r) for r in IngredienteRepo(db_path, user_id).get_all()],
        fichas_tecnicas=[ficha_from_row(r) for r in FichaTecnicaRepo(db_path, user_id).get_all()],
        categorias_produto=[categoria_produto_from_row(r) for r in CategoriaProdutoRepo(db_path, user_id).get_all()],
        producoes=[producao_from_row(r) for r in ProducaoRepo(db_path, user_id).get_all()],
        transacoes=[transacao_from_row(r) for r in TransacaoRepo(db_path, user_id).get_all()],
        contas_pagar=[conta_from_row(r) for r in ContaPagarRepo(db_path, user_id).get_all()],
        categorias_conta=[categoria_conta_from_row(r) for r in CategoriaContaRepo(db_path, user_id).get_all()],
        metas=[meta_from_row(r) for r in MetaRepo(db_path, user_id).get_all()],
        configuracoes=configuracoes_from_row(ConfiguracoesRepo(db_path, user_id).get()),
    )

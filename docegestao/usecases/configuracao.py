"""
UC: Configurações do estabelecimento (taxas, percentuais padrão e
custos mensais fixos/variáveis).

Sem registro gravado, valem os padrões de `docegestao.config.DEFAULTS`.
"""

from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, Dict, Optional

from docegestao.config import DB_PATH, USUARIO_PADRAO
from docegestao.domain.models import CustoItem
from docegestao.domain.periodos import total_custos_fixos, total_custos_variaveis
from docegestao.infra.db import new_id
from docegestao.infra.logger import log_database_operation, log_system_event, log_transaction
from docegestao.infra.repositories import ConfiguracoesRepo, configuracoes_from_row
from docegestao.usecases.comum import normalize_str, numero, preparar

_LISTAS = {"fixo": "custos_fixos", "variavel": "custos_variaveis"}


def _carregar(db_path: str, usuario: str):
    return configuracoes_from_row(ConfiguracoesRepo(db_path, usuario).get())


def _salvar(config, db_path: str, usuario: str, operacao: str) -> Dict[str, Any]:
    ConfiguracoesRepo(db_path, usuario).save(config)
    log_database_operation("configuracoes", operacao, 1, usuario=usuario)
    return mostrar_configuracoes(db_path=db_path, usuario=usuario)


def mostrar_configuracoes(db_path: str = DB_PATH, usuario: str = USUARIO_PADRAO) -> Dict[str, Any]:
    preparar(db_path)
    config = _carregar(db_path, usuario)
    out = asdict(config)
    out["total_custos_fixos"] = total_custos_fixos(config)
    out["total_custos_variaveis"] = total_custos_variaveis(config)
    return out


def atualizar_configuracoes(
    taxa_pix: Optional[float] = None,
    taxa_debito: Optional[float] = None,
    taxa_credito: Optional[float] = None,
    cmv_percentual: Optional[float] = None,
    margem_lucro: Optional[float] = None,
    nome_estabelecimento: Optional[str] = None,
    logo_url: Optional[str] = None,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """Atualiza apenas os campos informados (``None`` mantém o valor atual)."""
    preparar(db_path)
    try:
        config = _carregar(db_path, usuario)
        taxas = dict(config.taxas)
        for forma, valor in (("pix", taxa_pix), ("debito", taxa_debito), ("credito", taxa_credito)):
            if valor is not None:
                taxa = numero(valor, f"taxa_{forma}", minimo=0)
                if taxa > 100:
                    raise ValueError(f"taxa_{forma} deve ser <= 100")
                taxas[forma] = taxa
        changes: Dict[str, Any] = {"taxas": taxas}
        if cmv_percentual is not None:
            changes["cmv_percentual_padrao"] = numero(cmv_percentual, "cmv_percentual", minimo=0)
        if margem_lucro is not None:
            changes["margem_lucro_padrao"] = numero(margem_lucro, "margem_lucro")
        if nome_estabelecimento is not None:
            changes["nome_estabelecimento"] = normalize_str(nome_estabelecimento)
        if logo_url is not None:
            changes["logo_url"] = normalize_str(logo_url)

        out = _salvar(replace(config, **changes), db_path, usuario, "UPDATE")
        log_transaction("atualizar_configuracoes", {k: v for k, v in changes.items()}, result="ok")
        return out
    except Exception as e:
        log_transaction("atualizar_configuracoes", {"usuario": usuario}, error=str(e))
        log_system_event("atualizar_configuracoes_error", {"error": str(e)}, level="error")
        raise


def adicionar_custo(
    tipo: str,
    nome: str,
    valor: float,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    """Adiciona um custo mensal (``tipo`` = 'fixo' ou 'variavel')."""
    preparar(db_path)
    campo = _LISTAS.get(tipo)
    if campo is None:
        raise ValueError(f"tipo de custo inválido: {tipo!r} (opções: fixo, variavel)")
    nome_ok = normalize_str(nome)
    if not nome_ok:
        raise ValueError("nome é obrigatório")
    item = CustoItem(id=new_id(), nome=nome_ok, valor=numero(valor, "valor", minimo=0))
    config = _carregar(db_path, usuario)
    config = replace(config, **{campo: list(getattr(config, campo)) + [item]})
    log_system_event("custo_adicionado", {"tipo": tipo, "nome": nome_ok, "valor": item.valor})
    return _salvar(config, db_path, usuario, "UPDATE_CUSTOS")


def remover_custo(
    tipo: str,
    custo_id: str,
    db_path: str = DB_PATH,
    usuario: str = USUARIO_PADRAO,
) -> Dict[str, Any]:
    preparar(db_path)
    campo = _LISTAS.get(tipo)
    if campo is None:
        raise ValueError(f"tipo de custo inválido: {tipo!r} (opções: fixo, variavel)")
    config = _carregar(db_path, usuario)
    atuais = list(getattr(config, campo))
    restantes = [c for c in atuais if c.id != custo_id]
    if len(restantes) == len(atuais):
        raise ValueError(f"custo não encontrado: {custo_id}")
    log_system_event("custo_removido", {"tipo": tipo, "id": custo_id})
    return _salvar(replace(config, **{campo: restantes}), db_path, usuario, "UPDATE_CUSTOS")

"""
Políticas de classificação e regras de negócio auxiliares.

Este módulo contém funções que encapsulam regras de status (validade
de produções, margens de produtos, situação de contas) e pequenas
regras de metas e produção. As funções aqui expostas são utilizadas
pela camada de aplicação ao montar listagens e ao gravar registros.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Tuple

from docegestao.config import DEFAULTS
from docegestao.domain.datas import adicionar_dias, dias_entre, meses_completos_entre, para_data
from docegestao.domain.models import ContaPagar, Meta


def status_validade(
    data_validade: Optional[date],
    hoje: date,
    dias_alerta: int = DEFAULTS.dias_alerta_validade,
) -> Tuple[str, Optional[int]]:
    """Classifica uma produção pela data de validade.

    Regras:
        - Sem data de validade → ``'valido'`` (dias restantes ``None``).
        - ``dias_restantes < 0`` → ``'vencido'``
        - ``dias_restantes <= dias_alerta`` → ``'proximo'``
        - caso contrário → ``'valido'``

    Args:
        data_validade: Data de validade da produção.
        hoje: Dia de referência.
        dias_alerta: Janela, em dias, para o alerta de vencimento.

    Returns:
        Tupla ``(status, dias_restantes)``.
    """
    validade = para_data(data_validade)
    if validade is None:
        return "valido", None
    restantes = dias_entre(hoje, validade)
    if restantes < 0:
        return "vencido", restantes
    if restantes <= dias_alerta:
        return "proximo", restantes
    return "valido", restantes


def status_margem(
    margem: float,
    margem_ideal: float,
    fator_atencao: float = DEFAULTS.fator_atencao_margem,
) -> str:
    """Compara a margem de um produto com a margem ideal da categoria.

    Returns:
        ``'bom'`` se ``margem >= margem_ideal``; ``'atencao'`` se
        ``margem >= margem_ideal * fator_atencao``; ``'ruim'`` caso contrário.
    """
    if margem >= margem_ideal:
        return "bom"
    if margem >= margem_ideal * fator_atencao:
        return "atencao"
    return "ruim"


def status_conta(conta: ContaPagar, hoje: date) -> str:
    """``'paga'``, ``'vencida'``, ``'vence_hoje'`` ou ``'pendente'``."""
    if conta.pago:
        return "paga"
    vencimento = para_data(conta.data_vencimento)
    if vencimento < hoje:
        return "vencida"
    if vencimento == hoje:
        return "vence_hoje"
    return "pendente"


def meta_ativa(valor_acumulado: float, valor_meta: float) -> bool:
    """Uma meta continua ativa enquanto o acumulado não atinge o alvo."""
    return float(valor_acumulado) < float(valor_meta)


def meses_restantes(meta: Meta, hoje: date) -> Optional[int]:
    """Meses completos até a data final da meta (nunca negativo)."""
    fim = para_data(meta.data_fim)
    if fim is None:
        return None
    return max(0, meses_completos_entre(hoje, fim))


def data_validade_producao(data_producao: date, validade_dias: Optional[int]) -> Optional[date]:
    """Data de produção deslocada pelos dias de validade da ficha."""
    if not validade_dias:
        return None
    return adicionar_dias(para_data(data_producao), int(validade_dias))

# docegestao/config.py
"""
Configurações globais e valores padrão do DoceGestão.
"""

import os
from dataclasses import dataclass


# Caminho padrão do banco de dados SQLite
DB_PATH = os.path.join(os.getcwd(), "docegestao.db")

# Escopo de linhas usado quando nenhum usuário é informado
USUARIO_PADRAO = "local"


@dataclass
class DefaultConfig:
    """Valores padrão para as configurações do estabelecimento."""
    taxa_pix: float = 0.0  # % retido no Pix
    taxa_debito: float = 1.5  # % retido no cartão de débito
    taxa_credito: float = 3.5  # % retido no cartão de crédito
    cmv_percentual: float = 30.0  # CMV padrão sobre o faturamento
    margem_lucro: float = 60.0  # margem de lucro alvo
    dias_contas_vencendo: int = 7  # janela de alerta de contas no painel
    dias_alerta_validade: int = 2  # produção "próxima do vencimento"
    fator_atencao_margem: float = 0.7  # margem >= 70% da ideal fica em atenção


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()

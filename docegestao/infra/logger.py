# docegestao/infra/logger.py
"""
Sistema de logging das operações do DoceGestão.

Este módulo configura e fornece loggers para registrar as operações
críticas do sistema: lançamentos no caixa, gravações no banco, eventos
dos casos de uso e importação de planilhas.

O logging fica desligado por padrão; defina ``DOCEGESTAO_LOG=1`` no
ambiente (ou ligue ``ENABLE_LOGGING``) para gravar os arquivos em
``docegestao/logs/``.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = os.getenv("DOCEGESTAO_LOG", "0").strip().lower() in {"1", "true", "sim"}
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = False


def print_system(*args, **kwargs):
    """Print controlado pelo ENABLE_OUTPUT."""
    if ENABLE_OUTPUT:
        print(*args, **kwargs)


# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger específico com arquivo de saída.

    O arquivo só é aberto na primeira mensagem gravada.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configurado
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Remove handlers anteriores (reimportações em testes)
    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


# Diretório base para logs (na pasta do pacote)
BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = BASE_DIR / "logs"

LOG_FILES = {
    "transacoes": LOGS_DIR / "transacoes.log",
    "caixa": LOGS_DIR / "caixa.log",
    "database": LOGS_DIR / "database.log",
    "system": LOGS_DIR / "system.log",
}

# Loggers específicos para cada operação
transaction_logger = setup_logger('docegestao.transacoes', str(LOG_FILES["transacoes"]))
caixa_logger = setup_logger('docegestao.caixa', str(LOG_FILES["caixa"]))
database_logger = setup_logger('docegestao.database', str(LOG_FILES["database"]))
system_logger = setup_logger('docegestao.system', str(LOG_FILES["system"]))


def _ativo() -> bool:
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return False
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    return True


def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Registra uma operação completa de caso de uso.

    Args:
        operation: Nome da operação (registrar_transacao, salvar_ficha, ...)
        data: Dados da operação
        result: Resultado da operação (opcional)
        error: Mensagem de erro (opcional)
    """
    if not _ativo():
        return
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - Data: {data}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - Result: {result} - Data: {data}")


def log_caixa(action: str, tipo: str, valor: float, forma_pagamento: str = None, **kwargs) -> None:
    """
    Log específico para lançamentos do caixa diário.

    Args:
        action: Ação realizada (insert, delete, import)
        tipo: 'receita' ou 'despesa'
        valor: Valor bruto
        forma_pagamento: Forma de pagamento (opcional)
        **kwargs: Dados adicionais (taxa, valor líquido, ...)
    """
    if not _ativo():
        return
    log_data = {
        "action": action,
        "tipo": tipo,
        "valor": valor,
        "forma_pagamento": forma_pagamento,
        **kwargs
    }
    caixa_logger.info(f"CAIXA_{action.upper()}: {log_data}")


def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log específico para operações no banco de dados.

    Args:
        table: Nome da tabela
        operation: Operação SQL (INSERT, UPDATE, DELETE, SELECT)
        affected_rows: Número de linhas afetadas
        **kwargs: Dados adicionais
    """
    if not _ativo():
        return
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs
    }
    database_logger.info(f"DB_{operation}: {log_data}")


def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """
    Log para eventos do sistema.

    Args:
        event: Descrição do evento
        details: Detalhes adicionais (opcional)
        level: Nível do log (info, warning, error)
    """
    if not _ativo():
        return
    log_data = {
        "event": event,
        "details": details or {}
    }
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """
    Log para operações de arquivo (importação de planilhas).

    Args:
        operation: Tipo de operação (import)
        file_path: Caminho do arquivo
        rows_processed: Número de linhas processadas
        **kwargs: Dados adicionais
    """
    if not _ativo():
        return
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        **kwargs
    }
    system_logger.info(f"FILE_{operation.upper()}: {log_data}")


def get_log_summary(log_type: str = "transacoes", lines: int = 100) -> Optional[str]:
    """
    Obtém um resumo dos logs recentes.

    Args:
        log_type: Tipo de log (transacoes, caixa, database, system)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string, ou ``None`` com o logging desligado
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return None

    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    try:
        with open(log_file, 'r', encoding='utf-8') as f:
            all_lines = f.readlines()
    except OSError as e:
        return f"Erro ao ler log {log_type}: {e}"
    return ''.join(all_lines[-lines:])

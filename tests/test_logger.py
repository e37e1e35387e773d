import logging

import pytest

from docegestao.infra import logger


@pytest.fixture
def logs_ativos(tmp_path, monkeypatch):
    """Liga o logging gravando em ``tmp_path`` no lugar de ``docegestao/logs``."""
    arquivos = {nome: tmp_path / f"{nome}.log" for nome in logger.LOG_FILES}
    monkeypatch.setattr(logger, "ENABLE_LOGGING", True)
    monkeypatch.setattr(logger, "LOGS_DIR", tmp_path)
    monkeypatch.setattr(logger, "LOG_FILES", arquivos)
    for attr, nome in (("transaction_logger", "transacoes"), ("caixa_logger", "caixa"),
                       ("database_logger", "database"), ("system_logger", "system")):
        monkeypatch.setattr(logger, attr, logger.setup_logger(f"docegestao.test.{nome}", str(arquivos[nome])))
    yield arquivos
    for nome in arquivos:
        for h in logging.getLogger(f"docegestao.test.{nome}").handlers:
            h.close()


def test_logging_desligado_nao_grava(monkeypatch):
    monkeypatch.setattr(logger, "ENABLE_LOGGING", False)
    monkeypatch.setattr(logger, "ENABLE_OUTPUT", False)
    logger.log_transaction("qualquer", {"x": 1})
    assert logger.get_log_summary("transacoes") is None


def test_logs_por_arquivo(logs_ativos):
    logger.log_transaction("registrar_transacao", {"valor": 10.0}, result="abc")
    logger.log_transaction("registrar_transacao", {"valor": -1}, error="valor inválido")
    logger.log_caixa("insert", "receita", 100.0, "credito", taxa=3.5)
    logger.log_database_operation("transacoes", "INSERT", 1, id="abc")
    logger.log_system_event("importar_transacoes_error", {"error": "x"}, level="error")
    logger.log_file_operation("import", "caixa.xlsx", rows_processed=3)

    transacoes = logger.get_log_summary("transacoes")
    assert "TRANSACTION_SUCCESS: registrar_transacao" in transacoes
    assert "TRANSACTION_FAILED: registrar_transacao - valor inválido" in transacoes
    assert "CAIXA_INSERT" in logger.get_log_summary("caixa")
    assert "DB_INSERT" in logger.get_log_summary("database")

    system = logger.get_log_summary("system")
    assert " - ERROR - SYSTEM_EVENT: importar_transacoes_error" in system
    assert "FILE_IMPORT" in system


def test_get_log_summary_ultimas_linhas(logs_ativos):
    for i in range(5):
        logger.log_database_operation("metas", "UPDATE", 1, n=i)
    ultimas = logger.get_log_summary("database", lines=2).splitlines()
    assert len(ultimas) == 2
    assert "'n': 4" in ultimas[-1]
    assert logger.get_log_summary("inexistente") == "Log inexistente não encontrado."


def test_print_system_respeita_flag(monkeypatch, capsys):
    monkeypatch.setattr(logger, "ENABLE_OUTPUT", False)
    logger.print_system("silencioso")
    monkeypatch.setattr(logger, "ENABLE_OUTPUT", True)
    logger.print_system("visível")
    assert capsys.readouterr().out == "visível\n"

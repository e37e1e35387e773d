from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from docegestao.adapters import cli
from docegestao.adapters.cli import app
from docegestao.usecases.cadastros import listar_ingredientes
from docegestao.usecases.configuracao import mostrar_configuracoes

runner = CliRunner()


@pytest.fixture(autouse=True)
def console_largo(monkeypatch):
    """Tabelas com largura fixa, independente do terminal que roda os testes."""
    monkeypatch.setattr(cli, "console", Console(width=200))


def _db(tmp_path: Path) -> str:
    db_path = str(tmp_path / "docegestao_test.sqlite")
    result = runner.invoke(app, ["migrate", "--db", db_path])
    assert result.exit_code == 0, result.output
    return db_path


def test_cli_migrate_e_config_show(tmp_path: Path):
    db_path = _db(tmp_path)
    result = runner.invoke(app, ["config", "show", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Configurações" in result.stdout
    assert "Taxa credito: 3,5%" in result.stdout


def test_cli_config_set(tmp_path: Path):
    db_path = _db(tmp_path)
    result = runner.invoke(app, ["config", "set", "--db", db_path, "--taxa-credito", "4", "--cmv", "0"])
    assert result.exit_code == 0, result.output
    assert "Taxa credito: 4,0%" in result.stdout

    cfg = mostrar_configuracoes(db_path=db_path)
    assert cfg["taxas"]["credito"] == 4.0
    assert cfg["cmv_percentual_padrao"] == 0.0

    # sem nenhum valor informado
    result = runner.invoke(app, ["config", "set", "--db", db_path])
    assert result.exit_code == 1

    result = runner.invoke(app, ["config", "set", "--db", db_path, "--taxa-pix", "150"])
    assert result.exit_code == 1
    assert "Erro" in result.stdout


def test_cli_ingredientes_add_e_list(tmp_path: Path):
    db_path = _db(tmp_path)
    result = runner.invoke(
        app,
        ["ingredientes", "add", "Farinha", "--qtd", "1000", "--unidade", "g", "--preco", "6",
         "--estoque", "1", "--minimo", "2", "--db", db_path],
    )
    assert result.exit_code == 0, result.output
    assert "Ingrediente Cadastrado" in result.stdout

    (ing,) = listar_ingredientes(db_path=db_path)
    assert ing["custo_unidade"] == 0.006

    result = runner.invoke(app, ["ingredientes", "list", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Farinha" in result.stdout

    result = runner.invoke(app, ["compras", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "R$ 6,00" in result.stdout


def test_cli_entrada_invalida_sai_com_codigo_1(tmp_path: Path):
    db_path = _db(tmp_path)
    result = runner.invoke(
        app, ["ingredientes", "add", "Sal", "--qtd", "1", "--unidade", "xicara", "--preco", "2", "--db", db_path]
    )
    assert result.exit_code == 1
    assert "unidade" in result.stdout

    result = runner.invoke(app, ["caixa", "add", "transferencia", "X", "10", "--db", db_path])
    assert result.exit_code == 1

    result = runner.invoke(app, ["fichas", "show", "nao-existe", "--db", db_path])
    assert result.exit_code == 1
    assert "ficha não encontrada" in result.stdout


def test_cli_caixa_add_e_dia(tmp_path: Path):
    db_path = _db(tmp_path)
    result = runner.invoke(
        app,
        ["caixa", "add", "receita", "Bolo", "100", "--forma", "credito", "--data", "2025-03-05", "--db", db_path],
    )
    assert result.exit_code == 0, result.output
    assert "Lançamento Registrado" in result.stdout

    result = runner.invoke(app, ["caixa", "dia", "--data", "05/03/2025", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Caixa de 05/03/2025" in result.stdout
    assert "Faturamento: R$ 100,00" in result.stdout


def test_cli_painel_e_relatorios(tmp_path: Path):
    db_path = _db(tmp_path)
    runner.invoke(app, ["config", "custo-add", "fixo", "Aluguel", "1000", "--db", db_path])
    runner.invoke(app, ["caixa", "add", "receita", "Encomenda", "2000", "--forma", "pix",
                        "--data", "2025-03-05", "--db", db_path])

    result = runner.invoke(app, ["painel", "--hoje", "2025-03-15", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Painel 2025-03" in result.stdout
    assert "Faturamento no mês: R$ 2.000,00" in result.stdout

    result = runner.invoke(app, ["rel", "evolucao", "--de", "2025-03", "--ate", "2025-04", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Total" in result.stdout

    result = runner.invoke(app, ["rel", "evolucao", "--de", "2025-04", "--ate", "2025-03", "--db", db_path])
    assert result.exit_code == 0, result.output
    assert "Intervalo vazio" in result.stdout

    result = runner.invoke(app, ["rel", "evolucao", "--de", "03/2025", "--ate", "2025-04", "--db", db_path])
    assert result.exit_code == 1

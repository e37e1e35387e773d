from datetime import date

import pytest

from docegestao.usecases.configuracao import (
    adicionar_custo,
    atualizar_configuracoes,
    mostrar_configuracoes,
    remover_custo,
)
from docegestao.usecases.metas import contribuir, criar_meta, excluir_meta, listar_metas, reativar_meta


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "docegestao_test.sqlite")


def test_meta_conclui_ao_atingir_o_alvo(db_path):
    meta = criar_meta("Faturar 10 mil", 10000.0, data_inicio="2025-01-01", data_fim="2025-06-30", db_path=db_path)
    assert meta["ativa"] is True

    parcial = contribuir(meta["id"], 4000.0, db_path=db_path)
    assert parcial["ativa"] is True
    assert parcial["percentual"] == pytest.approx(40.0)

    final = contribuir(meta["id"], 6000.0, db_path=db_path)
    assert final["valor_acumulado"] == pytest.approx(10000.0)
    assert final["ativa"] is False
    assert listar_metas(apenas_ativas=True, db_path=db_path) == []

    reativar_meta(meta["id"], db_path=db_path)
    (m,) = listar_metas(hoje=date(2025, 3, 30), apenas_ativas=True, db_path=db_path)
    assert m["falta"] == 0.0
    assert m["percentual"] == 100.0
    assert m["meses_restantes"] == 3


def test_meta_validacoes(db_path):
    with pytest.raises(ValueError, match="valor_meta"):
        criar_meta("Zero", 0, db_path=db_path)
    with pytest.raises(ValueError, match="data_fim"):
        criar_meta("Invertida", 100.0, data_inicio="2025-03-01", data_fim="2025-02-01", db_path=db_path)
    with pytest.raises(ValueError, match="tipo"):
        criar_meta("Outra", 100.0, tipo="economia", db_path=db_path)

    meta = criar_meta("Caixa", 100.0, db_path=db_path)
    with pytest.raises(ValueError, match="valor"):
        contribuir(meta["id"], -5, db_path=db_path)
    excluir_meta(meta["id"], db_path=db_path)
    with pytest.raises(ValueError, match="não encontrada"):
        contribuir(meta["id"], 5, db_path=db_path)


def test_configuracoes_padrao(db_path):
    cfg = mostrar_configuracoes(db_path=db_path)
    assert cfg["taxas"] == {"pix": 0.0, "debito": 1.5, "credito": 3.5}
    assert cfg["cmv_percentual_padrao"] == 30.0
    assert cfg["total_custos_fixos"] == 0.0


def test_atualizar_configuracoes_parcial(db_path):
    cfg = atualizar_configuracoes(taxa_credito=4.2, cmv_percentual=0, nome_estabelecimento="Doce Lar",
                                  db_path=db_path)
    assert cfg["taxas"] == {"pix": 0.0, "debito": 1.5, "credito": 4.2}
    assert cfg["cmv_percentual_padrao"] == 0.0
    assert cfg["nome_estabelecimento"] == "Doce Lar"

    cfg = atualizar_configuracoes(margem_lucro=50, db_path=db_path)
    assert cfg["taxas"]["credito"] == 4.2
    assert cfg["margem_lucro_padrao"] == 50.0

    with pytest.raises(ValueError, match="taxa_pix"):
        atualizar_configuracoes(taxa_pix=101, db_path=db_path)


def test_custos_mensais(db_path):
    adicionar_custo("fixo", "Aluguel", 1200.0, db_path=db_path)
    cfg = adicionar_custo("variavel", "Gás", 150.0, db_path=db_path)
    assert cfg["total_custos_fixos"] == pytest.approx(1200.0)
    assert cfg["total_custos_variaveis"] == pytest.approx(150.0)

    (aluguel,) = cfg["custos_fixos"]
    cfg = remover_custo("fixo", aluguel["id"], db_path=db_path)
    assert cfg["custos_fixos"] == []

    with pytest.raises(ValueError, match="não encontrado"):
        remover_custo("fixo", aluguel["id"], db_path=db_path)
    with pytest.raises(ValueError, match="tipo de custo"):
        adicionar_custo("anual", "IPTU", 900.0, db_path=db_path)

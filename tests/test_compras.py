from docegestao.domain.compras import gerar_lista_compras, total_lista_compras
from docegestao.domain.models import Ingrediente


def _ing(id_, atual, minimo, preco):
    return Ingrediente(id=id_, nome=id_.title(), quantidade_embalagem=1, unidade="kg", preco_embalagem=preco,
                       estoque_atual=atual, estoque_minimo=minimo)


def test_item_abaixo_do_minimo():
    (item,) = gerar_lista_compras([_ing("farinha", 2, 5, 10.0)])
    assert item.ingrediente_id == "farinha"
    assert item.quantidade_comprar == 3
    assert item.custo_estimado == 30.0
    assert item.unidade == "kg"


def test_estoque_igual_ao_minimo_fica_de_fora():
    assert gerar_lista_compras([_ing("acucar", 5, 5, 4.0)]) == []


def test_minimo_zero_sem_estoque_fica_de_fora():
    assert gerar_lista_compras([_ing("fermento", 0, 0, 3.0)]) == []


def test_ordenado_por_custo_estimado():
    itens = gerar_lista_compras([
        _ing("barato", 0, 1, 2.0),
        _ing("ok", 10, 5, 100.0),
        _ing("caro", 1, 3, 50.0),
        _ing("medio", 0, 2, 20.0),
    ])
    assert [i.ingrediente_id for i in itens] == ["caro", "medio", "barato"]
    assert total_lista_compras(itens) == 100.0 + 40.0 + 2.0


def test_estoque_negativo_compra_a_diferenca():
    (item,) = gerar_lista_compras([_ing("leite", -1, 2, 5.0)])
    assert item.quantidade_comprar == 3

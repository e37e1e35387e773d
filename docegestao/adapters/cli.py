# docegestao/adapters/cli.py
"""
CLI do DoceGestão (Typer).

Comandos principais:
- migrate                      -> aplica migrações
- config show/set/custo-add/custo-rm
- ingredientes add/update/estoque/list/rm
- categorias conta-add/conta-list/conta-rm/produto-add/produto-list/produto-rm
- fichas add/update/show/list/rm/desatualizadas/recalcular
- producao add/list/rm
- compras                      -> lista de compras (estoque <= mínimo)
- caixa add/dia/rm/importar <xlsx>
- contas add/pagar/list/rm/gastos
- metas add/contribuir/reativar/list/rm
- precos set/analise
- painel / resultado
- rel evolucao/despesas
- logs                         -> últimas linhas de um arquivo de log

Todos os comandos aceitam --db (caminho do SQLite) e --usuario (escopo).
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Callable, Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from docegestao.adapters.parsers import format_data, format_moeda, format_percentual, parse_item
from docegestao.config import DB_PATH, USUARIO_PADRAO
from docegestao.domain.datas import para_data
from docegestao.infra.logger import get_log_summary
from docegestao.infra.migrations import apply_migrations
from docegestao.usecases import (
    cadastros,
    caixa,
    configuracao,
    contas,
    fichas,
    metas,
    precificacao,
    producao,
    relatorios,
)


app = typer.Typer(help="DoceGestão — CLI financeira para confeitarias")
console = Console()


# -----------------------
# util
# -----------------------

_COLUNAS_MOEDA = {
    "valor", "preco_embalagem", "custo_unidade", "custo_total", "preco_venda", "preco_ideal",
    "custo_estimado", "faturamento", "despesas", "saldo", "taxa_descontada", "valor_liquido",
    "gasto", "limite", "valor_meta", "valor_acumulado", "falta", "contribuicao_mensal",
    "custo_gravado", "custo_atual", "total", "faturamento_liquido", "cmv", "custos_fixos",
    "custos_variaveis", "lucro", "ponto_equilibrio",
}
_COLUNAS_PERCENT = {"margem_lucro", "cmv_percentual", "percentual", "percentual_limite", "margem_padrao", "margem"}
_CORES_STATUS = {
    "vencido": "bold red", "vencida": "bold red", "ruim": "bold red",
    "proximo": "bold yellow", "vence_hoje": "bold yellow", "atencao": "bold yellow",
    "valido": "bold green", "paga": "bold green", "bom": "bold green",
}


def _db_opt():
    return typer.Option(DB_PATH, "--db", help="Caminho do SQLite")


def _usuario_opt():
    return typer.Option(USUARIO_PADRAO, "--usuario", help="Escopo dos registros (usuário)")


def _print_json(obj) -> None:
    """Fallback para impressão de JSON quando necessário."""
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


def _num(val: float) -> str:
    return f"{val:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def _fmt(col: str, val: Any) -> str:
    if val is None:
        return "-"
    if isinstance(val, bool):
        return "sim" if val else "não"
    if isinstance(val, (int, float)):
        if col in _COLUNAS_MOEDA:
            return format_moeda(val)
        if col in _COLUNAS_PERCENT:
            return format_percentual(val)
        return _num(val)
    if isinstance(val, date):
        return format_data(val)
    if col == "status":
        cor = _CORES_STATUS.get(str(val))
        return f"[{cor}]{val}[/]" if cor else str(val)
    return str(val)


def _display_table(data: Dict[str, Any] | List[Dict[str, Any]], title: str = "Resultado") -> None:
    """Exibe os dados em tabelas formatadas usando Rich."""
    if not data:
        console.print(Panel("Nenhum dado encontrado", title=title, border_style="yellow"))
        return

    # Lista de itens
    if isinstance(data, list) and isinstance(data[0], dict):
        table = Table(title=title, box=box.ROUNDED)
        columns = list(data[0].keys())
        for column in columns:
            primeiro = data[0].get(column)
            if isinstance(primeiro, (int, float)) and not isinstance(primeiro, bool):
                table.add_column(column, justify="right")
            elif column.startswith("data"):
                table.add_column(column, justify="center")
            else:
                table.add_column(column)
        for row in data:
            table.add_row(*[_fmt(col, row.get(col)) for col in columns])
        console.print(table)
        return

    # Registro único: tabela campo/valor
    if isinstance(data, dict):
        table = Table(title=title, box=box.ROUNDED)
        table.add_column("Campo")
        table.add_column("Valor", justify="right")
        for chave, valor in data.items():
            if isinstance(valor, (list, dict)):
                continue
            table.add_row(chave, _fmt(chave, valor))
        console.print(table)
        return

    _print_json(data)


def _display_rel(res, title: str) -> None:
    """Exibe o retorno (colunas, linhas, mensagem) dos relatórios."""
    cols, rows, msg = res
    if msg:
        console.print(Panel(msg, title=title, border_style="yellow"))
        return
    table = Table(title=title, box=box.ROUNDED)
    for i, c in enumerate(cols):
        table.add_column(c, justify="left" if i == 0 else "right")
    for r in rows:
        valores = []
        for c, v in zip(cols, r):
            if v is None:
                valores.append("")
            elif isinstance(v, (int, float)):
                valores.append(format_percentual(v) if "%" in c else format_moeda(v))
            else:
                valores.append(str(v))
        table.add_row(*valores)
    console.print(table)


def _rodar(fn: Callable[..., Any], *args, **kwargs) -> Any:
    """Executa o caso de uso; erros de validação viram mensagem e código 1."""
    try:
        return fn(*args, **kwargs)
    except ValueError as e:
        console.print(f"[bold red]Erro:[/] {e}")
        raise typer.Exit(code=1)


def _data_opcional(txt: Optional[str]) -> Optional[date]:
    return _rodar(para_data, txt) if txt else None


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = _db_opt()):
    """Aplica as migrações do banco."""
    apply_migrations(db_path)
    typer.echo(f">> Migrações aplicadas em: {db_path}")


@app.command("logs")
def cmd_logs(
    tipo: str = typer.Option("transacoes", "--tipo", help="transacoes | caixa | database | system"),
    linhas: int = typer.Option(50, "--linhas"),
):
    """Mostra as últimas linhas de um arquivo de log."""
    conteudo = get_log_summary(tipo, linhas)
    if conteudo is None:
        typer.echo("Logging desligado (defina DOCEGESTAO_LOG=1).")
        return
    typer.echo(conteudo)


# -----------------------
# configurações
# -----------------------

config_app = typer.Typer(help="Taxas, percentuais padrão e custos mensais.")
app.add_typer(config_app, name="config")


def _mostrar_config(cfg: Dict[str, Any]) -> None:
    taxas = cfg.get("taxas") or {}
    linhas = [f"Estabelecimento: {cfg.get('nome_estabelecimento') or '-'}"]
    linhas += [f"Taxa {forma}: {format_percentual(v)}" for forma, v in taxas.items()]
    linhas.append(f"CMV padrão: {format_percentual(cfg['cmv_percentual_padrao'])}")
    linhas.append(f"Margem padrão: {format_percentual(cfg['margem_lucro_padrao'])}")
    linhas.append(f"Custos fixos/mês: {format_moeda(cfg['total_custos_fixos'])}")
    linhas.append(f"Custos variáveis/mês: {format_moeda(cfg['total_custos_variaveis'])}")
    console.print(Panel("\n".join(linhas), title="Configurações"))
    for campo, titulo in (("custos_fixos", "Custos Fixos"), ("custos_variaveis", "Custos Variáveis")):
        if cfg.get(campo):
            _display_table(cfg[campo], title=titulo)


@config_app.command("show")
def cmd_config_show(db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    """Exibe as configurações efetivas (com fallback para os padrões)."""
    _mostrar_config(configuracao.mostrar_configuracoes(db_path=db_path, usuario=usuario))


@config_app.command("set")
def cmd_config_set(
    taxa_pix: Optional[float] = typer.Option(None, help="% retido no Pix"),
    taxa_debito: Optional[float] = typer.Option(None, help="% retido no débito"),
    taxa_credito: Optional[float] = typer.Option(None, help="% retido no crédito"),
    cmv: Optional[float] = typer.Option(None, help="CMV padrão (% do faturamento)"),
    margem: Optional[float] = typer.Option(None, help="Margem de lucro padrão (%)"),
    nome: Optional[str] = typer.Option(None, help="Nome do estabelecimento"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Atualiza as configurações (apenas os valores informados)."""
    if all(v is None for v in (taxa_pix, taxa_debito, taxa_credito, cmv, margem, nome)):
        typer.echo("Nada a alterar. Informe pelo menos um valor.")
        raise typer.Exit(code=1)
    cfg = _rodar(
        configuracao.atualizar_configuracoes,
        taxa_pix=taxa_pix, taxa_debito=taxa_debito, taxa_credito=taxa_credito,
        cmv_percentual=cmv, margem_lucro=margem, nome_estabelecimento=nome,
        db_path=db_path, usuario=usuario,
    )
    typer.echo(">> Configurações atualizadas.")
    _mostrar_config(cfg)


@config_app.command("custo-add")
def cmd_config_custo_add(
    tipo: str = typer.Argument(..., help="fixo | variavel"),
    nome: str = typer.Argument(...),
    valor: float = typer.Argument(..., help="Valor mensal"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Adiciona um custo mensal fixo ou variável."""
    cfg = _rodar(configuracao.adicionar_custo, tipo, nome, valor, db_path=db_path, usuario=usuario)
    _mostrar_config(cfg)


@config_app.command("custo-rm")
def cmd_config_custo_rm(
    tipo: str = typer.Argument(..., help="fixo | variavel"),
    custo_id: str = typer.Argument(...),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Remove um custo mensal."""
    cfg = _rodar(configuracao.remover_custo, tipo, custo_id, db_path=db_path, usuario=usuario)
    _mostrar_config(cfg)


# -----------------------
# ingredientes
# -----------------------

ing_app = typer.Typer(help="Ingredientes e embalagens.")
app.add_typer(ing_app, name="ingredientes")


@ing_app.command("add")
def cmd_ing_add(
    nome: str = typer.Argument(...),
    quantidade: float = typer.Option(..., "--qtd", help="Quantidade da embalagem (ex.: 1000 para 1 kg em g)"),
    unidade: str = typer.Option("g", "--unidade", help="kg | g | L | ml | un | cm | m"),
    preco: float = typer.Option(..., "--preco", help="Preço da embalagem"),
    estoque: float = typer.Option(0.0, "--estoque", help="Estoque atual (embalagens)"),
    minimo: float = typer.Option(0.0, "--minimo", help="Estoque mínimo (embalagens)"),
    tipo: str = typer.Option("ingrediente", "--tipo", help="ingrediente | embalagem"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Cadastra um ingrediente ou embalagem."""
    dados = {"nome": nome, "quantidade_embalagem": quantidade, "unidade": unidade, "preco_embalagem": preco,
             "estoque_atual": estoque, "estoque_minimo": minimo, "tipo": tipo}
    rec = _rodar(cadastros.salvar_ingrediente, dados, db_path=db_path, usuario=usuario)
    _display_table(rec, title="Ingrediente Cadastrado")


@ing_app.command("update")
def cmd_ing_update(
    ingrediente_id: str = typer.Argument(...),
    nome: Optional[str] = typer.Option(None, "--nome"),
    quantidade: Optional[float] = typer.Option(None, "--qtd"),
    unidade: Optional[str] = typer.Option(None, "--unidade"),
    preco: Optional[float] = typer.Option(None, "--preco"),
    minimo: Optional[float] = typer.Option(None, "--minimo"),
    tipo: Optional[str] = typer.Option(None, "--tipo"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Altera um ingrediente (apenas os campos informados)."""
    dados = {"nome": nome, "quantidade_embalagem": quantidade, "unidade": unidade, "preco_embalagem": preco,
             "estoque_minimo": minimo, "tipo": tipo}
    rec = _rodar(cadastros.salvar_ingrediente, dados, ingrediente_id=ingrediente_id, db_path=db_path, usuario=usuario)
    _display_table(rec, title="Ingrediente Atualizado")
    pendentes = fichas.listar_desatualizadas(db_path=db_path, usuario=usuario)
    if pendentes:
        console.print(f"[yellow]{len(pendentes)} ficha(s) com custo desatualizado. "
                      f"Rode 'fichas recalcular'.[/yellow]")


@ing_app.command("estoque")
def cmd_ing_estoque(
    ingrediente_id: str = typer.Argument(...),
    atual: Optional[float] = typer.Option(None, "--atual", help="Novo estoque (embalagens)"),
    variacao: Optional[float] = typer.Option(None, "--variacao", help="Soma ao estoque (negativo retira)"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Ajusta o estoque de um ingrediente."""
    rec = _rodar(cadastros.ajustar_estoque, ingrediente_id, estoque_atual=atual, variacao=variacao,
                 db_path=db_path, usuario=usuario)
    _display_table(rec, title="Estoque Ajustado")


@ing_app.command("list")
def cmd_ing_list(
    tipo: Optional[str] = typer.Option(None, "--tipo", help="ingrediente | embalagem"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Lista ingredientes e embalagens."""
    _display_table(cadastros.listar_ingredientes(tipo=tipo, db_path=db_path, usuario=usuario), title="Ingredientes")


@ing_app.command("rm")
def cmd_ing_rm(ingrediente_id: str = typer.Argument(...), db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    """Exclui um ingrediente."""
    _rodar(cadastros.excluir_ingrediente, ingrediente_id, db_path=db_path, usuario=usuario)
    typer.echo(">> Ingrediente excluído.")


# -----------------------
# categorias
# -----------------------

cat_app = typer.Typer(help="Categorias de conta e de produto.")
app.add_typer(cat_app, name="categorias")


@cat_app.command("conta-add")
def cmd_cat_conta_add(
    nome: str = typer.Argument(...),
    tipo: str = typer.Option("variavel", "--tipo", help="fixa | variavel"),
    limite: Optional[float] = typer.Option(None, "--limite", help="Limite de gasto mensal"),
    cor: str = typer.Option("#9ca3af", "--cor"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Cria uma categoria de conta/despesa."""
    rec = _rodar(cadastros.criar_categoria_conta, nome, tipo=tipo, limite_gasto=limite, cor=cor,
                 db_path=db_path, usuario=usuario)
    _display_table(rec, title="Categoria de Conta")


@cat_app.command("conta-list")
def cmd_cat_conta_list(db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    _display_table(cadastros.listar_categorias_conta(db_path=db_path, usuario=usuario), title="Categorias de Conta")


@cat_app.command("conta-rm")
def cmd_cat_conta_rm(categoria_id: str = typer.Argument(...), db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    _rodar(cadastros.excluir_categoria_conta, categoria_id, db_path=db_path, usuario=usuario)
    typer.echo(">> Categoria excluída.")


@cat_app.command("produto-add")
def cmd_cat_produto_add(
    nome: str = typer.Argument(...),
    margem: float = typer.Option(..., "--margem", help="Margem ideal da categoria (%)"),
    cor: str = typer.Option("#9ca3af", "--cor"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Cria uma categoria de produto com a margem ideal."""
    rec = _rodar(cadastros.criar_categoria_produto, nome, margem, cor=cor, db_path=db_path, usuario=usuario)
    _display_table(rec, title="Categoria de Produto")


@cat_app.command("produto-list")
def cmd_cat_produto_list(db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    _display_table(cadastros.listar_categorias_produto(db_path=db_path, usuario=usuario),
                   title="Categorias de Produto")


@cat_app.command("produto-rm")
def cmd_cat_produto_rm(categoria_id: str = typer.Argument(...), db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    _rodar(cadastros.excluir_categoria_produto, categoria_id, db_path=db_path, usuario=usuario)
    typer.echo(">> Categoria excluída.")


# -----------------------
# fichas técnicas
# -----------------------

fichas_app = typer.Typer(help="Fichas técnicas (receitas base e produtos finais).")
app.add_typer(fichas_app, name="fichas")


def _dados_ficha(
    nome, tipo, categoria, bases, itens, embalagens, rendimento, rendimento_unidade, preco, validade, tempo, descricao,
) -> Dict[str, Any]:
    return {
        "nome": nome,
        "tipo": tipo,
        "categoria_id": categoria,
        "receitas_base_ids": list(bases) or None,
        "itens": _rodar(lambda: [parse_item(i) for i in itens]) or None,
        "itens_embalagem": _rodar(lambda: [parse_item(i) for i in embalagens]) or None,
        "rendimento_quantidade": rendimento,
        "rendimento_unidade": rendimento_unidade,
        "preco_venda": preco,
        "validade_dias": validade,
        "tempo_preparo": tempo,
        "descricao": descricao,
    }


def _mostrar_ficha(rec: Dict[str, Any], title: str) -> None:
    _display_table(rec, title=title)
    if rec.get("composicao"):
        _display_table(rec["composicao"], title="Composição do custo")


@fichas_app.command("add")
def cmd_fichas_add(
    nome: str = typer.Argument(...),
    tipo: str = typer.Option("produto_final", "--tipo", help="receita_base | produto_final"),
    categoria: Optional[str] = typer.Option(None, "--categoria", help="Id da categoria de produto"),
    base: List[str] = typer.Option([], "--base", help="Id de receita base (repetível)"),
    item: List[str] = typer.Option([], "--item", help="ID:QTD[:UNIDADE] de ingrediente (repetível)"),
    embalagem: List[str] = typer.Option([], "--embalagem", help="ID:QTD[:UNIDADE] de embalagem (repetível)"),
    rendimento: float = typer.Option(1.0, "--rendimento", help="Quantidade produzida pela receita"),
    rendimento_unidade: str = typer.Option("un", "--rendimento-unidade"),
    preco: float = typer.Option(0.0, "--preco", help="Preço de venda por unidade"),
    validade: Optional[int] = typer.Option(None, "--validade", help="Validade em dias"),
    tempo: Optional[int] = typer.Option(None, "--tempo", help="Tempo de preparo (min)"),
    descricao: Optional[str] = typer.Option(None, "--descricao"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Cria uma ficha técnica e calcula seus custos."""
    dados = _dados_ficha(nome, tipo, categoria, base, item, embalagem, rendimento, rendimento_unidade,
                         preco, validade, tempo, descricao)
    rec = _rodar(fichas.salvar_ficha, dados, db_path=db_path, usuario=usuario)
    _display_table(rec, title="Ficha Técnica Salva")


@fichas_app.command("update")
def cmd_fichas_update(
    ficha_id: str = typer.Argument(...),
    nome: Optional[str] = typer.Option(None, "--nome"),
    tipo: Optional[str] = typer.Option(None, "--tipo"),
    categoria: Optional[str] = typer.Option(None, "--categoria"),
    base: List[str] = typer.Option([], "--base", help="Substitui as receitas base"),
    item: List[str] = typer.Option([], "--item", help="Substitui os ingredientes"),
    embalagem: List[str] = typer.Option([], "--embalagem", help="Substitui as embalagens"),
    rendimento: Optional[float] = typer.Option(None, "--rendimento"),
    rendimento_unidade: Optional[str] = typer.Option(None, "--rendimento-unidade"),
    preco: Optional[float] = typer.Option(None, "--preco"),
    validade: Optional[int] = typer.Option(None, "--validade"),
    tempo: Optional[int] = typer.Option(None, "--tempo"),
    descricao: Optional[str] = typer.Option(None, "--descricao"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Altera uma ficha técnica (apenas o que for informado) e recalcula seus custos."""
    dados = _dados_ficha(nome, tipo, categoria, base, item, embalagem, rendimento, rendimento_unidade,
                         preco, validade, tempo, descricao)
    rec = _rodar(fichas.salvar_ficha, dados, ficha_id=ficha_id, db_path=db_path, usuario=usuario)
    _display_table(rec, title="Ficha Técnica Atualizada")


@fichas_app.command("show")
def cmd_fichas_show(ficha_id: str = typer.Argument(...), db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    """Detalha uma ficha com a composição do custo."""
    _mostrar_ficha(_rodar(fichas.detalhar_ficha, ficha_id, db_path=db_path, usuario=usuario), title="Ficha Técnica")


@fichas_app.command("list")
def cmd_fichas_list(
    tipo: Optional[str] = typer.Option(None, "--tipo", help="receita_base | produto_final"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    _display_table(fichas.listar_fichas(tipo=tipo, db_path=db_path, usuario=usuario), title="Fichas Técnicas")


@fichas_app.command("rm")
def cmd_fichas_rm(ficha_id: str = typer.Argument(...), db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    _rodar(fichas.excluir_ficha, ficha_id, db_path=db_path, usuario=usuario)
    typer.echo(">> Ficha excluída.")


@fichas_app.command("desatualizadas")
def cmd_fichas_desatualizadas(db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    """Fichas cujo custo gravado não bate com os preços atuais."""
    _display_table(fichas.listar_desatualizadas(db_path=db_path, usuario=usuario), title="Fichas Desatualizadas")


@fichas_app.command("recalcular")
def cmd_fichas_recalcular(db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    """Regrava o custo de todas as fichas (receitas base primeiro)."""
    res = _rodar(fichas.recalcular_fichas, db_path=db_path, usuario=usuario)
    typer.echo(f">> {res['recalculadas']} ficha(s) verificadas, {len(res['alteradas'])} alterada(s).")


# -----------------------
# produção e compras
# -----------------------

prod_app = typer.Typer(help="Registro de produção e validade.")
app.add_typer(prod_app, name="producao")


@prod_app.command("add")
def cmd_prod_add(
    ficha_id: str = typer.Argument(...),
    quantidade: float = typer.Argument(...),
    data: Optional[str] = typer.Option(None, "--data", help="YYYY-MM-DD ou DD/MM/YYYY (padrão: hoje)"),
    obs: Optional[str] = typer.Option(None, "--obs"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Registra uma produção."""
    rec = _rodar(producao.registrar_producao, ficha_id, quantidade, data_producao=data, observacao=obs,
                 db_path=db_path, usuario=usuario)
    _display_table(rec, title="Produção Registrada")


@prod_app.command("list")
def cmd_prod_list(
    hoje: Optional[str] = typer.Option(None, "--hoje", help="Dia de referência do status"),
    status: Optional[str] = typer.Option(None, "--status", help="valido | proximo | vencido"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    res = producao.listar_producoes(hoje=_data_opcional(hoje), status=status, db_path=db_path, usuario=usuario)
    _display_table(res, title="Produções")


@prod_app.command("rm")
def cmd_prod_rm(producao_id: str = typer.Argument(...), db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    _rodar(producao.excluir_producao, producao_id, db_path=db_path, usuario=usuario)
    typer.echo(">> Produção excluída.")


@app.command("compras")
def cmd_compras(db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    """Lista de compras: itens com estoque no mínimo ou abaixo."""
    res = producao.lista_compras(db_path=db_path, usuario=usuario)
    _display_table(res["itens"], title="Lista de Compras")
    if res["itens"]:
        console.print(f"[bold]Total estimado:[/] {format_moeda(res['total'])}")


# -----------------------
# caixa
# -----------------------

caixa_app = typer.Typer(help="Caixa diário (receitas e despesas).")
app.add_typer(caixa_app, name="caixa")


@caixa_app.command("add")
def cmd_caixa_add(
    tipo: str = typer.Argument(..., help="receita | despesa"),
    descricao: str = typer.Argument(...),
    valor: float = typer.Argument(..., help="Valor bruto"),
    forma: str = typer.Option("dinheiro", "--forma", help="dinheiro | pix | debito | credito"),
    data: Optional[str] = typer.Option(None, "--data", help="Padrão: hoje"),
    categoria: Optional[str] = typer.Option(None, "--categoria", help="Id da categoria de conta"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Registra um lançamento com taxa e valor líquido."""
    rec = _rodar(caixa.registrar_transacao, tipo, descricao, valor, forma_pagamento=forma, data=data,
                 categoria_id=categoria, db_path=db_path, usuario=usuario)
    _display_table(rec, title="Lançamento Registrado")


@caixa_app.command("dia")
def cmd_caixa_dia(
    data: Optional[str] = typer.Option(None, "--data", help="Padrão: hoje"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Resumo e lançamentos de um dia."""
    res = _rodar(caixa.resumo_do_dia, data, db_path=db_path, usuario=usuario)
    linhas = [
        f"Faturamento: {format_moeda(res['faturamento'])}",
        f"Despesas: {format_moeda(res['despesas'])}",
        f"Saldo: {format_moeda(res['saldo'])}",
    ]
    linhas += [f"  {forma}: {format_moeda(v)}" for forma, v in res["receitas_por_forma"].items()]
    console.print(Panel("\n".join(linhas), title=f"Caixa de {format_data(res['data'])}"))
    _display_table(res["transacoes"], title="Lançamentos")


@caixa_app.command("rm")
def cmd_caixa_rm(transacao_id: str = typer.Argument(...), db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    _rodar(caixa.excluir_transacao, transacao_id, db_path=db_path, usuario=usuario)
    typer.echo(">> Lançamento excluído.")


@caixa_app.command("importar")
def cmd_caixa_importar(
    path: str = typer.Argument(..., help="Caminho do XLSX de lançamentos"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Importa lançamentos em lote a partir de um XLSX."""
    info = _rodar(caixa.importar_transacoes_xlsx, path, db_path=db_path, usuario=usuario)
    console.print(Panel(f"Importados: {info['importadas']}\nErros: {len(info['erros'])}", title="Importação"))
    if info["erros"]:
        erro_table = Table(title="Erros Encontrados")
        erro_table.add_column("Linha")
        erro_table.add_column("Erro")
        for erro in info["erros"]:
            erro_table.add_row(str(erro["linha"]), erro["erro"])
        console.print(erro_table)


# -----------------------
# contas a pagar
# -----------------------

contas_app = typer.Typer(help="Contas a pagar.")
app.add_typer(contas_app, name="contas")


@contas_app.command("add")
def cmd_contas_add(
    descricao: str = typer.Argument(...),
    valor: float = typer.Argument(...),
    vencimento: str = typer.Argument(..., help="Data de vencimento"),
    categoria: Optional[str] = typer.Option(None, "--categoria"),
    recorrente: bool = typer.Option(False, "--recorrente"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    rec = _rodar(contas.adicionar_conta, descricao, valor, vencimento, categoria_id=categoria,
                 recorrente=recorrente, db_path=db_path, usuario=usuario)
    _display_table(rec, title="Conta Cadastrada")


@contas_app.command("pagar")
def cmd_contas_pagar(
    conta_id: str = typer.Argument(...),
    hoje: Optional[str] = typer.Option(None, "--hoje", help="Data do pagamento (padrão: hoje)"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Marca/desmarca a conta como paga."""
    rec = _rodar(contas.alternar_pagamento, conta_id, hoje=_data_opcional(hoje), db_path=db_path, usuario=usuario)
    typer.echo(f">> '{rec['descricao']}' {'paga' if rec['pago'] else 'em aberto'}.")


@contas_app.command("list")
def cmd_contas_list(
    mes: Optional[str] = typer.Option(None, "--mes", help="YYYY-MM (padrão: mês atual)"),
    hoje: Optional[str] = typer.Option(None, "--hoje"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    res = _rodar(contas.listar_contas, mes, hoje=_data_opcional(hoje), db_path=db_path, usuario=usuario)
    _display_table(res["contas"], title=f"Contas de {res['mes']}")
    console.print(
        f"Total: {format_moeda(res['total'])} | Pago: {format_moeda(res['total_pago'])} | "
        f"Pendente: {format_moeda(res['total_pendente'])}"
    )


@contas_app.command("rm")
def cmd_contas_rm(conta_id: str = typer.Argument(...), db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    _rodar(contas.excluir_conta, conta_id, db_path=db_path, usuario=usuario)
    typer.echo(">> Conta excluída.")


@contas_app.command("gastos")
def cmd_contas_gastos(
    mes: Optional[str] = typer.Option(None, "--mes", help="YYYY-MM"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Gasto por categoria comparado ao limite."""
    res = _rodar(contas.gastos_categorias, mes, db_path=db_path, usuario=usuario)
    _display_table(res, title="Gastos por Categoria")


# -----------------------
# metas
# -----------------------

metas_app = typer.Typer(help="Metas de faturamento e investimento.")
app.add_typer(metas_app, name="metas")


@metas_app.command("add")
def cmd_metas_add(
    nome: str = typer.Argument(...),
    valor: float = typer.Argument(..., help="Valor alvo"),
    tipo: str = typer.Option("faturamento", "--tipo", help="faturamento | investimento"),
    inicio: Optional[str] = typer.Option(None, "--inicio"),
    fim: Optional[str] = typer.Option(None, "--fim"),
    mensal: float = typer.Option(0.0, "--mensal", help="Contribuição mensal planejada"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    rec = _rodar(metas.criar_meta, nome, valor, tipo=tipo, data_inicio=inicio, data_fim=fim,
                 contribuicao_mensal=mensal, db_path=db_path, usuario=usuario)
    _display_table(rec, title="Meta Criada")


@metas_app.command("contribuir")
def cmd_metas_contribuir(
    meta_id: str = typer.Argument(...),
    valor: float = typer.Argument(...),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    rec = _rodar(metas.contribuir, meta_id, valor, db_path=db_path, usuario=usuario)
    _display_table(rec, title="Contribuição Registrada")
    if not rec["ativa"]:
        console.print("[bold green]Meta atingida![/]")


@metas_app.command("reativar")
def cmd_metas_reativar(meta_id: str = typer.Argument(...), db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    _rodar(metas.reativar_meta, meta_id, db_path=db_path, usuario=usuario)
    typer.echo(">> Meta reativada.")


@metas_app.command("list")
def cmd_metas_list(
    hoje: Optional[str] = typer.Option(None, "--hoje"),
    ativas: bool = typer.Option(False, "--ativas", help="Somente metas ativas"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    res = metas.listar_metas(hoje=_data_opcional(hoje), apenas_ativas=ativas, db_path=db_path, usuario=usuario)
    _display_table(res, title="Metas")


@metas_app.command("rm")
def cmd_metas_rm(meta_id: str = typer.Argument(...), db_path: str = _db_opt(), usuario: str = _usuario_opt()):
    _rodar(metas.excluir_meta, meta_id, db_path=db_path, usuario=usuario)
    typer.echo(">> Meta excluída.")


# -----------------------
# precificação
# -----------------------

precos_app = typer.Typer(help="Preço de venda e análise de margens.")
app.add_typer(precos_app, name="precos")


@precos_app.command("set")
def cmd_precos_set(
    ficha_id: str = typer.Argument(...),
    preco: float = typer.Argument(...),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Define o preço de venda de um produto final."""
    rec = _rodar(precificacao.atualizar_preco, ficha_id, preco, db_path=db_path, usuario=usuario)
    _display_table(rec, title="Preço Atualizado")


@precos_app.command("analise")
def cmd_precos_analise(
    categoria: Optional[str] = typer.Option(None, "--categoria"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Margens por categoria com preço ideal e status."""
    res = precificacao.analise_precos(categoria_id=categoria, db_path=db_path, usuario=usuario)
    if not res["categorias"]:
        console.print(Panel("Nenhum produto final cadastrado", title="Precificação", border_style="yellow"))
        return
    for grupo in res["categorias"]:
        titulo = (f"{grupo['nome']} (ideal {format_percentual(grupo['margem_ideal'])}, "
                  f"média {format_percentual(grupo['margem_media'])})")
        _display_table(grupo["produtos"], title=titulo)
    r = res["resumo"]
    console.print(f"[green]bom: {r['bom']}[/] | [yellow]atenção: {r['atencao']}[/] | [red]ruim: {r['ruim']}[/]")


# -----------------------
# painel, resultado e relatórios
# -----------------------

@app.command("painel")
def cmd_painel(
    hoje: Optional[str] = typer.Option(None, "--hoje", help="Dia de referência (padrão: hoje)"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Painel do mês."""
    d = relatorios.painel(hoje=_data_opcional(hoje), db_path=db_path, usuario=usuario)
    cor = "green" if d["lucro_prejuizo"] >= 0 else "red"
    linhas = [
        f"Faturamento hoje: {format_moeda(d['faturamento_dia'])}",
        f"Faturamento no mês: {format_moeda(d['faturamento_mes'])}",
        f"Faturamento líquido: {format_moeda(d['faturamento_liquido_mes'])}",
        f"Despesas: {format_moeda(d['despesas_mes'])}",
        f"Custos fixos: {format_moeda(d['custos_fixos'])}",
        f"Custos variáveis: {format_moeda(d['custos_variaveis'])}",
        f"CMV: {format_moeda(d['cmv'])}",
        f"[bold {cor}]Lucro/Prejuízo: {format_moeda(d['lucro_prejuizo'])} "
        f"({format_percentual(d['margem_lucro'])})[/]",
    ]
    console.print(Panel("\n".join(linhas), title=f"Painel {d['mes']}"))
    if d["por_forma_pagamento"]:
        _display_table([{"forma": k, "valor": v} for k, v in d["por_forma_pagamento"].items()],
                       title="Receitas por Forma de Pagamento")
    if d["contas_vencendo"]:
        _display_table(d["contas_vencendo"], title="Contas a Vencer (7 dias)")
    if d["estoque_baixo"]:
        _display_table(d["estoque_baixo"], title="Estoque Baixo")
    if d["metas"]:
        _display_table(d["metas"], title="Metas Ativas")


@app.command("resultado")
def cmd_resultado(
    mes: Optional[str] = typer.Option(None, "--mes", help="YYYY-MM (padrão: mês atual)"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Resultado do mês com ponto de equilíbrio."""
    r = _rodar(relatorios.resultado, mes, db_path=db_path, usuario=usuario)
    _display_table(r, title=f"Resultado {r['mes']}")


rel_app = typer.Typer(help="Relatórios financeiros")
app.add_typer(rel_app, name="rel")


@rel_app.command("evolucao")
def rel_evolucao(
    inicio_ano_mes: str = typer.Option(..., "--de", help="YYYY-MM (início)"),
    fim_ano_mes: str = typer.Option(..., "--ate", help="YYYY-MM (fim)"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Evolução mês a mês de faturamento, custos e lucro."""
    res = _rodar(relatorios.relatorio_evolucao, inicio_ano_mes, fim_ano_mes, db_path=db_path, usuario=usuario)
    _display_rel(res, title=f"Evolução ({inicio_ano_mes} a {fim_ano_mes})")


@rel_app.command("despesas")
def rel_despesas(
    inicio_ano_mes: str = typer.Option(..., "--de", help="YYYY-MM (início)"),
    fim_ano_mes: str = typer.Option(..., "--ate", help="YYYY-MM (fim)"),
    db_path: str = _db_opt(),
    usuario: str = _usuario_opt(),
):
    """Despesas por categoria no período (inclui custos fixos/variáveis)."""
    res = _rodar(relatorios.relatorio_despesas_categoria, inicio_ano_mes, fim_ano_mes,
                 db_path=db_path, usuario=usuario)
    _display_rel(res, title=f"Despesas por Categoria ({inicio_ano_mes} a {fim_ano_mes})")


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()

# docegestao/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observação importante:
- As entidades são fotografias imutáveis carregadas dos repositórios;
  o motor de cálculo apenas lê estes objetos.
- Datas são sempre ``datetime.date`` (sem hora e sem fuso). A conversão
  de strings acontece nas bordas (repositórios, CLI, planilhas).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional


UNIDADES = ("kg", "g", "L", "ml", "un", "cm", "m")
FORMAS_PAGAMENTO = ("dinheiro", "pix", "debito", "credito")
TIPOS_TRANSACAO = ("receita", "despesa")
TIPOS_FICHA = ("receita_base", "produto_final")
TIPOS_INGREDIENTE = ("ingrediente", "embalagem")
TIPOS_CATEGORIA_CONTA = ("fixa", "variavel")
TIPOS_META = ("faturamento", "investimento")


@dataclass(frozen=True)
class Ingrediente:
    """Ingrediente ou item de embalagem; estoque contado em embalagens."""
    id: str
    nome: str
    quantidade_embalagem: float
    unidade: str
    preco_embalagem: float
    custo_unidade: float = 0.0
    estoque_atual: float = 0.0
    estoque_minimo: float = 0.0
    tipo: str = "ingrediente"            # 'ingrediente' | 'embalagem'


@dataclass(frozen=True)
class ItemFicha:
    """Linha de ingrediente/embalagem de uma ficha técnica."""
    ingrediente_id: str
    quantidade: float
    unidade: str = "un"
    custo: float = 0.0


@dataclass(frozen=True)
class FichaTecnica:
    id: str
    nome: str
    tipo: str                            # 'receita_base' | 'produto_final'
    categoria_id: Optional[str] = None
    receitas_base_ids: List[str] = field(default_factory=list)
    itens: List[ItemFicha] = field(default_factory=list)
    itens_embalagem: List[ItemFicha] = field(default_factory=list)
    rendimento_quantidade: float = 1.0
    rendimento_unidade: str = "un"
    custo_total: float = 0.0
    custo_unidade: float = 0.0
    preco_venda: float = 0.0
    margem_lucro: float = 0.0
    cmv_percentual: float = 0.0
    validade_dias: Optional[int] = None
    tempo_preparo: Optional[int] = None
    descricao: Optional[str] = None


@dataclass(frozen=True)
class Producao:
    id: str
    ficha_tecnica_id: str
    quantidade_produzida: float
    data_producao: date
    data_validade: Optional[date] = None
    custo_total: float = 0.0             # fotografia no momento do registro
    observacao: Optional[str] = None


@dataclass(frozen=True)
class TransacaoDiaria:
    id: str
    data: date
    tipo: str                            # 'receita' | 'despesa'
    descricao: str
    valor: float                         # valor bruto
    forma_pagamento: str = "dinheiro"
    taxa_descontada: float = 0.0
    valor_liquido: float = 0.0
    categoria_id: Optional[str] = None


@dataclass(frozen=True)
class ContaPagar:
    id: str
    descricao: str
    categoria_id: Optional[str]
    valor: float
    data_vencimento: date
    pago: bool = False
    data_pagamento: Optional[date] = None
    recorrente: bool = False


@dataclass(frozen=True)
class CategoriaConta:
    id: str
    nome: str
    tipo: str = "variavel"               # 'fixa' | 'variavel'
    limite_gasto: Optional[float] = None
    cor: str = "#9ca3af"


@dataclass(frozen=True)
class CategoriaProduto:
    id: str
    nome: str
    margem_padrao: float = 0.0
    cor: str = "#9ca3af"


@dataclass(frozen=True)
class Meta:
    id: str
    tipo: str                            # 'faturamento' | 'investimento'
    nome: str
    valor_meta: float
    valor_acumulado: float = 0.0
    data_inicio: Optional[date] = None
    data_fim: Optional[date] = None
    contribuicao_mensal: float = 0.0
    ativa: bool = True


@dataclass(frozen=True)
class CustoItem:
    """Custo fixo ou variável mensal (valor absoluto, não percentual)."""
    id: str
    nome: str
    valor: float


@dataclass(frozen=True)
class Configuracoes:
    """Configurações do estabelecimento, passadas explicitamente ao motor."""
    taxas: Dict[str, float] = field(default_factory=dict)   # pix/debito/credito em %
    cmv_percentual_padrao: float = 30.0
    margem_lucro_padrao: float = 60.0
    custos_fixos: List[CustoItem] = field(default_factory=list)
    custos_variaveis: List[CustoItem] = field(default_factory=list)
    nome_estabelecimento: Optional[str] = None
    logo_url: Optional[str] = None


@dataclass(frozen=True)
class SistemaData:
    """Fotografia completa dos dados de um usuário."""
    ingredientes: List[Ingrediente] = field(default_factory=list)
    fichas_tecnicas: List[FichaTecnica] = field(default_factory=list)
    categorias_produto: List[CategoriaProduto] = field(default_factory=list)
    producoes: List[Producao] = field(default_factory=list)
    transacoes: List[TransacaoDiaria] = field(default_factory=list)
    contas_pagar: List[ContaPagar] = field(default_factory=list)
    categorias_conta: List[CategoriaConta] = field(default_factory=list)
    metas: List[Meta] = field(default_factory=list)
    configuracoes: Configuracoes = field(default_factory=Configuracoes)


# -------------------------
# Visões derivadas
# -------------------------

@dataclass(frozen=True)
class ResumoDiario:
    data: date
    faturamento: float
    despesas: float
    saldo: float
    receitas_por_forma: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ProgressoMeta:
    meta: Meta
    percentual: float


@dataclass(frozen=True)
class DashboardData:
    faturamento_dia: float
    faturamento_mes: float
    faturamento_liquido_mes: float
    despesas_mes: float
    custos_fixos: float
    custos_variaveis: float
    cmv: float
    lucro_prejuizo: float
    margem_lucro: float
    contas_vencendo: List[ContaPagar] = field(default_factory=list)
    ingredientes_estoque_baixo: List[Ingrediente] = field(default_factory=list)
    progresso_metas: List[ProgressoMeta] = field(default_factory=list)
    resumo_por_forma_pagamento: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ResultadoMensal:
    mes: str                             # YYYY-MM
    faturamento: float
    faturamento_liquido: float
    custos_fixos: float
    custos_variaveis: float
    cmv: float
    lucro: float
    margem: float
    ponto_equilibrio: float


@dataclass(frozen=True)
class ItemListaCompras:
    ingrediente_id: str
    nome: str
    quantidade_estoque: float
    estoque_minimo: float
    quantidade_comprar: float
    unidade: str
    custo_estimado: float


@dataclass(frozen=True)
class FichaDesatualizada:
    """Ficha cujo custo gravado difere do custo resolvido agora."""
    ficha_id: str
    nome: str
    custo_gravado: float
    custo_atual: float

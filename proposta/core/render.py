# proposta/core/render.py
"""
Render: ProposalSnapshot + templates/proposta.html -> HTML pronto para imprimir.
- Formata dinheiro/datas em pt-BR (R$ 1.234,56 e dd/mm/aaaa)
- Injeta as linhas da tabela de preços em <tbody id="itens-precos">
- Blocos opcionais (logo, texto complementar, dados técnicos, normas, data de
  validade) somem quando o campo está vazio
- Substitui todos os {{...}}; o que sobrar é removido
O PDF é gerado pelo "Imprimir -> Salvar como PDF" do navegador.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from html import escape
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from proposta.core.calculator import ProposalSnapshot, as_date
from proposta.core.parsing import parse_money, parse_percent
from proposta.schemas.proposal import OPTIONAL_DEFAULTS
from proposta.services.company import load_company
from proposta.settings.config import settings

DEFAULT_SERVICES_TITLE = "SERVIÇOS ESPECIALIZADOS EM ENERGIA"

RE_PLACEHOLDER = re.compile(r"\{\{[a-zA-Z0-9_.]+\}\}")
RE_OPTIONAL_BLOCK = re.compile(r"<!--if:(?P<key>[a-zA-Z0-9_]+)-->(?P<body>.*?)<!--endif:(?P=key)-->", re.S)

# ---------- Formatadores (pt-BR) ----------

def _group_thousands(int_str: str) -> str:
    """Agrupa a parte inteira com ponto a cada 3 dígitos, da direita para a esquerda."""
    s = "".join(ch for ch in int_str if ch.isdigit())
    if len(s) <= 3:
        return s
    parts: List[str] = []
    while s:
        parts.append(s[-3:])
        s = s[:-3]
    return ".".join(reversed(parts))

def format_brl(value: Union[Decimal, float, int, None]) -> str:
    """1234.5 -> "1.234,50" (sempre duas casas)."""
    d = Decimal(str(value or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if d < 0 else ""
    int_part, dec_part = "{:.2f}".format(abs(d)).split(".")
    return "{}{},{}".format(sign, _group_thousands(int_part), dec_part)

def format_currency(value: Union[Decimal, float, int, None]) -> str:
    """1000 -> "R$ 1.000,00"."""
    return "R$ " + format_brl(value)

def format_date(value: Optional[date]) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime("%d/%m/%Y")

# ---------- Contexto ----------

def _get(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    return str(value).strip()

def _text(raw: Mapping[str, Any], key: str) -> str:
    return escape(_get(raw, key))

def document_title(raw: Mapping[str, Any]) -> str:
    """Nome sugerido para o PDF: Proposta_<número>_<cliente>."""
    return "Proposta_{}_{}".format(_get(raw, "numeroProposta"), _get(raw, "nomeCliente"))

def build_item_rows(items: Any) -> str:
    if not isinstance(items, (list, tuple)):
        return ""

    rows: List[str] = []
    for index, item in enumerate(items, start=1):
        d = item if isinstance(item, Mapping) else {}
        rows.append(
            "<tr>"
            "<td class='num'>{idx}</td>"
            "<td class='num'>{qty}</td>"
            "<td>{desc}</td>"
            "<td class='money'>R$ {value}</td>"
            "</tr>".format(
                idx=index,
                qty=escape(str(d.get("quantidade") or "")),
                desc=escape(str(d.get("descricao") or "")),
                value=format_brl(parse_money(d.get("valorTotal"))),
            )
        )
    return "\n          ".join(rows)

def _representatives_html(company: Mapping[str, Any]) -> str:
    blocks: List[str] = []
    for rep in company.get("representantes") or []:
        blocks.append(
            "<div class='rep'><p>Nome: {n}</p><p>Função: {f}</p><p>CPF: {c}</p></div>".format(
                n=escape(rep.get("nome", "")),
                f=escape(rep.get("funcao", "")),
                c=escape(rep.get("cpf", "")),
            )
        )
    return "".join(blocks)

def build_context(snapshot: ProposalSnapshot, company: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
    """
    Todos os valores que a template usa, já formatados e escapados.
    Lê sempre do formulário (snapshot.raw), então funciona também na
    pré-visualização de um formulário ainda incompleto.
    """
    raw = snapshot.raw
    derived = snapshot.derived
    c = company or {}
    empresa = c.get("empresa") or {}
    banco = c.get("dados_bancarios") or {}

    def opt(key: str) -> str:
        # Opcional em branco == default (mesma regra do builder)
        return escape(_get(raw, key) or OPTIONAL_DEFAULTS[key])

    signature_pct = parse_percent(opt("percentualAssinatura"))
    scheduled_pct = parse_percent(opt("percentualEventograma"))

    context: Dict[str, str] = {
        "document_title": escape(document_title(raw)),
        # Identificação
        "numero_proposta": _text(raw, "numeroProposta"),
        "data_proposta": format_date(as_date(raw.get("dataProposta"))),
        "revisao": opt("revisao"),
        "confidencial": opt("confidencial"),
        "elaborado_por": opt("elaboradoPor"),
        "servicos_executar": _text(raw, "servicosExecutar") or DEFAULT_SERVICES_TITLE,
        "logo_cliente_url": _text(raw, "logoClienteUrl"),
        # Cliente
        "nome_cliente": _text(raw, "nomeCliente"),
        "local_prestacao": _text(raw, "localPrestacao"),
        "solicitante": _text(raw, "solicitante") or _text(raw, "nomeCliente"),
        "cidade": _text(raw, "cidade") or _text(raw, "localPrestacao"),
        # Escopo
        "objetivo_cliente": _text(raw, "objetivoCliente"),
        "servicos_especializados": _text(raw, "servicosEspecializados"),
        "dados_tecnicos": _text(raw, "dadosTecnicos"),
        "normas_tecnicas": _text(raw, "normasTecnicas"),
        "escopo_fornecimento": _text(raw, "escopoFornecimento"),
        "prazo_execucao": _text(raw, "prazoExecucao"),
        # Preços
        "texto_complementar_precos": _text(raw, "textoComplementarPrecos"),
        "rows_html": build_item_rows(raw.get("itensPrecos")),
        "valor_total": format_brl(derived.grand_total),
        # Pagamento
        "percentual_assinatura": format_brl(signature_pct).rstrip("0").rstrip(","),
        "percentual_eventograma": format_brl(scheduled_pct).rstrip("0").rstrip(","),
        "valor_assinatura": format_currency(derived.signature_amount),
        "valor_eventograma": format_currency(derived.scheduled_amount),
        "faturamento": escape(str(c.get("faturamento") or "")),
        # Validade
        "validade_dias": opt("validadeDias"),
        "data_validade": format_date(derived.validity_date) if derived.validity_date else "",
        # Empresa
        "empresa_nome": escape(empresa.get("nome", "")),
        "empresa_endereco": escape(empresa.get("endereco", "")),
        "empresa_cidade": escape(empresa.get("cidade", "")),
        "empresa_telefone": escape(empresa.get("telefone", "")),
        "empresa_cnpj": escape(empresa.get("cnpj", "")),
        "empresa_ie": escape(empresa.get("inscricao_estadual", "")),
        "banco_favorecido": escape(banco.get("favorecido", "")),
        "banco_cnpj": escape(banco.get("cnpj", "")),
        "banco_nome": escape(banco.get("banco", "")),
        "banco_agencia": escape(banco.get("agencia", "")),
        "banco_conta": escape(banco.get("conta", "")),
        "representantes_html": _representatives_html(c),
    }
    return context

# ---------- Render ----------

def _apply_optional_blocks(html: str, context: Mapping[str, str]) -> str:
    """<!--if:chave--> ... <!--endif:chave--> fica só se context[chave] não for vazio."""
    def repl(m: "re.Match[str]") -> str:
        return m.group("body") if context.get(m.group("key")) else ""
    return RE_OPTIONAL_BLOCK.sub(repl, html)

def _inject_rows(html: str, rows_html: str, tbody_id: str) -> str:
    """Coloca as linhas logo depois da abertura <tbody id="...">."""
    marker = '<tbody id="{}">'.format(tbody_id)
    if marker in html:
        return html.replace(marker, marker + rows_html)
    marker2 = "<tbody id='{}'>".format(tbody_id)
    return html.replace(marker2, marker2 + rows_html)

def render_html(context: Mapping[str, str], template: str) -> str:
    html = _apply_optional_blocks(template, context)

    # Uma passada só sobre os marcadores da template: o texto do usuário já
    # substituído não é relido, e marcador sem valor vira vazio
    def repl(m: "re.Match[str]") -> str:
        key = m.group(0)[2:-2]
        if key == "rows_html":
            return ""
        return context.get(key, "")

    html = RE_PLACEHOLDER.sub(repl, html)
    return _inject_rows(html, context.get("rows_html", ""), "itens-precos")

def render_proposal(
    snapshot: ProposalSnapshot,
    company: Optional[Mapping[str, Any]] = None,
    template_path: Optional[Union[str, Path]] = None,
) -> Dict[str, object]:
    template = Path(template_path or settings.template_path).read_text(encoding="utf-8")
    if company is None:
        company = load_company()

    context = build_context(snapshot, company)
    html = render_html(context, template)

    derived = snapshot.derived
    return {
        "html": html,
        "title": document_title(snapshot.raw),
        "totals": {
            "valor_total": round(float(derived.grand_total), 2),
            "valor_assinatura": round(float(derived.signature_amount), 2),
            "valor_eventograma": round(float(derived.scheduled_amount), 2),
            "data_validade": derived.validity_date.isoformat() if derived.validity_date else None,
        },
    }

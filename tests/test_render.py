from datetime import date
from decimal import Decimal
from pathlib import Path

from proposta.core.calculator import ProposalSnapshot, derive
from proposta.core.render import (
    build_context,
    document_title,
    format_brl,
    format_currency,
    format_date,
    render_proposal,
)
from proposta.services.company import load_company
from proposta.services.proposal_builder import build_proposal, proposal_to_input

TEMPLATE = Path(__file__).resolve().parents[1] / "templates" / "proposta.html"
COMPANY = {
    "empresa": {"nome": "RTB SOLUÇÕES LTDA", "cnpj": "37.944.939/0001-14"},
    "dados_bancarios": {"banco": "Itaú S/A", "agencia": "6474"},
    "faturamento": "NF - 30DLL - OEM",
    "representantes": [{"nome": "Fulano", "funcao": "Diretor", "cpf": "000"}],
}

def _snapshot(raw):
    p = build_proposal(raw)
    return ProposalSnapshot(raw=proposal_to_input(p), proposal=p, derived=derive(p))

def test_brl_formatting():
    assert format_brl(Decimal("1234.5")) == "1.234,50"
    assert format_brl(1000) == "1.000,00"
    assert format_brl(Decimal("0.005")) == "0,01"
    assert format_brl(None) == "0,00"
    assert format_currency(Decimal("1234567.891")) == "R$ 1.234.567,89"

def test_date_formatting():
    assert format_date(date(2025, 3, 2)) == "02/03/2025"
    assert format_date(None) == "N/A"

def test_document_title():
    assert document_title({"numeroProposta": "2023-PT-1-01", "nomeCliente": "ACME"}) == "Proposta_2023-PT-1-01_ACME"

def test_context_fallbacks(valid_input):
    ctx = build_context(_snapshot(valid_input), COMPANY)
    assert ctx["servicos_executar"] == "SERVIÇOS ESPECIALIZADOS EM ENERGIA"
    assert ctx["solicitante"] == "ACME"
    assert ctx["cidade"] == "Usina X"
    assert ctx["percentual_assinatura"] == "25"
    assert ctx["valor_assinatura"] == "R$ 250,00"
    assert ctx["valor_eventograma"] == "R$ 750,00"
    assert ctx["data_validade"] == "31/01/2025"

def test_render_full_document(valid_input):
    valid_input["itensPrecos"].append(
        {"quantidade": "02", "descricao": "Troca de <rotores>", "valorTotal": "2.500,00"}
    )
    r = render_proposal(_snapshot(valid_input), company=COMPANY, template_path=TEMPLATE)
    html = r["html"]

    assert r["title"] == "Proposta_2023-PT-1-01_ACME"
    assert r["totals"]["valor_total"] == 3500.0
    assert r["totals"]["data_validade"] == "2025-01-31"
    assert "{{" not in html and "}}" not in html
    assert "R$ 3.500,00" in html
    assert "Troca de &lt;rotores&gt;" in html
    assert "<td class='num'>2</td>" in html
    assert "01/01/2025" in html
    assert "Fulano" in html and "NF - 30DLL - OEM" in html

def test_optional_blocks_removed_when_empty(valid_input):
    html = render_proposal(_snapshot(valid_input), company=COMPANY, template_path=TEMPLATE)["html"]
    assert "Dados técnicos de referência" not in html
    assert "Logo do cliente" not in html

    valid_input["dadosTecnicos"] = "Turbina Kaplan 12 MW"
    html = render_proposal(_snapshot(valid_input), company=COMPANY, template_path=TEMPLATE)["html"]
    assert "Turbina Kaplan 12 MW" in html

def test_draft_render_from_partial_form():
    raw = {"nomeCliente": "ACME", "itensPrecos": [{"quantidade": "01", "valorTotal": "10,00"}]}
    snap = ProposalSnapshot(raw=raw, proposal=None, derived=derive(raw))
    html = render_proposal(snap, company={}, template_path=TEMPLATE)["html"]
    assert "R$ 10,00" in html
    assert "{{" not in html

def test_company_yaml_is_loaded():
    company = load_company()
    assert company["empresa"]["nome"] == "RTB SOLUÇÕES LTDA"
    assert company["dados_bancarios"]["agencia"] == "6474"
    assert len(company["representantes"]) == 2

def test_missing_company_file_degrades(tmp_path):
    company = load_company(tmp_path / "nao_existe.yaml")
    assert company == {"empresa": {}, "dados_bancarios": {}, "faturamento": "", "representantes": []}

def test_user_braces_are_kept_verbatim(valid_input):
    valid_input["escopoFornecimento"] = "troca de rotores conforme {{valor_total}} e {{obs}}"
    valid_input["itensPrecos"][0]["descricao"] = "Revisão {{numero_proposta}}"
    html = render_proposal(_snapshot(valid_input), company=COMPANY, template_path=TEMPLATE)["html"]
    assert "troca de rotores conforme {{valor_total}} e {{obs}}" in html
    assert "Revisão {{numero_proposta}}" in html

def test_shipped_company_data_reaches_the_document(valid_input):
    company = load_company()
    assert company["empresa"]["cidade"] == "Monte Mor - SP - CEP: 13.190-005"
    assert company["faturamento"] == "NF - 30DLL - OEM"

    html = render_proposal(_snapshot(valid_input), template_path=TEMPLATE)["html"]
    assert "RTB SOLUÇÕES LTDA" in html
    assert "Monte Mor - SP - CEP: 13.190-005" in html
    assert "Camila Cristina Escobar" in html

"""
Valores derivados da proposta (nunca armazenados, sempre recalculados).

- Valor global = soma dos valores dos itens (texto em BRL).
- Data de validade = data da proposta + validade em dias corridos.
- Condições de pagamento: a) % na assinatura, b) % conforme cronograma.

As funções aceitam tanto a Proposal validada quanto o dicionário cru do
formulário, porque a pré-visualização roda enquanto o usuário ainda digita.
Nenhuma delas levanta exceção: valor malformado conta como zero/default.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Union

from proposta.core.parsing import parse_days, parse_money, parse_percent
from proposta.schemas.proposal import OPTIONAL_DEFAULTS, LineItem, Proposal

DEFAULT_VALIDITY_DAYS = 30


@dataclass(frozen=True)
class PaymentSplit:
    signature_amount: Decimal      # a) na assinatura do contrato
    scheduled_amount: Decimal      # b) conforme cronograma


@dataclass(frozen=True)
class DerivedProposal:
    grand_total: Decimal
    validity_date: Optional[date]
    signature_amount: Decimal
    scheduled_amount: Decimal


@dataclass(frozen=True)
class ProposalSnapshot:
    """
    O que o renderizador recebe. proposal é None enquanto o formulário
    ainda não valida (pré-visualização ao vivo); raw é sempre o que está na tela.
    """
    raw: Mapping[str, Any]
    proposal: Optional[Proposal]
    derived: DerivedProposal


def _item_value(item: Any) -> Any:
    if isinstance(item, LineItem):
        return item.total_value
    if isinstance(item, Mapping):
        return item.get("valorTotal")
    return None


def compute_grand_total(items: Optional[Iterable[Any]]) -> Decimal:
    total = Decimal("0")
    for item in (items or []):
        total += parse_money(_item_value(item))
    return total


def as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def compute_validity_date(proposal_date: Any, validity_days: Any) -> Optional[date]:
    """
    Dias corridos no calendário: 31/01/2025 + 30 -> 02/03/2025.
    Sem data da proposta ou sem validade -> None. Dias ilegíveis -> 30.
    """
    start = as_date(proposal_date)
    if start is None:
        return None
    if validity_days is None or (isinstance(validity_days, str) and not validity_days.strip()):
        return None

    days = parse_days(validity_days, DEFAULT_VALIDITY_DAYS)
    try:
        return start + timedelta(days=days)
    except OverflowError:
        # Validade além de 31/12/9999: sem data para mostrar
        return None


def compute_payment_split(
    grand_total: Union[Decimal, int, float, str],
    signature_percent: Any,
    scheduled_percent: Any,
) -> PaymentSplit:
    """
    Proporções simples do total. Os percentuais NÃO são normalizados para 100:
    o documento mostra exatamente o que foi digitado.
    """
    if isinstance(grand_total, Decimal):
        total = grand_total
    else:
        total = parse_percent(grand_total)

    return PaymentSplit(
        signature_amount=total * parse_percent(signature_percent) / 100,
        scheduled_amount=total * parse_percent(scheduled_percent) / 100,
    )


def _or_default(value: Any, field: str) -> Any:
    # Mesmo tratamento do formulário: em branco == ausente
    if value is None or (isinstance(value, str) and not value.strip()):
        return OPTIONAL_DEFAULTS[field]
    return value


def derive(source: Union[Proposal, Mapping[str, Any]]) -> DerivedProposal:
    if isinstance(source, Proposal):
        items: Any = source.items
        proposal_date: Any = source.proposal_date
        validity_days: Any = source.validity_days
        signature: Any = source.signature_percent
        scheduled: Any = source.scheduled_percent
    else:
        data = source if isinstance(source, Mapping) else {}
        items = data.get("itensPrecos")
        if not isinstance(items, (list, tuple)):
            items = []
        proposal_date = data.get("dataProposta")
        validity_days = data.get("validadeDias")
        signature = _or_default(data.get("percentualAssinatura"), "percentualAssinatura")
        scheduled = _or_default(data.get("percentualEventograma"), "percentualEventograma")

    grand_total = compute_grand_total(items)
    split = compute_payment_split(grand_total, signature, scheduled)

    return DerivedProposal(
        grand_total=grand_total,
        validity_date=compute_validity_date(proposal_date, validity_days),
        signature_amount=split.signature_amount,
        scheduled_amount=split.scheduled_amount,
    )

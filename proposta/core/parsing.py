"""
Leitura tolerante de números digitados no formulário (pt-BR).

Regras:
- Valores monetários: tudo que não for dígito ou vírgula é descartado e a
  vírgula vira separador decimal ("R$ 1.234,56" -> 1234.56).
- Percentuais: número no início do texto, vírgula ou ponto como decimal.
- Dias: inteiro no início do texto.

Nenhuma função aqui levanta exceção: texto malformado vira 0 (ou o default),
porque a pré-visualização é recalculada a cada tecla digitada.
"""
from decimal import Decimal, InvalidOperation
from typing import Any
import re

ZERO = Decimal("0")

RE_LEADING_DECIMAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)")
RE_LEADING_INT = re.compile(r"^[+-]?\d+")


def _to_decimal(text: str) -> Decimal:
    m = RE_LEADING_DECIMAL.match(text)
    if not m:
        return ZERO
    try:
        return Decimal(m.group(0))
    except InvalidOperation:
        return ZERO


def parse_money(value: Any) -> Decimal:
    """"1.000,00" -> Decimal("1000.00"). Vazio/sem dígitos -> 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))

    cleaned = re.sub(r"[^\d,]", "", str(value))
    # Só a primeira vírgula é decimal; o que vier depois dela é ignorado
    cleaned = cleaned.replace(",", ".", 1)
    return _to_decimal(cleaned)


def parse_percent(value: Any) -> Decimal:
    """"25" -> 25, "12,5%" -> 12.5, "abc" -> 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))

    text = str(value).strip().replace(",", ".", 1)
    return _to_decimal(text)


def parse_days(value: Any, default: int) -> int:
    """
    "30" -> 30, "15 dias" -> 15.
    Sem número, ou número negativo -> default.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value >= 0 else default

    text = str(value or "").strip()
    m = RE_LEADING_INT.match(text)
    if not m:
        return default
    days = int(m.group(0))
    return days if days >= 0 else default

from decimal import Decimal

from proposta.core.parsing import parse_days, parse_money, parse_percent

def test_money_ptbr_thousands_and_decimals():
    assert parse_money("1.234,56") == Decimal("1234.56")
    assert parse_money("R$ 1.000,00") == Decimal("1000.00")

def test_money_without_digits_is_zero():
    assert parse_money("a combinar") == 0
    assert parse_money("") == 0
    assert parse_money(None) == 0

def test_money_ignores_extra_commas():
    assert parse_money("1,5,0") == Decimal("1.5")

def test_percent_parsing():
    assert parse_percent("25") == 25
    assert parse_percent("12,5%") == Decimal("12.5")
    assert parse_percent("abc") == 0
    # Sem notação científica: só o número simples do início
    assert parse_percent("1e2") == 1

def test_days_leading_integer_or_default():
    assert parse_days("30", 30) == 30
    assert parse_days("15 dias", 30) == 15
    assert parse_days("0", 30) == 0
    assert parse_days("", 30) == 30
    assert parse_days("-5", 30) == 30

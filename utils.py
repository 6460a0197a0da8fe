import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Optional

from babel import Locale
from babel.core import UnknownLocaleError
from babel import numbers

from config import config
from models import Currency

logger = logging.getLogger(__name__)

_NUMERIC = re.compile(r'^(\d+\.?\d*|\.\d+)$')
_PLACEHOLDER = re.compile(r'\{([^{]+?)\}')


class ParseError(ValueError):
    pass


def babel_locale(locale: str) -> Locale:
    try:
        return Locale.parse(locale.replace('-', '_'))
    except (UnknownLocaleError, ValueError) as e:
        raise ParseError(f"Unknown locale: {locale}") from e


def get_currency(locale: str) -> Currency:
    code = config.LOCALE_CURRENCIES.get(locale)
    if code is None:
        territory = babel_locale(locale).territory
        codes = numbers.get_territory_currencies(territory) if territory else []
        code = codes[0] if codes else config.LOCALE_CURRENCIES[config.DEFAULT_LOCALE]
    return Currency(code=code, exponent=numbers.get_currency_precision(code))


def _normalize(locale: str, text: str, strip: tuple = ()) -> Decimal:
    """
    Reduce user text to a plain decimal using the locale's symbols.
    Raises ParseError when nothing numeric is left.
    """
    if text is None or not str(text).strip():
        raise ParseError("Empty amount")

    loc = babel_locale(locale)
    cleaned = str(text).strip()

    negative = False
    if cleaned.startswith('(') and cleaned.endswith(')'):
        negative = True
        cleaned = cleaned[1:-1]

    for symbol in sorted(strip, key=len, reverse=True):
        if symbol:
            cleaned = cleaned.replace(symbol, '')

    minus = numbers.get_minus_sign_symbol(loc)
    cleaned = cleaned.replace(minus, '-').replace('−', '-')
    cleaned = cleaned.replace(numbers.get_plus_sign_symbol(loc), '')
    cleaned = re.sub(r'\s', '', cleaned)
    if cleaned.startswith('-'):
        negative = not negative
        cleaned = cleaned[1:]
    elif cleaned.endswith('-'):
        negative = not negative
        cleaned = cleaned[:-1]

    group = numbers.get_group_symbol(loc)
    decimal = numbers.get_decimal_symbol(loc)
    if group.strip():
        cleaned = cleaned.replace(group, '')
    cleaned = cleaned.replace(decimal, '.')

    if not _NUMERIC.match(cleaned):
        raise ParseError(f"Not a number: {text!r}")
    try:
        value = Decimal(cleaned)
    except InvalidOperation as e:
        raise ParseError(f"Not a number: {text!r}") from e
    return -value if negative else value


def _round(value: Decimal, text: str) -> int:
    try:
        return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    except InvalidOperation as e:
        raise ParseError(f"Amount out of range: {text!r}") from e


def currency_symbols(locale: str, currency: Currency) -> tuple:
    symbol = numbers.get_currency_symbol(currency.code, babel_locale(locale))
    # narrow form, e.g. CA$ -> $
    narrow = re.sub(r"[A-Za-z]", "", symbol)
    return currency.code, symbol, narrow


def parse_currency_decimal(locale: str, currency: Currency, text: str) -> int:
    value = _normalize(locale, text, strip=currency_symbols(locale, currency))
    return _round(value * currency.scale, text)


def parse_ratio_decimal(locale: str, text: str) -> int:
    return _round(_normalize(locale, text), text)


def parse_currency_amount(locale: str, currency: Currency, text: str) -> int:
    try:
        return parse_currency_decimal(locale, currency, text)
    except ParseError as e:
        logger.debug("Treating currency input as 0: %s", e)
        return 0


def parse_ratio_amount(locale: str, text: str) -> int:
    try:
        return parse_ratio_decimal(locale, text)
    except ParseError as e:
        logger.debug("Treating ratio input as 0: %s", e)
        return 0


def format_currency(locale: str, amount: int,
                    currency: Optional[Currency] = None) -> str:
    currency = currency or get_currency(locale)
    major = Decimal(amount) / currency.scale
    return numbers.format_currency(major, currency.code,
                                   locale=babel_locale(locale))


def format_integer(locale: str, value: int) -> str:
    return numbers.format_decimal(int(value), locale=babel_locale(locale))


def format_ratio(locale: str, value: int) -> str:
    return format_integer(locale, max(0, value))


def interpolate_string(template: str, values: Dict[str, str]) -> str:
    return _PLACEHOLDER.sub(
        lambda match: values.get(match.group(1), match.group(0)), template)

"""Locale-aware money conversion and formatting.

The engine works on integer minor units only. This module converts between
display decimals and minor units, and formats minor-unit amounts for people,
using babel for currency precision and locale conventions.

Configuration:
    SPLITLEDGER_LOCALE (default: en_US) - number formatting and parsing
    SPLITLEDGER_CURRENCY (default: USD) - currency when none is given

Example:
    >>> to_minor_units("12.34", "USD")
    1234
    >>> format_amount(1234, "USD", "en_US")
    '$12.34'
"""

import logging
from decimal import Decimal, InvalidOperation

from babel import Locale, UnknownLocaleError
from babel.numbers import NumberFormatError
from babel.numbers import (
    format_currency as babel_format_currency,
)
from babel.numbers import (
    get_currency_precision as babel_get_currency_precision,
)
from babel.numbers import (
    get_currency_symbol as babel_get_currency_symbol,
)
from babel.numbers import (
    parse_decimal as babel_parse_decimal,
)

from splitledger.services.config import settings
from splitledger.services.errors import InvalidAmount

logger = logging.getLogger(__name__)

# Default locale if the configured one is invalid
DEFAULT_LOCALE = "en_US"


def resolve_locale(locale_str: str | None = None) -> str:
    """Validate a locale string, falling back to settings and then en_US.

    Args:
        locale_str: Locale such as 'de_DE' (default: settings.locale)

    Returns:
        Valid locale string
    """
    locale_str = locale_str or settings.locale
    try:
        Locale.parse(locale_str)
        return locale_str
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(f"Invalid locale '{locale_str}': {e}. Falling back to '{DEFAULT_LOCALE}'")
        return DEFAULT_LOCALE


def resolve_currency(currency: str | None = None) -> str:
    return (currency or settings.currency).upper()


def get_currency_precision(currency: str | None = None) -> int:
    """Number of minor-unit digits for a currency (2 for USD, 0 for JPY)."""
    return babel_get_currency_precision(resolve_currency(currency))


def get_currency_symbol(currency: str | None = None, locale: str | None = None) -> str:
    return babel_get_currency_symbol(resolve_currency(currency), locale=resolve_locale(locale))


def to_minor_units(amount: Decimal | str | int, currency: str | None = None) -> int:
    """Convert a display amount to integer minor units.

    Args:
        amount: Decimal, numeric string ('12.50') or whole number
        currency: ISO 4217 code (default: settings.currency)

    Returns:
        Amount in minor units (1250 for '12.50' USD)

    Raises:
        InvalidAmount: If amount is not a number or has more decimal
            places than the currency allows
    """
    currency = resolve_currency(currency)
    if isinstance(amount, bool):
        raise InvalidAmount(f"Amount must be a number: {amount!r}")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise InvalidAmount(f"Amount must be a number: {amount!r}") from e

    if not value.is_finite():
        raise InvalidAmount(f"Amount must be a finite number: {amount!r}")

    precision = get_currency_precision(currency)
    minor = value.scaleb(precision)
    if minor != minor.to_integral_value():
        raise InvalidAmount(
            f"Amount {amount} has more than {precision} decimal places for {currency}"
        )
    return int(minor)


def from_minor_units(minor: int, currency: str | None = None) -> Decimal:
    """Convert integer minor units back to a display Decimal (1250 -> 12.50)."""
    precision = get_currency_precision(currency)
    return Decimal(minor).scaleb(-precision)


def format_amount(
    minor: int,
    currency: str | None = None,
    locale: str | None = None,
    include_symbol: bool = True,
) -> str:
    """Format a minor-unit amount according to locale.

    Args:
        minor: Amount in minor units
        currency: ISO 4217 code (default: settings.currency)
        locale: Locale string (default: settings.locale)
        include_symbol: Whether to include currency symbol (default True)

    Returns:
        Formatted currency string (e.g., '$1,234.56')

    Example:
        >>> format_amount(123456, "USD", "en_US", include_symbol=False)
        '1,234.56'
    """
    currency = resolve_currency(currency)
    locale = resolve_locale(locale)
    amount = from_minor_units(minor, currency)
    if include_symbol:
        return babel_format_currency(amount, currency, locale=locale)
    return babel_format_currency(amount, currency, format="#,##0.00", locale=locale)


def format_balance(minor: int, currency: str | None = None, locale: str | None = None) -> str:
    """Describe a balance from the viewer's side ('owed you $5.00' / 'you owe $5.00')."""
    if minor == 0:
        return format_amount(0, currency, locale)
    prefix = "owed you " if minor > 0 else "you owe "
    return prefix + format_amount(abs(minor), currency, locale)


def parse_decimal(value: str, locale: str | None = None) -> Decimal:
    """Parse locale-formatted decimal string to Decimal.

    Raises:
        InvalidAmount: If value cannot be parsed

    Example:
        >>> parse_decimal('1.234,56', 'de_DE')
        Decimal('1234.56')
    """
    try:
        return babel_parse_decimal(value.strip(), locale=resolve_locale(locale))
    except NumberFormatError as e:
        raise InvalidAmount(f"Amount must be a number: {value!r}") from e


def parse_amount(value: str, currency: str | None = None, locale: str | None = None) -> int:
    """Parse a locale-formatted amount straight to minor units."""
    return to_minor_units(parse_decimal(value, locale), currency)


__all__ = [
    "DEFAULT_LOCALE",
    "resolve_locale",
    "resolve_currency",
    "get_currency_precision",
    "get_currency_symbol",
    "to_minor_units",
    "from_minor_units",
    "format_amount",
    "format_balance",
    "parse_decimal",
    "parse_amount",
]

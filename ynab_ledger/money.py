"""Locale-aware money parsing and formatting.

YNAB writes amounts the way the budget's culture displays them, e.g.
``$1,234.56``, ``€1 304,16`` or ``12,48ден.``. Every locale quirk lives in
this module so the grouping and rendering code only ever sees ``Decimal``.

Locales are CLDR locales resolved with Babel. Culture names may use either
separator (``en-US`` or ``en_US``).
"""

import unicodedata
from decimal import Decimal
from functools import lru_cache

from babel import Locale
from babel.core import UnknownLocaleError as BabelUnknownLocaleError
from babel.core import get_global
from babel.numbers import (
    NumberFormatError,
    format_currency,
    get_currency_symbol,
    get_territory_currencies,
    parse_decimal,
)

from ynab_ledger.errors import AmountParseError, UnknownLocaleError

# YNAB appends a period to currency symbols it abbreviates, e.g. 12,48ден.
ABBREVIATION_MARK = "."
CURRENCY_SIGN = "¤"
SPACE_CHARS = " \u00a0\u202f"

LocaleLike = Locale | str


@lru_cache(maxsize=None)
def _parse_locale(name: str) -> Locale:
    try:
        return Locale.parse(name.strip().replace("-", "_"))
    except (BabelUnknownLocaleError, ValueError) as e:
        raise UnknownLocaleError(f"Unknown culture {name!r}") from e


def resolve_locale(locale: LocaleLike) -> Locale:
    """Return a Babel ``Locale`` for a culture name such as ``fr-FR``."""
    if isinstance(locale, Locale):
        return locale
    return _parse_locale(locale)


def _territory(locale: Locale) -> str | None:
    if locale.territory:
        return locale.territory
    # Bare languages ("mk") carry no territory; CLDR likely subtags fill it in.
    likely = get_global("likely_subtags").get(locale.language)
    if likely:
        return Locale.parse(likely).territory
    return None


def currency_for_locale(locale: LocaleLike, currency: str | None = None) -> str:
    """Return the ISO currency code used for amounts in ``locale``.

    Args:
        locale: A culture name or Babel locale.
        currency: An explicit ISO code that overrides the locale's own currency.

    Returns:
        The currency code, e.g. ``"USD"`` for ``en-US``.
    """
    if currency:
        return currency.upper()

    loc = resolve_locale(locale)
    territory = _territory(loc)
    codes = get_territory_currencies(territory) if territory else []
    if not codes:
        raise UnknownLocaleError(f"No currency known for culture {loc}")
    return codes[0]


def display_amount(text: str | None) -> str:
    """Trim an amount string and drop a trailing abbreviation mark."""
    cleaned = (text or "").strip()
    if cleaned.endswith(ABBREVIATION_MARK):
        cleaned = cleaned[: -len(ABBREVIATION_MARK)].rstrip()
    return cleaned


def _is_currency_text(char: str) -> bool:
    return char in SPACE_CHARS or unicodedata.category(char)[0] in "LS"


def _strip_currency_text(text: str) -> str:
    """Drop symbol letters left on either side of the number (e.g. other currencies)."""
    start, end = 0, len(text)
    while start < end and _is_currency_text(text[start]):
        start += 1
    while end > start and _is_currency_text(text[end - 1]):
        end -= 1
    return text[start:end]


def parse_amount(text: str | None, locale: LocaleLike, currency: str | None = None) -> Decimal:
    """Parse a locale-formatted currency string into a ``Decimal``.

    Blank text parses as zero. The locale's currency symbol may appear on
    either side of the number and may itself end with an abbreviation mark.

    Raises:
        AmountParseError: The text isn't a number in this locale.
    """
    loc = resolve_locale(locale)
    cleaned = display_amount(text)
    if not cleaned:
        return Decimal("0")

    symbol = get_currency_symbol(currency_for_locale(loc, currency), locale=loc)
    for candidate in (symbol, symbol.rstrip(ABBREVIATION_MARK)):
        if candidate:
            cleaned = cleaned.replace(candidate, "")
    cleaned = _strip_currency_text(cleaned)

    try:
        return parse_decimal(cleaned, locale=loc)
    except NumberFormatError as e:
        raise AmountParseError(text or "", str(loc)) from e


def _digits_pattern(locale: Locale) -> str:
    """The number part of the locale's standard currency pattern."""
    standard = locale.currency_formats["standard"].pattern.split(";")[0]
    return standard.replace(CURRENCY_SIGN, "").strip(SPACE_CHARS)


def format_amount(value: Decimal, locale: LocaleLike, currency: str | None = None) -> str:
    """Format ``value`` as currency.

    Non-negative values use the locale's native layout. Negative values are
    always written as a minus sign followed by the symbol and the digits
    (``-$54.84``, ``-€1 304,16``), whatever the locale does natively.
    Abbreviated symbols lose their trailing mark (``-ден12,48``), matching the
    expense postings written from the export's own text.
    """
    loc = resolve_locale(locale)
    code = currency_for_locale(loc, currency)
    if value < 0:
        pattern = CURRENCY_SIGN + _digits_pattern(loc)
        text = "-" + format_currency(-value, code, format=pattern, locale=loc)
    else:
        text = format_currency(value, code, locale=loc)

    # symbols are written without their abbreviation mark
    symbol = get_currency_symbol(code, locale=loc)
    return text.replace(symbol, display_amount(symbol), 1)

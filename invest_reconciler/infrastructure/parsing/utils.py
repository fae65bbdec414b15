"""Shared parsing utilities turning raw cells into canonical values.

``normalize_currency`` and ``normalize_date`` never raise: a malformed cell
degrades to a zero amount or to today's date, and the degradation is logged,
so one bad row cannot abort a whole batch.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from io import BytesIO
from pathlib import Path
import re

import pandas as pd

from invest_reconciler.config import SETTINGS
from invest_reconciler.domain.models import MonetaryAmount, today
from invest_reconciler.logging_setup import get_logger

logger = get_logger(__name__)

_NON_NUMERIC = re.compile(r"[^\d,.\-]")
_CURRENCY_MARKERS = re.compile(r"R\$|US\$|\$|BRL|USD", re.IGNORECASE)
_LETTERS = re.compile(r"[A-Za-z]")
_CENT = Decimal("1")

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%d/%m/%Y",
    "%d/%m/%y",
    "%d.%m.%Y",
    "%d.%m.%y",
)


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _strip_separators(text: str) -> str:
    has_dot = "." in text
    has_comma = "," in text
    if has_dot and has_comma:
        decimal_sep = "." if text.rfind(".") > text.rfind(",") else ","
        grouping_sep = "," if decimal_sep == "." else "."
        return text.replace(grouping_sep, "").replace(decimal_sep, ".")
    if has_dot or has_comma:
        sep = "." if has_dot else ","
        digits_after = len(text) - text.index(sep) - 1
        if text.count(sep) == 1 and digits_after <= 2:
            return text.replace(sep, ".")
        return text.replace(sep, "")
    return text


def parse_decimal_text(value: str) -> Decimal | None:
    """Parse a human-formatted amount such as ``R$ 1.234,56`` in major units."""
    text = value.strip()
    negative = False
    if text.startswith("(") and text.endswith(")"):
        negative = True
        text = text[1:-1]
    text = _CURRENCY_MARKERS.sub("", text)
    if _LETTERS.search(text):
        return None
    text = _strip_separators(_NON_NUMERIC.sub("", text))
    try:
        result = Decimal(text)
    except InvalidOperation:
        return None
    return -result if negative else result


def normalize_currency(value: object, currency: str | None = None) -> MonetaryAmount:
    currency = currency or SETTINGS.currency
    if _is_missing(value):
        return MonetaryAmount.zero(currency)

    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        amount: Decimal | None = Decimal(str(value))
    else:
        text = str(value)
        if not text.strip():
            return MonetaryAmount.zero(currency)
        amount = parse_decimal_text(text)

    if amount is None or not amount.is_finite():
        logger.warning("Unparsable amount %r; using zero", value)
        return MonetaryAmount.zero(currency)
    cents = int((amount * 100).quantize(_CENT, rounding=ROUND_HALF_UP))
    return MonetaryAmount(cents, currency)


def normalize_date(value: object, default: date | None = None) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    fallback = default or today()
    if _is_missing(value):
        return fallback

    text = str(value).strip()
    if not text:
        return fallback

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    parsed = pd.to_datetime(text, dayfirst=True, errors="coerce")
    if pd.isna(parsed):
        logger.warning("Unparsable date %r; using %s", value, fallback.isoformat())
        return fallback
    return parsed.date()

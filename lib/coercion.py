# =============================================================================
# lib/coercion.py - Value Coercion Primitives
# =============================================================================
# Pure functions used by the Spec compiler to turn raw cell values into typed
# values before checking them:
#
#   - coerce_number: locale-tolerant numbers ("1,234.56", "(12)", "−5",
#     "1 000", optional unit stripping "12.5 kg")
#   - coerce_boolean: strict word mapping (never bool("false") == True)
#   - coerce_date: permissive date parsing
#
# None of these raise on bad input. A value that cannot be coerced is either
# returned unchanged or as None/NaT, and the downstream type check rejects it.
# =============================================================================

import math
import re
from datetime import date
from typing import Any

import pandas as pd


# =============================================================================
# Numbers
# =============================================================================

UNICODE_MINUS = "\u2212"

# Leading numeric token, optionally in accounting parentheses. Used when the
# unit tool is on: "12.5 kg" -> "12.5", "(1,200) MYR" -> "(1,200)".
LEADING_NUMBER = re.compile(
    r"^\(?[-+\u2212]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?(?:e[-+]?\d+)?\)?",
    re.IGNORECASE | re.ASCII,
)

THOUSANDS_NUMBER = re.compile(
    r"^[-+]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?(?:e[-+]?\d+)?$",
    re.IGNORECASE | re.ASCII,
)

PLAIN_NUMBER = re.compile(r"^[-+]?\d+(?:\.\d+)?(?:e[-+]?\d+)?$", re.IGNORECASE | re.ASCII)

ACCOUNTING_NEGATIVE = re.compile(r"^\(.*\)$")

# Spaces and underscores used as digit groupers ("1 000", "1_000")
ACCIDENTAL_GROUPERS = re.compile(r"[ _]")


def coerce_number(value: Any, unit_tool: bool = False) -> Any:
    """
    Coerce a raw value to a float where it looks like a number.

    Accepts:
        "1,234"      -> 1234.0
        "1,234.56"   -> 1234.56
        "(1,234.56)" -> -1234.56
        " 1.2e3 "    -> 1200.0
        "−5"         -> -5.0   (U+2212 minus)
        "1 000"      -> 1000.0
        "12.5 kg"    -> 12.5   (only with unit_tool=True)

    None and "" are returned as-is so nullability is decided downstream.
    Numbers pass through. A string that is not numeric returns None; a
    non-finite parse ("1e999") returns the original value. Anything else is
    returned unchanged for the type check to reject.
    """
    if value is None or value == "":
        return value
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return value

    s = value.strip()
    if s == "":
        return value

    if unit_tool:
        match = LEADING_NUMBER.match(s)
        if match:
            s = match.group(0)

    is_paren_negative = bool(ACCOUNTING_NEGATIVE.match(s))
    if is_paren_negative:
        s = s[1:-1].strip()

    s = s.replace(UNICODE_MINUS, "-")

    candidate = s
    if THOUSANDS_NUMBER.match(candidate):
        candidate = candidate.replace(",", "")
    elif not PLAIN_NUMBER.match(candidate):
        compact = ACCIDENTAL_GROUPERS.sub("", candidate)
        if PLAIN_NUMBER.match(compact):
            candidate = compact
        else:
            return None

    number = float(candidate)
    if not math.isfinite(number):
        return value

    return -number if is_paren_negative else number


# =============================================================================
# Booleans
# =============================================================================

TRUE_WORDS = frozenset({"true", "t", "1", "yes", "y"})
FALSE_WORDS = frozenset({"false", "f", "0", "no", "n"})


def coerce_boolean(value: Any) -> Any:
    """
    Map common boolean spellings to bool.

    None, "" and booleans pass through. Numbers map to `value != 0`.
    Strings (case-insensitive, trimmed) map {true,t,1,yes,y} -> True and
    {false,f,0,no,n} -> False. Anything else is returned unchanged.
    """
    if value is None or value == "":
        return value
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0

    s = str(value).strip().lower()
    if s in TRUE_WORDS:
        return True
    if s in FALSE_WORDS:
        return False
    return value


# =============================================================================
# Dates
# =============================================================================

def coerce_date(value: Any) -> Any:
    """
    Parse a raw value into a date/datetime.

    None and "" become None. date/datetime instances pass through. Anything
    else is parsed permissively from its string form; an unparsable value
    becomes NaT, which the date check rejects.
    """
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return pd.to_datetime(str(value), format="mixed", errors="coerce")


def is_valid_date(value: Any) -> bool:
    """True for a real (non-NaT) date or datetime."""
    return isinstance(value, date) and not pd.isna(value)

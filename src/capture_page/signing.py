"""
Query-string serialization and request signing.

The service authenticates a request by recomputing the token from the query
string it receives, so both functions here must stay byte-for-byte stable:

    token = md5(secret + query_string).hexdigest()
"""

from decimal import Decimal
from typing import Any, Mapping
from urllib.parse import quote
import hashlib
import math
import numbers


def format_float(value: float) -> str:
    """
    Shortest round-trip text for a finite float, laid out like serde_json.

    Plain decimals for magnitudes in [1e-5, 1e16), otherwise scientific
    notation without "+" or zero padding: 2.0 -> "2.0", 1e-05 -> "0.00001",
    1e+16 -> "1e16", 1.5e-07 -> "1.5e-7".
    """
    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    prefix = "-" if sign else ""

    digits = "".join(map(str, digit_tuple)).rstrip("0")
    if not digits:
        return f"{prefix}0.0"
    exponent += len(digit_tuple) - len(digits)
    point = len(digits) + exponent  # position of the decimal point

    if exponent >= 0 and point <= 16:
        text = digits + "0" * exponent + ".0"
    elif 0 < point <= 16:
        text = f"{digits[:point]}.{digits[point:]}"
    elif -5 < point <= 0:
        text = "0." + "0" * -point + digits
    elif len(digits) == 1:
        text = f"{digits}e{point - 1}"
    else:
        text = f"{digits[0]}.{digits[1:]}e{point - 1}"
    return prefix + text


def format_value(value: Any) -> str | None:
    """
    Render one option value the way the service expects it.

    Integers (any numbers.Integral) print as-is. Other real numbers,
    Decimal and Fraction included, go through float. Returns None for
    values that cannot be sent (containers, None, non-finite numbers).
    """
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, Decimal) and not value.is_finite():
        return None
    if isinstance(value, (numbers.Real, Decimal)):
        value = float(value)
        if not math.isfinite(value):
            return None
        return format_float(value)
    if isinstance(value, str):
        return value
    return None


def to_query_string(options: Mapping[str, Any]) -> str:
    """
    Serialize options into a percent-encoded query string.

    Entries keep the mapping's order. Unsendable values and values that
    render as an empty string are dropped. Spaces encode as %20, never '+'.
    """
    params = []

    for key, value in options.items():
        value_str = format_value(value)
        if not value_str:
            continue
        params.append(f"{quote(str(key), safe='')}={quote(value_str, safe='')}")

    return "&".join(params)


def generate_token(secret: str, query: str) -> str:
    """Hex MD5 digest of the secret followed by the query string."""
    return hashlib.md5(f"{secret}{query}".encode("utf-8")).hexdigest()

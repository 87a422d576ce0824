"""
Canonical form of a Checkeeper request for signature stability.

Checkeeper verifies requests against a flattened, form-encoded rendition of
the JSON body rather than the JSON itself. This module produces that
rendition:

1. Flatten nested mappings and sequences into (key, value) pairs, naming
   nested keys with brackets: {"payer": {"address": {"line1": "X"}}} becomes
   ("payer[address][line1]", "X") and sequence elements use their index,
   e.g. "invoice_table[rows][0][1]".
2. Form-encode every key and value and join each pair with "=".
3. Sort the encoded tokens lexicographically and join them with "&".
"""

import math
import numbers
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Iterator, List, Tuple
from urllib.parse import quote_plus

# Value kinds recognised while flattening
KIND_STRING = "string"
KIND_NUMBER = "number"
KIND_ABSENT = "absent"
KIND_CONTAINER = "container"
KIND_UNSUPPORTED = "unsupported"

# Plain decimal notation is used for exponents in this range, as in JavaScript
_MIN_PLAIN_EXPONENT = -6
_MAX_PLAIN_EXPONENT = 20


def value_kind(value: Any) -> str:
    """
    Classify a request value into one of the kinds the canonical form knows.

    Booleans are unsupported even though bool subclasses int: Checkeeper
    expects the strings "1" and "0" instead, and a raw boolean is dropped.

    Args:
        value: Any value found in a request

    Returns:
        One of the KIND_* constants
    """
    if value is None:
        return KIND_ABSENT
    if isinstance(value, str):
        return KIND_STRING
    if isinstance(value, bool):
        return KIND_UNSUPPORTED
    if isinstance(value, (numbers.Real, Decimal)):
        return KIND_NUMBER
    if isinstance(value, (Mapping, list, tuple)):
        return KIND_CONTAINER
    return KIND_UNSUPPORTED


def format_number(value: Any) -> str:
    """
    Render a number the way the Checkeeper reference implementation does.

    Numbers are stringified as JavaScript does: integral floats lose their
    fraction, magnitudes from 1e-6 up to 1e21 use plain decimals, and
    anything outside that range uses an unpadded exponent ("1e-7",
    "1.5e+21"). Other real types (e.g. Fraction) go through float.

    Examples:
        >>> format_number(299235)
        '299235'
        >>> format_number(75.0)
        '75'
        >>> format_number(0.000015)
        '0.000015'
        >>> format_number(1e-7)
        '1e-7'
    """
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal):
        return format(value, "f")

    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))

    text = repr(value)
    if "e" not in text:
        return text

    mantissa, exponent = text.split("e")
    exp = int(exponent)
    if _MIN_PLAIN_EXPONENT <= exp <= _MAX_PLAIN_EXPONENT:
        return format(Decimal(text), "f")
    return f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"


def _children(value: Any) -> Iterator[Tuple[str, Any]]:
    if isinstance(value, Mapping):
        for key, child in value.items():
            yield str(key), child
    else:
        for index, child in enumerate(value):
            yield str(index), child


def flatten_pairs(request: Mapping[str, Any]) -> List[Tuple[str, str]]:
    """
    Flatten a request into bracket-named (key, value) string pairs.

    Pairs come out in depth-first traversal order; ordering is only fixed
    later by canonical_string(). The walk uses an explicit stack, so
    nesting depth is not bounded by the recursion limit.

    Args:
        request: Request mapping, possibly nested

    Returns:
        List of (qualified_key, value) pairs
    """
    pairs: List[Tuple[str, str]] = []
    stack = [(str(key), value) for key, value in reversed(list(request.items()))]

    while stack:
        key_name, value = stack.pop()
        kind = value_kind(value)

        if kind == KIND_STRING:
            pairs.append((key_name, value))
        elif kind == KIND_NUMBER:
            pairs.append((key_name, format_number(value)))
        elif kind == KIND_CONTAINER:
            children = [(f"{key_name}[{child_key}]", child) for child_key, child in _children(value)]
            stack.extend(reversed(children))
        # KIND_ABSENT and KIND_UNSUPPORTED emit nothing

    return pairs


def encode_component(text: str) -> str:
    """
    Form-encode a single key or value.

    Spaces become "+", the characters A-Z a-z 0-9 * - . _ pass through and
    everything else is percent-encoded from its UTF-8 bytes. quote_plus
    leaves "~" unescaped, so it is encoded separately.

    Examples:
        >>> encode_component("payer[name]")
        'payer%5Bname%5D'
        >>> encode_component("$75.00 ~ok")
        '%2475.00+%7Eok'
    """
    return quote_plus(text, safe="*").replace("~", "%7E")


def canonical_string(request: Mapping[str, Any]) -> str:
    """
    Build the string Checkeeper signs for a request.

    Sorting is applied once over the encoded "key=value" tokens, not over
    raw key names and not per nesting level.

    Args:
        request: Complete request (token included, signature excluded)

    Returns:
        Sorted, "&"-joined, form-encoded pairs
    """
    tokens = [
        f"{encode_component(key)}={encode_component(value)}"
        for key, value in flatten_pairs(request)
    ]
    tokens.sort()
    return "&".join(tokens)

"""
Frequency tables: counting, and the ``symbol:count`` text form.

One entry per line. Symbols that cannot appear literally on a line are
escaped (``\\n``, ``\\r``, ``\\t``), and a literal backslash is written as
``\\\\``. The last ':' on a line separates the symbol from its count, so ':'
itself is a valid symbol (``::3``).
"""

import math
from typing import Dict, Mapping

from codec_errors import DuplicateSymbol, InvalidArgument

ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\\": "\\\\"}
UNESCAPES = {v: k for k, v in ESCAPES.items()}


def frequency_table(text: str) -> Dict[str, int]:
    ft: Dict[str, int] = {}
    for ch in text:
        ft[ch] = ft.get(ch, 0) + 1
    return ft


def escape_symbol(symbol: str) -> str:
    return ESCAPES.get(symbol, symbol)


def unescape_symbol(token: str) -> str:
    return UNESCAPES.get(token, token)


def format_frequency_table(table: Mapping[str, float]) -> str:
    lines = [f"{escape_symbol(symbol)}:{count}" for symbol, count in table.items()]
    return "".join(line + "\n" for line in lines)


def _parse_count(raw: str, line_no: int):
    try:
        count = int(raw)
    except ValueError:
        try:
            count = float(raw)
        except ValueError:
            raise InvalidArgument(f"line {line_no}: frequency {raw!r} is not a number") from None
    if not math.isfinite(count):
        raise InvalidArgument(f"line {line_no}: frequency must be finite, got {raw!r}")
    if count < 0:
        raise InvalidArgument(f"line {line_no}: frequency cannot be negative, got {raw!r}")
    return count


def parse_frequency_table(text: str) -> Dict[str, float]:
    table: Dict[str, float] = {}
    for line_no, line in enumerate(text.split("\n"), start=1):
        line = line.rstrip("\r") # tolerate CRLF line endings
        if not line:
            continue

        token, sep, raw = line.rpartition(":")
        if not sep or not token:
            raise InvalidArgument(f"line {line_no}: expected 'symbol:count', got {line!r}")

        symbol = unescape_symbol(token)
        if len(symbol) != 1:
            raise InvalidArgument(f"line {line_no}: symbol must be a single character, got {token!r}")
        if symbol in table:
            raise DuplicateSymbol(symbol)
        table[symbol] = _parse_count(raw.strip(), line_no)
    return table

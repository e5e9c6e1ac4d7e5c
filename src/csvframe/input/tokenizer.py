"""
Line reading and token cleanup for delimiter-separated sources.

Quoting is not understood: every occurrence of the delimiter separates
two fields.
"""

import math
from typing import Iterator, List, Optional, TextIO

_LINE_TERMINATORS = "\r\n"


def read_line(source: TextIO) -> Optional[str]:
    """
    Read the next line from an open text handle.

    Returns the line without its terminator (\\n, \\r\\n or \\r),
    or None once the handle is exhausted.
    """
    line = source.readline()
    if line == "":
        return None
    return line.rstrip(_LINE_TERMINATORS)


def iter_lines(source: TextIO) -> Iterator[str]:
    while True:
        line = read_line(source)
        if line is None:
            return
        yield line


def split_line(line: str, delimiter: str) -> List[str]:
    """
    Split on every exact occurrence of `delimiter`.

    Multi-character delimiters are matched as a whole. A line ending in the
    delimiter yields a trailing empty token; dropping it is up to the caller.
    """
    if not delimiter:
        raise ValueError("delimiter must be a non-empty string")
    return line.split(delimiter)


def trim_token(token: str) -> str:
    """
    Keep only letters and digits, e.g. ' Age ' / '"Age"' / 'Age!' -> 'Age'.

    Meant for header labels only. Numeric tokens must go through
    parse_number, this would strip signs and decimal points.
    """
    return "".join(ch for ch in token if ch.isalnum())


def try_parse_number(token: str) -> Optional[float]:
    """
    Parse a finite float literal, ignoring surrounding whitespace.
    Returns None when the token is not a number, or is nan / inf.
    """
    text = token.strip()
    # float() also accepts digit separators like 1_000
    if not text or "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_number(token: str, default: float = 0.0) -> float:
    """
    Permissive numeric conversion: unparsable tokens become `default`.
    """
    value = try_parse_number(token)
    return default if value is None else value

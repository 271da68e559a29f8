"""
Positional "?" placeholders.

Queries in the connection file mark bind variables with question marks, as
DBI does. SQLAlchemy's text() wants named parameters, so each marker is
rewritten in order of appearance to :p1, :p2, ... Markers inside quoted
literals, quoted identifiers and comments are left alone.
"""
import re
from typing import Dict, List, Sequence, Tuple
from ..exceptions import ExecutionError, PrepareError

# Same pattern text() uses to spot bind parameters; literal colons are escaped
_TEXT_BIND_RE = re.compile(r"(?<![:\w\\]):(\w+)(?!:)")

_QUOTES = {"'": "'", '"': '"', "`": "`"}

def _split(sql: str) -> List[str]:
    """Split sql into chunks where every bare "?" is a chunk of its own."""
    chunks: List[str] = []
    current: List[str] = []
    i, length = 0, len(sql)
    while i < length:
        ch = sql[i]
        if ch in _QUOTES:
            close = _QUOTES[ch]
            end = i + 1
            while True:
                end = sql.find(close, end)
                if end == -1:
                    raise PrepareError(f"Error in preparing query!: unterminated {ch} quote at position {i}")
                # doubled quote is an escaped quote
                if sql.startswith(close * 2, end):
                    end += 2
                    continue
                break
            current.append(sql[i:end + 1])
            i = end + 1
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            end = length if end == -1 else end
            current.append(sql[i:end])
            i = end
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            if end == -1:
                raise PrepareError(f"Error in preparing query!: unterminated comment at position {i}")
            current.append(sql[i:end + 2])
            i = end + 2
        elif ch == "?":
            chunks.append("".join(current))
            chunks.append("?")
            current = []
            i += 1
        else:
            current.append(ch)
            i += 1
    chunks.append("".join(current))
    return chunks

def count_markers(sql: str) -> int:
    return _split(sql).count("?")

def bind_positional(sql: str, values: Sequence[str]) -> Tuple[str, Dict[str, str]]:
    """
    Returns the rewritten statement and its parameter mapping.
    Raises PrepareError if the statement cannot be tokenized and
    ExecutionError if the number of values differs from the number of markers.
    """
    chunks = _split(_TEXT_BIND_RE.sub(r"\\:\1", sql))
    markers = chunks.count("?")
    if markers != len(values):
        raise ExecutionError(
            f"Error in executing query!: query has {markers} placeholder(s) "
            f"but {len(values)} value(s) were supplied"
        )

    params: Dict[str, str] = {}
    parts: List[str] = []
    position = 0
    for chunk in chunks:
        if chunk != "?":
            parts.append(chunk)
            continue
        position += 1
        name = f"p{position}"
        params[name] = values[position - 1]
        if parts and parts[-1] and (parts[-1][-1].isalnum() or parts[-1][-1] in "_:"):
            parts.append(" ")
        parts.append(f":{name}")
    return "".join(parts), params

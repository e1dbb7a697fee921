"""Named parameter binding and identifier quoting.

Queries use ``@name`` placeholders regardless of the target product. The
drivers only understand positional placeholders (``?`` for ODBC, ``$n`` for
asyncpg), so names are rewritten here just before execution.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

# @name, but not @@VERSION and not the tail of an e-mail address
_NAMED_PARAM = re.compile(r"(?<![@\w])@([A-Za-z_][A-Za-z0-9_]*)")
_IDENTIFIER_PART = re.compile(r"[^A-Za-z0-9_]")

QMARK = "qmark"        # pyodbc / aioodbc
NUMERIC = "numeric"    # asyncpg


def normalize_parameters(parameters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop a leading ``@`` from parameter names."""
    if not parameters:
        return {}
    return {name.lstrip("@"): value for name, value in parameters.items()}


def bind_named_parameters(
    query: str,
    parameters: Optional[Dict[str, Any]],
    style: str = QMARK
) -> Tuple[str, List[Any]]:
    """Rewrite ``@name`` placeholders into driver placeholders.

    Only names present in ``parameters`` are rewritten; any other ``@name``
    is left alone (T-SQL local variables, for instance).

    Args:
        query: SQL text with ``@name`` placeholders
        parameters: Values keyed by name
        style: ``qmark`` (one ``?`` per occurrence) or ``numeric``
            (``$n`` shared by every occurrence of the same name)

    Returns:
        Tuple of (rewritten SQL, positional argument list)
    """
    params = normalize_parameters(parameters)
    if not params:
        return query, []

    args: List[Any] = []
    positions: Dict[str, int] = {}

    def replace(match: "re.Match") -> str:
        name = match.group(1)
        if name not in params:
            return match.group(0)
        if style == NUMERIC:
            if name not in positions:
                args.append(params[name])
                positions[name] = len(args)
            return f"${positions[name]}"
        args.append(params[name])
        return "?"

    return _NAMED_PARAM.sub(replace, query), args


def clean_identifier_part(name: str) -> str:
    """Strip everything outside ``[A-Za-z0-9_]`` (a leading ``@`` included)."""
    return _IDENTIFIER_PART.sub("", name)


def quote_identifier(name: str, db_type: str) -> str:
    """Quote a possibly schema-qualified identifier for the given product.

    Each dot-separated part is stripped of everything outside
    ``[A-Za-z0-9_]`` before quoting, so the result cannot break out of the
    quotes.
    """
    parts = [clean_identifier_part(part) for part in name.split(".")]
    parts = [part for part in parts if part]
    if db_type == "postgresql":
        return ".".join(f'"{part}"' for part in parts)
    return ".".join(f"[{part}]" for part in parts)

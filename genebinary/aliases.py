from collections.abc import Mapping

import pandas as pd

from genebinary.errors import InvalidInputKind
from genebinary.reference import Reference


def alias_mapping(aliases=None) -> Mapping:
    """Get an alias to gene symbol mapping.

    Args:
        aliases: a `Reference`, a mapping of alias to canonical gene symbol,
            or None for the packaged default reference.

    Returns:
        mapping of alias to canonical gene symbol.
    """
    if aliases is None:
        return Reference.default().aliases
    if isinstance(aliases, Reference):
        return aliases.aliases
    return aliases


def recode_alias(events: pd.DataFrame, aliases=None) -> pd.DataFrame:
    """Replace gene aliases with canonical gene symbols.

    Symbols that are not a known alias are kept as they are. No rows are
    added or removed, and only the `hugo_symbol` column is changed.

    Args:
        events: event table with a `hugo_symbol` column.
        aliases: a `Reference`, a mapping of alias to canonical gene symbol,
            or None for the packaged default reference.

    Returns:
        a copy of `events` with canonical gene symbols.

    Examples:
        >>> recode_alias(mutations, {"MLL2": "KMT2D"})
    """
    if not isinstance(events, pd.DataFrame):
        raise InvalidInputKind("events must be a DataFrame")
    mapping = alias_mapping(aliases)
    events = events.copy()
    if mapping:
        symbols = events["hugo_symbol"]
        events["hugo_symbol"] = symbols.map(lambda x: mapping.get(x, x))
    return events

"""Optional query parameters for lookups.

Each option is a callable that sets one key of the query. Options are applied
in the order given, after the mandatory parameters, so a later option for the
same key wins::

    client.get_by_cidr("8.8.0.0/16", limit(1000), from_(cursor))
"""

from __future__ import annotations

from typing import Callable, Dict

Query = Dict[str, str]
Option = Callable[[Query], None]


def output_format(fmt: str) -> Option:
    """Response format, JSON or XML. The service defaults to JSON."""

    def apply(query: Query) -> None:
        query["outputFormat"] = fmt.upper()

    return apply


def limit(value: int) -> Option:
    """Maximum number of netblocks per page, 1 to 1000. Service default: 100."""

    def apply(query: Query) -> None:
        query["limit"] = str(value)

    return apply


def from_(value: str | None) -> Option:
    """Start the page after this netblock (the ``next`` of a previous page).

    ``None`` leaves the query untouched so a pagination loop can start with
    no cursor.
    """

    def apply(query: Query) -> None:
        if value is not None:
            query["from"] = value.upper()

    return apply


def apply_options(query: Query, options: tuple[Option, ...] | list[Option]) -> Query:
    for option in options:
        option(query)
    return query

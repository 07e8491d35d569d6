"""
Parameterized SQL builders shared by the entity classes.

Every builder returns a ``QueryDescriptor``: query text with ``$1..$N``
placeholders plus the matching parameter list. Request values only ever
travel through ``parameters``. Table and column names are interpolated
into the text and must come from calling code, never from a request.
"""
from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Union

RESERVED_PREFIX = "_"


class QueryDescriptor(NamedTuple):
    text: str
    parameters: List[Any]


@dataclass(frozen=True)
class Substring:
    """Case-insensitive substring match on ``column``."""

    column: str
    value: str


@dataclass(frozen=True)
class AtLeast:
    """Inclusive lower bound on ``column``."""

    column: str
    value: Real


@dataclass(frozen=True)
class AtMost:
    """Inclusive upper bound on ``column``."""

    column: str
    value: Real


FilterPredicate = Union[Substring, AtLeast, AtMost]


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


# PUBLIC_INTERFACE
def parse_filter(key: str, value: Any) -> Optional[FilterPredicate]:
    """
    Turn a ``{verb}_{column}`` filter key into a predicate.

    ``search`` gives a substring match, ``min``/``max`` give inclusive
    bounds. Unknown verbs, and keys without an underscore, give ``None``.
    ``min``/``max`` require a number: request values are expected to be
    converted and validated before they get here.
    """
    verb, sep, column = key.partition("_")
    if not sep or not column:
        return None

    if verb == "search":
        return Substring(column, str(value))
    if verb in ("min", "max"):
        if not _is_number(value):
            raise TypeError(f"{key} expects a number, got {type(value).__name__}")
        return AtLeast(column, value) if verb == "min" else AtMost(column, value)
    return None


# PUBLIC_INTERFACE
def parse_filters(
    filters: Mapping[str, Any], allowed_columns: Optional[Iterable[str]] = None
) -> List[FilterPredicate]:
    """Parse a filter mapping in insertion order, skipping ``None`` values."""
    allowed = set(allowed_columns) if allowed_columns is not None else None
    predicates: List[FilterPredicate] = []
    for key, value in filters.items():
        if value is None:
            continue
        predicate = parse_filter(key, value)
        if predicate is None:
            continue
        if allowed is not None and predicate.column not in allowed:
            raise ValueError(f"Column '{predicate.column}' cannot be filtered on")
        predicates.append(predicate)
    return predicates


def _predicate_sql(predicate: FilterPredicate, idx: int):
    if isinstance(predicate, Substring):
        return f"{predicate.column} ILIKE ${idx}", f"%{predicate.value}%"
    if isinstance(predicate, AtLeast):
        return f"{predicate.column} >= ${idx}", predicate.value
    if isinstance(predicate, AtMost):
        return f"{predicate.column} <= ${idx}", predicate.value
    raise TypeError(f"Unsupported filter predicate: {predicate!r}")


# PUBLIC_INTERFACE
def search_query(
    predicates: Iterable[FilterPredicate], select_cols: Sequence[str], table: str
) -> QueryDescriptor:
    """
    Build a SELECT over ``table`` with the predicates AND-ed together.

    With no predicates the WHERE clause is left out entirely.
    """
    clauses: List[str] = []
    values: List[Any] = []
    for idx, predicate in enumerate(predicates, start=1):
        clause, value = _predicate_sql(predicate, idx)
        clauses.append(clause)
        values.append(value)

    query = f"SELECT {', '.join(select_cols)} FROM {table}"
    if clauses:
        query += f" WHERE {' AND '.join(clauses)}"
    return QueryDescriptor(query, values)


# PUBLIC_INTERFACE
def create_values(details: Mapping[str, Any], table: str, returning_cols: Sequence[str]) -> QueryDescriptor:
    """
    Build an INSERT of ``details`` into ``table``.

    An empty ``details`` gives ``INSERT INTO t () VALUES ()``, which the
    database rejects; callers validate required fields first.
    """
    columns = list(details.keys())
    indices = [f"${idx}" for idx in range(1, len(columns) + 1)]
    query = (
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join(indices)})"
        f" RETURNING {', '.join(returning_cols)}"
    )
    return QueryDescriptor(query, [details[c] for c in columns])


# PUBLIC_INTERFACE
def sql_for_partial_update(table: str, items: Mapping[str, Any], key: str, key_value: Any) -> QueryDescriptor:
    """
    Build ``UPDATE table SET col=$1, ... WHERE key=$N RETURNING *``.

    Keys starting with ``_`` carry request metadata (``_token``) rather than
    columns and are dropped. ``items`` itself is left untouched.
    """
    columns = [col for col in items if not col.startswith(RESERVED_PREFIX)]
    assignments = [f"{col}=${idx}" for idx, col in enumerate(columns, start=1)]
    values = [items[col] for col in columns]
    values.append(key_value)

    query = f"UPDATE {table} SET {', '.join(assignments)} WHERE {key}=${len(values)} RETURNING *"
    return QueryDescriptor(query, values)

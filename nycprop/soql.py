"""Structured SoQL predicate builder.

Filters are assembled as a small expression tree and compiled to a SoQL
``$where`` string in one place, so field names are validated and every
literal is escaped before it reaches the transport::

    where = And(
        Gt("sale_price", 100000),
        Eq("borough", "1"),
        StartsWith("building_class_at_time_of_sale", "D"),
    )
    where.compile()
    # "sale_price > 100000 AND borough = '1' AND building_class_at_time_of_sale LIKE 'D%'"
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from nycprop.errors import InvalidInput

_FIELD_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


def _field(name: str) -> str:
    if not isinstance(name, str) or not _FIELD_RE.match(name):
        raise InvalidInput(f"Invalid SoQL field name: {name!r}")
    return name


def escape_literal(value: str) -> str:
    """Escape a string for use inside single quotes."""
    return str(value).replace("\\", "\\\\").replace("'", "''")


def _like_text(value: str) -> str:
    # LIKE wildcards: % any run, _ any single character
    return escape_literal(str(value).replace("%", "").replace("_", ""))


def _number(value: int | float) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"Expected a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidInput(f"Expected a finite number, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value)


class Predicate:
    """Base node. Subclasses implement compile()."""

    def compile(self) -> str:  # pragma: no cover - abstract
        raise NotImplementedError

    def __and__(self, other: Predicate) -> Predicate:
        return And(self, other)

    def __or__(self, other: Predicate) -> Predicate:
        return Or(self, other)

    def __str__(self) -> str:
        return self.compile()


@dataclass(frozen=True, eq=True)
class Eq(Predicate):
    field: str
    value: str | int | float
    upper: bool = False

    def compile(self) -> str:
        name = _field(self.field)
        if isinstance(self.value, str):
            text = self.value.upper() if self.upper else self.value
            lhs = f"upper({name})" if self.upper else name
            return f"{lhs} = '{escape_literal(text)}'"
        return f"{name} = {_number(self.value)}"


@dataclass(frozen=True, eq=True)
class _Compare(Predicate):
    field: str
    value: int | float

    op = ""

    def compile(self) -> str:
        return f"{_field(self.field)} {self.op} {_number(self.value)}"


class Gt(_Compare):
    op = ">"


class Gte(_Compare):
    op = ">="


class Lt(_Compare):
    op = "<"


class Lte(_Compare):
    op = "<="


@dataclass(frozen=True, eq=True)
class DateBound(Predicate):
    """Compare a floating-timestamp column against an ISO date."""

    field: str
    value: str
    op: str = ">="

    _DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

    def compile(self) -> str:
        if self.op not in (">=", "<=", ">", "<"):
            raise InvalidInput(f"Unsupported date comparison {self.op!r}")
        if not self._DATE_RE.match(str(self.value)):
            raise InvalidInput(f"Expected a YYYY-MM-DD date, got {self.value!r}")
        return f"{_field(self.field)} {self.op} '{self.value}'"


@dataclass(frozen=True, eq=True)
class StartsWith(Predicate):
    """Prefix match anchored at the start of the value."""

    field: str
    prefix: str
    upper: bool = False

    def compile(self) -> str:
        name = _field(self.field)
        text = self.prefix.upper() if self.upper else self.prefix
        lhs = f"upper({name})" if self.upper else name
        return f"{lhs} LIKE '{_like_text(text)}%'"


@dataclass(frozen=True, eq=True)
class Contains(Predicate):
    """Substring match anywhere in the value."""

    field: str
    text: str
    upper: bool = False

    def compile(self) -> str:
        name = _field(self.field)
        text = self.text.upper() if self.upper else self.text
        lhs = f"upper({name})" if self.upper else name
        return f"{lhs} LIKE '%{_like_text(text)}%'"


@dataclass(frozen=True, eq=True)
class IsBlank(Predicate):
    """Value is NULL or the empty string."""

    field: str

    def compile(self) -> str:
        name = _field(self.field)
        return f"({name} IS NULL OR {name} = '')"


class _Junction(Predicate):
    joiner = ""

    def __init__(self, *terms: Predicate | None):
        self.terms = tuple(t for t in terms if t is not None)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.terms == other.terms

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.terms))

    def __repr__(self) -> str:
        return f"{type(self).__name__}{self.terms!r}"

    def compile(self) -> str:
        if not self.terms:
            raise InvalidInput(f"Empty {type(self).__name__} predicate")
        parts = [t.compile() for t in self.terms]
        if len(parts) == 1:
            return parts[0]
        return self.joiner.join(parts)


class And(_Junction):
    joiner = " AND "

    def compile(self) -> str:
        parts = []
        for t in self.terms:
            text = t.compile()
            parts.append(f"({text})" if isinstance(t, Or) and len(t.terms) > 1 else text)
        if not parts:
            raise InvalidInput("Empty And predicate")
        return self.joiner.join(parts)


class Or(_Junction):
    joiner = " OR "


def any_of(predicates: list[Predicate]) -> Predicate | None:
    """OR together a list; None when the list is empty."""
    if not predicates:
        return None
    if len(predicates) == 1:
        return predicates[0]
    return Or(*predicates)


def compile_where(where: Predicate | None) -> str | None:
    if where is None:
        return None
    if isinstance(where, Predicate):
        return where.compile()
    raise InvalidInput("Filters must be built with nycprop.soql predicates")

"""
Árbol de predicados para consultas al store.

Los servicios arman predicados como datos (Condition / AnyOf / AllOf) y
los repositorios los traducen a filtros de PostgREST. Así la lógica de
composición (qué se combina con AND y qué con OR) vive en un solo lugar
y se puede testear sin base de datos.

Una lista de predicados en el nivel superior se combina con AND.
"""

from dataclasses import dataclass
from typing import Any, Union

# Operadores soportados
EQ = "eq"
NEQ = "neq"
IN = "in"
GTE = "gte"
LTE = "lte"
ILIKE = "ilike"  # substring case-insensitive
IEQ = "ieq"  # igualdad case-insensitive

OPERATORS = frozenset({EQ, NEQ, IN, GTE, LTE, ILIKE, IEQ})


@dataclass(frozen=True)
class Condition:
    """Comparación sobre una columna (admite columnas embebidas: ``owner.role``)."""

    column: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Operador no soportado: {self.op}")


@dataclass(frozen=True)
class AnyOf:
    """Disyunción: alcanza con que una rama se cumpla."""

    branches: tuple["Predicate", ...]


@dataclass(frozen=True)
class AllOf:
    """Conjunción agrupada, para usar dentro de un AnyOf."""

    branches: tuple["Predicate", ...]


Predicate = Union[Condition, AnyOf, AllOf]


# Caracteres reservados por la sintaxis de or=(...) de PostgREST
_RESERVED = set(',()"')


def _quote(value: Any) -> str:
    text = str(value)
    if any(ch in _RESERVED for ch in text) or text != text.strip():
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def _escape_like(text: str) -> str:
    return text.replace("%", r"\%").replace("_", r"\_")


def render_postgrest(predicate: Predicate) -> str:
    """
    Renderiza un predicado con la sintaxis de filtros lógicos de PostgREST.

    Ej: AnyOf(title ilike "casa", city ieq "Riyadh")
        -> "title.ilike.%casa%,city.ilike.Riyadh"
    """
    if isinstance(predicate, AnyOf):
        return ",".join(_render_branch(b) for b in predicate.branches)
    if isinstance(predicate, AllOf):
        return f"and({','.join(_render_branch(b) for b in predicate.branches)})"
    return _render_condition(predicate)


def _render_branch(predicate: Predicate) -> str:
    if isinstance(predicate, AnyOf):
        return f"or({render_postgrest(predicate)})"
    return render_postgrest(predicate)


def _render_condition(cond: Condition) -> str:
    if cond.op == IN:
        values = ",".join(_quote(v) for v in cond.value)
        return f"{cond.column}.in.({values})"
    if cond.op == ILIKE:
        return f"{cond.column}.ilike.{_quote('%' + _escape_like(str(cond.value)) + '%')}"
    if cond.op == IEQ:
        return f"{cond.column}.ilike.{_quote(_escape_like(str(cond.value)))}"
    return f"{cond.column}.{cond.op}.{_quote(cond.value)}"

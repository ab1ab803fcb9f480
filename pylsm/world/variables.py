"""
Symbolic variable declarations.

Processes describe the fields they need with `prognostic`, `auxiliary` and
`input_` declarations; storage is allocated later by `build_state` once the
grid is known. A prognostic variable implicitly owns a tendency field named
`<name>_tendency` with the same dims, and may carry a closure relating it
to one or more diagnostic (auxiliary) companions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class VarKind(Enum):
    PROGNOSTIC = "prognostic"
    AUXILIARY = "auxiliary"
    INPUT = "input"


class Dims(Enum):
    LATERAL = "XY"  # one value per column
    COLUMN = "XYZ"  # one value per column and layer


XY = Dims.LATERAL
XYZ = Dims.COLUMN


@dataclass(frozen=True)
class Variable:
    name: str
    kind: VarKind
    dims: Dims
    closure: Any = field(default=None, compare=False)
    default: float = field(default=0.0, compare=False)
    units: str = field(default="", compare=False)
    desc: str = field(default="", compare=False)

    @property
    def key(self) -> tuple[str, VarKind, Dims]:
        """Identity used to merge duplicate declarations."""
        return (self.name, self.kind, self.dims)

    @property
    def is_prognostic(self) -> bool:
        return self.kind is VarKind.PROGNOSTIC


@dataclass(frozen=True)
class Namespaced:
    """Declares `process` as a sub-model whose variables live in child namespace `name`."""

    name: str
    process: Any


def prognostic(name: str, dims: Dims, closure=None, default: float = 0.0, units: str = "", desc: str = "") -> Variable:
    return Variable(name, VarKind.PROGNOSTIC, dims, closure=closure, default=default, units=units, desc=desc)


def auxiliary(name: str, dims: Dims, default: float = 0.0, units: str = "", desc: str = "") -> Variable:
    return Variable(name, VarKind.AUXILIARY, dims, default=default, units=units, desc=desc)


def input_(name: str, dims: Dims, default: float = 0.0, units: str = "", desc: str = "") -> Variable:
    return Variable(name, VarKind.INPUT, dims, default=default, units=units, desc=desc)


def tendency_name(name: str) -> str:
    return f"{name}_tendency"


def iter_declarations(process) -> Iterator[Variable | Namespaced]:
    """
    Yield the declarations of `process` in its composition order, followed
    for every prognostic by the companion variables of its closure.
    """
    for decl in process.variables():
        yield decl
        if isinstance(decl, Variable) and decl.closure is not None:
            yield from decl.closure.variables()


def collect_variables(process) -> list[Variable]:
    """Flat list of the variables declared directly in the namespace of `process`."""
    return [d for d in iter_declarations(process) if isinstance(d, Variable)]

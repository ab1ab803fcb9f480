"""
State namespace tree: runtime storage for all model fields.

Layout
- One StateNamespace per (sub-)model. Each holds five mappings
  (prognostic, tendencies, auxiliary, inputs, closures) plus child
  namespaces, and shares one Clock with the whole tree.
- Field names resolve to plain numpy arrays; `schema` records the group,
  dims and a stable integer index of every field, fixed at build time.
- Processes never keep private copies of fields: every read and write goes
  through the namespace, so contributions to a shared tendency add up.

Construction
- build_state(model, grid) walks the declarations of the process tree in
  composition order, merges identical duplicate declarations, rejects
  conflicting ones (ConfigurationError), allocates one array per unique
  variable and one tendency per prognostic, and registers closures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, NamedTuple

import numpy as np

from pylsm.jax_compat import to_numpy

from .errors import ConfigurationError
from .variables import Dims, Namespaced, Variable, VarKind, iter_declarations, tendency_name


@dataclass
class Clock:
    """Simulation clock: model time in seconds and completed step count."""

    time: float = 0.0
    iteration: int = 0

    def tick(self, dt: float) -> None:
        self.time += float(dt)
        self.iteration += 1


class FieldSpec(NamedTuple):
    group: str  # prognostic | tendency | auxiliary | input
    dims: Dims
    index: int


_GROUP_OF_KIND = {
    VarKind.PROGNOSTIC: "prognostic",
    VarKind.AUXILIARY: "auxiliary",
    VarKind.INPUT: "input",
}


class StateNamespace:
    """
    A node of the state tree. Fields are reachable as attributes
    (`state.temperature`), items (`state["temperature"]`) or dotted paths
    into child namespaces (`state["upland.density_soc"]`).
    """

    def __init__(self, name: str, grid, clock: Clock):
        self.name = name
        self.grid = grid
        self.clock = clock
        self.prognostic: dict[str, np.ndarray] = {}
        self.tendencies: dict[str, np.ndarray] = {}
        self.auxiliary: dict[str, np.ndarray] = {}
        self.inputs: dict[str, np.ndarray] = {}
        self.closures: dict[str, Any] = {}
        self.namespaces: dict[str, StateNamespace] = {}
        self.schema: dict[str, FieldSpec] = {}
        self.variables: dict[str, Variable] = {}

    # ---------------- lookup ----------------

    def _group(self, group: str) -> dict[str, np.ndarray]:
        return {
            "prognostic": self.prognostic,
            "tendency": self.tendencies,
            "auxiliary": self.auxiliary,
            "input": self.inputs,
        }[group]

    def _resolve(self, path: str) -> tuple[StateNamespace, str]:
        ns = self
        *parents, leaf = path.split(".")
        for part in parents:
            try:
                ns = ns.namespaces[part]
            except KeyError:
                raise KeyError(f"no namespace {part!r} in {self.name or '<root>'}") from None
        return ns, leaf

    def __getitem__(self, path: str) -> np.ndarray:
        ns, name = self._resolve(path)
        spec = ns.schema.get(name)
        if spec is None:
            raise KeyError(f"no field {name!r} in namespace {ns.name or '<root>'}")
        return ns._group(spec.group)[name]

    def __setitem__(self, path: str, value) -> None:
        """Assign in place (broadcasting), so references held elsewhere stay valid."""
        self[path][...] = to_numpy(value)

    def __contains__(self, path: str) -> bool:
        try:
            self._resolve_spec(path)
        except KeyError:
            return False
        return True

    def _resolve_spec(self, path: str) -> FieldSpec:
        ns, name = self._resolve(path)
        return ns.schema[name]

    def __getattr__(self, name: str):
        # Only reached when regular attribute lookup fails
        if name.startswith("_") or "schema" not in self.__dict__:
            raise AttributeError(name)
        if name in self.schema:
            return self._group(self.schema[name].group)[name]
        if name in self.namespaces:
            return self.namespaces[name]
        raise AttributeError(f"StateNamespace {self.name or '<root>'!r} has no field {name!r}")

    def group_of(self, path: str) -> str:
        return self._resolve_spec(path).group

    def tendency(self, name: str) -> np.ndarray:
        return self.tendencies[tendency_name(name)]

    def fields(self) -> Iterator[tuple[str, np.ndarray]]:
        """All fields of this namespace (not children) in schema order."""
        for name, spec in self.schema.items():
            yield name, self._group(spec.group)[name]

    def walk(self, prefix: str = "") -> Iterator[tuple[str, StateNamespace]]:
        """Depth-first (path, namespace) pairs, starting with self."""
        yield prefix, self
        for child_name, child in self.namespaces.items():
            path = f"{prefix}.{child_name}" if prefix else child_name
            yield from child.walk(path)

    # ---------------- mutation ----------------

    def zero_tendencies(self) -> None:
        for _, ns in self.walk():
            for arr in ns.tendencies.values():
                arr.fill(0.0)

    def copy(self, clock: Clock | None = None) -> StateNamespace:
        """Deep copy of all fields; the grid is shared, the clock is copied."""
        clock = clock if clock is not None else Clock(self.clock.time, self.clock.iteration)
        new = StateNamespace(self.name, self.grid, clock)
        new.prognostic = {k: v.copy() for k, v in self.prognostic.items()}
        new.tendencies = {k: v.copy() for k, v in self.tendencies.items()}
        new.auxiliary = {k: v.copy() for k, v in self.auxiliary.items()}
        new.inputs = {k: v.copy() for k, v in self.inputs.items()}
        new.closures = dict(self.closures)
        new.schema = dict(self.schema)
        new.variables = dict(self.variables)
        new.namespaces = {k: v.copy(clock=clock) for k, v in self.namespaces.items()}
        return new

    def assign(self, other: StateNamespace) -> None:
        """Copy all field values of `other` (same schema) into this namespace in place."""
        if self.schema.keys() != other.schema.keys():
            raise ConfigurationError(f"cannot assign namespace {other.name!r}: schemas differ")
        for name, arr in self.fields():
            np.copyto(arr, other[name])
        for child_name, child in self.namespaces.items():
            child.assign(other.namespaces[child_name])
        self.clock.time = other.clock.time
        self.clock.iteration = other.clock.iteration

    def snapshot(self) -> dict[str, Any]:
        """In-memory restart point: copies of every field plus the clock."""
        data = {}
        for path, ns in self.walk():
            for name, arr in ns.fields():
                data[f"{path}.{name}" if path else name] = arr.copy()
        return {"time": self.clock.time, "iteration": self.clock.iteration, "fields": data}

    def restore(self, snap: dict[str, Any]) -> None:
        for path, arr in snap["fields"].items():
            self[path] = arr
        self.clock.time = float(snap["time"])
        self.clock.iteration = int(snap["iteration"])

    def __repr__(self) -> str:
        return (
            f"StateNamespace({self.name or '<root>'!r}, prognostic={list(self.prognostic)}, "
            f"auxiliary={list(self.auxiliary)}, inputs={list(self.inputs)}, "
            f"namespaces={list(self.namespaces)})"
        )


# ---------------------------
# Construction
# ---------------------------


def _shape_of(dims: Dims, grid) -> tuple[int, ...]:
    return tuple(grid.column_shape) if dims is Dims.COLUMN else tuple(grid.lateral_shape)


def _merge_declarations(process, where: str) -> tuple[dict[str, Variable], dict[str, Namespaced]]:
    declared: dict[str, Variable] = {}
    children: dict[str, Namespaced] = {}
    for decl in iter_declarations(process):
        if isinstance(decl, Namespaced):
            if decl.name in children or decl.name in declared:
                raise ConfigurationError(f"namespace {decl.name!r} declared twice in {where}")
            children[decl.name] = decl
            continue
        if decl.name in children:
            raise ConfigurationError(f"variable {decl.name!r} clashes with a namespace in {where}")
        prev = declared.get(decl.name)
        if prev is None:
            declared[decl.name] = decl
            continue
        if prev.key != decl.key:
            raise ConfigurationError(
                f"conflicting declarations of {decl.name!r} in {where}: "
                f"{prev.kind.value}/{prev.dims.value} vs {decl.kind.value}/{decl.dims.value}"
            )
        if decl.closure is not None:
            if prev.closure is None:
                declared[decl.name] = decl
            elif prev.closure != decl.closure:
                raise ConfigurationError(f"prognostic {decl.name!r} declared with two different closures in {where}")

    for name, var in declared.items():
        if var.is_prognostic and tendency_name(name) in declared:
            raise ConfigurationError(f"variable {tendency_name(name)!r} clashes with the tendency of {name!r} in {where}")
    return declared, children


def _build_namespace(name: str, process, grid, dtype, clock: Clock) -> StateNamespace:
    where = f"namespace {name or '<root>'!r}"
    declared, children = _merge_declarations(process, where)

    ns = StateNamespace(name, grid, clock)
    index = 0
    for var_name, var in declared.items():
        group = _GROUP_OF_KIND[var.kind]
        ns._group(group)[var_name] = np.full(_shape_of(var.dims, grid), var.default, dtype=dtype)
        ns.schema[var_name] = FieldSpec(group, var.dims, index)
        ns.variables[var_name] = var
        index += 1
    for var_name, var in declared.items():
        if not var.is_prognostic:
            continue
        tname = tendency_name(var_name)
        ns.tendencies[tname] = np.zeros(_shape_of(var.dims, grid), dtype=dtype)
        ns.schema[tname] = FieldSpec("tendency", var.dims, index)
        index += 1
        if var.closure is not None:
            ns.closures[var_name] = var.closure

    for child_name, decl in children.items():
        ns.namespaces[child_name] = _build_namespace(child_name, decl.process, grid, dtype, clock)
    return ns


def build_state(model, grid, dtype=np.float64, clock: Clock | None = None) -> StateNamespace:
    """Declare-then-allocate: build the full namespace tree for `model` on `grid`."""
    return _build_namespace("", model, grid, dtype, clock if clock is not None else Clock())


__all__ = ["Clock", "FieldSpec", "StateNamespace", "build_state"]

"""
Process API: the common contract of every physics component.

Contract
- variables(): pure; returns the declarations (prognostic/auxiliary/input,
  or Namespaced sub-models) this process needs. Callable before any field
  exists.
- initialize(state, grid): optional; default is a no-op. Must leave every
  prognostic closure-consistent (seed diagnostics, then apply the closure).
- compute_auxiliary(state, grid): recompute diagnostics from the current
  prognostic and input fields.
- compute_tendencies(state, grid): ADD (+=) contributions to tendency
  fields; never overwrite, several processes may feed one tendency.

Notes
- Processes are configuration only: all mutable data lives in the state
  namespace, processes keep no private state between calls.
- A required hook left unimplemented raises NotImplementedError on first
  call. Components whose hooks are intentionally empty say so explicitly
  by overriding with a documented no-op.
"""

from __future__ import annotations

from typing import ClassVar, Iterator, Optional, Tuple

from .variables import Namespaced


class Process:
    """Base class for all processes."""

    def variables(self) -> tuple:
        raise NotImplementedError(f"{type(self).__name__} does not implement variables()")

    def initialize(self, state, grid) -> None:
        """Default: nothing to initialize."""
        return None

    def compute_auxiliary(self, state, grid) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not implement compute_auxiliary()")

    def compute_tendencies(self, state, grid) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not implement compute_tendencies()")


class CompositeProcess(Process):
    """
    A process built from named child processes (dataclass fields).

    Subclasses list their children in `components` (declaration order)
    and may override the call order of the other hooks with
    `initialize_order`, `auxiliary_order` and `tendency_order`. Children
    named in `namespaced` get their own child namespace. A child set to
    None is skipped.
    """

    components: ClassVar[Tuple[str, ...]] = ()
    initialize_order: ClassVar[Optional[Tuple[str, ...]]] = None
    auxiliary_order: ClassVar[Optional[Tuple[str, ...]]] = None
    tendency_order: ClassVar[Optional[Tuple[str, ...]]] = None
    namespaced: ClassVar[Tuple[str, ...]] = ()

    def children(self, order: Optional[Tuple[str, ...]] = None) -> Iterator[tuple[str, Process]]:
        for name in order if order is not None else self.components:
            child = getattr(self, name)
            if child is not None:
                yield name, child

    def child_state(self, name: str, state):
        return state.namespaces[name] if name in self.namespaced else state

    def variables(self) -> tuple:
        decls = []
        for name, child in self.children():
            if name in self.namespaced:
                decls.append(Namespaced(name, child))
            else:
                decls.extend(child.variables())
        return tuple(decls)

    def initialize(self, state, grid) -> None:
        for name, child in self.children(self.initialize_order):
            child.initialize(self.child_state(name, state), grid)

    def compute_auxiliary(self, state, grid) -> None:
        for name, child in self.children(self.auxiliary_order):
            child.compute_auxiliary(self.child_state(name, state), grid)

    def compute_tendencies(self, state, grid) -> None:
        for name, child in self.children(self.tendency_order):
            child.compute_tendencies(self.child_state(name, state), grid)

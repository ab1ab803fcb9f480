"""
Error taxonomy for model assembly and time stepping.

- ConfigurationError: raised eagerly at build/call time (state construction,
  run arguments, unknown inputs or integrators). Subclasses ValueError.
- NumericalDomainError: non-finite values detected by the diagnostics hook.
"""


class ConfigurationError(ValueError):
    """Invalid model, state or run configuration."""


class NumericalDomainError(FloatingPointError):
    """A field contains NaN or Inf after a checked pass."""

    def __init__(self, checkpoint: str, fields: list[str]):
        self.checkpoint = checkpoint
        self.fields = list(fields)
        super().__init__(f"non-finite values after {checkpoint}: {', '.join(self.fields)}")

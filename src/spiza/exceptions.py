"""Exception hierarchy for spiza.

Each concrete error also derives from the builtin it refines, so callers that
only know about ValueError or RuntimeError keep working.
"""


class SpizaError(Exception):
    """Base for all spiza exceptions."""

    pass


class SettingsError(SpizaError, ValueError):
    """Invalid construction-time parameters for settings or strategies."""

    pass


class MalformedGenomeError(SpizaError, ValueError):
    """Structurally invalid input: mismatched genomes, empty populations."""

    pass


class InvalidOperationError(SpizaError, RuntimeError):
    """Operation cannot be carried out in the current state."""

    pass


class SerializationError(SpizaError, ValueError):
    """Malformed serialized payloads or unknown type tags."""

    pass

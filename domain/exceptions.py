"""Exception types raised by the diagnostics and reflexion engine."""


class DiagnosticsError(Exception):
    """Base class for engine errors."""


class FixMemoryStoreError(DiagnosticsError):
    """The fix memory backing store could not be read or written."""


class ReflexionStoreError(DiagnosticsError):
    """The reflexion storage collaborator failed."""


class ReflectionNotFoundError(ReflexionStoreError):
    """No reflection exists with the requested id."""

    def __init__(self, reflection_id: str):
        super().__init__(f"Reflection not found: {reflection_id}")
        self.reflection_id = reflection_id

from __future__ import annotations


class EngineRejectedAction(Exception):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class ValidationError(EngineRejectedAction):
    """Input was missing, negative or malformed. Nothing was written."""


class PreconditionError(EngineRejectedAction):
    """The table is not in a state that allows the operation. Nothing was written."""

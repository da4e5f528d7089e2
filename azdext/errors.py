"""Error types that carry extra context for the user."""

from __future__ import annotations


class DetailedError(Exception):
    """An error with a human readable description on top of the underlying cause."""

    def __init__(self, description: str, err: BaseException) -> None:
        super().__init__(description, err)
        self.description = description
        self.err = err
        self.__cause__ = err

    def __str__(self) -> str:
        return f"{self.description}\n\nDetails:\n{self.err}"


class ErrorWithSuggestion(Exception):
    """An error that includes a suggestion on how the user can fix it."""

    def __init__(self, err: BaseException, suggestion: str) -> None:
        super().__init__(err, suggestion)
        self.err = err
        self.suggestion = suggestion
        self.__cause__ = err

    def __str__(self) -> str:
        return str(self.err)


class ErrorWithTraceId(Exception):
    """An error that includes the trace id of the operation that failed."""

    def __init__(self, err: BaseException, trace_id: str) -> None:
        super().__init__(err, trace_id)
        self.err = err
        self.trace_id = trace_id
        self.__cause__ = err

    def __str__(self) -> str:
        return str(self.err)
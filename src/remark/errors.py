"""Exceptions raised while extracting annotations."""

from __future__ import annotations


class RemarkError(Exception):
    """Base class for annotation processing failures."""


class MalformedParamsError(RemarkError):
    """Raised when an annotation's parameter section is not a JSON object."""

    def __init__(self, name: str, line: int, detail: str) -> None:
        super().__init__(f"@{name} on line {line}: malformed parameters ({detail})")
        self.name = name
        self.line = line
        self.detail = detail


__all__ = ["MalformedParamsError", "RemarkError"]

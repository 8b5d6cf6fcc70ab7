"""Annotation record models.

Records are created in discovery order while comments are scanned, claimed
in place by one declaration shape during traversal, and handed read-only to
annotation handlers.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DeclarationShape = Literal["function", "member", "variable", "call"]


class QualifiedName(BaseModel):
    """Location of a declaration: outer-to-inner context path plus leaf."""

    model_config = ConfigDict(frozen=True)

    path_segments: tuple[str, ...] = ()
    leaf_name: str

    @property
    def dotted(self) -> str:
        return ".".join((*self.path_segments, self.leaf_name))


class AnnotationRecord(BaseModel):
    """An annotation found in a comment, plus its resolved declaration."""

    line: int = Field(description="Line of the annotated declaration (1-based)")
    name: str
    params: dict[str, Any] = Field(default_factory=dict)
    declaration: QualifiedName | None = None
    comment_line: int = Field(description="Line on which the comment ends")
    shape: DeclarationShape | None = Field(
        default=None, description="Declaration shape that resolved the record"
    )

    @property
    def resolved(self) -> bool:
        return self.declaration is not None


__all__ = ["AnnotationRecord", "DeclarationShape", "QualifiedName"]

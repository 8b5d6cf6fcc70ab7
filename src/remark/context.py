"""Per-invocation working state for one annotation scan."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from parse.line_map import LineMapper
    from parse.scope import ScopeResolver
    from remark.models import AnnotationRecord, DeclarationShape, QualifiedName

# (start_byte, end_byte, node type) of the statement that owns a claim.
StatementKey = tuple[int, int, str]


@dataclass
class ScanContext:
    """Everything one scan mutates; built fresh for every call."""

    source_bytes: bytes
    line_mapper: LineMapper
    resolver: ScopeResolver
    scope_root: Any = None
    records: list[AnnotationRecord] = field(default_factory=list)
    line_index: dict[int, int] = field(default_factory=dict)
    claims: dict[int, StatementKey] = field(default_factory=dict)

    def line_of(self, offset: int) -> int:
        return self.line_mapper.line_of(offset).line

    def pending_at(self, offset: int) -> int | None:
        """Index of the record targeting the line that holds ``offset``."""
        return self.line_index.get(self.line_of(offset))

    def register(self, record: AnnotationRecord) -> None:
        self.records.append(record)
        if record.line in self.line_index:
            owner = self.records[self.line_index[record.line]]
            logger.warning(
                "@{} (comment line {}) targets line {}, already taken by @{}",
                record.name,
                record.comment_line,
                record.line,
                owner.name,
            )
            return
        self.line_index[record.line] = len(self.records) - 1

    def is_callable(self, name: QualifiedName) -> bool:
        lookup = self.resolver.resolve(
            self.scope_root, name.path_segments, name.leaf_name
        )
        return lookup.found and lookup.is_callable

    def claim(
        self,
        index: int,
        name: QualifiedName,
        shape: DeclarationShape,
        statement: StatementKey,
    ) -> bool:
        """Attach ``name`` to a record unless another statement owns it."""
        owner = self.claims.get(index)
        if owner is not None and owner != statement:
            return False
        record = self.records[index]
        record.declaration = name
        record.shape = shape
        self.claims[index] = statement
        logger.debug(
            "@{} on line {} -> {} ({})", record.name, record.line, name.dotted, shape
        )
        return True


__all__ = ["ScanContext", "StatementKey"]

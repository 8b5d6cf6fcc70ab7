"""Comment scanning and annotation extraction.

An annotation is a comment whose trimmed text starts with ``@``::

    // @Log({"level": "debug"})
    /* @Cache */

It targets the first non-blank line after the line where the comment ends.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import orjson
from loguru import logger

from remark.errors import MalformedParamsError
from remark.models import AnnotationRecord

if TYPE_CHECKING:
    from remark.context import ScanContext

_BLOCK_CONTINUATION = re.compile(r"\r\n\s*|[\n\r\u2028\u2029]\s*")
_ANNOTATION_NAME = re.compile(r"@(?P<name>[A-Za-z_$][\w$]*)")


def clean_comment(is_block: bool, text: str) -> str | None:
    """Return normalized comment text if it looks like an annotation."""
    if is_block:
        text = _BLOCK_CONTINUATION.sub("", text)
    text = text.strip()
    return text if text.startswith("@") else None


def _closing_paren(text: str) -> int:
    """Index of the ``)`` matching ``text[0]``, skipping JSON string contents."""
    depth = 0
    in_string = escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return -1


def parse_annotation(text: str, comment_line: int) -> tuple[str, dict[str, Any]] | None:
    """Split ``@Name({...})`` into its name and parameters.

    After the name there may be nothing, or one parenthesized group and
    nothing after it; any other text means the comment is not an
    annotation and None is returned. Empty parentheses mean no parameters;
    anything else inside them must be a JSON object, otherwise
    ``MalformedParamsError`` is raised.
    """
    match = _ANNOTATION_NAME.match(text)
    if match is None:
        return None

    name = match.group("name")
    rest = text[match.end() :].lstrip()
    if not rest:
        return name, {}
    if not rest.startswith("("):
        logger.debug("Ignoring @{}: unexpected text {!r}", name, rest)
        return None

    close = _closing_paren(rest)
    if close == -1:
        raise MalformedParamsError(name, comment_line, "missing closing ')'")
    if rest[close + 1 :].strip():
        logger.debug("Ignoring @{}: trailing text {!r}", name, rest[close + 1 :])
        return None

    payload = rest[1:close].strip()
    if not payload:
        return name, {}

    try:
        params = orjson.loads(payload)
    except orjson.JSONDecodeError as exc:
        raise MalformedParamsError(name, comment_line, str(exc)) from exc

    if not isinstance(params, dict):
        raise MalformedParamsError(name, comment_line, "expected a JSON object")
    return name, params


class AnnotationExtractor:
    """Comment callback that turns annotation comments into records."""

    def __init__(self, context: ScanContext, *, skip_malformed: bool = False) -> None:
        self.context = context
        self.skip_malformed = skip_malformed

    def __call__(self, is_block: bool, text: str, start: int, end: int) -> None:
        cleaned = clean_comment(is_block, text)
        if cleaned is None:
            return

        mapper = self.context.line_mapper
        comment_line = mapper.line_of(end).line
        try:
            parsed = parse_annotation(cleaned, comment_line)
        except MalformedParamsError as exc:
            if not self.skip_malformed:
                raise
            logger.warning("Skipping annotation: {}", exc)
            return
        if parsed is None:
            return

        name, params = parsed
        self.context.register(
            AnnotationRecord(
                line=mapper.next_code_line(comment_line + 1),
                name=name,
                params=params,
                comment_line=comment_line,
            )
        )


__all__ = ["AnnotationExtractor", "clean_comment", "parse_annotation"]

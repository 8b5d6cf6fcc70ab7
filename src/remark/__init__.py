"""Comment annotations bound to the JavaScript declarations they decorate."""

from remark.dispatch import DEFAULT_HANDLER, build_registry, describe, dispatch
from remark.engine import collect, process
from remark.errors import MalformedParamsError, RemarkError
from remark.models import AnnotationRecord, QualifiedName

__all__ = [
    "DEFAULT_HANDLER",
    "AnnotationRecord",
    "MalformedParamsError",
    "QualifiedName",
    "RemarkError",
    "build_registry",
    "collect",
    "describe",
    "dispatch",
    "process",
]

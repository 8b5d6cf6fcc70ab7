"""Source discovery for remarker."""

from scan.files import DEFAULT_EXTENSIONS, find_source_files

__all__ = ["DEFAULT_EXTENSIONS", "find_source_files"]

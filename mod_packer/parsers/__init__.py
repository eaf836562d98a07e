"""Parsers read BG3 LSX documents.

:class:`~mod_packer.parsers.meta.MetaLsxParser` turns a ``meta.lsx`` descriptor
into :class:`~mod_packer.models.ModuleMetadata`, and
:class:`~mod_packer.parsers.linter.LsxLinter` streams LSX files for structural
errors.
"""

from .base import BaseLsxParser
from .linter import LsxLinter
from .meta import META_FILENAME, MetaLsxParser, build_meta_lsx, write_meta_lsx

__all__ = [
    "BaseLsxParser",
    "LsxLinter",
    "META_FILENAME",
    "MetaLsxParser",
    "build_meta_lsx",
    "write_meta_lsx",
]

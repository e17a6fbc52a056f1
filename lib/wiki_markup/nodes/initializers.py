"""
Records produced by a scanner for each markup construct that it finds.  Parsed nodes are built from these, and they
retain their initializer so that conversions between node types can be re-derived from pristine data.

:author: Doug Skrypa
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field, replace
from typing import Optional

__all__ = ['TITLE_MARKER', 'ParamSeed', 'TemplateInitializer', 'WikilinkInitializer']

#: Placeholder in a raw title that marks where the canonical title should be reinserted
TITLE_MARKER = '\x01'


@dataclass(frozen=True)
class ParamSeed:
    value: str
    key: Optional[str] = None
    text: Optional[str] = None  # The verbatim source text, including the leading ``|``


@dataclass
class _Initializer:
    title: str
    raw_title: str
    text: str
    start_index: int = 0
    end_index: int = 0
    nest_level: int = 0
    skip: bool = False

    def copy(self, **changes):
        """Return a deep copy of this initializer, with the given fields replaced."""
        return replace(deepcopy(self), **changes)

    @property
    def has_marker(self) -> bool:
        return TITLE_MARKER in self.raw_title

    @property
    def filled_raw_title(self) -> str:
        return self.raw_title.replace(TITLE_MARKER, self.title, 1)


@dataclass
class TemplateInitializer(_Initializer):
    params: list[ParamSeed] = field(default_factory=list)
    original_title: Optional[str] = None  # The template title, if this was converted to a parser function


@dataclass
class WikilinkInitializer(_Initializer):
    index: int = 0
    parent: Optional[int] = None
    children: set[int] = field(default_factory=set)
    display: Optional[str] = None  # The raw text after the first pipe for non-file links
    params: Optional[list[str]] = None  # The raw pipe-separated parts after the title for file links

"""
Behavior shared by the template and wikilink node families.

:author: Doug Skrypa
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from ..exceptions import MarkupError
from .initializers import TITLE_MARKER

if TYPE_CHECKING:
    from .initializers import _Initializer

__all__ = ['ParsedNode', 'log_failure', 'CONVERSION_ERRORS']
log = logging.getLogger(__name__)

I = TypeVar('I', bound='_Initializer')

#: Errors that fallible conversions report as a failed result instead of raising
CONVERSION_ERRORS = (MarkupError, TypeError)


def log_failure(node, action: str, error: Exception, verbose: bool):
    if verbose:
        log.error(f'Unable to {action} for {node!r}: {error}', exc_info=error)


class ParsedNode:
    """
    Provenance for nodes that were created from a scanner's initializer record.  The initializer is copied so that
    conversions can be re-derived from the original data, regardless of any changes made to this node.
    """

    _initializer: I
    _raw_title: str
    raw_title: str
    text: str
    start_index: int
    end_index: int
    nest_level: int
    skip: bool

    def _init_provenance(self, initializer: I):
        self._initializer = initializer.copy()
        self._raw_title = initializer.raw_title
        self.raw_title = initializer.filled_raw_title
        self.text = initializer.text
        self.start_index = initializer.start_index
        self.end_index = initializer.end_index
        self.nest_level = initializer.nest_level
        self.skip = initializer.skip

    @property
    def initializer(self) -> I:
        return self._initializer.copy()

    @property
    def span(self) -> tuple[int, int]:
        return self.start_index, self.end_index

    def _raw_title_text(self, title_text: str, unchanged: bool) -> str:
        """
        :param title_text: The canonical rendering of the current title
        :param unchanged: Whether the current title is the same as the one that was parsed
        :return: The raw title with the current title reinserted, or the canonical title if that is not possible
        """
        raw = self._raw_title
        if self._initializer.has_marker:
            return raw.replace(TITLE_MARKER, self._initializer.title if unchanged else title_text, 1)
        elif unchanged:
            return raw
        log.debug(f'Unable to reinsert {title_text=} into raw_title={raw!r} for {self!r} - using the canonical title')
        return title_text

"""
:author: Doug Skrypa
"""

from __future__ import annotations

import re
from itertools import chain
from shutil import get_terminal_size
from typing import Iterator, Optional, Pattern, Union

from rich.pretty import pretty_repr
from rich.text import Text
from wikitextparser import WikiText

__all__ = ['rich_repr', 'short_repr', 'clean_text', 'strip_comments', 'value_matches', 'split_top_level']

_MAX_WIDTH = None
_BIDI_PATTERN = re.compile('[\u200e\u200f\u202a-\u202e]')


def rich_repr(obj, max_width: int = None) -> str:
    """Render a non-highlighted (symmetrical) pretty repr of the given object using rich."""
    if max_width is None:
        global _MAX_WIDTH
        if _MAX_WIDTH is None:
            max_width = _MAX_WIDTH = get_terminal_size()[0]
        else:
            max_width = _MAX_WIDTH

    text = pretty_repr(obj, max_width=max_width)
    return str(Text(text, style='pretty'))


def short_repr(text) -> str:
    text = str(text)
    if len(text) <= 50:
        return repr(text)
    else:
        return repr(f'{text[:24]}...{text[-23:]}')


def clean_text(text: str, strip: bool = True) -> str:
    """Remove unicode bidi control characters, which browsers may insert when copying titles, from the given text."""
    text = _BIDI_PATTERN.sub('', text)
    return text.strip() if strip else text


def strip_comments(text: str) -> str:
    """Remove ``<!-- -->`` comments, including a trailing unclosed one, from the given text."""
    if '<!--' not in text:
        return text
    for comment in reversed(WikiText(text).comments):
        start, end = comment.span
        text = text[:start] + text[end:]
    return text


def value_matches(value: Optional[str], expected: Union[str, Pattern, None]) -> bool:
    """
    :param value: The value to test
    :param expected: None to accept any value, a str for an exact match, or a compiled pattern to search for
    :return: True if the value satisfies the given expectation, False otherwise
    """
    if expected is None:
        return True
    elif isinstance(expected, str):
        return value == expected
    elif isinstance(expected, re.Pattern):
        return value is not None and expected.search(value) is not None
    raise TypeError(f'Expected a str or compiled pattern to match values against; found {type(expected).__name__}')


def _nested_spans(parsed: WikiText) -> list[tuple[int, int]]:
    nodes = chain(
        parsed.templates,
        parsed.parser_functions,
        parsed.parameters,
        parsed.wikilinks,
        parsed.comments,
        parsed.get_tags(),
    )
    return sorted(node.span for node in nodes)


def split_top_level(text: str, sep: str = '|') -> Iterator[str]:
    """
    Split the given text on the given separator, ignoring separators that are inside the templates, parser functions,
    parameters, wikilinks, comments, or tags that wikitextparser finds in it.
    """
    spans = _nested_spans(WikiText(text))
    start = pos = 0
    while (index := text.find(sep, pos)) != -1:
        if enclosing_end := max((end for s, end in spans if s < index < end), default=None):
            pos = enclosing_end
            continue
        yield text[start:index]
        start = pos = index + 1

    yield text[start:]

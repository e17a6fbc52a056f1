"""
Title validation and normalization.

Titles are parsed the way MediaWiki parses them, to the extent needed by the markup nodes: namespace and interwiki
prefixes are resolved using a :class:`~.site.Site`, first-letter capitalization is applied according to the namespace's
case setting, and illegal titles are rejected.

:author: Doug Skrypa
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Union

from .exceptions import InvalidTitleError
from .utils import clean_text

if TYPE_CHECKING:
    from .site import Site

__all__ = ['Title', 'TitleLike']

_ILLEGAL_CHARS = re.compile(r'[<>\[\]{}|\x00-\x1f\x7f\ufffd]')
_PREFIX_MATCH = re.compile(r'^([^:]+?)\s*:\s*(.*)$', re.DOTALL).match
_MAX_BYTES = 255


class Title:
    __slots__ = ('site', 'namespace', 'main', 'fragment', 'interwiki', 'leading_colon')

    def __init__(self, title: Union[str, Title], namespace: int = None, *, site: Site = None):
        if isinstance(title, Title):
            site = site or title.site
            title = title.prefixed_text(colon=True, fragment=True)
        elif not isinstance(title, str):
            raise TypeError(f'Expected a str or Title for title; found {type(title).__name__}')
        if site is None:
            raise TypeError('A site is required to parse titles')

        self.site = site
        self.namespace = site.ns_main
        self.main = ''
        self.fragment = ''
        self.interwiki = ''
        self.leading_colon = False
        self._parse(title, site.ns_main if namespace is None else namespace)

    def _parse(self, title: str, default_ns: int):
        site = self.site
        text = ' '.join(clean_text(title).replace('_', ' ').split())
        if text.startswith(':'):
            self.leading_colon = True
            text = text[1:].lstrip()
            default_ns = site.ns_main

        if '#' in text:
            text, fragment = text.split('#', 1)
            self.fragment = fragment.strip()
            text = text.rstrip()

        if _ILLEGAL_CHARS.search(text):
            raise InvalidTitleError(title, 'it contains illegal characters')

        namespace = default_ns
        explicit_ns = False
        if m := _PREFIX_MATCH(text):
            prefix, rest = m.groups()
            if (ns_id := site.namespace_id(prefix)) is not None:
                namespace, text, explicit_ns = ns_id, rest, True
            elif iw := site.interwiki(prefix):
                self.interwiki = iw.prefix.lower()
                namespace, text = site.ns_main, rest

        if not text:
            if explicit_ns:
                raise InvalidTitleError(title, 'it has a namespace prefix without a title')
            elif not self.fragment and not self.interwiki:
                raise InvalidTitleError(title, 'it is empty')
        elif '~~~' in text:
            raise InvalidTitleError(title, 'it contains a signature')
        elif _is_relative(text):
            raise InvalidTitleError(title, 'it is a relative path')
        elif len(text.encode('utf-8')) > _MAX_BYTES:
            raise InvalidTitleError(title, f'it exceeds {_MAX_BYTES} bytes')

        if text and not self.interwiki and (ns := site.namespaces.get(namespace)) and ns.first_letter_case:
            text = text[0].upper() + text[1:]

        self.namespace = namespace
        self.main = text

    # region Properties

    @property
    def namespace_name(self) -> str:
        if self.namespace == self.site.ns_main:
            return ''
        try:
            return self.site.namespaces[self.namespace].name
        except KeyError:
            return ''

    @property
    def text(self) -> str:
        return self.main

    @property
    def db_key(self) -> str:
        return self.main.replace(' ', '_')

    @property
    def is_external(self) -> bool:
        return bool(self.interwiki)

    @property
    def is_trans(self) -> bool:
        """True if this is an interwiki title for which the interwiki allows transclusion"""
        if not self.interwiki:
            return False
        iw = self.site.interwiki(self.interwiki)
        return bool(iw and iw.trans)

    @property
    def is_file(self) -> bool:
        return self.namespace == self.site.ns_file and not self.interwiki

    # endregion

    def prefixed_text(self, colon: bool = False, fragment: bool = False, interwiki: bool = True) -> str:
        """
        :param colon: Include the leading colon, if the original title had one
        :param fragment: Include the ``#fragment``, if present
        :param interwiki: Include the interwiki prefix, if present
        :return: The full title, including its namespace prefix
        """
        parts = []
        if interwiki and self.interwiki:
            parts.append(self.interwiki)
        if ns_name := self.namespace_name:
            parts.append(ns_name)
        parts.append(self.main)
        text = ':'.join(parts)
        if fragment and self.fragment:
            text += '#' + self.fragment
        return ':' + text if colon and self.leading_colon else text

    def prefixed_db(self, colon: bool = False, fragment: bool = False, interwiki: bool = True) -> str:
        return self.prefixed_text(colon, fragment, interwiki).replace(' ', '_')

    def relative_text(self, namespace: int) -> str:
        """The title text without its namespace prefix if it is in the given namespace, otherwise the full title"""
        if self.namespace == namespace and not self.interwiki:
            return self.main
        return self.prefixed_text()

    # region Internal Methods

    def _key(self):
        return self.interwiki, self.namespace, self.main, self.fragment, self.leading_colon

    def __eq__(self, other) -> bool:
        if not isinstance(other, Title):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.prefixed_text(fragment=True)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[{self.prefixed_text(colon=True, fragment=True)!r}]>'

    # endregion


TitleLike = Union[str, Title]


def _is_relative(text: str) -> bool:
    return (
        text in ('.', '..')
        or text.startswith(('./', '../'))
        or '/./' in text
        or '/../' in text
        or text.endswith(('/.', '/..'))
    )

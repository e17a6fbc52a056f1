"""
Internal link nodes.

A plain :class:`Wikilink` has a single display text, such as ``[[Foo|bar]]``, while a :class:`FileWikilink` has a
list of parameters, such as ``[[File:Foo.png|thumb|A caption]]``.  A :class:`RawWikilink` is a link with a title that
could not be parsed.  Each of these has a parsed counterpart that is created from a scanner's initializer record.

:author: Doug Skrypa
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Generic, Iterable, Optional, TypeVar, Union

from ..exceptions import TitleNamespaceError
from ..titles import Title, TitleLike
from ..utils import clean_text
from .base import CONVERSION_ERRORS, ParsedNode, log_failure
from .initializers import WikilinkInitializer
from .params import ParamList

if TYPE_CHECKING:
    from ..site import Site

__all__ = [
    'Wikilink', 'ParsedWikilink', 'FileWikilink', 'ParsedFileWikilink', 'RawWikilink', 'ParsedRawWikilink',
    'validate_link_title', 'AnyWikilink',
]
log = logging.getLogger(__name__)

T = TypeVar('T', Title, str)


def validate_link_title(title: TitleLike, site: Site = None) -> Title:
    if isinstance(title, Title):
        return Title(title.prefixed_text(colon=True, fragment=True), site=site or title.site)
    elif isinstance(title, str):
        if site is None:
            raise TypeError('A site is required to validate link titles')
        return Title(title, site=site)
    raise TypeError(f'Expected a str or Title for title; found {type(title).__name__}')


def _validate_file_title(title: TitleLike, site: Site = None) -> Title:
    title = validate_link_title(title, site)
    if title.is_external:
        raise TitleNamespaceError(title, 'The title is interwiki')
    elif title.leading_colon:
        raise TitleNamespaceError(title, 'The title has a leading colon')
    elif title.namespace != title.site.ns_file:
        raise TitleNamespaceError(title, 'The title does not belong to the File namespace')
    return title


def _validate_non_file_title(title: TitleLike, site: Site = None) -> Title:
    title = validate_link_title(title, site)
    if title.namespace == title.site.ns_file and not title.leading_colon:
        raise TitleNamespaceError(title, 'The title is a file title')
    return title


def _title_text(title: TitleLike) -> str:
    return title.prefixed_text(colon=True, fragment=True) if isinstance(title, Title) else title


def _stringify(left: str, right: Optional[str]) -> str:
    if right is None:
        return f'[[{left}]]'
    return f'[[{left}|{right}]]'


class _WikilinkBase(ABC, Generic[T]):
    _title: T
    _display: Optional[str]

    def __init__(self, title: T, display: str = None):
        self._title = title
        self._display = None
        self.set_display(display)

    @property
    def title(self) -> T:
        return self._title

    def get_display(self) -> str:
        """The display text if one was set, otherwise the title text"""
        if self._display:
            return self._display
        elif isinstance(self._title, str):
            return clean_text(self._title)
        return self._title.prefixed_text(fragment=True)

    def set_display(self, display: Optional[str]):
        """
        :param display: The new display text, or None to remove it.  Leading / trailing whitespace is removed, and an
          empty display text is treated the same as None.
        :return: This link, for chaining
        """
        if display is None:
            self._display = None
        elif isinstance(display, str):
            self._display = clean_text(display) or None
        else:
            raise TypeError(f'Expected a str or None for display; found {type(display).__name__}')
        return self

    def has_display(self) -> bool:
        return bool(self._display)

    def _right(self, suppress_display: bool) -> Optional[str]:
        return None if suppress_display else self._display

    def __str__(self) -> str:
        return self.stringify()

    @abstractmethod
    def stringify(self, **kwargs) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[{_title_text(self._title)!r}][display={self._display!r}]>'

    def __rich_repr__(self):
        yield 'title', _title_text(self._title)
        yield 'display', self._display


class _ParsedLink(ParsedNode):
    """Provenance for parsed links, including their relationship to other links found by the same scanner."""

    _initializer: WikilinkInitializer
    _display: Optional[str]
    index: int
    parent: Optional[int]
    children: set[int]

    def _init_link_provenance(self, initializer: WikilinkInitializer):
        self._init_provenance(initializer)
        self.index = initializer.index
        self.parent = initializer.parent
        self.children = set(initializer.children)
        self._parsed_title = self._title  # noqa
        self._parsed_display = self._display

    def _right(self, suppress_display: bool) -> Optional[str]:
        if suppress_display:
            return None
        elif self._display == self._parsed_display and self._initializer.display is not None:
            return self._initializer.display  # The display was not changed
        return self._display

    def _link_initializer(self, title: TitleLike, **changes) -> WikilinkInitializer:
        return self._initializer.copy(title=_title_text(title), **changes)

    def _file_initializer(self, title: TitleLike) -> WikilinkInitializer:
        display = self._initializer.display
        return self._link_initializer(title, display=None, params=[display] if display else [])


# region Wikilinks


class Wikilink(_WikilinkBase[Title]):
    """
    An internal link to a page that is not a file, such as ``[[Foo|bar]]``.  Links to files are allowed if they have a
    leading colon, such as ``[[:File:Foo.png]]``.

    :param title: The link target
    :param display: The text to display
    :param site: The site that the title belongs to.  Required if the title is a str.
    """

    def __init__(self, title: TitleLike, display: str = None, *, site: Site = None):
        super().__init__(_validate_non_file_title(title, site), display)

    @property
    def site(self) -> Site:
        return self._title.site

    def set_title(self, title: TitleLike, verbose: bool = False) -> bool:
        """
        :param title: The new link target.  File titles must be converted via :meth:`.to_file_wikilink` instead.
        :param verbose: Whether the reason should be logged if the title is invalid
        :return: True if the title was changed, False otherwise
        """
        try:
            self._title = _validate_non_file_title(title, self.site)
        except CONVERSION_ERRORS as e:
            log_failure(self, f'set {title=}', e, verbose)
            return False
        return True

    def to_file_wikilink(self, title: TitleLike, verbose: bool = False) -> Optional[FileWikilink]:
        """
        :param title: A file title
        :param verbose: Whether the reason should be logged if the title is invalid
        :return: A new :class:`FileWikilink` with this link's display text as its only parameter, or None if the title
          is not a valid file title
        """
        try:
            return FileWikilink(title, [self._display] if self._display else [], site=self.site)
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a file link with {title=}', e, verbose)
            return None

    def stringify(self, suppress_display: bool = False) -> str:
        return _stringify(self._title.prefixed_text(colon=True, fragment=True), self._right(suppress_display))


class ParsedWikilink(_ParsedLink, Wikilink):
    def __init__(self, initializer: WikilinkInitializer, *, site: Site):
        Wikilink.__init__(self, initializer.title, initializer.display, site=site)
        self._init_link_provenance(initializer)

    def to_file_wikilink(self, title: TitleLike, verbose: bool = False) -> Optional[ParsedFileWikilink]:
        try:
            return ParsedFileWikilink(self._file_initializer(title), site=self.site)
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a file link with {title=}', e, verbose)
            return None

    def stringify(self, suppress_display: bool = False, raw_title: bool = False) -> str:
        """
        :param suppress_display: Omit the display text
        :param raw_title: Reproduce the original formatting around the title.  If the title was not changed, it is
          reproduced exactly as it was written.
        :return: The wiki markup for this link
        """
        left = self._title.prefixed_text(colon=True, fragment=True)
        if raw_title:
            left = self._raw_title_text(left, self._title == self._parsed_title)
        return _stringify(left, self._right(suppress_display))

    def pristine_copy(self) -> ParsedWikilink:
        return self.__class__(self._initializer, site=self.site)


# endregion


# region File Wikilinks


class FileWikilink:
    """
    A link that embeds a file, such as ``[[File:Foo.png|thumb|A caption]]``.  The parts after the title are stored as
    a :class:`~.params.ParamList`.

    :param title: A title in the File namespace, without a leading colon
    :param params: The parts after the title
    :param site: The site that the title belongs to.  Required if the title is a str.
    """

    def __init__(self, title: TitleLike, params: Iterable[str] = (), *, site: Site = None):
        self._title = _validate_file_title(title, site)
        self.params = ParamList(params)

    @property
    def title(self) -> Title:
        return self._title

    @property
    def site(self) -> Site:
        return self._title.site

    def set_title(self, title: TitleLike, verbose: bool = False) -> bool:
        try:
            self._title = _validate_file_title(title, self.site)
        except CONVERSION_ERRORS as e:
            log_failure(self, f'set {title=}', e, verbose)
            return False
        return True

    def _display(self) -> Optional[str]:
        return '|'.join(self.params.strings()) if len(self.params) else None

    def to_wikilink(self, title: TitleLike, verbose: bool = False) -> Optional[Wikilink]:
        """
        :param title: A title that is not a file title
        :param verbose: Whether the reason should be logged if the title is invalid
        :return: A new :class:`Wikilink` with this link's parameters joined as its display text, or None if the title
          is not valid
        """
        try:
            return Wikilink(title, self._display(), site=self.site)
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a link with {title=}', e, verbose)
            return None

    def _right(self, sort_key: Optional[Callable[[str], object]]) -> Optional[str]:
        params = self.params.strings()
        if sort_key is not None:
            params.sort(key=sort_key)
        return '|'.join(params) if params else None

    def stringify(self, sort_key: Callable[[str], object] = None) -> str:
        return _stringify(self._title.prefixed_text(interwiki=False), self._right(sort_key))

    def __str__(self) -> str:
        return self.stringify()

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[{self._title.prefixed_text()!r}][params={len(self.params)}]>'

    def __rich_repr__(self):
        yield 'title', self._title.prefixed_text()
        yield 'params', self.params.params


class ParsedFileWikilink(ParsedNode, FileWikilink):
    def __init__(self, initializer: WikilinkInitializer, *, site: Site):
        FileWikilink.__init__(self, initializer.title, initializer.params or (), site=site)
        self._init_provenance(initializer)
        self.index = initializer.index
        self.parent = initializer.parent
        self.children = set(initializer.children)
        self._parsed_title = self._title

    def to_wikilink(self, title: TitleLike, verbose: bool = False) -> Optional[ParsedWikilink]:
        try:
            initializer = self._initializer.copy(title=_title_text(title), params=None, display=self._display())
            return ParsedWikilink(initializer, site=self.site)
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a link with {title=}', e, verbose)
            return None

    def stringify(self, sort_key: Callable[[str], object] = None, raw_title: bool = False) -> str:
        left = self._title.prefixed_text(interwiki=False)
        if raw_title:
            left = self._raw_title_text(left, self._title == self._parsed_title)
        return _stringify(left, self._right(sort_key))

    def pristine_copy(self) -> ParsedFileWikilink:
        return self.__class__(self._initializer, site=self.site)


# endregion


# region Raw Wikilinks


class RawWikilink(_WikilinkBase[str]):
    """
    A link with a title that could not be parsed, such as ``[[{{{1}}}|foo]]``.

    :param title: The raw link target
    :param display: The text to display
    :param site: The site to use when converting this link to another type with a str title
    """

    def __init__(self, title: str, display: str = None, *, site: Site = None):
        if not isinstance(title, str):
            raise TypeError(f'Expected a str for title; found {type(title).__name__}')
        super().__init__(title, display)
        self.site = site

    def set_title(self, title: str) -> RawWikilink:
        if not isinstance(title, str):
            raise TypeError(f'Expected a str for title; found {type(title).__name__}')
        self._title = title
        return self

    def _site_for(self, title: TitleLike) -> Optional[Site]:
        return title.site if isinstance(title, Title) else self.site

    def to_wikilink(self, title: TitleLike, verbose: bool = False) -> Optional[Wikilink]:
        try:
            return Wikilink(title, self._display, site=self._site_for(title))
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a link with {title=}', e, verbose)
            return None

    def to_file_wikilink(self, title: TitleLike, verbose: bool = False) -> Optional[FileWikilink]:
        try:
            return FileWikilink(title, [self._display] if self._display else [], site=self._site_for(title))
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a file link with {title=}', e, verbose)
            return None

    def stringify(self, suppress_display: bool = False) -> str:
        return _stringify(self._title, self._right(suppress_display))


class ParsedRawWikilink(_ParsedLink, RawWikilink):
    def __init__(self, initializer: WikilinkInitializer, *, site: Site = None):
        RawWikilink.__init__(self, initializer.title, initializer.display, site=site)
        self._init_link_provenance(initializer)

    def to_wikilink(self, title: TitleLike, verbose: bool = False) -> Optional[ParsedWikilink]:
        try:
            return ParsedWikilink(self._link_initializer(title), site=self._site_for(title))
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a link with {title=}', e, verbose)
            return None

    def to_file_wikilink(self, title: TitleLike, verbose: bool = False) -> Optional[ParsedFileWikilink]:
        try:
            return ParsedFileWikilink(self._file_initializer(title), site=self._site_for(title))
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a file link with {title=}', e, verbose)
            return None

    def stringify(self, suppress_display: bool = False, raw_title: bool = False) -> str:
        left = self._title
        if raw_title:
            left = self._raw_title_text(left, self._title == self._initializer.title)
        return _stringify(left, self._right(suppress_display))

    def pristine_copy(self) -> ParsedRawWikilink:
        return self.__class__(self._initializer, site=self.site)


# endregion


AnyWikilink = Union[Wikilink, ParsedWikilink, FileWikilink, ParsedFileWikilink, RawWikilink, ParsedRawWikilink]

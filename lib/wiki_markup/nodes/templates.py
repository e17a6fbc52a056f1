"""
Template transclusion and parser function nodes.

Fresh nodes are created directly (e.g., ``Template('Foo', [('', 'bar')], site=site)``), while parsed nodes are created
from :class:`~.initializers.TemplateInitializer` records produced by a scanner, such as
:meth:`wiki_markup.wikitext.Wikitext.parse_templates`.  Parsed nodes can reproduce their original text exactly when
they have not been modified.

:author: Doug Skrypa
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Generic, Iterable, Optional, TypeVar, Union

from ..exceptions import InvalidHookError, InvalidTitleError, RawTitleError, TitleNamespaceError
from ..titles import Title, TitleLike
from ..typing import Hierarchies, StrOrPattern
from ..utils import clean_text
from .base import CONVERSION_ERRORS, ParsedNode, log_failure
from .initializers import TITLE_MARKER, TemplateInitializer
from .params import NUMERIC_KEY, ParamList, ParamPosition, TemplateParameter, TemplateParams

if TYPE_CHECKING:
    from ..site import Site
    from .params import ParamPredicate, SeedLike

__all__ = [
    'Template', 'ParsedTemplate', 'RawTemplate', 'ParserFunction', 'ParsedParserFunction',
    'validate_template_title', 'AnyTemplate',
]
log = logging.getLogger(__name__)

T = TypeVar('T', Title, str)
SortKey = Callable[[TemplateParameter], object]
TitlePredicate = Callable[[T], bool]
ParamBreakPredicate = Callable[[TemplateParameter], bool]


def validate_template_title(title: TitleLike, site: Site = None) -> Title:
    """
    :param title: A template title.  Titles without a namespace prefix are treated as being in the Template namespace,
      unless they have a leading colon.
    :param site: The site that the title belongs to.  Required if the title is a str.
    :return: The validated :class:`~.titles.Title`
    """
    if isinstance(title, Title):
        site = site or title.site
        text = title.prefixed_db(colon=True, fragment=True)
    elif isinstance(title, str):
        text = title
    else:
        raise TypeError(f'Expected a str or Title for title; found {type(title).__name__}')
    if site is None:
        raise TypeError('A site is required to validate template titles')

    if site.hook_table.verify(text):
        raise TitleNamespaceError(title, 'The title is a parser function hook')
    elif isinstance(title, str):
        text = clean_text(title)
        title = Title(text, site.ns_main if text.startswith(':') else site.ns_template, site=site)
    else:
        title = Title(title.prefixed_text(colon=True, fragment=True), site=site)

    if not title.main:
        raise InvalidTitleError(text, 'the empty title cannot be transcluded')
    elif title.is_external and not title.is_trans:
        raise TitleNamespaceError(title, 'The interwiki title cannot be transcluded')
    return title


# region Templates


class _TemplateBase(ABC, Generic[T]):
    """Base class for nodes with keyed parameters.  Parameter modification methods return this node for chaining."""

    _title: T
    params: TemplateParams

    def __init__(self, title: T, params: Iterable[SeedLike] = (), hierarchies: Hierarchies = None):
        self._title = title
        self.params = TemplateParams(params, hierarchies)
        self._parsed_params: Optional[TemplateParams] = None

    @property
    def title(self) -> T:
        return self._title

    @property
    def param_order(self) -> tuple[str, ...]:
        return self.params.order

    @property
    def hierarchies(self) -> list[list[str]]:
        return self.params.hierarchies

    # region Parameter Methods

    def insert(self, key: Optional[str], value: str, overwrite: bool = True, position: ParamPosition = None):
        """
        Add a parameter, or replace the value of an existing one.  See :meth:`.TemplateParams.insert` for details.
        """
        self.params.insert(key, value, overwrite, position)
        return self

    def update(self, key: str, value: str):
        """Replace the value of an existing parameter.  Does nothing if the parameter does not exist."""
        self.params.update(key, value)
        return self

    def get(self, key: str, resolve_hierarchy: bool = False) -> Optional[TemplateParameter]:
        return self.params.get(key, resolve_hierarchy)

    def has(self, key: Union[StrOrPattern, ParamPredicate], value: StrOrPattern = None) -> bool:
        return self.params.has(key, value)

    def delete(self, key: str, resolve_hierarchy: bool = False) -> bool:
        return self.params.delete(key, resolve_hierarchy)

    # endregion

    # region Output

    @abstractmethod
    def _has_leading_colon(self) -> bool:
        raise NotImplementedError

    def _verbatim_params(self) -> Optional[str]:
        """
        The original text of every parsed parameter, including repeated and overridden ones, if the parameters were not
        modified since they were parsed.
        """
        if self._parsed_params is None or self.params != self._parsed_params:
            return None
        seeds = self._initializer.params
        if any(seed.text is None for seed in seeds):
            return None
        return ''.join(seed.text for seed in seeds)

    def _stringify(
        self,
        title: str,
        prepend: str = None,
        append: str = None,
        sort_key: SortKey = None,
        break_after_title: TitlePredicate = None,
        break_after_param: ParamBreakPredicate = None,
        suppress_keys: Iterable[str] = (),
        normalize: bool = False,
    ) -> str:
        parts = ['{{']
        if prepend is not None:
            if prepend.endswith(':') and self._has_leading_colon():
                prepend = prepend[:-1]
            parts.append(prepend)
        parts.append(title)
        if append is not None:
            parts.append(append)
        if break_after_title and break_after_title(self._title):
            parts.append('\n')

        suppress_keys = set(suppress_keys)
        reformat = normalize or suppress_keys or sort_key is not None or break_after_param is not None
        if not reformat and (verbatim := self._verbatim_params()) is not None:
            parts.append(verbatim)
        else:
            params = self.params.values()
            if sort_key is not None:
                params.sort(key=sort_key)
            for param in params:
                parts.append(_param_text(param, suppress_keys, normalize))
                if break_after_param and break_after_param(param):
                    parts.append('\n')

        parts.append('}}')
        return ''.join(parts)

    def __str__(self) -> str:
        return self.stringify()

    @abstractmethod
    def stringify(self, **kwargs) -> str:
        raise NotImplementedError

    # endregion

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[{str(self._title)!r}][params={len(self.params)}]>'

    def __rich_repr__(self):
        yield 'title', str(self._title)
        yield 'params', self.params


class Template(_TemplateBase[Title]):
    """
    A template transclusion, such as ``{{Foo|bar|baz=1}}``.

    :param title: The template title.  Titles without a namespace prefix are treated as being in the Template
      namespace, unless they have a leading colon.
    :param params: Initial parameters, as :class:`~.initializers.ParamSeed` objects, ``(key, value)`` pairs, or
      ``{'key': ..., 'value': ...}`` mappings.  A None or empty key indicates an unnamed parameter.
    :param hierarchies: Lists of equivalent parameter keys, where later keys have higher priority
    :param site: The site that the title belongs to.  Required if the title is a str.
    """

    def __init__(
        self, title: TitleLike, params: Iterable[SeedLike] = (), hierarchies: Hierarchies = None, *, site: Site = None
    ):
        super().__init__(validate_template_title(title, site), params, hierarchies)

    @classmethod
    def new(cls, *args, **kwargs) -> Optional[Template]:
        """Alternate constructor that returns None instead of raising an exception if the title is invalid."""
        try:
            return cls(*args, **kwargs)
        except CONVERSION_ERRORS as e:
            log.debug(f'Unable to create {cls.__name__}: {e}')
            return None

    @property
    def site(self) -> Site:
        return self._title.site

    def _has_leading_colon(self) -> bool:
        title = self._title
        # Main namespace titles need a colon to be transcluded as pages instead of templates
        return title.leading_colon or (title.namespace == title.site.ns_main and not title.interwiki)

    def _title_text(self) -> str:
        title = self._title
        if title.namespace == title.site.ns_template and not title.interwiki:
            return title.main
        elif self._has_leading_colon():
            return ':' + title.prefixed_text()
        return title.prefixed_text()

    def set_title(self, title: TitleLike, verbose: bool = False) -> bool:
        """
        :param title: The new title
        :param verbose: Whether the reason should be logged if the title is invalid
        :return: True if the title was changed, False if the given title was invalid
        """
        try:
            self._title = validate_template_title(title, self.site)
        except CONVERSION_ERRORS as e:
            log_failure(self, f'set {title=}', e, verbose)
            return False
        return True

    def stringify(
        self,
        prepend: str = None,
        append: str = None,
        sort_key: SortKey = None,
        break_after_title: TitlePredicate = None,
        break_after_param: ParamBreakPredicate = None,
        suppress_keys: Iterable[str] = (),
        normalize: bool = False,
    ) -> str:
        """
        :param prepend: Text to insert before the title.  A trailing colon is dropped if the title has a leading colon.
        :param append: Text to insert after the title
        :param sort_key: Key function for sorting parameters.  Parameters are rendered in their current order by
          default.
        :param break_after_title: Predicate that receives the title; a line break is inserted after it when true
        :param break_after_param: Predicate that receives each parameter; a line break is inserted after it when true
        :param suppress_keys: Numeric keys that should be rendered without ``key=``, unless the value contains ``=``
        :param normalize: Render all parameters in canonical form instead of using their original text when they
          have not been modified
        :return: The wiki markup for this template
        """
        return self._stringify(
            self._title_text(),
            prepend, append, sort_key, break_after_title, break_after_param, suppress_keys, normalize
        )


class ParsedTemplate(ParsedNode, Template):
    """A :class:`Template` that was created from an initializer record produced by a scanner."""

    _initializer: TemplateInitializer

    def __init__(self, initializer: TemplateInitializer, hierarchies: Hierarchies = None, *, site: Site):
        _TemplateBase.__init__(self, validate_template_title(initializer.title, site), initializer.params, hierarchies)
        self._init_provenance(initializer)
        self._parsed_params = self.params.copy()
        self._parsed_title = self._title

    def stringify(self, raw_title: bool = False, **kwargs) -> str:
        """
        :param raw_title: Reproduce the original formatting around the title, such as whitespace and line breaks.
          If the title was not changed, it is reproduced exactly as it was written.
        :param kwargs: Keyword arguments to pass to :meth:`Template.stringify`
        :return: The wiki markup for this template
        """
        title = self._title_text()
        if raw_title:
            title = self._raw_title_text(title, self._title == self._parsed_title)
        return self._stringify(title, **kwargs)

    def to_parser_function(self, hook: str, verbose: bool = False) -> Optional[ParsedParserFunction]:
        """
        Re-derive this node as a parser function with the given hook from the original initializer.  Any changes that
        were made to this node are not carried over.

        :param hook: The new hook and (optionally) its first argument, such as ``#if:{{{1|}}}``
        :param verbose: Whether the reason should be logged if the hook is invalid
        :return: A new :class:`ParsedParserFunction`, or None if the hook was invalid
        """
        initializer = self._initializer
        original_title = initializer.original_title or initializer.title
        try:
            return ParsedParserFunction(initializer.copy(title=hook, original_title=original_title), site=self.site)
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a parser function with {hook=}', e, verbose)
            return None

    def pristine_copy(self) -> ParsedTemplate:
        """Re-create this node from its initializer, without any changes that were made to it."""
        return self.__class__(self._initializer, self.hierarchies, site=self.site)


class RawTemplate(ParsedNode, _TemplateBase[str]):
    """
    A template that was found by a scanner, but with a title that is not valid (e.g., it contains a nested template
    like ``{{{{{1}}}|foo}}``).  Its title is stored as a plain string.
    """

    _initializer: TemplateInitializer

    def __init__(self, initializer: TemplateInitializer, hierarchies: Hierarchies = None, *, site: Site = None):
        if not isinstance(initializer.title, str):
            raise TypeError(f'Expected a str for title; found {type(initializer.title).__name__}')
        super().__init__(initializer.title, initializer.params, hierarchies)
        self._init_provenance(initializer)
        self._parsed_params = self.params.copy()
        self.site = site

    def _has_leading_colon(self) -> bool:
        return self._title.startswith(':')

    def set_title(self, title: str) -> RawTemplate:
        if not isinstance(title, str):
            raise TypeError(f'Expected a str for title; found {type(title).__name__}')
        self._title = title
        return self

    def stringify(self, raw_title: bool = False, **kwargs) -> str:
        title = self._title
        if raw_title:
            title = self._raw_title_text(title, title == self._initializer.title)
        return self._stringify(title, **kwargs)

    def to_template(self, title: TitleLike, verbose: bool = False) -> Optional[ParsedTemplate]:
        """
        Re-derive this node as a :class:`ParsedTemplate` with the given valid title from the original initializer.

        :param title: The new title
        :param verbose: Whether the reason should be logged if the title is invalid
        :return: A new :class:`ParsedTemplate`, or None if the title was invalid
        """
        text = title.prefixed_text(colon=True) if isinstance(title, Title) else title
        try:
            initializer = self._initializer.copy(title=text)
            return ParsedTemplate(initializer, self.hierarchies, site=self._site_for(title))
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a template with {title=}', e, verbose)
            return None

    def to_parser_function(self, hook: str, verbose: bool = False) -> Optional[ParsedParserFunction]:
        try:
            initializer = self._initializer.copy(title=hook, original_title=self._initializer.title)
            return ParsedParserFunction(initializer, site=self._site_for(hook))
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a parser function with {hook=}', e, verbose)
            return None

    def _site_for(self, title: TitleLike) -> Site:
        if isinstance(title, Title):
            return title.site
        elif self.site is None:
            raise TypeError(f'A site is required to convert {self!r}')
        return self.site

    def pristine_copy(self) -> RawTemplate:
        return self.__class__(self._initializer, self.hierarchies, site=self.site)


# endregion


# region Parser Functions


class ParserFunction:
    """
    A parser function call, such as ``{{#if:{{{1|}}}|yes|no}}``.  The first parameter is the text between the hook
    and the first pipe.

    :param hook: The function hook, such as ``#if:``.  Any text after the hook's colon is ignored.
    :param params: The function's arguments
    :param site: The site whose function hooks should be used to verify the hook
    """

    def __init__(self, hook: str, params: Iterable[str] = (), *, site: Site):
        if not (verified := site.hook_table.verify(hook)):
            raise InvalidHookError(hook)
        self.site = site
        self.hook = verified.match
        self.canonical_hook = verified.canonical
        self.params = ParamList(params)

    def set_hook(self, hook: str) -> bool:
        """
        :param hook: The new function hook
        :return: True if the hook was changed, False if the given hook was invalid
        """
        if not (verified := self.site.hook_table.verify(hook)):
            return False
        self.hook = verified.match
        self.canonical_hook = verified.canonical
        return True

    def _stringify(
        self,
        hook: str,
        prepend: str = '',
        sort_key: Callable[[str], object] = None,
        break_after: Callable[[str, int], bool] = None,
    ) -> str:
        params = self.params.strings()
        if sort_key is not None:
            params.sort(key=sort_key)
        if break_after is not None:
            params = [param + '\n' if break_after(param, i) else param for i, param in enumerate(params)]
        return '{{' + prepend + hook + '|'.join(params) + '}}'

    def stringify(
        self,
        prepend: str = '',
        use_canonical: bool = False,
        sort_key: Callable[[str], object] = None,
        break_after: Callable[[str, int], bool] = None,
    ) -> str:
        """
        :param prepend: Text to insert before the hook
        :param use_canonical: Render the canonical hook (e.g., ``#if:``) instead of the hook as it was written
        :param sort_key: Key function for sorting parameters
        :param break_after: Predicate that receives each parameter and its index; a line break is inserted after the
          parameter when true
        :return: The wiki markup for this parser function
        """
        return self._stringify(self.canonical_hook if use_canonical else self.hook, prepend, sort_key, break_after)

    def __str__(self) -> str:
        return self.stringify()

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[{self.hook!r}][params={len(self.params)}]>'

    def __rich_repr__(self):
        yield 'hook', self.hook
        yield 'params', self.params.params


class ParsedParserFunction(ParsedNode, ParserFunction):
    """
    A :class:`ParserFunction` that was created from an initializer record produced by a scanner.  The initializer's
    title contains the hook and the first argument, such as ``#if:{{{1|}}}``.
    """

    _initializer: TemplateInitializer

    def __init__(self, initializer: TemplateInitializer, *, site: Site):
        title, raw_title = initializer.title, initializer.raw_title
        if not (verified := site.hook_table.verify(title)):
            raise InvalidHookError(title)

        hook = verified.match
        if (index := raw_title.find(TITLE_MARKER)) != -1:
            leading = raw_title[:index]
            first_arg = title.strip()[len(hook):] + raw_title[index + 1:]
            self.raw_hook = leading + hook
            self._raw_hook = leading + TITLE_MARKER
        else:
            # Characters such as comments interrupted the title: find the hook's characters as a subsequence
            hook_end = _find_subsequence_end(raw_title, hook)
            if hook_end == -1:
                raise RawTitleError(title, raw_title, hook)
            hook_start = hook_end - len(hook)
            self.raw_hook = raw_title[:hook_end]
            if raw_title[hook_start:hook_end] == hook:
                self._raw_hook = raw_title[:hook_start] + TITLE_MARKER
            else:
                self._raw_hook = self.raw_hook
            first_arg = raw_title[hook_end:]

        params = [first_arg]
        for seed in initializer.params:
            if seed.text is not None:
                params.append(seed.text[1:])
            else:
                params.append((f'{seed.key}=' if seed.key else '') + seed.value)

        ParserFunction.__init__(self, title, params, site=site)
        self._init_provenance(initializer)
        self._parsed_hook = self.hook

    def stringify(self, raw_hook: bool = False, use_canonical: bool = False, **kwargs) -> str:
        """
        :param raw_hook: Reproduce the original formatting around the hook, such as whitespace and comments
        :param use_canonical: Render the canonical hook (e.g., ``#if:``) instead of the hook as it was written
        :param kwargs: Keyword arguments to pass to :meth:`ParserFunction.stringify`
        :return: The wiki markup for this parser function
        """
        hook = self.canonical_hook if use_canonical else self.hook
        if raw_hook:
            if TITLE_MARKER in self._raw_hook:
                hook = self._raw_hook.replace(TITLE_MARKER, hook, 1)
            elif hook == self._parsed_hook:
                hook = self._raw_hook
            else:
                log.debug(f'Unable to reinsert {hook=} into raw_hook={self._raw_hook!r} - using the hook as-is')
        return self._stringify(hook, **kwargs)

    def to_template(
        self, title: TitleLike = None, hierarchies: Hierarchies = None, verbose: bool = False
    ) -> Optional[ParsedTemplate]:
        """
        Re-derive this node as a template from the original initializer.  Any changes that were made to this node are
        not carried over.

        :param title: The template title.  Defaults to the original title, if this node was converted from a template.
        :param hierarchies: Parameter hierarchies for the new template
        :param verbose: Whether the reason should be logged if the title is invalid
        :return: A new :class:`ParsedTemplate`, or None if the title was invalid
        """
        initializer = self._initializer
        if title is None:
            if (title := initializer.original_title) is None:
                log_failure(self, 'convert to a template', ValueError('no title was provided'), verbose)
                return None
        elif isinstance(title, Title):
            title = title.prefixed_text(colon=True)
        try:
            return ParsedTemplate(initializer.copy(title=title), hierarchies, site=self.site)
        except CONVERSION_ERRORS as e:
            log_failure(self, f'convert to a template with {title=}', e, verbose)
            return None

    def pristine_copy(self) -> ParsedParserFunction:
        return self.__class__(self._initializer, site=self.site)


def _find_subsequence_end(text: str, chars: str) -> int:
    """Return the index after the position where all of the given chars were found in order, or -1."""
    j = 0
    for i, char in enumerate(text):
        if char == chars[j]:
            j += 1
            if j == len(chars):
                return i + 1
    return -1


# endregion


def _param_text(param: TemplateParameter, suppress_keys: set[str], normalize: bool) -> str:
    suppress = param.key in suppress_keys and NUMERIC_KEY.match(param.key) is not None
    if param.source is not None and not normalize and (param.unnamed or not suppress):
        return param.source
    unnamed = (param.unnamed or suppress) and '=' not in param.value
    return '|' + ('' if unnamed else param.key + '=') + param.value


AnyTemplate = Union[Template, ParsedTemplate, RawTemplate, ParserFunction, ParsedParserFunction]

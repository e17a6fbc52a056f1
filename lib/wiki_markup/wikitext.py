"""
Scanner adapter that locates templates, parser functions, and wikilinks in wikitext using :mod:`wikitextparser`, and
turns each of them into a parsed markup node.

Example::

    >>> text = Wikitext('{{Foo|bar|user=baz}} [[Bar|link]]', site=site)
    >>> template = text.parse_templates()[0]
    >>> template.get('user').value
    'baz'

:author: Doug Skrypa
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import TYPE_CHECKING, Callable, Collection, Iterable, Optional, Union

from wikitextparser import WikiText

from .exceptions import InvalidTitleError, TitleNamespaceError
from .titles import Title
from .utils import short_repr, split_top_level, strip_comments
from .nodes.initializers import TITLE_MARKER, ParamSeed, TemplateInitializer, WikilinkInitializer
from .nodes.links import ParsedFileWikilink, ParsedRawWikilink, ParsedWikilink
from .nodes.templates import ParsedParserFunction, ParsedTemplate, RawTemplate, validate_template_title

if TYPE_CHECKING:
    from wikitextparser import ParserFunction as WtpParserFunction, Template as WtpTemplate, WikiLink
    from .site import Site
    from .typing import HierarchyMap

__all__ = ['Wikitext', 'DEFAULT_SKIP_TAGS']
log = logging.getLogger(__name__)

DEFAULT_SKIP_TAGS = frozenset({'!--', 'nowiki', 'pre', 'syntaxhighlight', 'source', 'math'})

Span = tuple[int, int]
ParsedTemplateNode = Union[ParsedTemplate, RawTemplate, ParsedParserFunction]
ParsedLinkNode = Union[ParsedWikilink, ParsedFileWikilink, ParsedRawWikilink]


class Wikitext:
    """
    :param text: The wikitext to scan
    :param site: The site that titles and parser function hooks belong to
    :param skip_tags: Names of tags whose contents are not treated as live markup.  Nodes found inside them are still
      returned, but their ``skip`` attribute is True.  Use ``'!--'`` for comments.
    """

    def __init__(self, text: str, *, site: Site, skip_tags: Iterable[str] = DEFAULT_SKIP_TAGS):
        if not isinstance(text, str):
            raise TypeError(f'Expected a str for text; found {type(text).__name__}')
        self._text = text
        self.site = site
        self._skip_tags = {tag.lower() for tag in skip_tags}

    @property
    def text(self) -> str:
        return self._text

    @property
    def length(self) -> int:
        return len(self._text)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[{short_repr(self._text)}]>'

    @cached_property
    def _parsed(self) -> WikiText:
        return WikiText(self._text)

    # region Skip Tags

    @property
    def skip_tags(self) -> frozenset[str]:
        return frozenset(self._skip_tags)

    def add_skip_tags(self, *tags: str):
        self._skip_tags.update(tag.lower() for tag in tags)
        return self

    def remove_skip_tags(self, *tags: str):
        self._skip_tags.difference_update(tag.lower() for tag in tags)
        return self

    def _skip_spans(self) -> list[Span]:
        parsed = self._parsed
        spans = []
        for tag in self._skip_tags:
            if tag == '!--':
                spans.extend(comment.span for comment in parsed.comments)
            else:
                spans.extend(node.span for node in parsed.get_tags(tag))
        return spans

    # endregion

    # region Templates

    def _double_brace_nodes(self) -> list[Union[WtpTemplate, WtpParserFunction]]:
        parsed = self._parsed
        return sorted((*parsed.templates, *parsed.parser_functions), key=lambda node: node.span)

    def template_initializers(self) -> list[TemplateInitializer]:
        """Return an initializer for every ``{{...}}`` construct, in the order in which they appear in the text."""
        skip_spans = self._skip_spans()
        nodes = self._double_brace_nodes()
        spans = [node.span for node in nodes]
        initializers = []
        for node in nodes:
            string = node.string
            start, end = node.span
            args = node.arguments
            # Parser functions' first argument starts with ``:`` and belongs to the head
            pipe_args = [arg for arg in args if arg.string.startswith('|')]
            head_end = pipe_args[0].span[0] - start if pipe_args else len(string) - 2
            head = string[2:head_end]
            title = strip_comments(head).strip()
            seeds = [
                ParamSeed(arg.value, None if arg.positional else arg.name, arg.string) for arg in pipe_args
            ]
            initializers.append(
                TemplateInitializer(
                    title=title,
                    raw_title=_raw_title(head, title),
                    text=string,
                    start_index=start,
                    end_index=end,
                    nest_level=sum(1 for span in spans if _contains(span, start, end)),
                    skip=_in_spans(start, end, skip_spans),
                    params=seeds,
                )
            )
        return initializers

    def parse_templates(
        self,
        hierarchies: HierarchyMap = None,
        title_predicate: Callable[[str], bool] = None,
        template_predicate: Callable[[ParsedTemplateNode], bool] = None,
    ) -> list[ParsedTemplateNode]:
        """
        :param hierarchies: Mapping of canonical titles (such as ``Template:Foo``) to the parameter hierarchies that
          should be used for templates with that title
        :param title_predicate: Filter that receives each construct's title (or hook) text before a node is created
        :param template_predicate: Filter that receives each node after it was created
        :return: A :class:`ParsedParserFunction` for each construct whose title is a parser function hook, otherwise a
          :class:`ParsedTemplate`, or a :class:`RawTemplate` if its title is not a valid template title
        """
        site = self.site
        hierarchies = hierarchies or {}
        nodes = []
        for initializer in self.template_initializers():
            if title_predicate is not None and not title_predicate(initializer.title):
                continue
            node = self._template_node(initializer, hierarchies)
            if template_predicate is None or template_predicate(node):
                nodes.append(node)

        log.debug(f'Parsed {len(nodes)} template nodes from {self!r} for site={site.name!r}')
        return nodes

    def _template_node(self, initializer: TemplateInitializer, hierarchies: HierarchyMap) -> ParsedTemplateNode:
        site = self.site
        if site.hook_table.verify(initializer.title):
            return ParsedParserFunction(initializer, site=site)
        try:
            title = validate_template_title(initializer.title, site)
        except (InvalidTitleError, TitleNamespaceError) as e:
            log.debug(f'Using a raw template for title={initializer.title!r}: {e}')
            return RawTemplate(initializer, site=site)
        return ParsedTemplate(initializer, hierarchies.get(title.prefixed_text()), site=site)

    def modify_templates(
        self, callback: Callable[[ParsedTemplateNode], Optional[str]], include_skipped: bool = False, **kwargs
    ) -> str:
        """
        :param callback: Function that receives each node and returns the text that should replace it, or None to
          leave it as-is.  Nodes that are nested inside a replaced node are not passed to the callback.
        :param include_skipped: Whether nodes inside skipped tags should be passed to the callback
        :param kwargs: Keyword arguments to pass to :meth:`.parse_templates`
        :return: The modified text.  This object's text is not changed.
        """
        return self._modify(self.parse_templates(**kwargs), callback, include_skipped)

    # endregion

    # region Wikilinks

    def wikilink_initializers(self) -> list[WikilinkInitializer]:
        """
        Return an initializer for every ``[[...]]`` construct, in the order in which they appear in the text.  The
        ``nest_level`` of each is the number of ``{{...}}`` constructs that contain it, while ``parent`` and
        ``children`` are the indexes of the wikilinks that contain it / that it directly contains.
        """
        skip_spans = self._skip_spans()
        brace_spans = [node.span for node in self._double_brace_nodes()]
        links: list[WikiLink] = sorted(self._parsed.wikilinks, key=lambda link: link.span)
        spans = [link.span for link in links]

        initializers = []
        for index, link in enumerate(links):
            start, end = spans[index]
            string = link.string
            target = link.target
            title = strip_comments(target).strip()
            parent = None
            for i in range(index - 1, -1, -1):
                if _contains(spans[i], start, end):
                    parent = i
                    break

            initializers.append(
                WikilinkInitializer(
                    title=title,
                    raw_title=_raw_title(target, title),
                    text=string,
                    start_index=start,
                    end_index=end,
                    nest_level=sum(1 for span in brace_spans if _contains(span, start, end)),
                    skip=_in_spans(start, end, skip_spans),
                    index=index,
                    parent=parent,
                    display=link.text,
                )
            )
            if parent is not None:
                initializers[parent].children.add(index)

        return initializers

    def parse_wikilinks(self) -> list[ParsedLinkNode]:
        """
        :return: A :class:`ParsedFileWikilink` for each link to a file, a :class:`ParsedRawWikilink` for each link with
          an invalid title, and a :class:`ParsedWikilink` for each other link
        """
        site = self.site
        nodes = []
        for initializer in self.wikilink_initializers():
            try:
                title = Title(initializer.title, site=site)
            except InvalidTitleError as e:
                log.debug(f'Using a raw wikilink for title={initializer.title!r}: {e}')
                nodes.append(ParsedRawWikilink(initializer, site=site))
                continue

            if title.namespace == site.ns_file and not title.leading_colon and not title.is_external:
                display = initializer.display
                params = [] if display is None else list(split_top_level(display))
                nodes.append(ParsedFileWikilink(initializer.copy(display=None, params=params), site=site))
            else:
                nodes.append(ParsedWikilink(initializer, site=site))

        log.debug(f'Parsed {len(nodes)} wikilink nodes from {self!r} for site={site.name!r}')
        return nodes

    def modify_wikilinks(
        self, callback: Callable[[ParsedLinkNode], Optional[str]], include_skipped: bool = False
    ) -> str:
        """
        :param callback: Function that receives each node and returns the text that should replace it, or None to
          leave it as-is.  Nodes that are nested inside a replaced node are not passed to the callback.
        :param include_skipped: Whether nodes inside skipped tags should be passed to the callback
        :return: The modified text.  This object's text is not changed.
        """
        return self._modify(self.parse_wikilinks(), callback, include_skipped)

    # endregion

    def _modify(self, nodes, callback: Callable[[object], Optional[str]], include_skipped: bool) -> str:
        replacements: list[tuple[int, int, str]] = []
        for node in sorted(nodes, key=lambda n: (n.start_index, -n.end_index)):
            if node.skip and not include_skipped:
                continue
            elif any(s <= node.start_index and node.end_index <= e for s, e, _ in replacements):
                continue
            elif (replacement := callback(node)) is not None:
                replacements.append((node.start_index, node.end_index, replacement))

        text = self._text
        for start, end, replacement in reversed(replacements):
            text = text[:start] + replacement + text[end:]
        log.debug(f'Replaced {len(replacements)} nodes in {self!r}')
        return text


def _raw_title(head: str, title: str) -> str:
    if title and title in head:
        return head.replace(title, TITLE_MARKER, 1)
    return head


def _contains(span: Span, start: int, end: int) -> bool:
    return span[0] <= start and end <= span[1] and span != (start, end)


def _in_spans(start: int, end: int, spans: Collection[Span]) -> bool:
    return any(s <= start and end <= e for s, e in spans)

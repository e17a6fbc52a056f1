"""
Site metadata needed to validate titles and recognize parser function hooks.

The data is expected to come from a ``action=query&meta=siteinfo`` response with (at least) the ``namespaces``,
``namespacealiases``, ``magicwords``, ``functionhooks``, and ``interwikimap`` siprop values.  Nothing here performs
any requests - callers are responsible for obtaining that data.

:author: Doug Skrypa
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import TYPE_CHECKING, Any, Iterable, Mapping, NamedTuple, Optional

if TYPE_CHECKING:
    from .nodes.hooks import HookTable

__all__ = ['Site', 'Namespace', 'Interwiki']
log = logging.getLogger(__name__)

NS_MAIN = 0
NS_FILE = 6
NS_TEMPLATE = 10


class Namespace(NamedTuple):
    id: int
    name: str
    canonical: Optional[str] = None
    aliases: tuple[str, ...] = ()
    case: str = 'first-letter'

    @property
    def first_letter_case(self) -> bool:
        return self.case == 'first-letter'


class Interwiki(NamedTuple):
    prefix: str
    url: str = ''
    local: bool = False
    trans: bool = False
    local_interwiki: bool = False


def _flag(entry: Mapping[str, Any], key: str) -> bool:
    # formatversion=1 represents true flags as empty strings and omits false ones
    try:
        value = entry[key]
    except KeyError:
        return False
    return value == '' or bool(value)


class Site:
    """Immutable (by convention) container for the parts of a wiki's siteinfo that the markup nodes depend on."""

    def __init__(
        self,
        namespaces: Iterable[Namespace],
        magic_words: Iterable[Mapping[str, Any]] = (),
        function_hooks: Iterable[str] = (),
        interwikis: Iterable[Interwiki] = (),
        name: str = None,
    ):
        self.name = name
        self.namespaces: dict[int, Namespace] = {ns.id: ns for ns in namespaces}
        self.magic_words = tuple(magic_words)
        self.function_hooks = frozenset(function_hooks)
        self.interwiki_map: dict[str, Interwiki] = {iw.prefix.lower(): iw for iw in interwikis}
        self.namespace_ids: dict[str, int] = {}
        for ns in self.namespaces.values():
            for alias in (ns.name, ns.canonical, *ns.aliases):
                if alias is not None:
                    self.namespace_ids[_normalize_ns_name(alias)] = ns.id

    @classmethod
    def from_siteinfo(cls, siteinfo: Mapping[str, Any], name: str = None) -> Site:
        """
        :param siteinfo: A siteinfo API response (or its ``query`` value), in either formatversion
        :param name: An optional name (such as the host) to identify this site in reprs / logs
        :return: A new Site instance
        """
        query = siteinfo.get('query', siteinfo)
        if name is None:
            try:
                name = query['general']['servername']
            except KeyError:
                pass

        aliases = {}
        for entry in query.get('namespacealiases', ()):
            alias = entry['alias'] if 'alias' in entry else entry['*']
            aliases.setdefault(int(entry['id']), []).append(alias)

        namespaces = []
        for ns_id, entry in query['namespaces'].items():
            ns_id = int(entry.get('id', ns_id))
            ns_name = entry['name'] if 'name' in entry else entry.get('*', '')
            ns_aliases = tuple(aliases.get(ns_id, ()))
            case = entry.get('case', 'first-letter')
            namespaces.append(Namespace(ns_id, ns_name, entry.get('canonical'), ns_aliases, case))

        magic_words = []
        for entry in query.get('magicwords', ()):
            mw = {'name': entry['name'], 'aliases': list(entry.get('aliases', ()))}
            mw['case-sensitive'] = _flag(entry, 'case-sensitive')
            magic_words.append(mw)

        interwikis = [
            Interwiki(
                entry['prefix'],
                entry.get('url', ''),
                _flag(entry, 'local'),
                _flag(entry, 'trans'),
                _flag(entry, 'localinterwiki'),
            )
            for entry in query.get('interwikimap', ())
        ]
        log.debug(f'Loaded siteinfo for site={name!r} with {len(namespaces)} namespaces')
        return cls(namespaces, magic_words, query.get('functionhooks', ()), interwikis, name)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[{self.name!r}]>'

    # region Namespaces

    def _canonical_id(self, canonical: str, default: int) -> int:
        for ns in self.namespaces.values():
            if ns.canonical == canonical:
                return ns.id
        return default

    @cached_property
    def ns_main(self) -> int:
        return self.namespace_ids.get('', NS_MAIN)

    @cached_property
    def ns_file(self) -> int:
        return self._canonical_id('File', NS_FILE)

    @cached_property
    def ns_template(self) -> int:
        return self._canonical_id('Template', NS_TEMPLATE)

    def namespace_id(self, name: str) -> Optional[int]:
        """Return the ID of the namespace with the given name or alias (case-insensitive), if it exists."""
        return self.namespace_ids.get(_normalize_ns_name(name))

    def namespace(self, ns_id: int) -> Namespace:
        try:
            return self.namespaces[ns_id]
        except KeyError as e:
            raise ValueError(f'Unknown namespace={ns_id} for {self}') from e

    def is_known_namespace(self, ns_id: int) -> bool:
        return ns_id in self.namespaces

    # endregion

    def interwiki(self, prefix: str) -> Optional[Interwiki]:
        return self.interwiki_map.get(prefix.strip().lower())

    @cached_property
    def hook_table(self) -> HookTable:
        from .nodes.hooks import HookTable

        return HookTable(self.magic_words, self.function_hooks)


def _normalize_ns_name(name: str) -> str:
    return ' '.join(name.replace('_', ' ').split()).lower()

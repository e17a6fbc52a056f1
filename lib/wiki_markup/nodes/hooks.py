"""
Recognition of parser function hooks, such as ``#if:`` or ``lc:``, based on a site's magic words.

:author: Doug Skrypa
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Any, Iterable, Mapping, NamedTuple, Optional, Pattern

__all__ = ['NO_HASH_FUNCTIONS', 'HookTable', 'VerifiedHook']
log = logging.getLogger(__name__)

# Function hooks that are used without a leading ``#``, as defined by MediaWiki's CoreParserFunctions
NO_HASH_FUNCTIONS = frozenset((
    'ns', 'nse', 'urlencode', 'lcfirst', 'ucfirst', 'lc', 'uc',
    'localurl', 'localurle', 'fullurl', 'fullurle', 'canonicalurl', 'canonicalurle',
    'formatnum', 'grammar', 'gender', 'plural', 'formal', 'bidi', 'numberingroup', 'language',
    'padleft', 'padright', 'anchorencode', 'defaultsort', 'filepath',
    'pagesincategory', 'pagesize', 'protectionlevel', 'protectionexpiry',
    # Parser function forms of magic variables; the first parameter is a page title
    'pagename', 'pagenamee', 'fullpagename', 'fullpagenamee', 'subpagename', 'subpagenamee',
    'rootpagename', 'rootpagenamee', 'basepagename', 'basepagenamee', 'talkpagename', 'talkpagenamee',
    'subjectpagename', 'subjectpagenamee',
    'pageid', 'revisionid', 'revisionday', 'revisionday2', 'revisionmonth', 'revisionmonth1', 'revisionyear',
    'revisiontimestamp', 'revisionuser', 'cascadingsources',
    'namespace', 'namespacee', 'namespacenumber', 'talkspace', 'talkspacee', 'subjectspace', 'subjectspacee',
    # Parser function forms of magic variables; the first parameter is "raw"
    'numberofarticles', 'numberoffiles', 'numberofusers', 'numberofactiveusers', 'numberofpages',
    'numberofadmins', 'numberofedits',
    # These already contain the hash in their magic words
    'bcp47', 'dir', 'interwikilink', 'interlanguagelink',
))

_UNDERSCORE_WRAPPED = re.compile(r'^[_＿].+[_＿]$')
_COLON_SUFFIX = re.compile(r'[:：]$')
_HOOK_PREFIX = re.compile(r'^#?[^:：\s]+[:：]')


class VerifiedHook(NamedTuple):
    canonical: str  # The canonical hook, such as ``#if:``
    match: str  # The hook as it was written, such as ``#IF:``


class HookTable:
    """
    Maps canonical parser function hooks to patterns that match every accepted spelling of that hook.

    :param magic_words: The site's magic words, each of which is a mapping with ``name``, ``aliases``, and
      ``case-sensitive`` keys
    :param function_hooks: The names of the site's magic words that are parser function hooks
    """

    __slots__ = ('_patterns',)

    def __init__(self, magic_words: Iterable[Mapping[str, Any]], function_hooks: Iterable[str]):
        function_hooks = set(function_hooks)
        self._patterns: dict[str, Pattern] = {}
        for magic_word in magic_words:
            name = magic_word['name']
            if name not in function_hooks:
                continue
            case_sensitive = bool(magic_word.get('case-sensitive'))
            no_hash = name in NO_HASH_FUNCTIONS
            keys = [name]
            keys.extend(
                alias
                for alias in magic_word.get('aliases', ())
                if alias != name and not _UNDERSCORE_WRAPPED.match(alias)
            )
            alternatives = '|'.join(_hook_pattern(key, no_hash, case_sensitive) for key in keys)
            canonical = ('' if no_hash else '#') + name + ':'
            self._patterns[canonical] = re.compile(alternatives, 0 if case_sensitive else re.IGNORECASE)

        log.debug(f'Built hook table with {len(self._patterns)} function hooks')

    @property
    def patterns(self) -> Mapping[str, Pattern]:
        return MappingProxyType(self._patterns)

    def verify(self, hook: str) -> Optional[VerifiedHook]:
        """
        :param hook: A candidate parser function hook, optionally followed by its first argument (e.g., ``#if:x``).
          Whitespace is not allowed between the hook name and the colon.
        :return: The canonical form of the hook and the hook as it was written, or None if it is not a valid hook
        """
        if not isinstance(hook, str) or not (m := _HOOK_PREFIX.match(hook.strip())):
            return None
        prefix = m.group()
        for canonical, pattern in self._patterns.items():
            if pattern.match(prefix):
                return VerifiedHook(canonical, prefix)
        return None

    def __contains__(self, canonical: str) -> bool:
        return canonical in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[hooks={len(self._patterns)}]>'


def _hook_pattern(key: str, no_hash: bool, case_sensitive: bool) -> str:
    hash_prefix = '' if no_hash else '#'
    if key.startswith('#'):
        hash_prefix = '#'
        key = key[1:]
    if not _COLON_SUFFIX.search(key):
        key += ':'
    if case_sensitive:
        # The first letter is case-insensitive even for case-sensitive hooks
        first = key[0]
        return f'^{hash_prefix}[{re.escape(first.lower() + first.upper())}]{re.escape(key[1:])}$'
    return f'^{re.escape(hash_prefix + key)}$'

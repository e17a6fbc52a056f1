"""
Helpers for unit tests

:author: Doug Skrypa
"""

from __future__ import annotations

import json
from difflib import unified_diff
from functools import lru_cache
from io import StringIO
from pathlib import Path
from typing import Any
from unittest import TestCase

from .site import Site
from .utils import rich_repr

__all__ = ['MarkupTest', 'format_diff', 'get_siteinfo', 'get_site']

TEST_DATA_DIR = Path(__file__).resolve().parents[2].joinpath('tests', 'data')
DEFAULT_SITE = 'en.wikipedia.org'


class MarkupTest(TestCase):
    site_name: str = DEFAULT_SITE

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.site = get_site(cls.site_name)

    def assert_equal(self, expected, actual, msg: str = None):
        if expected != actual:
            diff_str = format_diff(rich_repr(expected), rich_repr(actual))
            if not diff_str.strip():
                self.assertEqual(expected, actual, msg)  # Provides a generic diff / message
            else:
                suffix = f'\n{msg}' if msg else ''
                self.fail(f'Objects did not match:\n{diff_str}{suffix}')

    def assert_strings_equal(self, expected: str, actual: str, message: str = None, diff_lines: int = 3):
        if message:
            self.assertEqual(expected, actual, message)
        elif expected != actual:
            diff = format_diff(expected, actual, n=diff_lines)
            if not diff.strip():
                self.assertEqual(expected, actual)
            else:
                self.fail('Strings did not match:\n' + diff)


def _colored(text: str, color: int, end: str = '\n'):
    return f'\x1b[38;5;{color}m{text}\x1b[0m{end}'


def format_diff(a: str, b: str, name_a: str = 'expected', name_b: str = '  actual', n: int = 3) -> str:
    sio = StringIO()
    for i, line in enumerate(unified_diff(a.splitlines(), b.splitlines(), name_a, name_b, n=n, lineterm='')):
        if i < 2:
            sio.write(line + '\n')
        elif line.startswith('+'):
            sio.write(_colored(line, 2))
        elif line.startswith('-'):
            sio.write(_colored(line, 1))
        elif line.startswith('@@ '):
            sio.write(_colored(line, 6, '\n\n'))
        else:
            sio.write(line + '\n')

    return sio.getvalue()


@lru_cache(5)
def get_siteinfo(site: str) -> dict[str, Any]:
    with TEST_DATA_DIR.joinpath('siteinfo', f'{site}.json').open('r', encoding='utf-8') as f:
        return json.load(f)


@lru_cache(5)
def get_site(site: str = DEFAULT_SITE) -> Site:
    return Site.from_siteinfo(get_siteinfo(site), site)

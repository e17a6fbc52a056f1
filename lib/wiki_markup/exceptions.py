"""
:author: Doug Skrypa
"""

__all__ = ['MarkupError', 'InvalidTitleError', 'TitleNamespaceError', 'InvalidHookError', 'RawTitleError']


class MarkupError(Exception):
    """Base exception for other wiki_markup exceptions"""


class InvalidTitleError(MarkupError, ValueError):
    """Exception to be raised when a title cannot be parsed"""

    def __init__(self, title, reason: str):
        self.title = title
        self.reason = reason

    def __str__(self):
        return f'Invalid title={self.title!r}: {self.reason}'


# region Node Exceptions


class TitleNamespaceError(MarkupError, ValueError):
    """A valid title was provided, but it cannot be used for the requested node type"""
    _problem = 'The title cannot be used here'

    def __init__(self, title, problem: str = None):
        self.title = title
        if problem:
            self._problem = problem

    def __str__(self):
        return f'{self.__class__.__name__}: {self._problem} for title={self.title!r}'


class InvalidHookError(MarkupError, ValueError):
    """Exception to be raised when a parser function hook does not match any of the site's function hooks"""

    def __init__(self, hook):
        self.hook = hook

    def __str__(self):
        return f'{self.hook!r} is not a valid function hook'


class RawTitleError(MarkupError):
    """The hook of a parsed parser function could not be located in its raw title"""

    def __init__(self, title: str, raw_title: str, hook: str):
        self.title = title
        self.raw_title = raw_title
        self.hook = hook

    def __str__(self):
        return f'Unable to locate hook={self.hook!r} in raw_title={self.raw_title!r} for title={self.title!r}'


# endregion

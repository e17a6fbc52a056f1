"""
Parameter containers used by markup nodes.

:class:`ParamList` is a plain ordered list of positional values, used by parser functions and file links.
:class:`TemplateParams` is a keyed store for template parameters that tracks parameter order, duplicate values, and
hierarchies of equivalent keys.

:author: Doug Skrypa
"""

from __future__ import annotations

import logging
import re
from copy import deepcopy
from typing import Callable, Iterable, Iterator, Mapping, NamedTuple, Optional, Union

from ..typing import Hierarchies, StrOrPattern
from ..utils import value_matches
from .enums import OverrideType, Position
from .initializers import ParamSeed

__all__ = [
    'ParamList', 'TemplateParams', 'TemplateParameter', 'DuplicateParameter', 'KeyOverride', 'ParamPosition',
    'normalize_seeds',
]
log = logging.getLogger(__name__)

NUMERIC_KEY = re.compile(r'^[1-9]\d*$')
ParamPosition = Union[str, Position, Mapping[str, str], None]
SeedLike = Union[ParamSeed, tuple[Optional[str], str], Mapping[str, Optional[str]]]
ParamPredicate = Callable[[str, 'TemplateParameter'], bool]


def _check_str(name: str, value) -> str:
    if not isinstance(value, str):
        raise TypeError(f'Expected a str for {name}; found {type(value).__name__}')
    return value


# region Ordered Parameter List


class ParamList:
    """
    An ordered list of positional string values.  Deleting a value without shifting the values to its right leaves a
    hole in its place; holes are reported as missing values by :meth:`get` / :meth:`has`, and are rendered as empty
    strings by the nodes that use this list.
    """

    __slots__ = ('params',)

    def __init__(self, params: Iterable[str] = ()):
        self.params: list[Optional[str]] = []
        for value in params:
            self.add(value)

    @staticmethod
    def _check_index(index) -> int:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f'Expected an int for index; found {type(index).__name__}')
        return index

    def add(self, value: str) -> ParamList:
        self.params.append(_check_str('value', value))
        return self

    def set(self, value: str, index: int, overwrite: bool = True, ifexist: bool = False) -> bool:
        """
        :param value: The value to store
        :param index: The index at which the value should be stored
        :param overwrite: Whether an existing value at the given index may be replaced
        :param ifexist: Only store the value if there is already a value at the given index
        :return: True if the value was stored, False otherwise
        """
        _check_str('value', value)
        if self._check_index(index) < 0:
            return False
        exists = self.get(index) is not None
        if (exists and not overwrite) or (not exists and ifexist):
            return False
        if index >= len(self.params):
            self.params.extend([None] * (index + 1 - len(self.params)))
        self.params[index] = value
        return True

    def get(self, index: int) -> Optional[str]:
        if 0 <= self._check_index(index) < len(self.params):
            return self.params[index]
        return None

    def has(self, index: Union[int, Callable[[int, str], bool]], value: StrOrPattern = None) -> bool:
        """
        :param index: The index to check, or a predicate that will be called with each (index, value) pair
        :param value: A str for an exact match or a compiled pattern to search for in the value at the given index
        :return: True if a matching value exists, False otherwise
        """
        if callable(index):
            return any(index(i, val) for i, val in enumerate(self.params) if val is not None)
        current = self.get(index)
        return current is not None and value_matches(current, value)

    def delete(self, index: int, left_shift: bool = True) -> bool:
        if self.get(index) is None:
            return False
        if left_shift:
            del self.params[index]
        else:
            self.params[index] = None
        return True

    def strings(self) -> list[str]:
        return ['' if val is None else val for val in self.params]

    def __len__(self) -> int:
        return len(self.params)

    def __iter__(self) -> Iterator[str]:
        yield from (val for val in self.params if val is not None)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ParamList):
            return NotImplemented
        return self.params == other.params

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}{self.params}>'


# endregion


# region Keyed Parameters


class DuplicateParameter(NamedTuple):
    key: str
    value: str
    unnamed: bool = False

    @property
    def text(self) -> str:
        return '|' + ('' if self.unnamed else self.key + '=') + self.value


class KeyOverride(NamedTuple):
    type: OverrideType
    key: str  # The already registered key


class TemplateParameter:
    __slots__ = ('key', 'value', 'unnamed', 'duplicates', 'source')

    def __init__(
        self,
        key: str,
        value: str,
        unnamed: bool = False,
        duplicates: list[DuplicateParameter] = None,
        source: str = None,
    ):
        self.key = key
        self.value = value
        self.unnamed = unnamed
        self.duplicates = [] if duplicates is None else duplicates
        self.source = source  # The verbatim parsed text; cleared when the parameter is replaced

    @property
    def text(self) -> str:
        if self.source is not None:
            return self.source
        return self.canonical_text

    @property
    def canonical_text(self) -> str:
        return '|' + ('' if self.unnamed else self.key + '=') + self.value

    def as_duplicate(self) -> DuplicateParameter:
        return DuplicateParameter(self.key, self.value, self.unnamed)

    def copy(self) -> TemplateParameter:
        return self.__class__(self.key, self.value, self.unnamed, list(self.duplicates), self.source)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TemplateParameter):
            return NotImplemented
        return (
            self.key == other.key
            and self.value == other.value
            and self.unnamed == other.unnamed
            and self.duplicates == other.duplicates
        )

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[{self.key!r}={self.value!r}, unnamed={self.unnamed}]>'

    def __rich_repr__(self):
        yield 'key', self.key
        yield 'value', self.value
        yield 'unnamed', self.unnamed
        yield 'duplicates', self.duplicates


class TemplateParams:
    """
    Keyed store for the parameters of a single template.

    Each live key maps to exactly one :class:`TemplateParameter`.  Values that were superseded (by a repeated key
    while parsing, or by a higher priority key in the same hierarchy) are recorded in the live parameter's
    ``duplicates`` list, and never participate in lookups.

    A hierarchy is a list of equivalent keys where later entries have a higher priority, such as
    ``['1', 'user', 'User']``.  At most one key from a given hierarchy is live at a time.

    Parameters returned by :meth:`get`, :meth:`values`, and :meth:`items` are copies; modifications must be made
    through this store's methods.
    """

    __slots__ = ('_params', '_order', '_hierarchies')

    def __init__(self, seeds: Iterable[SeedLike] = (), hierarchies: Hierarchies = None):
        self._params: dict[str, TemplateParameter] = {}
        self._order: list[str] = []
        self._hierarchies = _copy_hierarchies(hierarchies)
        for seed in normalize_seeds(seeds):
            # An explicitly empty key, as in ``|=x``, is registered as unnamed
            self._register(seed.key or '', seed.value, parsing=True, source=seed.text)

    # region Registration

    def insert(self, key: Optional[str], value: str, overwrite: bool = True, position: ParamPosition = None) -> bool:
        """
        Insert or replace a parameter.

        :param key: The parameter key.  An empty key (or None) indicates an unnamed parameter, which will be assigned
          the smallest unused positive integer key.
        :param value: The parameter value.  Values of named parameters are trimmed.
        :param overwrite: Whether an existing value for the key (or a higher priority key in the same hierarchy)
          may be replaced
        :param position: Where the parameter should be placed in the parameter order.  One of ``'start'``,
          ``'end'``, ``{'before': key}``, or ``{'after': key}``.  New parameters are added at the end by default;
          existing parameters keep their position by default.
        :return: True if the given value is live after this call, False otherwise
        """
        return self._register('' if key is None else key, value, overwrite, position)

    def update(self, key: str, value: str) -> bool:
        """Replace the value of an existing parameter, keeping its position.  Does nothing if the key is absent."""
        return self._register(_check_str('key', key), value, must_exist=True)

    def _register(
        self,
        key: str,
        value: str,
        overwrite: bool = True,
        position: ParamPosition = None,
        *,
        must_exist: bool = False,
        parsing: bool = False,
        source: str = None,
    ) -> bool:
        key = _check_str('key', key).strip()
        _check_str('value', value)
        position = _normalize_position(position)
        if unnamed := not key:
            key = self.find_numeric_key()
        else:
            value = value.strip()

        if must_exist and key not in self._params:
            return False

        override = self.check_key_override(key)
        existing = key in self._params
        if not override and not existing:
            self._params[key] = TemplateParameter(key, value, unnamed, [], source)
            self._place(key, position, True)
            return True
        elif not overwrite:
            return False

        if override is None:
            old = self._params[key]
            if parsing:
                old.duplicates.append(old.as_duplicate())
                self._order.remove(key)
                self._order.append(key)
            elif old.value == value and old.unnamed == unnamed:
                source = old.source  # The value did not change
            self._params[key] = TemplateParameter(key, value, unnamed, old.duplicates, source)
            if not parsing and position is not None:
                self._place(key, position, False)
            return True
        elif override.type is OverrideType.OVERRIDDEN:
            _add_duplicate(self._params[override.key].duplicates, DuplicateParameter(key, value, unnamed), parsing)
            log.debug(f'Parameter {key=} is overridden by higher priority key={override.key!r}')
            return False

        evicted = self._params.pop(override.key)
        duplicates = evicted.duplicates
        _add_duplicate(duplicates, evicted.as_duplicate(), parsing)
        self._params[key] = TemplateParameter(key, value, unnamed, duplicates, source)
        index = self._order.index(override.key)
        if position is not None and position[1] == override.key:
            position = None
        if parsing or position is not None:
            del self._order[index]
            self._place(key, position, True)
        else:
            self._order[index] = key
        return True

    def _place(self, key: str, position: Optional[tuple[Position, Optional[str]]], is_new: bool):
        order = self._order
        if position is None:
            if is_new:
                order.append(key)
            return

        kind, ref = position
        others = [k for k in order if k != key]
        if kind is Position.START:
            index = 0
        elif kind is Position.END:
            index = len(others)
        elif ref == key or ref not in others:
            if is_new:
                order.append(key)
            return
        else:
            index = others.index(ref) + (kind is Position.AFTER)

        others.insert(index, key)
        self._order = others

    def check_key_override(self, key: str) -> Optional[KeyOverride]:
        """
        :param key: A parameter key
        :return: A :class:`KeyOverride` describing the relationship between the given key and a live key in the same
          hierarchy, or None if the given key is not in any hierarchy or no other key from its hierarchy is live
        """
        if (chain := self._find_chain(key)) is None:
            return None
        try:
            registered = next(k for k in self._params if k != key and k in chain)
        except StopIteration:
            return None
        if chain.index(key) > chain.index(registered):
            return KeyOverride(OverrideType.OVERRIDES, registered)
        return KeyOverride(OverrideType.OVERRIDDEN, registered)

    def find_numeric_key(self) -> str:
        """Return the smallest positive integer that is not already used as a key, as a string"""
        numeric_keys = {int(key) for key in self._params if NUMERIC_KEY.match(key)}
        i = 1
        while i in numeric_keys:
            i += 1
        return str(i)

    # endregion

    # region Access

    def _find_chain(self, key: str) -> Optional[list[str]]:
        for chain in self._hierarchies:
            if key in chain:
                return chain
        return None

    def _resolve(self, key: str) -> str:
        if chain := self._find_chain(key):
            for k in reversed(chain):
                if k in self._params:
                    return k
        return key

    def get(self, key: str, resolve_hierarchy: bool = False) -> Optional[TemplateParameter]:
        """
        :param key: The key of the parameter to retrieve
        :param resolve_hierarchy: If the key is in a hierarchy, return the live parameter with the highest priority
          key in that hierarchy instead of only checking for the given key
        :return: A copy of the matching parameter, or None if it does not exist
        """
        _check_str('key', key)
        if resolve_hierarchy:
            key = self._resolve(key)
        try:
            return self._params[key].copy()
        except KeyError:
            return None

    def has(self, key: Union[StrOrPattern, ParamPredicate], value: StrOrPattern = None) -> bool:
        """
        :param key: An exact key, a compiled pattern to search for in keys, or a predicate that will be called with
          each (key, parameter copy) pair
        :param value: A str for an exact match or a compiled pattern to search for in the value of a parameter with a
          matching key
        :return: True if a matching parameter exists, False otherwise
        """
        if isinstance(key, str):
            if not key or (param := self._params.get(key)) is None:
                return False
            return value_matches(param.value, value)
        elif isinstance(key, re.Pattern):
            return any(key.search(k) and value_matches(p.value, value) for k, p in self._params.items())
        elif callable(key):
            return any(key(k, self._params[k].copy()) for k in self._order)
        raise TypeError(f'Expected a str, compiled pattern, or predicate for key; found {type(key).__name__}')

    def delete(self, key: str, resolve_hierarchy: bool = False) -> bool:
        _check_str('key', key)
        if resolve_hierarchy:
            key = self._resolve(key)
        try:
            del self._params[key]
        except KeyError:
            return False
        self._order.remove(key)
        return True

    @property
    def order(self) -> tuple[str, ...]:
        return tuple(self._order)

    @property
    def hierarchies(self) -> list[list[str]]:
        return deepcopy(self._hierarchies)

    def keys(self) -> list[str]:
        return list(self._order)

    def values(self) -> list[TemplateParameter]:
        return [self._params[key].copy() for key in self._order]

    def items(self) -> list[tuple[str, TemplateParameter]]:
        return [(key, self._params[key].copy()) for key in self._order]

    def _live(self) -> Iterator[TemplateParameter]:
        # Internal access without copying, in order
        for key in self._order:
            yield self._params[key]

    def copy(self) -> TemplateParams:
        clone = self.__class__(hierarchies=self._hierarchies)
        clone._params = {key: param.copy() for key, param in self._params.items()}
        clone._order = list(self._order)
        return clone

    # endregion

    # region Internal Methods

    def __len__(self) -> int:
        return len(self._params)

    def __contains__(self, key: str) -> bool:
        return key in self._params

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._order))

    def __eq__(self, other) -> bool:
        if not isinstance(other, TemplateParams):
            return NotImplemented
        return self._order == other._order and self._params == other._params

    def __repr__(self) -> str:
        params = ', '.join(f'{p.key}={p.value!r}' for p in self._live())
        return f'<{self.__class__.__name__}[{params}]>'

    def __rich_repr__(self):
        for param in self._live():
            yield param.key, param.value

    # endregion


# endregion


def normalize_seeds(seeds: Iterable[SeedLike]) -> Iterator[ParamSeed]:
    """Convert (key, value) pairs and {'key': ..., 'value': ...} mappings to :class:`ParamSeed` objects."""
    for seed in seeds:
        if isinstance(seed, ParamSeed):
            yield seed
        elif isinstance(seed, Mapping):
            yield ParamSeed(seed['value'], seed.get('key'))
        elif isinstance(seed, tuple) and len(seed) == 2:
            key, value = seed
            yield ParamSeed(value, key)
        else:
            raise TypeError(f'Invalid parameter={seed!r} - expected a ParamSeed, (key, value) pair, or mapping')


def _normalize_position(position: ParamPosition) -> Optional[tuple[Position, Optional[str]]]:
    if position is None:
        return None
    elif isinstance(position, (str, Position)):
        try:
            kind = Position(position)
        except ValueError as e:
            raise ValueError(f'Invalid {position=}') from e
        if kind in (Position.START, Position.END):
            return kind, None
    elif isinstance(position, Mapping) and len(position) == 1:
        (kind, ref), = position.items()
        try:
            kind = Position(kind)
        except ValueError as e:
            raise ValueError(f'Invalid {position=}') from e
        if kind in (Position.BEFORE, Position.AFTER):
            return kind, _check_str('position reference key', ref).strip()
    else:
        raise TypeError(f'Invalid {position=} - expected a str or a single-entry mapping')
    raise ValueError(f'Invalid {position=}')


def _copy_hierarchies(hierarchies: Optional[Hierarchies]) -> list[list[str]]:
    if not hierarchies:
        return []
    copied = []
    for chain in hierarchies:
        if isinstance(chain, str):
            raise TypeError(f'Invalid hierarchy={chain!r} - expected a sequence of keys')
        copied.append([_check_str('hierarchy key', key).strip() for key in chain])
    return copied


def _add_duplicate(duplicates: list[DuplicateParameter], duplicate: DuplicateParameter, allow_repeat: bool):
    if allow_repeat or duplicate not in duplicates:
        duplicates.append(duplicate)

"""
Typing helpers.
"""

from typing import Mapping, Pattern, Sequence, Union

StrOrPattern = Union[str, Pattern]
Hierarchy = Sequence[str]  # Equivalent parameter keys, in ascending priority order
Hierarchies = Sequence[Hierarchy]
HierarchyMap = Mapping[str, Hierarchies]  # Canonical template title -> hierarchies

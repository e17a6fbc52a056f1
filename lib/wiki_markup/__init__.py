"""
Mutable node model for MediaWiki template, parser function, and wikilink markup that can be stringified back to the
text it was parsed from.

:author: Doug Skrypa
"""

from .__version__ import __author__, __title__, __version__
from .exceptions import *
from .nodes import *
from .site import Site, Namespace, Interwiki
from .titles import Title
from .wikitext import Wikitext, DEFAULT_SKIP_TAGS

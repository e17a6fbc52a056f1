__title__ = 'wiki_markup'
__description__ = 'Mutable, round-trip capable node model for MediaWiki template and link markup'
__url__ = 'https://github.com/dskrypa/wiki_markup'
__version__ = '2024.11.03'
__author__ = 'Doug Skrypa'
__author_email__ = 'dskrypa@gmail.com'

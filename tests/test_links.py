#!/usr/bin/env python

from unittest import main

from wiki_markup.exceptions import TitleNamespaceError
from wiki_markup.nodes.links import FileWikilink, ParsedFileWikilink, ParsedRawWikilink, ParsedWikilink
from wiki_markup.nodes.links import RawWikilink, Wikilink, _WikilinkBase
from wiki_markup.titles import Title
from wiki_markup.testing import MarkupTest
from wiki_markup.wikitext import Wikitext


class LinkTestCase(MarkupTest):
    def parse(self, text: str, **kwargs):
        return Wikitext(text, site=self.site, **kwargs).parse_wikilinks()


class WikilinkTest(LinkTestCase):
    def test_base_class_is_abstract(self):
        with self.assertRaises(TypeError):
            _WikilinkBase('Foo')  # noqa

    def test_titles(self):
        self.assertEqual('[[Foo]]', str(Wikilink('foo', site=self.site)))
        self.assertEqual('[[Foo bar#baz|qux]]', str(Wikilink('foo_bar#baz', 'qux', site=self.site)))
        self.assertEqual('[[:File:Foo.png]]', str(Wikilink(':Image:foo.png', site=self.site)))
        self.assertEqual('[[commons:Foo]]', str(Wikilink('commons:Foo', site=self.site)))
        self.assertEqual('[[Foo]]', str(Wikilink(Title('Foo', site=self.site))))

    def test_invalid_titles(self):
        with self.assertRaises(TitleNamespaceError):
            Wikilink('File:Foo.png', site=self.site)
        with self.assertRaises(TitleNamespaceError):
            Wikilink('Image:Foo.png', site=self.site)
        with self.assertRaises(TypeError):
            Wikilink('Foo')
        with self.assertRaises(TypeError):
            Wikilink(None, site=self.site)  # noqa

    def test_display(self):
        link = Wikilink('foo#bar', site=self.site)
        self.assertFalse(link.has_display())
        self.assertEqual('Foo#bar', link.get_display())
        self.assertIs(link, link.set_display(' baz '))
        self.assertTrue(link.has_display())
        self.assertEqual('baz', link.get_display())
        self.assertEqual('[[Foo#bar|baz]]', str(link))
        self.assertEqual('[[Foo#bar]]', link.stringify(suppress_display=True))
        link.set_display('')
        self.assertFalse(link.has_display())
        self.assertEqual('[[Foo#bar]]', str(link))
        with self.assertRaises(TypeError):
            link.set_display(1)  # noqa

    def test_set_title(self):
        link = Wikilink('Foo', 'bar', site=self.site)
        self.assertFalse(link.set_title('File:Foo.png'))
        self.assertEqual('[[Foo|bar]]', str(link))
        self.assertTrue(link.set_title('user:baz'))
        self.assertEqual('[[User:Baz|bar]]', str(link))

    def test_set_title_failure_is_logged_when_verbose(self):
        link = Wikilink('Foo', site=self.site)
        with self.assertLogs('wiki_markup.nodes.base', 'ERROR'):
            self.assertFalse(link.set_title('Foo|bar', verbose=True))

    def test_to_file_wikilink(self):
        link = Wikilink('Foo', 'bar', site=self.site)
        file_link = link.to_file_wikilink('Image:baz.png')
        self.assertIsInstance(file_link, FileWikilink)
        self.assertEqual('[[File:Baz.png|bar]]', str(file_link))
        self.assertEqual('[[File:Baz.png]]', str(Wikilink('Foo', site=self.site).to_file_wikilink('File:Baz.png')))
        self.assertIsNone(link.to_file_wikilink('Foo'))


class FileWikilinkTest(LinkTestCase):
    def test_titles_and_params(self):
        link = FileWikilink('Image:foo.png', ['thumb', 'A caption'], site=self.site)
        self.assertEqual('[[File:Foo.png|thumb|A caption]]', str(link))
        link.params.add('right')
        self.assertEqual('[[File:Foo.png|thumb|A caption|right]]', str(link))
        self.assertEqual('[[File:Foo.png]]', str(FileWikilink('File:Foo.png', site=self.site)))

    def test_invalid_titles(self):
        for title in ('Foo', ':File:Foo.png', 'commons:File:Foo.png'):
            with self.subTest(title=title), self.assertRaises(TitleNamespaceError):
                FileWikilink(title, site=self.site)

    def test_set_title(self):
        link = FileWikilink('File:Foo.png', ['thumb'], site=self.site)
        self.assertFalse(link.set_title('Foo'))
        self.assertTrue(link.set_title('File:Bar.png'))
        self.assertEqual('[[File:Bar.png|thumb]]', str(link))

    def test_sort_key(self):
        link = FileWikilink('File:Foo.png', ['thumb', 'alt=x', 'A caption'], site=self.site)
        self.assertEqual('[[File:Foo.png|A caption|alt=x|thumb]]', link.stringify(sort_key=str.lower))
        self.assertEqual('[[File:Foo.png|thumb|alt=x|A caption]]', str(link))

    def test_to_wikilink(self):
        link = FileWikilink('File:Foo.png', ['thumb', 'A caption'], site=self.site)
        self.assertEqual('[[Foo|thumb|A caption]]', str(link.to_wikilink('foo')))
        self.assertEqual('[[Foo]]', str(FileWikilink('File:Foo.png', site=self.site).to_wikilink('Foo')))
        self.assertIsNone(link.to_wikilink('File:Bar.png'))


class RawWikilinkTest(LinkTestCase):
    def test_stringify(self):
        link = RawWikilink('{{{1}}}', 'foo')
        self.assertEqual('[[{{{1}}}|foo]]', str(link))
        self.assertEqual('[[{{{1}}}]]', link.stringify(suppress_display=True))
        self.assertEqual('{{{1}}}', RawWikilink('{{{1}}}').get_display())
        self.assertIs(link, link.set_title('{{{2}}}'))
        self.assertEqual('[[{{{2}}}|foo]]', str(link))
        with self.assertRaises(TypeError):
            RawWikilink(1)  # noqa
        with self.assertRaises(TypeError):
            link.set_title(None)  # noqa

    def test_conversions_without_site(self):
        link = RawWikilink('{{{1}}}', 'foo')
        self.assertIsNone(link.to_wikilink('Bar'))
        self.assertEqual('[[Bar|foo]]', str(link.to_wikilink(Title('Bar', site=self.site))))

    def test_conversions_with_site(self):
        link = RawWikilink('{{{1}}}', 'foo', site=self.site)
        self.assertEqual('[[Bar|foo]]', str(link.to_wikilink('bar')))
        self.assertEqual('[[File:Bar.png|foo]]', str(link.to_file_wikilink('File:Bar.png')))
        self.assertIsNone(link.to_wikilink('File:Bar.png'))
        self.assertIsNone(link.to_file_wikilink('Bar'))


class ParsedWikilinkTest(LinkTestCase):
    def test_round_trip(self):
        cases = (
            '[[foo]]',
            '[[ foo bar |baz]]',
            '[[Foo|]]',
            '[[:File:Foo.png|x]]',
            '[[Foo<!-- c -->]]',
            '[[foo#bar|baz]]',
            '[[{{{1}}}|foo]]',
            '[[File:foo.png|thumb|A caption]]',
        )
        for text in cases:
            with self.subTest(text=text):
                links = self.parse(text)
                self.assertEqual(1, len(links))
                self.assertEqual(text, links[0].stringify(raw_title=True))

    def test_node_types(self):
        link, file_link, raw_link, colon_file_link = self.parse(
            '[[foo]] [[Image:Foo.png]] [[{{{1}}}]] [[:File:Foo.png]]'
        )
        self.assertIsInstance(link, ParsedWikilink)
        self.assertIsInstance(file_link, ParsedFileWikilink)
        self.assertIsInstance(raw_link, ParsedRawWikilink)
        self.assertIsInstance(colon_file_link, ParsedWikilink)

    def test_canonical_title(self):
        link = self.parse('[[ foo_bar #baz|qux]]')[0]
        self.assertEqual('[[Foo bar#baz|qux]]', str(link))
        self.assertEqual(' foo_bar #baz', link.raw_title)
        self.assertEqual('[[ foo_bar #baz|qux]]', link.stringify(raw_title=True))

    def test_display_is_kept_verbatim_until_changed(self):
        link = self.parse('[[foo| bar ]]')[0]
        self.assertEqual('bar', link.get_display())
        self.assertEqual('[[Foo| bar ]]', str(link))
        link.set_display('baz')
        self.assertEqual('[[Foo|baz]]', str(link))
        self.assertEqual('[[Foo]]', link.stringify(suppress_display=True))

    def test_changed_title_keeps_raw_formatting(self):
        link = self.parse('[[ foo bar |baz]]')[0]
        self.assertTrue(link.set_title('qux'))
        self.assertEqual('[[ Qux |baz]]', link.stringify(raw_title=True))
        self.assertEqual('[[Qux|baz]]', str(link))

    def test_provenance(self):
        text = 'abc [[foo|bar]]'
        link = self.parse(text)[0]
        self.assertEqual('[[foo|bar]]', link.text)
        self.assertEqual((4, 15), link.span)
        self.assertEqual(text[4:15], link.text)
        self.assertEqual(0, link.index)
        self.assertIsNone(link.parent)
        self.assertEqual(set(), link.children)

    def test_nested_links(self):
        outer, inner = self.parse('[[File:foo.png|thumb|A [[caption]] here]]')
        self.assertIsInstance(outer, ParsedFileWikilink)
        self.assertEqual(['thumb', 'A [[caption]] here'], outer.params.params)
        self.assertEqual({1}, outer.children)
        self.assertIsNone(outer.parent)
        self.assertEqual(0, inner.parent)
        self.assertEqual('[[Caption]]', str(inner))
        self.assertEqual('[[File:foo.png|thumb|A [[caption]] here]]', outer.stringify(raw_title=True))

    def test_file_params_keep_tag_contents(self):
        text = '[[File:X.png|thumb|a<nowiki>|</nowiki>b|{{c|d}}]]'
        link = self.parse(text)[0]
        self.assertEqual(['thumb', 'a<nowiki>|</nowiki>b', '{{c|d}}'], link.params.params)
        self.assertEqual(text, link.stringify(raw_title=True))

    def test_nest_level(self):
        nested, top_level = self.parse('{{Foo|[[bar]]}} [[baz]]')
        self.assertEqual(1, nested.nest_level)
        self.assertEqual(0, top_level.nest_level)

    def test_skip(self):
        skipped, live = self.parse('<span>[[foo]]</span> [[bar]]', skip_tags={'span'})
        self.assertTrue(skipped.skip)
        self.assertFalse(live.skip)
        self.assertFalse(any(link.skip for link in self.parse('<span>[[foo]]</span> [[bar]]')))

    def test_to_file_wikilink(self):
        link = self.parse('[[foo|bar]]')[0]
        link.set_display('changed')
        file_link = link.to_file_wikilink('File:X.png')
        self.assertIsInstance(file_link, ParsedFileWikilink)
        self.assertEqual('[[File:X.png|bar]]', file_link.stringify(raw_title=True))
        self.assertEqual(link.span, file_link.span)
        self.assertIsNone(link.to_file_wikilink('Foo'))

    def test_file_link_to_wikilink(self):
        link = self.parse('[[File:foo.png|thumb|A caption]]')[0]
        converted = link.to_wikilink('Bar')
        self.assertIsInstance(converted, ParsedWikilink)
        self.assertEqual('[[Bar|thumb|A caption]]', converted.stringify(raw_title=True))
        self.assertIsNone(link.to_wikilink('File:Bar.png'))

    def test_raw_link_conversions(self):
        link = self.parse('[[{{{1}}}|foo]]')[0]
        self.assertIsInstance(link.to_wikilink('Bar'), ParsedWikilink)
        self.assertEqual('[[Bar|foo]]', link.to_wikilink('Bar').stringify(raw_title=True))
        self.assertEqual('[[File:Bar.png|foo]]', link.to_file_wikilink('File:Bar.png').stringify(raw_title=True))
        self.assertIsNone(link.to_wikilink('File:Bar.png'))

    def test_pristine_copy(self):
        link = self.parse('[[foo|bar]]')[0]
        link.set_title('Qux')
        link.set_display('baz')
        self.assertEqual('[[Qux|baz]]', str(link))
        copy = link.pristine_copy()
        self.assertIsInstance(copy, ParsedWikilink)
        self.assertEqual('[[foo|bar]]', copy.stringify(raw_title=True))

        file_link = self.parse('[[File:foo.png|thumb]]')[0]
        file_link.params.add('right')
        self.assertEqual('[[File:foo.png|thumb]]', file_link.pristine_copy().stringify(raw_title=True))

    def test_initializer_is_a_copy(self):
        link = self.parse('[[foo|bar]]')[0]
        initializer = link.initializer
        initializer.title = 'changed'
        self.assertEqual('foo', link.initializer.title)


if __name__ == '__main__':
    main(exit=False, verbosity=2)

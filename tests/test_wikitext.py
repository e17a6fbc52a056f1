#!/usr/bin/env python

from unittest import main

from wiki_markup.nodes.initializers import ParamSeed, TITLE_MARKER
from wiki_markup.nodes.links import ParsedWikilink
from wiki_markup.nodes.templates import ParsedParserFunction, ParsedTemplate, RawTemplate
from wiki_markup.testing import MarkupTest
from wiki_markup.wikitext import DEFAULT_SKIP_TAGS, Wikitext


class WikitextTestCase(MarkupTest):
    def wikitext(self, text: str, **kwargs) -> Wikitext:
        return Wikitext(text, site=self.site, **kwargs)


class WikitextTest(WikitextTestCase):
    def test_text_type(self):
        with self.assertRaises(TypeError):
            Wikitext(None, site=self.site)  # noqa
        with self.assertRaises(TypeError):
            Wikitext(b'{{Foo}}', site=self.site)  # noqa

    def test_text_and_length(self):
        wikitext = self.wikitext('{{Foo}} bar')
        self.assertEqual('{{Foo}} bar', wikitext.text)
        self.assertEqual(11, wikitext.length)
        self.assertEqual("<Wikitext['{{Foo}} bar']>", repr(wikitext))

    def test_skip_tags(self):
        wikitext = self.wikitext('')
        self.assertEqual(DEFAULT_SKIP_TAGS, wikitext.skip_tags)
        self.assertIs(wikitext, wikitext.add_skip_tags('SPAN', 'div'))
        self.assertIn('span', wikitext.skip_tags)
        self.assertIn('div', wikitext.skip_tags)
        self.assertIs(wikitext, wikitext.remove_skip_tags('nowiki', 'Div'))
        self.assertNotIn('nowiki', wikitext.skip_tags)
        self.assertNotIn('div', wikitext.skip_tags)
        self.assertEqual({'span'}, set(self.wikitext('', skip_tags=['Span']).skip_tags))

    def test_skip_tags_apply_to_later_scans(self):
        wikitext = self.wikitext('<span>{{Foo}}</span>')
        self.assertFalse(wikitext.parse_templates()[0].skip)
        wikitext.add_skip_tags('span')
        self.assertTrue(wikitext.parse_templates()[0].skip)


class TemplateScanTest(WikitextTestCase):
    def test_template_initializer(self):
        text = 'a {{ foo |bar| baz = qux }}'
        initializer = self.wikitext(text).template_initializers()[0]
        self.assertEqual('foo', initializer.title)
        self.assertEqual(f' {TITLE_MARKER} ', initializer.raw_title)
        self.assertEqual(' foo ', initializer.filled_raw_title)
        self.assertTrue(initializer.has_marker)
        self.assertEqual('{{ foo |bar| baz = qux }}', initializer.text)
        self.assertEqual((2, len(text)), (initializer.start_index, initializer.end_index))
        self.assertEqual(0, initializer.nest_level)
        self.assertFalse(initializer.skip)
        expected = [ParamSeed('bar', None, '|bar'), ParamSeed(' qux ', ' baz ', '| baz = qux ')]
        self.assertEqual(expected, initializer.params)

    def test_parser_function_initializer(self):
        initializer = self.wikitext('{{#if: x | a | b}}').template_initializers()[0]
        self.assertEqual('#if: x', initializer.title)
        self.assertEqual(f'{TITLE_MARKER} ', initializer.raw_title)
        self.assertEqual([ParamSeed(' a ', None, '| a '), ParamSeed(' b', None, '| b')], initializer.params)

    def test_comment_in_title(self):
        initializer = self.wikitext('{{Foo<!-- c -->|a}}').template_initializers()[0]
        self.assertEqual('Foo', initializer.title)
        self.assertEqual(f'{TITLE_MARKER}<!-- c -->', initializer.raw_title)
        self.assertTrue(initializer.has_marker)

    def test_interrupted_title_has_no_marker(self):
        initializer = self.wikitext('{{Fo<!-- c -->o|a}}').template_initializers()[0]
        self.assertEqual('Foo', initializer.title)
        self.assertEqual('Fo<!-- c -->o', initializer.raw_title)
        self.assertFalse(initializer.has_marker)
        self.assertEqual('Fo<!-- c -->o', initializer.filled_raw_title)

    def test_nest_level_and_order(self):
        outer, inner = self.wikitext('{{Foo|{{Bar}}}}').template_initializers()
        self.assertEqual(('Foo', 0), (outer.title, outer.nest_level))
        self.assertEqual(('Bar', 1), (inner.title, inner.nest_level))
        self.assertEqual('|{{Bar}}', outer.params[0].text)

    def test_node_types(self):
        nodes = self.wikitext('{{Foo}} {{#if:x|y}} {{{{Bar}}|a}}').parse_templates()
        self.assertEqual(
            [ParsedTemplate, ParsedParserFunction, RawTemplate, ParsedTemplate], [type(node) for node in nodes]
        )
        self.assertEqual(1, nodes[3].nest_level)

    def test_hierarchies(self):
        hierarchies = {'Template:Foo': [['1', 'user']]}
        foo, bar = self.wikitext('{{Foo|a|user=b}}{{Bar|a|user=b}}').parse_templates(hierarchies)
        self.assertEqual(('user',), foo.param_order)
        self.assertEqual('b', foo.get('user').value)
        self.assertEqual(('1', 'user'), bar.param_order)

    def test_predicates(self):
        wikitext = self.wikitext('{{Foo}}{{Bar}}{{#if:x|y}}')
        nodes = wikitext.parse_templates(title_predicate=lambda title: title == 'Bar')
        self.assertEqual(['{{Bar}}'], [str(node) for node in nodes])
        nodes = wikitext.parse_templates(template_predicate=lambda node: isinstance(node, ParsedParserFunction))
        self.assertEqual(['{{#if:x|y}}'], [node.text for node in nodes])

    def test_round_trip(self):
        text = 'a {{ foo |bar| baz = qux }} b {{Foo<!-- c -->\n|a}}'
        wikitext = self.wikitext(text)
        self.assertEqual(text, wikitext.modify_templates(lambda node: node.stringify(raw_title=True)))
        self.assertEqual('a {{Foo|bar| baz = qux }} b {{Foo|a}}', wikitext.modify_templates(str))

    def test_modify_templates(self):
        wikitext = self.wikitext('a {{Foo|x}} b {{Bar}}')
        replaced = wikitext.modify_templates(lambda node: 'X' if node.title.text == 'Foo' else None)
        self.assertEqual('a X b {{Bar}}', replaced)
        self.assertEqual('a {{Foo|x}} b {{Bar}}', wikitext.text)

    def test_modify_nested_templates(self):
        seen = []

        def callback(node):
            seen.append(node.text)
            return 'X' if node.text == '{{Foo|{{Bar}}}}' else None

        self.assertEqual('X {{Baz}}', self.wikitext('{{Foo|{{Bar}}}} {{Baz}}').modify_templates(callback))
        self.assertEqual(['{{Foo|{{Bar}}}}', '{{Baz}}'], seen)

    def test_modify_inner_template(self):
        def callback(node):
            if node.title.text == 'Bar':
                node.insert('a', 'b')
                return str(node)
            return None

        wikitext = self.wikitext('{{Foo|{{Bar}}}}')
        self.assertEqual('{{Foo|{{Bar|a=b}}}}', wikitext.modify_templates(callback))

    def test_modify_skipped_templates(self):
        wikitext = self.wikitext('<span>{{Foo}}</span> {{Foo}}', skip_tags={'span'})
        self.assertEqual('<span>{{Foo}}</span> X', wikitext.modify_templates(lambda node: 'X'))
        self.assertEqual('<span>X</span> X', wikitext.modify_templates(lambda node: 'X', include_skipped=True))

    def test_modify_with_predicate(self):
        wikitext = self.wikitext('{{Foo}} {{Bar}}')
        replaced = wikitext.modify_templates(lambda node: 'X', title_predicate=lambda title: title == 'Bar')
        self.assertEqual('{{Foo}} X', replaced)

    def test_no_templates_in_extension_tags(self):
        wikitext = self.wikitext('<nowiki>{{Foo}}</nowiki> <!-- {{Bar}} --> {{Baz}}')
        self.assertEqual(['{{Baz}}'], [str(node) for node in wikitext.parse_templates()])


class WikilinkScanTest(WikitextTestCase):
    def test_wikilink_initializers(self):
        outer, first, second = self.wikitext('[[File:a.png|thumb|[[b]] [[ c |d]]]]').wikilink_initializers()
        self.assertEqual('File:a.png', outer.title)
        self.assertEqual('thumb|[[b]] [[ c |d]]', outer.display)
        self.assertEqual({1, 2}, outer.children)
        self.assertIsNone(outer.parent)
        self.assertEqual((0, 1), (first.parent, first.index))
        self.assertEqual((0, 2), (second.parent, second.index))
        self.assertEqual('c', second.title)
        self.assertEqual(f' {TITLE_MARKER} ', second.raw_title)
        self.assertEqual('d', second.display)
        self.assertIsNone(first.display)

    def test_nested_parent_is_nearest(self):
        links = self.wikitext('[[File:a.png|[[File:b.png|[[c]]]]]]').wikilink_initializers()
        self.assertEqual([None, 0, 1], [link.parent for link in links])
        self.assertEqual([{1}, {2}, set()], [link.children for link in links])

    def test_modify_wikilinks(self):
        wikitext = self.wikitext('[[foo]] and [[bar|baz]]')
        self.assertEqual('FOO and BAZ', wikitext.modify_wikilinks(lambda link: link.get_display().upper()))
        self.assertEqual('[[foo]] and [[bar|baz]]', wikitext.text)

    def test_modify_wikilinks_round_trip(self):
        text = '[[ foo |bar]] [[File:a.png|thumb|[[b]]]] [[{{{1}}}]]'
        wikitext = self.wikitext(text)
        self.assertEqual(text, wikitext.modify_wikilinks(lambda link: link.stringify(raw_title=True)))

    def test_modify_nested_wikilinks(self):
        def callback(link):
            if isinstance(link, ParsedWikilink):
                link.set_title('Qux')
                return link.stringify(raw_title=True)
            return None

        wikitext = self.wikitext('[[File:a.png|thumb|[[b|c]]]]')
        self.assertEqual('[[File:a.png|thumb|[[Qux|c]]]]', wikitext.modify_wikilinks(callback))

    def test_modify_skipped_wikilinks(self):
        wikitext = self.wikitext('<span>[[foo]]</span> [[bar]]', skip_tags={'span'})
        self.assertEqual('<span>[[foo]]</span> X', wikitext.modify_wikilinks(lambda link: 'X'))
        self.assertEqual('<span>X</span> X', wikitext.modify_wikilinks(lambda link: 'X', include_skipped=True))


if __name__ == '__main__':
    main(exit=False, verbosity=2)

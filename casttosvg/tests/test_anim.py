import itertools
import unittest

from casttosvg import anim, attributes, palette
from casttosvg import term

SVG = '{{{}}}'.format(anim.SVG_NS)

RED = anim.Style('#cf3c40', False, False)
BLUE = anim.Style('#50b3dd', False, False)
PLAIN = anim.Style(palette.FALLBACK_FOREGROUND, False, False)


class FakeBuffer(term.TerminalBuffer):
    """Terminal buffer made of lines of text, all cells with the same
    attributes"""
    def __init__(self, lines, word=None):
        self.lines = list(lines)
        self.word = attributes.encode() if word is None else word

    def write(self, data):
        self.lines.append(data)

    def row_count(self):
        return len(self.lines)

    def column_count(self, row):
        return len(self.lines[row])

    def cell_at(self, row, column):
        return self.word, self.lines[row][column]

    @property
    def cursor(self):
        return 0, len(self.lines)


def cells(row, styles, glyphs=None):
    if glyphs is None:
        glyphs = 'x' * len(styles)
    return [anim.Cell(row, column, glyph, style, palette.FALLBACK_BACKGROUND, False)
            for column, (glyph, style) in enumerate(zip(glyphs, styles))]


def texts(element):
    return [(t.get('x'), t.get('y'), t.get('class'), t.text)
            for t in element.iter(SVG + 'text')]


class TestExtractCells(unittest.TestCase):
    def test_whitespace_elision(self):
        test_cases = [
            ('x a y', 'x a y'),
            (' a ', 'a'),
            ('  ', ''),
            ('a  b', 'ab'),
            ('a b ', 'a b'),
            (' ', ''),
            ('', ''),
        ]
        for line, expected in test_cases:
            with self.subTest(case=line):
                row, = anim.extract_cells(FakeBuffer([line]))
                self.assertEqual(''.join(cell.glyph for cell in row), expected)

    def test_empty_glyphs(self):
        row, = anim.extract_cells(FakeBuffer([['a', '', 'b']]))
        self.assertEqual([(cell.column, cell.glyph) for cell in row], [(0, 'a'), (2, 'b')])

        with self.subTest(case='Space next to an empty cell'):
            row, = anim.extract_cells(FakeBuffer([['a', ' ', '', 'b']]))
            self.assertEqual([cell.glyph for cell in row], ['a', 'b'])

    def test_rows(self):
        rows = anim.extract_cells(FakeBuffer(['ab', '   ', 'c']))
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[1], [])
        self.assertEqual([(cell.row, cell.column) for cell in rows[2]], [(2, 0)])

    def test_colors(self):
        test_cases = [
            ('Default', attributes.encode(),
             anim.Style('#fff', False, False), '#000'),
            ('Palette', attributes.encode(fg_index=1, bg_index=4),
             anim.Style('#cf3c40', False, False), '#50b3dd'),
            ('Inverse', attributes.encode(fg_index=1, bg_index=4, inverse=True),
             anim.Style('#50b3dd', False, False), '#cf3c40'),
            ('Inverse default', attributes.encode(inverse=True),
             anim.Style('#000', False, False), '#fff'),
            ('Bold and underline', attributes.encode(fg_index=196, bold=True, underline=True),
             anim.Style('#ff0000', True, True), '#000'),
            ('Out of palette', attributes.encode(fg_index=300, bg_index=511),
             anim.Style('#fff', False, False), '#000'),
        ]
        for case, word, style, background_color in test_cases:
            with self.subTest(case=case):
                (cell,), = anim.extract_cells(FakeBuffer(['A'], word))
                self.assertEqual(cell.style, style)
                self.assertEqual(cell.background_color, background_color)


class TestGroupRuns(unittest.TestCase):
    def test_group_runs(self):
        row = cells(0, [RED, RED, BLUE, BLUE, BLUE, RED], 'abcdef')
        runs, = anim.group_runs([row])
        self.assertEqual([(run.column, run.text, run.style) for run in runs],
                         [(0, 'ab', RED), (2, 'cde', BLUE), (5, 'f', RED)])

    def test_empty_rows(self):
        self.assertEqual(anim.group_runs([[], []]), [[], []])
        self.assertEqual(anim.group_runs([]), [])

    def test_idempotence(self):
        row = cells(0, [RED, RED, BLUE, BLUE, BLUE, RED])
        runs, = anim.group_runs([row])
        # One cell per run
        regrouped, = anim.group_runs([cells(0, [run.style for run in runs])])
        self.assertEqual([run.style for run in regrouped], [run.style for run in runs])
        self.assertEqual(len(regrouped), len(runs))

    def test_column_gap(self):
        row = [
            anim.Cell(0, 0, 'a', RED, '#000', False),
            anim.Cell(0, 3, 'b', RED, '#000', False),
            anim.Cell(0, 4, 'c', RED, '#000', False),
        ]
        runs, = anim.group_runs([row])
        self.assertEqual([(run.column, run.text) for run in runs], [(0, 'a'), (3, 'bc')])

    def test_wide_characters(self):
        row = [
            anim.Cell(0, 0, '中', RED, '#000', False),
            anim.Cell(0, 2, 'a', RED, '#000', False),
        ]
        runs, = anim.group_runs([row])
        self.assertEqual([(run.column, run.text) for run in runs], [(0, '中a')])

    def test_background_and_inverse(self):
        row = [
            anim.Cell(0, 0, 'a', RED, '#000', False),
            anim.Cell(0, 1, 'b', RED, '#111111', False),
            anim.Cell(0, 2, 'c', RED, '#111111', True),
            anim.Cell(0, 3, 'd', RED, '#111111', True),
        ]
        runs, = anim.group_runs([row])
        self.assertEqual([run.text for run in runs], ['a', 'b', 'cd'])
        self.assertEqual(runs[1].background_color, '#111111')

    def test_ConsecutiveWithSameAttributes(self):
        row = cells(0, [RED, RED, BLUE])
        key = anim.ConsecutiveWithSameAttributes(['style'])
        self.assertEqual([key(cell) for cell in row],
                         [(0, {'style': RED}), (0, {'style': RED}), (2, {'style': BLUE})])


class TestStyleRegistry(unittest.TestCase):
    def test_style_declaration(self):
        test_cases = [
            (PLAIN, ''),
            (RED, 'fill: #cf3c40'),
            (anim.Style('#fff', True, False), 'font-weight: bold'),
            (anim.Style('#fff', False, True), 'text-decoration: underline'),
            (anim.Style('#000', True, True),
             'fill: #000;font-weight: bold;text-decoration: underline'),
        ]
        for style, expected in test_cases:
            with self.subTest(case=style):
                self.assertEqual(anim.style_declaration(style), expected)

    def test_declare_once(self):
        registry = anim.StyleRegistry()
        first = registry.declare_once(RED)
        second = registry.declare_once(anim.Style('#cf3c40', False, False))
        self.assertEqual(first, second)
        self.assertEqual(len(registry.declarations), 1)
        self.assertEqual(registry.css().count('fill: #cf3c40'), 1)

        self.assertNotEqual(registry.declare_once(BLUE), first)
        self.assertEqual(len(registry.declarations), 2)

    def test_plain_style(self):
        registry = anim.StyleRegistry()
        self.assertIsNone(registry.declare_once(PLAIN))
        self.assertEqual(registry.declarations, {})
        self.assertEqual(registry.css(), '')

    def test_distinct_ids(self):
        colors = list(palette.COLORS) + [palette.FALLBACK_FOREGROUND,
                                         palette.FALLBACK_BACKGROUND]
        styles = {anim.Style(color, bold, underline)
                  for color, bold, underline
                  in itertools.product(colors, (False, True), (False, True))}
        ids = {anim.style_id(style) for style in styles}
        self.assertEqual(len(ids), len(styles))

    def test_registries_are_independent(self):
        first = anim.StyleRegistry()
        second = anim.StyleRegistry()
        first.declare_once(RED)
        self.assertEqual(second.declarations, {})
        self.assertEqual(second.declare_once(RED), first.declare_once(RED))


class TestScene(unittest.TestCase):
    def test_projection(self):
        self.assertEqual(anim.project_x(0), 0)
        self.assertEqual(anim.project_x(1), 10)
        self.assertEqual(anim.project_x(3), 30)
        self.assertEqual(anim.project_y(2.8), 56)
        self.assertEqual(anim.project_y(0.8), 16)

    def test_render_document(self):
        runs = [
            [anim.Run(0, 1, 'ab', anim.Style('#ff0000', True, False), '#000')],
            [anim.Run(1, 0, 'c', PLAIN, '#5f0000')],
        ]
        root = anim.render_document(3, 2, runs)

        self.assertEqual(root.tag, SVG + 'svg')
        self.assertEqual(root.get('width'), '62')
        self.assertEqual(root.get('height'), '166')

        screen = root.find('.//{}svg[@id="screen"]'.format(SVG))
        self.assertEqual((screen.get('x'), screen.get('y')), ('15', '100'))
        first, second = screen.findall(SVG + 'text')
        self.assertEqual((first.get('x'), first.get('y'), first.text), ('10', '16', 'ab'))
        self.assertEqual(first.get('textLength'), '20')
        self.assertTrue(first.get('class').startswith('t'))
        self.assertEqual((second.get('x'), second.get('y'), second.text), ('0', '36', 'c'))
        self.assertIsNone(second.get('class'))

        rect, = screen.findall(SVG + 'rect')
        self.assertEqual((rect.get('x'), rect.get('y'), rect.get('width'), rect.get('height')),
                         ('0', '20', '10', '20'))
        self.assertEqual(rect.get('fill'), '#5f0000')

        css = root.find('{0}defs/{0}style'.format(SVG)).text
        self.assertEqual(css.count('fill: #ff0000;font-weight: bold'), 1)
        self.assertIn('.{} {{'.format(first.get('class')), css)

    def test_window_chrome(self):
        root = anim.render_document(0, 0, [])
        self.assertEqual(texts(root), [])
        self.assertEqual(root.get('width'), '32')
        self.assertEqual(root.get('height'), '127')

        circles = root.findall('.//{}circle'.format(SVG))
        self.assertEqual([(c.get('cx'), c.get('cy'), c.get('r'), c.get('fill')) for c in circles],
                         [('20', '70', '7.5', '#ff5f58'),
                          ('45', '70', '7.5', '#ffbd2e'),
                          ('70', '70', '7.5', '#18c132')])

        frame, = root.findall('{0}g/{0}rect'.format(SVG))
        self.assertEqual((frame.get('rx'), frame.get('ry'), frame.get('y')), ('5', '5', '50'))
        self.assertEqual((frame.get('width'), frame.get('height')), ('31', '76'))

    def test_title(self):
        root = anim.render_document(80, 24, [], title='demo <1>')
        title, = root.iter(SVG + 'text')
        self.assertEqual(title.text, 'demo <1>')
        self.assertEqual(title.get('class'), 'title')
        self.assertEqual(title.get('x'), '415.5')

        with self.subTest(case='No title'):
            self.assertEqual(texts(anim.render_document(80, 24, [])), [])

    def test_font(self):
        root = anim.render_document(1, 1, [], font='Monaco', font_size=12)
        css = root.find('{0}defs/{0}style'.format(SVG)).text
        self.assertIn('font-family: Monaco;', css)
        self.assertIn('font-size: 12px;', css)

    def test_purity(self):
        runs = [[anim.Run(0, 0, 'ab', RED, '#000'), anim.Run(0, 2, 'c', BLUE, '#000')]]
        self.assertEqual(anim.etree.tostring(anim.render_document(3, 1, runs)),
                         anim.etree.tostring(anim.render_document(3, 1, runs)))


def frame(index, start, end, text, style=RED):
    runs = [[anim.Run(0, 0, text, style, '#000')]] if text else [[]]
    return term.TimedFrame(index, start, end, runs)


class TestAnimation(unittest.TestCase):
    def test_percentage(self):
        test_cases = [
            (0, 5, 0),
            (1, 5, 20),
            (5, 5, 100),
            (7, 5, 100),
            (-1, 5, 0),
        ]
        for time, duration, expected in test_cases:
            with self.subTest(case=(time, duration)):
                self.assertAlmostEqual(anim.percentage(time, duration), expected)

    def test_visibility(self):
        frames = [
            frame(0, 0, 1.0, 'a'),
            frame(1, 1.0, 5.0, 'ab', BLUE),
        ]
        root = anim.render_animation(frames, 10, 2, 5.0, strategy='visibility')
        layers = root.findall('.//{}g[@class]'.format(SVG))
        self.assertEqual([layer.get('class') for layer in layers],
                         ['frame_0 frame', 'frame_1 frame'])
        self.assertEqual([t.text for t in layers[1].iter(SVG + 'text')], ['ab'])

        css = root.find('{0}defs/{0}style'.format(SVG)).text
        self.assertIn('@keyframes frame_0', css)
        self.assertIn('@keyframes frame_1', css)
        self.assertIn('animation-duration: 5s;', css)
        self.assertIn('animation-timing-function: steps(1, end);', css)
        self.assertIn('animation-iteration-count: infinite;', css)
        frame_0 = css[css.index('@keyframes frame_0'):css.index('@keyframes frame_1')]
        self.assertIn('0.000% {opacity: 1}', frame_0)
        self.assertIn('20.000% {opacity: 0}', frame_0)
        frame_1 = css[css.index('@keyframes frame_1'):]
        self.assertIn('0.000% {opacity: 0}', frame_1)
        self.assertIn('20.000% {opacity: 1}', frame_1)
        self.assertIn('100.000% {opacity: 0}', frame_1)

    def test__visibility_css(self):
        test_cases = [
            ((20.0, 60.0), ['0.000% {opacity: 0}', '20.000% {opacity: 1}',
                            '60.000% {opacity: 0}', '100.000% {opacity: 0}']),
            ((0.0, 100.0), ['0.000% {opacity: 1}', '100.000% {opacity: 0}']),
            ((30.0, 30.0), ['0.000% {opacity: 0}', '30.000% {opacity: 0}',
                            '100.000% {opacity: 0}']),
        ]
        for (start, end), keyframes in test_cases:
            with self.subTest(case=(start, end)):
                css = anim._visibility_css('name', start, end, 1)
                body = css[css.index('@keyframes name'):]
                positions = [body.index(keyframe) for keyframe in keyframes]
                self.assertEqual(positions, sorted(positions))
                self.assertEqual(body.count('opacity'), len(keyframes))

    def test_visibility_skips_empty_frames(self):
        frames = [
            frame(0, 0, 1, ''),
            frame(1, 1, 2, 'a'),
        ]
        root = anim.render_animation(frames, 10, 2, 2)
        layers = root.findall('.//{}g[@class]'.format(SVG))
        self.assertEqual([layer.get('class') for layer in layers], ['frame_1 frame'])
        css = root.find('{0}defs/{0}style'.format(SVG)).text
        self.assertNotIn('frame_0', css)

    def test_viewport(self):
        frames = [
            frame(0, 0, 1, 'a'),
            frame(1, 1, 2, ''),
            frame(2, 2, 4, 'abc', BLUE),
        ]
        root = anim.render_animation(frames, 10, 2, 4, strategy='viewport')
        strip = root.find('.//{}g[@id="strip"]'.format(SVG))
        slots = strip.findall(SVG + 'g')
        self.assertEqual([slot.get('transform') for slot in slots],
                         ['translate(0)', 'translate(110)', 'translate(220)'])
        self.assertEqual(len(slots[1]), 0)

        css = root.find('{0}defs/{0}style'.format(SVG)).text
        self.assertEqual(css.count('@keyframes'), 1)
        self.assertIn('0.000% {transform: translateX(0px)}', css)
        self.assertIn('25.000% {transform: translateX(-110px)}', css)
        self.assertIn('50.000% {transform: translateX(-220px)}', css)
        self.assertIn('100.000% {transform: translateX(-220px)}', css)
        self.assertIn('animation-name: roll;', css)

    def test_styles_declared_once(self):
        frames = [frame(i, i, i + 1, 'a' * (i + 1)) for i in range(4)]
        for strategy in anim.ANIMATORS:
            with self.subTest(case=strategy):
                root = anim.render_animation(frames, 10, 2, 4, strategy=strategy)
                css = root.find('{0}defs/{0}style'.format(SVG)).text
                self.assertEqual(css.count('fill: #cf3c40'), 1)

    def test_render_animation_errors(self):
        with self.assertRaises(ValueError):
            anim.render_animation([], 10, 2, 0)
        with self.assertRaises(ValueError):
            anim.render_animation([], 10, 2, 1, strategy='waapi')

    def test_no_frames(self):
        for strategy in anim.ANIMATORS:
            with self.subTest(case=strategy):
                root = anim.render_animation([], 10, 2, 1, strategy=strategy)
                self.assertEqual(texts(root), [])

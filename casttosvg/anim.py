"""SVG rendering of the terminal screen

The screen is read cell by cell from a TerminalBuffer, adjacent cells with
the same style are merged into runs of text and runs are laid out in a window
frame. Animations are built with CSS keyframes only, following one of two
policies:
    - 'visibility': one layer per frame, shown while the frame is current
    - 'viewport': all frames side by side in a strip which slides under the
    window
"""
import hashlib
import json
import logging
import os
from collections import namedtuple
from itertools import groupby

from lxml import etree
from lxml.builder import ElementMaker
from wcwidth import wcswidth

from casttosvg import attributes, config, palette

logger = logging.getLogger(__name__)

SVG_NS = 'http://www.w3.org/2000/svg'
E = ElementMaker(namespace=SVG_NS, nsmap={None: SVG_NS})

# Coordinates of a cell are projected on a grid of PROJECTION_UNIT per row and
# PROJECTION_UNIT * COLUMN_SCALE per column
PROJECTION_UNIT = 20
COLUMN_SCALE = .5
# Position of the baseline of the text relative to the top of its row
BASELINE = .8

# Height of a row used for the size of the window and of frame layers
SCREEN_ROW_HEIGHT = 19.5
FRAME_ROW_HEIGHT = 19
FRAME_PADDING = 30

# Window frame
WINDOW_MARGIN_WIDTH = 32
WINDOW_MARGIN_HEIGHT = 127
WINDOW_Y = 50
WINDOW_RADIUS = 5
WINDOW_BORDER_WIDTH = 31
WINDOW_BORDER_HEIGHT = 76
WINDOW_BORDER_COLOR = '#303030'
BUTTONS = [(20, '#ff5f58'), (45, '#ffbd2e'), (70, '#18c132')]
BUTTON_Y = 70
BUTTON_RADIUS = 7.5
CONTENT_X = 15
CONTENT_Y = 100

# The number of character cells to leave between two frames of the viewport
# strip so content does not bleed into adjacent frames
FRAME_CELL_SPACING = 1

Style = namedtuple('Style', ['color', 'bold', 'underline'])
Style.__doc__ = 'Attributes of a cell rendered as a CSS declaration'

Cell = namedtuple('Cell', ['row', 'column', 'glyph', 'style', 'background_color',
                           'inverse'])
Cell.__doc__ = 'Character cell with resolved colors'

Run = namedtuple('Run', ['row', 'column', 'text', 'style', 'background_color'])
Run.__doc__ = 'Adjacent cells of a row sharing the same attributes'

_RUN_ATTRIBUTES = ['style', 'background_color', 'inverse']


def _num(value):
    """Format a coordinate without a trailing '.0'"""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def project_x(column):
    return round(column * COLUMN_SCALE * PROJECTION_UNIT, 2)


def project_y(row):
    return round(row * PROJECTION_UNIT, 2)


def text_width(text):
    """Number of columns used by `text` on the screen"""
    width = wcswidth(text)
    return width if width >= 0 else len(text)


def _cell_width(glyph):
    return max(1, text_width(glyph))


def _make_cell(row, column, glyph, word):
    attrs = attributes.decode(word)
    color = palette.color(attrs.fg_index, palette.FALLBACK_FOREGROUND)
    background_color = palette.color(attrs.bg_index, palette.FALLBACK_BACKGROUND)
    if attrs.inverse:
        color, background_color = background_color, color

    return Cell(row, column, glyph, Style(color, attrs.bold, attrs.underline),
                background_color, attrs.inverse)


def _is_flanked(buffer, row, column, columns):
    """Return True if both neighbours of the cell exist and display something
    other than a space"""
    if column == 0 or column + 1 >= columns:
        return False
    _, before = buffer.cell_at(row, column - 1)
    _, after = buffer.cell_at(row, column + 1)
    return before not in ('', ' ') and after not in ('', ' ')


def extract_cells(buffer):
    """Return the visible cells of the buffer, one list of cells per row

    Cells without a glyph are skipped. Spaces are skipped too unless both
    their neighbours exist and are not spaces.

    :param buffer: Instance of casttosvg.term.TerminalBuffer
    """
    rows = []
    for row in range(buffer.row_count()):
        columns = buffer.column_count(row)
        cells = []
        for column in range(columns):
            word, glyph = buffer.cell_at(row, column)
            if not glyph:
                continue
            if glyph == ' ' and not _is_flanked(buffer, row, column, columns):
                continue
            cells.append(_make_cell(row, column, glyph, word))
        rows.append(cells)

    return rows


class ConsecutiveWithSameAttributes:
    """Callable to be used as a key for itertools.groupby to group together
    adjacent cells of a row with the same attributes"""
    def __init__(self, attributes_):
        self.group_column = None
        self.next_column = None
        self.attributes = attributes_
        self.last_key_attributes = None

    def __call__(self, cell):
        key_attributes = {name: getattr(cell, name) for name in self.attributes}
        if self.next_column != cell.column or self.last_key_attributes != key_attributes:
            self.group_column = cell.column
        self.next_column = cell.column + _cell_width(cell.glyph)
        self.last_key_attributes = key_attributes
        return self.group_column, key_attributes


def _group_row(cells):
    key = ConsecutiveWithSameAttributes(_RUN_ATTRIBUTES)
    runs = []
    for (column, key_attributes), group in groupby(cells, key):
        group = list(group)
        runs.append(Run(row=group[0].row,
                        column=column,
                        text=''.join(cell.glyph for cell in group),
                        style=key_attributes['style'],
                        background_color=key_attributes['background_color']))
    return runs


def group_runs(rows):
    """Merge adjacent cells with the same attributes into runs of text

    :param rows: List of rows, each one a list of cells sorted by column
    :return: List of runs for each row
    """
    return [_group_row(cells) for cells in rows]


def style_declaration(style):
    """Return the CSS declaration of a style, or an empty string for text
    rendered with the default style"""
    properties = []
    if style.color != palette.FALLBACK_FOREGROUND:
        properties.append('fill: {}'.format(style.color))
    if style.bold:
        properties.append('font-weight: bold')
    if style.underline:
        properties.append('text-decoration: underline')
    return ';'.join(properties)


def style_id(style):
    serialized = json.dumps(style._asdict(), sort_keys=True)
    digest = hashlib.sha1(serialized.encode('utf-8')).hexdigest()
    return 't{}'.format(digest[:10])


class StyleRegistry:
    """CSS classes declared in a document

    A new registry must be used for each document so that every class used
    by the document is declared in it.
    """
    def __init__(self):
        self.declarations = {}

    def declare_once(self, style):
        """Return the name of the CSS class of `style`, or None if the style
        needs no declaration"""
        declaration = style_declaration(style)
        if not declaration:
            return None

        class_name = style_id(style)
        if class_name not in self.declarations:
            logger.debug('New style {}: {}'.format(class_name, declaration))
            self.declarations[class_name] = declaration
        return class_name

    def css(self):
        return os.linesep.join('.{} {{{}}}'.format(class_name, declaration)
                               for class_name, declaration in self.declarations.items())


def _render_background(run):
    return E.rect({
        'x': _num(project_x(run.column)),
        'y': _num(project_y(run.row)),
        'width': _num(project_x(text_width(run.text))),
        'height': _num(project_y(1)),
        'fill': run.background_color,
    })


def _render_text(run, registry):
    text_attributes = {
        'x': _num(project_x(run.column)),
        'y': _num(project_y(run.row + BASELINE)),
        'textLength': _num(project_x(text_width(run.text))),
    }
    class_name = registry.declare_once(run.style)
    if class_name is not None:
        text_attributes['class'] = class_name
    return E.text(text_attributes, run.text)


def render_runs(rows, registry):
    """Return the SVG elements representing runs of text

    Backgrounds are rendered first so that they never hide the text of the
    row above.

    :param rows: List of runs for each row
    :param registry: StyleRegistry of the document (updated in place)
    """
    runs = [run for row in rows for run in row]
    backgrounds = [_render_background(run) for run in runs
                   if run.background_color != palette.FALLBACK_BACKGROUND]
    texts = [_render_text(run, registry) for run in runs]
    return backgrounds + texts


def screen_size(columns, rows):
    return project_x(columns), rows * SCREEN_ROW_HEIGHT


def _base_css(font, font_size):
    return """svg {{
            font-family: {font};
            font-size: {font_size}px;
        }}

        text {{
            fill: {foreground};
            white-space: pre;
        }}

        .title {{
            fill: {title};
        }}
    """.format(font=font, font_size=font_size,
               foreground=palette.FALLBACK_FOREGROUND, title=palette.FOREGROUND)


def screen(columns, rows, children, css='', title=None, font=config.DEFAULT_FONT,
           font_size=config.DEFAULT_FONT_SIZE):
    """Return an SVG document made of a window frame around `children`

    :param columns: Number of columns of the terminal
    :param rows: Number of rows of the terminal
    :param children: SVG elements displayed inside the window
    :param css: Additional CSS rules of the document
    :param title: Optional title displayed at the top of the window
    """
    width, height = screen_size(columns, rows)
    inner_width = width + WINDOW_BORDER_WIDTH

    style = E.style({'type': 'text/css'})
    style.text = etree.CDATA(os.linesep.join(filter(None, [_base_css(font, font_size), css])))

    window = E.g(
        E.rect({
            'rx': _num(WINDOW_RADIUS),
            'ry': _num(WINDOW_RADIUS),
            'y': _num(WINDOW_Y),
            'width': _num(inner_width),
            'height': _num(height + WINDOW_BORDER_HEIGHT),
            'fill': palette.FALLBACK_BACKGROUND,
            'stroke': WINDOW_BORDER_COLOR,
            'stroke-width': '1',
        }),
        *[E.circle({'cx': _num(cx), 'cy': _num(BUTTON_Y), 'r': _num(BUTTON_RADIUS),
                    'fill': fill})
          for cx, fill in BUTTONS]
    )
    if title:
        window.append(E.text({
            'class': 'title',
            'x': _num(inner_width / 2),
            'y': _num(BUTTON_Y),
            'text-anchor': 'middle',
            'dominant-baseline': 'central',
        }, title))

    window.append(E.svg({
        'id': 'screen',
        'x': _num(CONTENT_X),
        'y': _num(CONTENT_Y),
        'width': _num(width),
    }, *children))

    return E.svg({
        'width': _num(width + WINDOW_MARGIN_WIDTH),
        'height': _num(height + WINDOW_MARGIN_HEIGHT),
    }, E.defs(style), window)


def render_document(columns, rows, runs, title=None, font=config.DEFAULT_FONT,
                    font_size=config.DEFAULT_FONT_SIZE):
    """Return an SVG document of a single frame"""
    registry = StyleRegistry()
    children = render_runs(runs, registry)
    return screen(columns, rows, children, registry.css(), title, font, font_size)


def percentage(time, duration):
    """Position of `time` in the animation, in percent, clamped to [0, 100]"""
    return min(100.0, max(0.0, time / (duration / 100)))


def _visibility_css(name, start, end, duration):
    stops = {0.0: 0, start: 1, end: 0, 100.0: 0}
    keyframes = os.linesep.join('{:.3f}% {{opacity: {}}}'.format(time, opacity)
                                for time, opacity in sorted(stops.items()))
    return """
        .{name} {{
            opacity: 0;
            animation-name: {name};
            animation-duration: {duration}s;
            animation-timing-function: steps(1, end);
            animation-iteration-count: infinite;
        }}

        @keyframes {name} {{
            {keyframes}
        }}
    """.format(name=name, duration=_num(duration), keyframes=keyframes)


def _animate_visibility(frames, columns, rows, duration, registry):
    """Render each frame as a layer only visible between its start and end"""
    layers = []
    rules = []
    width, _ = screen_size(columns, rows)
    for frame in frames:
        children = render_runs(frame.runs, registry)
        if not children:
            logger.debug('Skipping empty frame {}'.format(frame.index))
            continue

        name = 'frame_{}'.format(frame.index)
        background = E.rect({
            'width': _num(width),
            'height': _num(rows * FRAME_ROW_HEIGHT + FRAME_PADDING),
            'fill': palette.FALLBACK_BACKGROUND,
        })
        layers.append(E.g({'class': '{} frame'.format(name)}, background, *children))
        rules.append(_visibility_css(name,
                                     percentage(frame.start, duration),
                                     percentage(frame.end, duration),
                                     duration))

    return layers, os.linesep.join(rules)


def _animate_viewport(frames, columns, rows, duration, registry):
    """Render all frames side by side and slide the strip to the current
    frame"""
    strip = E.g({'id': 'strip'})
    frame_width = project_x(columns + FRAME_CELL_SPACING)
    timings = {}
    for frame in frames:
        offset = frame.index * frame_width
        strip.append(E.g({'class': 'frame', 'transform': 'translate({})'.format(_num(offset))},
                         *render_runs(frame.runs, registry)))
        timings[percentage(frame.start, duration)] = -offset

    if not timings:
        return [strip], ''

    transform_format = '{time:.3f}% {{transform: translateX({offset}px)}}'
    transforms = [transform_format.format(time=time, offset=_num(offset))
                  for time, offset in sorted(timings.items())]
    last_offset = timings[max(timings)]
    transforms.append(transform_format.format(time=100, offset=_num(last_offset)))

    # steps(1, end) applies to each segment between two keyframes, frames
    # being unevenly spaced in time
    css = """
        @keyframes roll {{
            {transforms}
        }}

        #strip {{
            animation-name: roll;
            animation-duration: {duration}s;
            animation-timing-function: steps(1, end);
            animation-iteration-count: infinite;
        }}
    """.format(transforms=os.linesep.join(transforms), duration=_num(duration))
    return [strip], css


ANIMATORS = {
    'visibility': _animate_visibility,
    'viewport': _animate_viewport,
}


def render_animation(frames, columns, rows, duration, strategy=config.DEFAULT_STRATEGY,
                     title=None, font=config.DEFAULT_FONT,
                     font_size=config.DEFAULT_FONT_SIZE):
    """Return an animated SVG document

    :param frames: Iterable of casttosvg.term.TimedFrame
    :param duration: Duration of one loop of the animation in seconds
    :param strategy: Name of the animation policy ('visibility' or 'viewport')
    """
    if duration <= 0:
        raise ValueError('Animation duration must be greater than 0')

    animator = ANIMATORS.get(strategy)
    if animator is None:
        raise ValueError('Animation strategy must be one of {}'
                         .format(', '.join(ANIMATORS)))

    registry = StyleRegistry()
    children, animation_css = animator(frames, columns, rows, duration, registry)
    css = os.linesep.join(filter(None, [registry.css(), animation_css]))
    return screen(columns, rows, children, css, title, font, font_size)

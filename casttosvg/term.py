"""Terminal state

This module exposes
    - `TerminalBuffer`, the read/write interface the renderer expects from a
    terminal emulator
    - `PyteTerminal`, an implementation of this interface backed by pyte
    - `replay`, which feeds the chunks of a session to a terminal one at a
    time and yields the runs of text displayed after each of them
"""

import abc
import codecs
import logging
import math
from collections import namedtuple

import pyte
import pyte.graphics

from casttosvg import anim, attributes, palette

logger = logging.getLogger(__name__)

TimedFrame = namedtuple('TimedFrame', ['index', 'start', 'end', 'runs'])
TimedFrame.__doc__ = 'State of the screen during a time interval'
TimedFrame.index.__doc__ = 'Position of the frame in the animation'
TimedFrame.start.__doc__ = 'Time at which the frame is displayed in seconds'
TimedFrame.end.__doc__ = 'Time at which the frame is replaced in seconds'
TimedFrame.runs.__doc__ = 'Runs of text of the screen, one list per row'


class TerminalBuffer(abc.ABC):
    """Terminal emulator as seen by the renderer

    Cells are exposed as a tuple made of a packed attribute word (see
    `casttosvg.attributes`) and of the character displayed by the cell. An
    empty character means that nothing is drawn in the cell (for example the
    second half of a wide character).
    """
    @abc.abstractmethod
    def write(self, data):
        """Feed raw terminal output (text and escape sequences)"""

    @abc.abstractmethod
    def row_count(self):
        raise NotImplementedError

    @abc.abstractmethod
    def column_count(self, row):
        raise NotImplementedError

    @abc.abstractmethod
    def cell_at(self, row, column):
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def cursor(self):
        """Position of the cursor as a tuple (x, y)"""


# Names used by pyte for the 16 first colors. pyte stores the 256 colors as
# hexadecimal values, so the first 16 entries are replaced by their names to
# tell color 9 (styled by the theme) from color 196 (#ff0000 in both cases).
_COLORS = ['black', 'red', 'green', 'brown', 'blue', 'magenta', 'cyan', 'white']
NAMED_COLORS = _COLORS + ['bright{}'.format(color) for color in _COLORS]
pyte.graphics.FG_BG_256 = NAMED_COLORS + pyte.graphics.FG_BG_256[16:]

_HEX_INDICES = {pyte.graphics.FG_BG_256[index].lower(): index
                for index in range(len(NAMED_COLORS), len(pyte.graphics.FG_BG_256))}


def color_index(pyte_color, default):
    """Return the palette index of a color as stored by pyte

    :param pyte_color: 'default', a color name or an hexadecimal color
    :param default: Index returned for the default color
    """
    if pyte_color == 'default':
        return default
    if pyte_color in NAMED_COLORS:
        return NAMED_COLORS.index(pyte_color)

    hex_color = pyte_color.lower()
    if hex_color in _HEX_INDICES:
        return _HEX_INDICES[hex_color]
    # 24-bit color, approximated with the palette
    return palette.nearest_index(hex_color)


class PyteTerminal(TerminalBuffer):
    def __init__(self, columns, lines):
        self.screen = pyte.Screen(columns, lines)
        self.stream = pyte.Stream(self.screen)
        self._decoder = codecs.getincrementaldecoder('utf-8')('replace')

    def write(self, data):
        if isinstance(data, bytes):
            data = self._decoder.decode(data)
        self.stream.feed(data)

    def row_count(self):
        return self.screen.lines

    def column_count(self, row):
        return self.screen.columns

    def cell_at(self, row, column):
        char = self.screen.buffer[row][column]
        word = attributes.encode(
            fg_index=color_index(char.fg, attributes.DEFAULT_FG_INDEX),
            bg_index=color_index(char.bg, attributes.DEFAULT_BG_INDEX),
            bold=char.bold,
            underline=char.underscore,
            inverse=char.reverse,
        )
        return word, char.data

    @property
    def cursor(self):
        return self.screen.cursor.x, self.screen.cursor.y


def capture(terminal):
    """Return the runs of text currently displayed by the terminal"""
    return anim.group_runs(anim.extract_cells(terminal))


def apply_until(session, terminal, time):
    """Write to the terminal all chunks whose cumulative delay is less than or
    equal to `time`"""
    elapsed = 0
    count = 0
    for chunk in session.chunks:
        elapsed += chunk.delay
        if elapsed > time and not math.isclose(elapsed, time):
            break
        terminal.write(chunk.data)
        count += 1
    logger.debug('Applied {} chunk(s) out of {}'.format(count, len(session.chunks)))


def replay(session, terminal):
    """Yield a TimedFrame for each chunk of the session

    Chunks are written to the terminal in recording order and the screen is
    captured right after each write. Frame number i is displayed from the sum
    of the delays of the chunks preceding chunk i and until the sum of the
    delays up to chunk i included. The last frame lasts until the end of the
    session.
    """
    elapsed = 0
    count = len(session.chunks)
    for index, chunk in enumerate(session.chunks):
        terminal.write(chunk.data)
        start = elapsed
        elapsed += chunk.delay
        end = elapsed if index < count - 1 else session.duration
        yield TimedFrame(index, start, max(start, end), capture(terminal))

"""Packed cell attributes

Each cell of the terminal buffer carries a single integer describing its
colors and text attributes. The bit fields below are listed from the least
significant bit to the most significant one:

    bits  0-8   background color index
    bits  9-17  foreground color index
    bit   18    bold
    bit   19    underline
    bit   20    inverse
"""
from collections import namedtuple

BitField = namedtuple('BitField', ['name', 'offset', 'width'])

FIELDS = (
    BitField('bg_index', 0, 9),
    BitField('fg_index', 9, 9),
    BitField('bold', 18, 1),
    BitField('underline', 19, 1),
    BitField('inverse', 20, 1),
)

# Color indices used by the terminal for its default colors. Both are outside
# of the palette and are rendered with the fallback colors.
DEFAULT_BG_INDEX = 256
DEFAULT_FG_INDEX = 257

Attributes = namedtuple('Attributes', ['fg_index', 'bg_index', 'bold',
                                       'underline', 'inverse'])


def _validate_layout(fields):
    """Raise ValueError unless fields are contiguous, start at bit 0 and do
    not overlap"""
    offset = 0
    for field in fields:
        if field.width <= 0:
            raise ValueError('Invalid width for field {}'.format(field.name))
        if field.offset != offset:
            raise ValueError('Field {} starts at bit {} (expected {})'
                             .format(field.name, field.offset, offset))
        offset += field.width
    return offset


WORD_WIDTH = _validate_layout(FIELDS)
MASKS = {field.name: ((1 << field.width) - 1) << field.offset for field in FIELDS}
SHIFTS = {field.name: field.offset for field in FIELDS}
WIDTHS = {field.name: field.width for field in FIELDS}


def _field(word, name):
    return (word & MASKS[name]) >> SHIFTS[name]


def decode(word):
    """Split a packed attribute word into its fields. Never fails: bits
    outside of the layout are ignored"""
    return Attributes(fg_index=_field(word, 'fg_index'),
                      bg_index=_field(word, 'bg_index'),
                      bold=bool(_field(word, 'bold')),
                      underline=bool(_field(word, 'underline')),
                      inverse=bool(_field(word, 'inverse')))


def encode(fg_index=DEFAULT_FG_INDEX, bg_index=DEFAULT_BG_INDEX, bold=False,
           underline=False, inverse=False):
    values = {
        'fg_index': fg_index,
        'bg_index': bg_index,
        'bold': int(bold),
        'underline': int(underline),
        'inverse': int(inverse),
    }
    word = 0
    for name, value in values.items():
        if not 0 <= value < 1 << WIDTHS[name]:
            raise ValueError('Value out of range for field {}: {}'.format(name, value))
        word |= value << SHIFTS[name]
    return word

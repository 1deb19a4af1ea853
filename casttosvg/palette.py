"""256 color palette of the terminal

Indices 0 to 15 are the named ANSI colors, 16 to 231 a 6x6x6 RGB cube and
232 to 255 a grayscale ramp. Any other index resolves to a fallback color.
"""

# Default colors of the theme
FOREGROUND = '#d4d6d6'
BACKGROUND = '#151718'

# Colors used for indices outside of the palette (terminal defaults)
FALLBACK_FOREGROUND = '#fff'
FALLBACK_BACKGROUND = '#000'

ANSI_COLORS = [
    '#42535b',
    '#cf3c40',
    '#9fcc4e',
    '#e7ce61',
    '#50b3dd',
    '#9e70c2',
    '#9fcc4e',
    '#f1f1f1',
    '#1d262b',
    '#cf3c40',
    '#9dcb4e',
    '#e7ce61',
    '#50b2dc',
    '#9e70c2',
    '#9fcc4e',
    '#ffffff',
]

CUBE_LEVELS = [0, 95, 135, 175, 215, 255]

GRAYSCALE_LEVELS = [
    0x08, 0x12, 0x1c, 0x26, 0x30, 0x3a, 0x44, 0x4e, 0x58, 0x62, 0x6c, 0x76,
    0x80, 0x8a, 0x94, 0x9e, 0xa8, 0xb2, 0xbc, 0xc6, 0xd0, 0xda, 0xe4, 0xee,
]


def _hex(red, green, blue):
    return '#{:02x}{:02x}{:02x}'.format(red, green, blue)


def _build_palette():
    colors = list(ANSI_COLORS)
    colors.extend(_hex(r, g, b)
                  for r in CUBE_LEVELS
                  for g in CUBE_LEVELS
                  for b in CUBE_LEVELS)
    colors.extend(_hex(level, level, level) for level in GRAYSCALE_LEVELS)
    return tuple(colors)


COLORS = _build_palette()
if len(COLORS) != 256:
    raise ValueError('Invalid palette: {} colors (expected 256)'.format(len(COLORS)))


def color(index, fallback):
    """Return the color at `index` in the palette, or `fallback` if `index`
    is out of range"""
    if 0 <= index < len(COLORS):
        return COLORS[index]
    return fallback


def _rgb(hex_color):
    value = hex_color.lstrip('#')
    if len(value) == 3:
        value = ''.join(c * 2 for c in value)
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


def nearest_index(hex_color):
    """Return the index of the palette color closest to `hex_color`

    Only the cube and the grayscale ramp are considered since the first 16
    colors depend on the theme.

    :param hex_color: Color in 'rrggbb' or '#rrggbb' format
    """
    red, green, blue = _rgb(hex_color)

    def distance(index):
        r, g, b = _rgb(COLORS[index])
        return (r - red) ** 2 + (g - green) ** 2 + (b - blue) ** 2

    return min(range(len(ANSI_COLORS), len(COLORS)), key=distance)

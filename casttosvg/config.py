"""Default settings and validation of user supplied settings"""
import math

DEFAULT_FONT = "Consolas, Menlo, 'Bitstream Vera Sans Mono', monospace, 'Powerline Symbols'"
DEFAULT_FONT_SIZE = 15

# Animation policies: one layer per frame made visible in turn, or a strip of
# frames sliding under the window
STRATEGIES = ('visibility', 'viewport')
DEFAULT_STRATEGY = 'visibility'


def validate_strategy(name):
    """Raise ValueError if 'name' is not the name of an animation strategy"""
    strategy = name.lower()
    if strategy not in STRATEGIES:
        raise ValueError('Invalid animation strategy: "{}" (expected one of {})'
                         .format(name, ', '.join(STRATEGIES)))
    return strategy


def parse_time(value):
    """Return the time in seconds described by 'value', or None if it is not a
    finite number"""
    try:
        time = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(time):
        return None
    return time


def validate_font_size(value):
    """Raise ValueError if 'value' is not a positive number"""
    size = float(value)
    if not math.isfinite(size) or size <= 0:
        raise ValueError('Invalid font size: "{}"'.format(value))
    return int(size) if size.is_integer() else size

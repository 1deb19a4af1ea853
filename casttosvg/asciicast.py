"""asciicast recordings

This module turns an asciicast recording into a Session: the geometry of the
terminal and the ordered list of output chunks, each one with the delay
elapsed since the previous chunk. Both v1 and v2 formats are supported. The
specifications of both formats are available here:
    [1] https://github.com/asciinema/asciinema/blob/develop/doc/asciicast-v1.md
    [2] https://github.com/asciinema/asciinema/blob/develop/doc/asciicast-v2.md
"""
import json
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)


class AsciiCastError(Exception):
    pass


_Chunk = namedtuple('Chunk', ['delay', 'data'])


class Chunk(_Chunk):
    """Output of the terminal

    delay: Time elapsed since the previous chunk in seconds
    data: Raw output of the terminal (text and escape sequences)
    """
    def __new__(cls, delay, data):
        if isinstance(delay, bool) or not isinstance(delay, (int, float)):
            raise AsciiCastError('Invalid type for chunk delay: {} (expected a number)'
                                 .format(type(delay)))
        if delay < 0:
            raise AsciiCastError('Invalid chunk delay: {} (expected a positive number)'
                                 .format(delay))
        if not isinstance(data, (str, bytes)):
            raise AsciiCastError('Invalid type for chunk data: {} (expected a string)'
                                 .format(type(data)))
        return super().__new__(cls, float(delay), data)


_Session = namedtuple('Session', ['width', 'height', 'duration', 'title', 'chunks'])


class Session(_Session):
    """Terminal session

    width: Number of columns of the terminal
    height: Number of lines of the terminal
    duration: Duration of the session in seconds, authoritative for the length
              of the animation
    title: Optional title of the session
    chunks: Tuple of Chunk instances in recording order
    """
    def __new__(cls, width, height, duration=None, title=None, chunks=()):
        for name, value in (('width', width), ('height', height)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise AsciiCastError('Invalid type for attribute {}: {} (expected int)'
                                     .format(name, type(value)))
            if value < 0:
                raise AsciiCastError('Invalid value for attribute {}: {}'.format(name, value))

        chunks = tuple(c if isinstance(c, Chunk) else Chunk(*c) for c in chunks)
        if duration is None:
            duration = sum(chunk.delay for chunk in chunks)
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            raise AsciiCastError('Invalid type for attribute duration: {} (expected a number)'
                                 .format(type(duration)))
        if duration < 0:
            raise AsciiCastError('Invalid value for attribute duration: {}'.format(duration))
        if title is not None and not isinstance(title, str):
            raise AsciiCastError('Invalid type for attribute title: {} (expected str)'
                                 .format(type(title)))

        return super().__new__(cls, width, height, float(duration), title, chunks)


def _pairs(value, message):
    try:
        return [tuple(item) for item in value]
    except TypeError as exc:
        raise AsciiCastError(message) from exc


def _read_v1(json_dict):
    missing_attributes = {'width', 'height', 'stdout'} - set(json_dict)
    if missing_attributes:
        raise AsciiCastError('Missing attributes in asciicast v1 data: {}'
                             .format(', '.join(sorted(missing_attributes))))

    if json_dict.get('version', 1) != 1:
        raise AsciiCastError('Unsupported asciicast version: {}'
                             .format(json_dict['version']))

    events = _pairs(json_dict['stdout'], 'Invalid type for stdout attribute '
                                         '(expected a list of [delay, data] pairs)')
    chunks = []
    for event in events:
        if len(event) != 2:
            raise AsciiCastError('Invalid event: {} (expected [delay, data])'.format(event))
        chunks.append(Chunk(*event))

    return Session(width=json_dict['width'],
                   height=json_dict['height'],
                   duration=json_dict.get('duration'),
                   title=json_dict.get('title'),
                   chunks=chunks)


def _read_v2(header, lines):
    missing_attributes = {'width', 'height'} - set(header)
    if missing_attributes:
        raise AsciiCastError('Missing attributes in asciicast v2 header: {}'
                             .format(', '.join(sorted(missing_attributes))))

    idle_time_limit = header.get('idle_time_limit')
    chunks = []
    last_time = 0
    for line in lines:
        if not line.strip():
            continue
        try:
            time, event_type, event_data = json.loads(line)
        except (json.JSONDecodeError, TypeError, ValueError) as exc:
            raise AsciiCastError('Invalid asciicast v2 event: {}'.format(line)) from exc
        if isinstance(time, bool) or not isinstance(time, (int, float)):
            raise AsciiCastError('Invalid time for asciicast v2 event: {}'.format(line))
        if event_type != 'o':
            continue

        delay = time - last_time
        last_time = time
        if idle_time_limit and delay > idle_time_limit:
            delay = idle_time_limit
        chunks.append(Chunk(delay, event_data))

    duration = header.get('duration')
    if duration is None or idle_time_limit:
        duration = sum(chunk.delay for chunk in chunks)

    return Session(width=header['width'],
                   height=header['height'],
                   duration=duration,
                   title=header.get('title'),
                   chunks=chunks)


def parse_session(text):
    """Return the Session described by an asciicast recording

    Raise AsciiCastError if `text` is not a valid asciicast v1 or v2
    recording"""
    if not text or not text.strip():
        raise AsciiCastError('Empty asciicast data')

    try:
        json_dict = json.loads(text)
    except json.JSONDecodeError:
        # asciicast v2 is made of one JSON document per line
        first_line, *lines = text.strip().splitlines()
        try:
            json_dict = json.loads(first_line)
        except json.JSONDecodeError as exc:
            raise AsciiCastError('Invalid asciicast data: not JSON') from exc
        if not isinstance(json_dict, dict) or json_dict.get('version') != 2:
            raise AsciiCastError('Invalid asciicast v2 header: {}'.format(first_line))
        logger.debug('Reading asciicast v2 data')
        return _read_v2(json_dict, lines)

    if not isinstance(json_dict, dict):
        raise AsciiCastError('Invalid asciicast data: expected a JSON object')

    if json_dict.get('version') == 2:
        # Header only, without any event
        return _read_v2(json_dict, [])

    logger.debug('Reading asciicast v1 data')
    return _read_v1(json_dict)

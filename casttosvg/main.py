"""Command line interface of casttosvg"""

import argparse
import logging
import sys

import casttosvg
import casttosvg.config
import casttosvg.render
from casttosvg.asciicast import AsciiCastError, parse_session

logger = logging.getLogger('casttosvg')

USAGE = """casttosvg [at] [--animate] [-s STRATEGY] [-f FILE] [--font FONT]
                 [--font-size SIZE] [-v] [-h]

Render an asciicast recording read from the standard input as an SVG document
"""
EPILOG = """examples:
  cat recording.json | casttosvg > screen.svg
  casttosvg 2.3 < recording.json > screen.svg
  casttosvg --animate --strategy viewport < recording.json > animation.svg
"""


def build_parser():
    parser = argparse.ArgumentParser(
        prog='casttosvg',
        usage=USAGE,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        'at',
        nargs='?',
        type=casttosvg.config.parse_time,
        help='time in seconds of the frame to render (default: end of the '
             'session)'
    )
    parser.add_argument(
        '--animate',
        action='store_true',
        help='render the whole session as an animation'
    )
    parser.add_argument(
        '-s', '--strategy',
        type=casttosvg.config.validate_strategy,
        default=casttosvg.config.DEFAULT_STRATEGY,
        metavar='STRATEGY',
        help=('animation strategy, one of {} (default: {})'
              .format(', '.join(casttosvg.config.STRATEGIES),
                      casttosvg.config.DEFAULT_STRATEGY))
    )
    parser.add_argument(
        '-f', '--file',
        metavar='FILE',
        help='read the recording from FILE instead of the standard input'
    )
    parser.add_argument(
        '--font',
        default=casttosvg.config.DEFAULT_FONT,
        metavar='FONT',
        help='font family of the terminal (default: {})'
             .format(casttosvg.config.DEFAULT_FONT)
    )
    parser.add_argument(
        '--font-size',
        type=casttosvg.config.validate_font_size,
        default=casttosvg.config.DEFAULT_FONT_SIZE,
        metavar='SIZE',
        help='font size in pixels (default: {})'
             .format(casttosvg.config.DEFAULT_FONT_SIZE)
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='increase log messages verbosity'
    )
    parser.add_argument(
        '--version',
        action='version',
        version='%(prog)s {}'.format(casttosvg.__version__)
    )
    return parser


def read_session(filename, input_file):
    """Return the session read from `filename`, or from `input_file` if
    `filename` is None

    Raise AsciiCastError if no data is available or if the data is invalid"""
    if filename is not None:
        try:
            with open(filename, 'r') as cast_file:
                data = cast_file.read()
        except OSError as exc:
            raise AsciiCastError('Cannot read {}: {}'.format(filename, exc)) from exc
    else:
        data = input_file.read()

    if not data or not data.strip():
        raise AsciiCastError('stdin [input] is required')

    return parse_session(data)


def main(args=None, input_file=None, output_file=None):
    if args is None:
        args = sys.argv
    if input_file is None:
        input_file = sys.stdin
    if output_file is None:
        output_file = sys.stdout

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter('%(message)s')
    console_handler.setFormatter(console_formatter)
    logger.handlers = [console_handler]
    logger.setLevel(logging.INFO)

    parser = build_parser()
    args = parser.parse_args(args[1:])
    if args.verbose:
        console_handler.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)

    try:
        try:
            session = read_session(args.file, input_file)
        except AsciiCastError as exc:
            logger.error(exc)
            parser.print_help(sys.stderr)
            sys.exit(1)

        logger.debug('Rendering started')
        if args.animate:
            document = casttosvg.render.animate(session,
                                                strategy=args.strategy,
                                                font=args.font,
                                                font_size=args.font_size)
        else:
            document = casttosvg.render.render_at(session,
                                                  args.at,
                                                  font=args.font,
                                                  font_size=args.font_size)
        print(casttosvg.render.to_string(document), file=output_file)
        logger.debug('Rendering ended')
    finally:
        for handler in logger.handlers:
            handler.close()

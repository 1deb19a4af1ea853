"""Rendering of terminal sessions

    - `render_at` renders the screen as it is at a given time of the session
    - `animate` renders the whole session as an SVG animation
"""
import logging
import math

from lxml import etree

from casttosvg import anim, config, term

logger = logging.getLogger(__name__)


def render_at(session, time=None, font=config.DEFAULT_FONT,
              font_size=config.DEFAULT_FONT_SIZE, terminal_class=term.PyteTerminal):
    """Return an SVG document of the screen once all chunks whose cumulative
    delay is less than or equal to `time` have been written

    :param session: casttosvg.asciicast.Session
    :param time: Time in seconds. Defaults to the duration of the session if
    missing or not a finite number
    :param terminal_class: Implementation of casttosvg.term.TerminalBuffer
    """
    if time is None or not math.isfinite(time):
        time = session.duration

    logger.debug('Rendering screen at {}s'.format(time))
    terminal = terminal_class(session.width, session.height)
    term.apply_until(session, terminal, time)
    return anim.render_document(session.width, session.height, term.capture(terminal),
                                title=session.title, font=font, font_size=font_size)


def animate(session, strategy=config.DEFAULT_STRATEGY, font=config.DEFAULT_FONT,
            font_size=config.DEFAULT_FONT_SIZE, terminal_class=term.PyteTerminal):
    """Return an SVG animation of the session

    :param session: casttosvg.asciicast.Session
    :param strategy: Animation policy, one of casttosvg.config.STRATEGIES
    :param terminal_class: Implementation of casttosvg.term.TerminalBuffer
    """
    strategy = config.validate_strategy(strategy)
    if session.duration <= 0:
        # Nothing to animate: render the final state of the screen
        logger.debug('Session has no duration, rendering a still frame')
        total_delay = sum(chunk.delay for chunk in session.chunks)
        return render_at(session, total_delay, font, font_size, terminal_class)

    logger.debug('Rendering {} frame(s) with the {} strategy'
                 .format(len(session.chunks), strategy))
    terminal = terminal_class(session.width, session.height)
    frames = term.replay(session, terminal)
    return anim.render_animation(frames, session.width, session.height,
                                 session.duration, strategy=strategy,
                                 title=session.title, font=font, font_size=font_size)


def to_string(document):
    return etree.tostring(document, encoding='unicode')

"""
Splits an ``Accept`` header into its media ranges.

These headers generally take the form of::

    text/html, application/json; q=0.9, */*; q=0.1

The tokenizer here does not build parameter lists; it only finds where each
media range (and its parameters) starts and ends, and returns those
substrings so that the ones worth looking at can be parsed with
:func:`conneg.mediatype.parse_media_type`.
"""

import enum

from conneg.mediatype import State
from conneg.util import (
    is_ows,
    is_token,
)


class Mark(enum.Flag):
    """Boundary updates and emits requested by :func:`transition`."""

    NONE = 0
    START = enum.auto()             # the range starts here
    TYPE_END = enum.auto()          # ``type/subtype`` ends here
    PARAMS_END = enum.auto()        # the parameters (so far) end here
    PARAMS_END_AFTER = enum.auto()  # the parameters end after this char
    EMIT = enum.auto()              # the range is complete


_STAY = (None, Mark.NONE)
_DROP = (State.INITIAL, Mark.NONE)
_SPLIT = Mark.TYPE_END | Mark.PARAMS_END


def transition(state, char, escaped=False, permissive=False):
    """
    Return the (next state, marks) pair for `char` read in `state`.

    `char` is ``None`` at the end of the input. A next state of ``None``
    means "stay". A state that finds a character it cannot handle drops the
    current range: on a comma it starts over, otherwise it moves to
    :attr:`State.INVALID`, which skips to the next comma.
    """
    end = char is None
    separator = char == ',' or end
    if state is State.INITIAL:
        if is_ows(char) or char == ',':
            return _STAY
        if is_token(char):
            return State.TYPE, Mark.START
    elif state is State.TYPE:
        if is_token(char):
            return _STAY
        if char == '/':
            return State.SUBTYPE_START, Mark.NONE
    elif state is State.SUBTYPE_START:
        if is_token(char):
            return State.SUBTYPE, Mark.NONE
        if permissive and is_ows(char):
            return _STAY
    elif state is State.SUBTYPE:
        if is_token(char):
            return _STAY
        if separator:
            return State.INITIAL, _SPLIT | Mark.EMIT
        if char == ';':
            return State.PARAMS_START, _SPLIT
        if is_ows(char):
            return State.SUBTYPE_END, _SPLIT
    elif state is State.SUBTYPE_END:
        if separator:
            return State.INITIAL, Mark.EMIT
        if char == ';':
            return State.PARAMS_START, Mark.NONE
        if is_ows(char):
            return _STAY
    elif state is State.PARAMS_START:
        if is_token(char):
            return State.PARAMETER_NAME, Mark.NONE
        if is_ows(char) or char == ';':
            return _STAY
        if separator:
            return State.INITIAL, Mark.EMIT
    elif state is State.PARAMETER_NAME:
        if is_token(char):
            return _STAY
        if char == '=':
            return State.PARAMETER_VALUE_START, Mark.PARAMS_END_AFTER
        if permissive and is_ows(char):
            return State.PARAMETER_NAME_END, Mark.PARAMS_END
        if permissive and char == ';':
            # flag parameter, as in ``example/example; foo; bar=baz``
            return State.PARAMS_START, Mark.PARAMS_END
        if permissive and separator:
            return State.INITIAL, Mark.PARAMS_END | Mark.EMIT
    elif state is State.PARAMETER_NAME_END:
        if is_ows(char):
            return _STAY
        if char == ';':
            return State.PARAMS_START, Mark.NONE
        if char == '=':
            return State.PARAMETER_VALUE_START, Mark.PARAMS_END_AFTER
        if separator:
            return State.INITIAL, Mark.EMIT
    elif state is State.PARAMETER_VALUE_START:
        if is_token(char):
            return State.PARAMETER_VALUE, Mark.NONE
        if char == '"':
            return State.PARAMETER_QUOTED, Mark.NONE
        if permissive and is_ows(char):
            return _STAY
        if permissive and char == ';':
            # empty value, as in ``example/example; foo=; bar=baz``
            return State.PARAMS_START, Mark.NONE
        if permissive and separator:
            return State.INITIAL, Mark.EMIT
    elif state is State.PARAMETER_VALUE:
        if is_token(char):
            return _STAY
        if char == ';':
            return State.PARAMS_START, Mark.PARAMS_END
        if separator:
            return State.INITIAL, Mark.PARAMS_END | Mark.EMIT
        if is_ows(char):
            return State.SUBTYPE_END, Mark.PARAMS_END
    elif state is State.PARAMETER_QUOTED:
        if end and permissive:
            return State.INITIAL, Mark.PARAMS_END | Mark.EMIT
        if char != '"' or escaped:
            return _STAY
        return State.SUBTYPE_END, Mark.PARAMS_END_AFTER
    elif state is State.INVALID:
        if char == ',':
            return _DROP
        return _STAY
    if char == ',':
        # a malformed range ends at the next comma
        return _DROP
    return State.INVALID, Mark.NONE


def parse_accept_header(value, types_only=False, permissive=False):
    """
    Split an ``Accept`` header into media range strings.

    Malformed media ranges are skipped; the ranges before and after them are
    still returned. This never raises for a ``str`` argument.

    :param value: (``str``) header value
    :param types_only: (``bool``) return only the ``type/subtype`` part of
                       each media range, without its parameters
    :param permissive: (``bool``) tolerate the same deviations from the RFC
                       as :func:`conneg.mediatype.parse_media_type` does in
                       permissive mode
    :return: (``list``) the media ranges as they appear in `value`, from left
             to right, including any parameters (unless `types_only` is
             true). Case and the whitespace between parameters are kept;
             leading and trailing whitespace is not.

    >>> parse_accept_header('text/html, text/plain;q=0.8, application/json')
    ['text/html', 'text/plain;q=0.8', 'application/json']
    >>> parse_accept_header('text/*;q=0.5, text/plain', types_only=True)
    ['text/*', 'text/plain']
    """
    media_ranges = []
    state = State.INITIAL
    start = type_end = params_end = 0
    length = len(value)

    for pos in range(length + 1):
        char = value[pos] if pos < length else None
        escaped = pos > 0 and value[pos - 1] == '\\'
        next_state, marks = transition(state, char, escaped, permissive)

        if marks:
            if Mark.START in marks:
                start = pos
            if Mark.TYPE_END in marks:
                type_end = pos
            if Mark.PARAMS_END in marks:
                params_end = pos
            if Mark.PARAMS_END_AFTER in marks:
                params_end = pos + 1
            if Mark.EMIT in marks:
                media_ranges.append(
                    value[start:type_end if types_only else params_end],
                )

        if next_state is not None:
            state = next_state

    return media_ranges

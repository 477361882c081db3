"""
Parses and normalises single media types.

A media type takes the form::

    type/subtype; name1=value1; name2="quoted \\"value\\""

as described in :rfc:`RFC 9110, section 8.3.1 <9110#section-8.3.1>`. The same
grammar, with ``*`` allowed for the type and/or subtype, describes the media
ranges found in an ``Accept`` header.
"""

from collections import namedtuple
import enum

from conneg.util import (
    is_ows,
    is_token,
    quote_parameter_value,
    unescape_quoted,
)


class ParseError(ValueError):
    """Raised when a media type does not match the media type grammar."""


class State(enum.Enum):
    """States of the media type and ``Accept`` header scanners."""

    INVALID = -1
    INITIAL = 0
    TYPE = 1
    SUBTYPE_START = 2
    SUBTYPE = 3
    SUBTYPE_END = 4
    PARAMS_START = 5
    PARAMETER_NAME = 6
    PARAMETER_NAME_END = 7
    PARAMETER_VALUE_START = 8
    PARAMETER_VALUE = 9
    PARAMETER_QUOTED = 10


class Action(enum.Enum):
    """Span side effects requested by :func:`transition`."""

    NONE = 0
    MARK = 1            # start a span at the current character
    MARK_QUOTED = 2     # start a span after the opening double quote
    TYPE = 3
    SUBTYPE = 4
    NAME = 5
    PUSH_FLAG = 6       # parameter without '=': the span is the name
    PUSH_EMPTY = 7      # captured name with an empty value
    PUSH_VALUE = 8
    PUSH_QUOTED = 9


_NOOP = (None, Action.NONE)


def transition(state, char, escaped=False, permissive=False):
    """
    Return the (next state, action) pair for `char` read in `state`.

    `char` is ``None`` at the end of the input. `escaped` tells whether the
    previous character was a backslash, which only matters inside a quoted
    parameter value. A next state of ``None`` means "stay".
    """
    end = char is None
    if state is State.INITIAL:
        if is_token(char):
            return State.TYPE, Action.MARK
        if is_ows(char):
            return _NOOP
    elif state is State.TYPE:
        if is_token(char):
            return _NOOP
        if char == '/':
            return State.SUBTYPE_START, Action.TYPE
    elif state is State.SUBTYPE_START:
        if is_token(char):
            return State.SUBTYPE, Action.MARK
        if permissive and is_ows(char):
            return _NOOP
    elif state is State.SUBTYPE:
        if is_token(char):
            return _NOOP
        if char == ';' or end:
            return State.PARAMS_START, Action.SUBTYPE
        if is_ows(char):
            return State.SUBTYPE_END, Action.SUBTYPE
    elif state is State.SUBTYPE_END:
        if char == ';' or end:
            return State.PARAMS_START, Action.NONE
        if is_ows(char):
            return _NOOP
    elif state is State.PARAMS_START:
        if is_token(char):
            return State.PARAMETER_NAME, Action.MARK
        if is_ows(char) or char == ';' or end:
            return _NOOP
    elif state is State.PARAMETER_NAME:
        if is_token(char):
            return _NOOP
        if char == '=':
            return State.PARAMETER_VALUE_START, Action.NAME
        if permissive and is_ows(char):
            return State.PARAMETER_NAME_END, Action.NAME
        if permissive and (char == ';' or end):
            # flag parameter, as in ``example/example; foo; bar=baz``
            return State.PARAMS_START, Action.PUSH_FLAG
    elif state is State.PARAMETER_NAME_END:
        if is_ows(char):
            return _NOOP
        if char == ';' or end:
            return State.PARAMS_START, Action.PUSH_EMPTY
        if char == '=':
            return State.PARAMETER_VALUE_START, Action.NONE
    elif state is State.PARAMETER_VALUE_START:
        if is_token(char):
            return State.PARAMETER_VALUE, Action.MARK
        if char == '"':
            return State.PARAMETER_QUOTED, Action.MARK_QUOTED
        if permissive and is_ows(char):
            return _NOOP
        if permissive and (char == ';' or end):
            return State.PARAMS_START, Action.PUSH_EMPTY
    elif state is State.PARAMETER_VALUE:
        if is_token(char):
            return _NOOP
        if char == ';' or end:
            return State.PARAMS_START, Action.PUSH_VALUE
        if is_ows(char):
            return State.SUBTYPE_END, Action.PUSH_VALUE
    elif state is State.PARAMETER_QUOTED:
        if end and permissive:
            return State.SUBTYPE_END, Action.PUSH_QUOTED
        if char != '"' or escaped:
            return _NOOP
        return State.SUBTYPE_END, Action.PUSH_QUOTED
    elif state is State.INVALID:
        return _NOOP
    return State.INVALID, Action.NONE


class MediaType(namedtuple('MediaType', ['type', 'subtype', 'parameters'])):
    """
    A parsed media type.

    *parameters* is a list of (name, value) tuples in the order they appear,
    with the case of names and values unchanged.
    """

    __slots__ = ()

    @property
    def type_subtype(self):
        """(``str``) The ``type/subtype`` part of the media type."""
        return self.type + '/' + self.subtype

    def __str__(self):
        return format_media_type(self)


class NormalizedMediaType(namedtuple(
    'NormalizedMediaType', ['type', 'subtype', 'parameters', 'original'],
)):
    """
    A case-normalised view of a :class:`MediaType`, used for comparisons.

    *parameters* is a tuple of (name, value) tuples, so the view can be shared
    freely. *original* is the :class:`MediaType` the view was made from.
    """

    __slots__ = ()

    @property
    def type_subtype(self):
        """(``str``) The lowercased ``type/subtype``."""
        return self.type + '/' + self.subtype


def parse_media_type(value, permissive=False):
    """
    Parse a media type such as a ``Content-Type`` header value.

    :param value: (``str``) the media type
    :param permissive: (``bool``) also accept some common inputs the RFC does
                       not allow: whitespace after the ``/``, whitespace around
                       the ``=`` of a parameter, parameters without a value
                       (``text/plain; flag``), empty values
                       (``text/plain; a=``), and an unterminated quoted value
                       at the end of the input.
    :return: (:class:`MediaType`) the parsed media type. Quoted parameter
             values are returned unquoted and unescaped.
    :raises ParseError: if `value` is not a valid media type.
    """
    parameters = []
    type_ = subtype = name = None
    state = State.INITIAL
    start = 0
    length = len(value)

    for pos in range(length + 1):
        char = value[pos] if pos < length else None
        escaped = pos > 0 and value[pos - 1] == '\\'
        next_state, action = transition(state, char, escaped, permissive)

        if action is Action.MARK:
            start = pos
        elif action is Action.MARK_QUOTED:
            start = pos + 1
        elif action is Action.TYPE:
            type_ = value[start:pos]
        elif action is Action.SUBTYPE:
            subtype = value[start:pos]
        elif action is Action.NAME:
            name = value[start:pos]
        elif action is Action.PUSH_FLAG:
            parameters.append((value[start:pos], ''))
        elif action is Action.PUSH_EMPTY:
            parameters.append((name, ''))
        elif action is Action.PUSH_VALUE:
            parameters.append((name, value[start:pos]))
        elif action is Action.PUSH_QUOTED:
            parameters.append((name, unescape_quoted(value[start:pos])))

        if next_state is not None:
            state = next_state
        if state is State.INVALID:
            break

    if (
        not type_ or
        not subtype or
        state not in (State.SUBTYPE_END, State.PARAMS_START)
    ):
        raise ParseError('invalid media type')

    return MediaType(type_, subtype, parameters)


def normalize_media_type(media_type):
    """
    Return the :class:`NormalizedMediaType` view of `media_type`.

    Type, subtype and parameter names are lowercased, as they are
    case-insensitive; parameter values are left alone, as their case may
    matter. Parameters are sorted by name, keeping the original order of
    repeated names.
    """
    parameters = tuple(sorted(
        ((name.lower(), value) for name, value in media_type.parameters),
        key=lambda param: param[0],
    ))
    return NormalizedMediaType(
        media_type.type.lower(),
        media_type.subtype.lower(),
        parameters,
        media_type,
    )


def format_media_type(media_type):
    """
    Serialise `media_type` back into a header value.

    Parameter values are quoted only if they need to be, and the result
    parses back into the same media type.

    :raises ValueError: if a parameter value ends with a backslash, as such a
                        value cannot be written so that it parses back.
    """
    segment = ''
    for param_name, param_value in media_type.parameters:
        segment += ';' + param_name + '=' + quote_parameter_value(param_value)
    return media_type.type_subtype + segment

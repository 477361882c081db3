"""
Chooses the media type to respond with, given an ``Accept`` header.

The rules follow :rfc:`RFC 9110, section 12.5.1 <9110#section-12.5.1>`:
media ranges with the highest quality value win, more specific media ranges
win over wildcards, then media ranges sharing more parameters with a
server-side media type, and finally the server's own order of preference.
"""

from collections import namedtuple
import logging
import re

from conneg.acceptparse import parse_accept_header
from conneg.mediatype import (
    ParseError,
    normalize_media_type,
    parse_media_type,
)

log = logging.getLogger(__name__)

# RFC 9110 Section 12.4.2 "Quality Values":
# qvalue = ( "0" [ "." 0*3DIGIT ] )
#        / ( "1" [ "." 0*3("0") ] )
# A trailing '.' with no digits is not accepted here.
qvalue_compiled_re = re.compile(r'0(?:\.[0-9]{1,3})?|1(?:\.0{1,3})?')

DEFAULT_WEIGHT = 1000
MAX_WEIGHT = 1000
MIN_WEIGHT = 0

AvailableType = namedtuple('AvailableType', ['media_type', 'value', 'index'])
AcceptEntry = namedtuple('AcceptEntry', ['media_range', 'weight', 'available'])


def quality_weight(media_type):
    """
    Return the quality value of a normalised media range as an ``int``.

    The qvalue is scaled to the range 0 to 1000, so ``q=1`` gives 1000 and
    ``q=0.5`` gives 500. A missing or invalid ``q`` parameter gives 1000.
    """
    for name, value in media_type.parameters:
        if name == 'q':
            break
    else:
        return DEFAULT_WEIGHT

    if qvalue_compiled_re.fullmatch(value) is None:
        return DEFAULT_WEIGHT

    # '0.5' -> '05' -> '0500', '1' -> '1' -> '1000'
    weight = int(value.replace('.', '', 1).ljust(4, '0'))
    return max(min(MAX_WEIGHT, weight), MIN_WEIGHT)


def _overlaps(media_range, media_type):
    if media_range.type_subtype == media_type.type_subtype:
        return True
    if media_range.subtype == '*' and media_range.type == media_type.type:
        return True
    return media_range.type == '*' and media_range.subtype == '*'


def _shared_parameters(media_range, media_type):
    """Count the non-``q`` parameters of `media_range` in `media_type`."""
    offered = set(media_type.parameters)
    return sum(
        1 for param in media_range.parameters
        if param[0] != 'q' and param in offered
    )


def _rank(entry):
    media_range = entry.media_range
    return (
        media_range.type == '*',
        media_range.subtype == '*',
        -_shared_parameters(media_range, entry.available.media_type),
        entry.available.index,
    )


class Negotiator(object):
    """
    Negotiate against a fixed list of available media types.

    The available media types are parsed once, when the negotiator is
    created, so a negotiator should be created once and reused for every
    request. It holds no other state and can be shared between threads.
    """

    def __init__(self, available_types):
        """
        Create a :class:`Negotiator` instance.

        :param available_types: (iterable of ``str``) the media types the
                                server can respond with, most preferred
                                first.
        :raises ParseError: if any of `available_types` is not a valid media
                            type.
        """
        self._available = tuple(
            AvailableType(
                media_type=normalize_media_type(parse_media_type(value)),
                value=value,
                index=index,
            )
            for index, value in enumerate(available_types)
        )
        log.debug(
            'negotiator created for %d media type(s)', len(self._available),
        )

    @property
    def available_types(self):
        """(``list``) The available media types, as they were given."""
        return [available.value for available in self._available]

    def __repr__(self):
        return '<{} ({!r})>'.format(
            self.__class__.__name__, self.available_types,
        )

    def _accept_entries(self, accept, permissive):
        entries = []
        for media_range in parse_accept_header(
            accept, types_only=False, permissive=permissive,
        ):
            try:
                normalized = normalize_media_type(
                    parse_media_type(media_range, permissive=permissive),
                )
            except ParseError:
                log.debug('ignoring invalid media range %r', media_range)
                continue
            weight = quality_weight(normalized)
            if weight == 0:
                # q=0 is a refusal, not a preference
                continue
            entries.append(AcceptEntry(normalized, weight, None))
        # stable, so equal weights keep the order of the header
        entries.sort(key=lambda entry: entry.weight, reverse=True)
        return entries

    def negotiate(self, accept=None, permissive=False):
        """
        Return the available media type that best matches `accept`.

        :param accept: (``str`` or ``None``) the ``Accept`` header value. If
                       it is ``None`` or empty, the first available media type
                       is returned.
        :param permissive: (``bool``) parse `accept` in permissive mode (see
                           :func:`conneg.mediatype.parse_media_type`).
        :return: (``str`` or ``None``) one of the available media types,
                 exactly as it was given to the negotiator, or ``None`` if no
                 available media type is acceptable.

        Media ranges in `accept` that cannot be parsed are ignored.
        """
        if not self._available:
            return None
        if not accept:
            return self._available[0].value

        overlapping = []
        for entry in self._accept_entries(accept, permissive):
            for available in self._available:
                if _overlaps(entry.media_range, available.media_type):
                    overlapping.append(entry._replace(available=available))
                    break

        if not overlapping:
            return None

        highest = overlapping[0].weight
        candidates = []
        for entry in overlapping:
            if entry.weight != highest:
                break
            candidates.append(entry)

        best = min(candidates, key=_rank)
        return best.available.value

    __call__ = negotiate

    def negotiate_environ(self, environ, permissive=False):
        """
        Negotiate against the ``Accept`` header of a WSGI `environ`.

        A request without an ``Accept`` header gets the first available media
        type.
        """
        return self.negotiate(environ.get('HTTP_ACCEPT'), permissive)


def create_negotiator(available_types):
    """
    Return a :class:`Negotiator` for `available_types`.

    :raises ParseError: if any of `available_types` is not a valid media type.
    """
    return Negotiator(available_types)


def negotiate_media_type(available_types, accept=None, permissive=False):
    """
    Return the media type in `available_types` that best matches `accept`.

    This parses `available_types` again on every call. When negotiating
    against the same media types more than once, use
    :func:`create_negotiator` and reuse the :class:`Negotiator`.
    """
    return create_negotiator(available_types).negotiate(accept, permissive)

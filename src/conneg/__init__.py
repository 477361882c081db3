from conneg.acceptparse import parse_accept_header
from conneg.mediatype import (
    MediaType,
    NormalizedMediaType,
    ParseError,
    format_media_type,
    normalize_media_type,
    parse_media_type,
)
from conneg.negotiation import (
    Negotiator,
    create_negotiator,
    negotiate_media_type,
    quality_weight,
)

__all__ = [
    'MediaType',
    'Negotiator',
    'NormalizedMediaType',
    'ParseError',
    'create_negotiator',
    'format_media_type',
    'negotiate_media_type',
    'normalize_media_type',
    'parse_accept_header',
    'parse_media_type',
    'quality_weight',
]

__version__ = '1.0.0'

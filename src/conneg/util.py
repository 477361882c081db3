import re

# RFC 9110 Section 5.6.2 "Tokens":
# tchar          = "!" / "#" / "$" / "%" / "&" / "'" / "*"
#                / "+" / "-" / "." / "^" / "_" / "`" / "|" / "~"
#                / DIGIT / ALPHA
TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~"
    '0123456789'
    'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
    'abcdefghijklmnopqrstuvwxyz'
)

# RFC 9110 Section 5.6.3 "Whitespace":
# OWS            = *( SP / HTAB )
#                ; optional whitespace
OWS_CHARS = frozenset(' \t')

token_compiled_re = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
quoted_pair_compiled_re = re.compile(r'\\(.)')


def is_token(char):
    """Return whether `char` is a ``tchar``; ``None`` (end of input) is not."""
    return char in TOKEN_CHARS


def is_ows(char):
    """Return whether `char` is optional whitespace."""
    return char in OWS_CHARS


def unescape_quoted(value):
    """
    Return `value` with every quoted-pair replaced by the escaped character.

    `value` is the content of a quoted-string without the surrounding double
    quotes.
    """
    # RFC 9110, section 5.6.4 "Quoted Strings": "Recipients that process the
    # value of a quoted-string MUST handle a quoted-pair as if it were replaced
    # by the octet following the backslash."
    return quoted_pair_compiled_re.sub(r'\1', value)


def quote_parameter_value(value):
    """
    Escape and quote a parameter value where necessary.

    Tokens are returned unchanged; anything else is escaped and wrapped in
    double quotes.

    :raises ValueError: if `value` ends with a backslash. The closing quote
                        would follow a backslash, which the media type parser
                        reads as a literal ``"``.
    """
    if value == '':
        return '""'
    if token_compiled_re.fullmatch(value):
        return value
    if value.endswith('\\'):
        raise ValueError(
            'cannot quote a parameter value ending with a backslash: '
            '{!r}'.format(value),
        )
    return '"' + value.replace('\\', '\\\\').replace('"', r'\"') + '"'

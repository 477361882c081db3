import pytest

from conneg.acceptparse import (
    Mark,
    parse_accept_header,
    transition,
)
from conneg.mediatype import State


class TestTransition(object):
    @pytest.mark.parametrize('state', list(State))
    @pytest.mark.parametrize('char', ['a', '*', '/', ';', '=', '"', ' ', '@',
                                      ',', '\\', None])
    @pytest.mark.parametrize('permissive', [False, True])
    def test_total(self, state, char, permissive):
        next_state, marks = transition(state, char, permissive=permissive)
        assert next_state is None or isinstance(next_state, State)
        assert isinstance(marks, Mark)

    @pytest.mark.parametrize('state', [
        State.TYPE, State.SUBTYPE_START, State.INVALID,
    ])
    def test_comma_drops_entry(self, state):
        assert transition(state, ',') == (State.INITIAL, Mark.NONE)


class TestParseAcceptHeader(object):
    @pytest.mark.parametrize('value, expected', [
        ('text/html', ['text/html']),
        ('text/html, application/json', ['text/html', 'application/json']),
        (
            'application/xml, text/plain, image/png',
            ['application/xml', 'text/plain', 'image/png'],
        ),
        ('*/*', ['*/*']),
        ('image/*, */*', ['image/*', '*/*']),
        (
            'text/html; charset=UTF-8; q=0.9',
            ['text/html; charset=UTF-8; q=0.9'],
        ),
        (
            'text/html; q=0.8, application/json; q=0.9',
            ['text/html; q=0.8', 'application/json; q=0.9'],
        ),
        (
            'text/plain; title="a, b; c", application/json',
            ['text/plain; title="a, b; c"', 'application/json'],
        ),
        (
            'text/plain; title="a \\"quoted\\" text"; q=0.5, image/png',
            ['text/plain; title="a \\"quoted\\" text"; q=0.5', 'image/png'],
        ),
        (
            '  text/html  ; q=0.7 ,application/json\t; q=0.8 ',
            ['text/html  ; q=0.7', 'application/json\t; q=0.8'],
        ),
        (
            'TEXT/HTML; Q=0.8, Application/JSON',
            ['TEXT/HTML; Q=0.8', 'Application/JSON'],
        ),
        (
            'text/plain; title="one\\\\"two" , image/jpeg',
            ['text/plain; title="one\\\\"two"', 'image/jpeg'],
        ),
        ('text/html;q=1;', ['text/html;q=1']),
        ('text/html; ', ['text/html']),
    ])
    def test_valid(self, value, expected):
        assert parse_accept_header(value) == expected

    @pytest.mark.parametrize('value', ['', ' ', '   \t  ', ',', ', ,,'])
    def test_empty(self, value):
        assert parse_accept_header(value) == []

    def test_does_not_sort_by_qvalue(self):
        value = 'text/plain;q=0.1, text/html;q=1.0'
        assert parse_accept_header(value) == [
            'text/plain;q=0.1', 'text/html;q=1.0',
        ]

    @pytest.mark.parametrize('value, expected', [
        (
            'application/json, bad@@type, text/plain',
            ['application/json', 'text/plain'],
        ),
        ('text/, application/json', ['application/json']),
        (',,/, , application/xml, ,', ['application/xml']),
        ('text, text/html', ['text/html']),
        ('text/html;charset, image/png', ['image/png']),
        ('text/html;a=b c, image/png', ['image/png']),
        ('text/html;a="unterminated, image/png', []),
        ('text/ html, image/png', ['image/png']),
        ('image/png, text/html;a=', ['image/png']),
    ])
    def test_skips_malformed(self, value, expected):
        assert parse_accept_header(value) == expected

    @pytest.mark.parametrize('value, expected', [
        (
            'text/html; charset=UTF-8; q=0.9, example/plain, '
            'application/example ; q=0.4, test/test',
            ['text/html', 'example/plain', 'application/example', 'test/test'],
        ),
        ('text/*;q=0.5, text/plain', ['text/*', 'text/plain']),
        ('text/plain; title="a, b"', ['text/plain']),
    ])
    def test_types_only(self, value, expected):
        assert parse_accept_header(value, types_only=True) == expected

    @pytest.mark.parametrize('value, expected', [
        (
            'example/example; foo; bar=; q=0.5, text/plain',
            ['example/example; foo; bar=; q=0.5', 'text/plain'],
        ),
        (
            'text/plain;   charset = utf-8  , application/json',
            ['text/plain;   charset = utf-8', 'application/json'],
        ),
        (
            'text/plain; title="unterminated',
            ['text/plain; title="unterminated'],
        ),
        ('text/plain; flag', ['text/plain; flag']),
        ('text/plain; a=, image/png', ['text/plain; a=', 'image/png']),
        ('text/plain; a= , x/y', ['text/plain; a=', 'x/y']),
        ('text/plain; a = , x/y', ['text/plain; a =', 'x/y']),
        ('text/plain; a=  ; b=1', ['text/plain; a=  ; b=1']),
        ('text/plain; a=  ', ['text/plain; a=']),
        ('text/ html, image/png', ['text/ html', 'image/png']),
    ])
    def test_permissive(self, value, expected):
        assert parse_accept_header(value, permissive=True) == expected

    def test_permissive_types_only(self):
        value = 'text/plain; flag; a = 1, image/png; title="x'
        assert parse_accept_header(
            value, types_only=True, permissive=True,
        ) == ['text/plain', 'image/png']

    def test_many_ranges(self):
        value = ','.join('type{0}/sub{0}'.format(i) for i in range(100))
        returned = parse_accept_header(value)
        assert len(returned) == 100
        assert returned[42] == 'type42/sub42'

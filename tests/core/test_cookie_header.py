"""Cookie Header — Cookie parsing and Set-Cookie directive assembly.

Tests cover:
    - Percent-encoded values decoded on parse, encoded on build
    - Malformed pairs skipped
    - Default attributes (Max-Age 30 days, Path, HttpOnly, Secure, SameSite=Lax)
    - Clear directive is Max-Age=0 with the same attributes
"""

from linkcard.core.cookie_header import (
    CookieOptions, build_clear_cookie, build_set_cookie, parse_cookie_header,
)


def test_parse_decodes_values():
    header = "theme=dark; linkedin_card_data=%7B%22a%22%3A1%7D"
    assert parse_cookie_header(header) == {
        "theme": "dark", "linkedin_card_data": '{"a":1}',
    }


def test_parse_skips_malformed_pairs():
    assert parse_cookie_header("novalue; =x; a=1") == {"a": "1"}


def test_parse_empty_header():
    assert parse_cookie_header(None) == {}
    assert parse_cookie_header("") == {}


def test_build_set_cookie_with_defaults():
    directive = build_set_cookie("linkedin_card_data", '{"a":1}')
    assert directive == (
        "linkedin_card_data=%7B%22a%22%3A1%7D; Max-Age=2592000; Path=/; "
        "HttpOnly; Secure; SameSite=Lax"
    )


def test_build_set_cookie_round_trips_through_parse():
    value = '{"url":"https://linkedin.com/in/john-doe?lang=en","n":1}'
    directive = build_set_cookie("c", value)
    pair = directive.split(";")[0]
    assert parse_cookie_header(pair) == {"c": value}


def test_build_set_cookie_honours_options():
    options = CookieOptions(max_age=None, http_only=False, secure=False, same_site=None)
    assert build_set_cookie("c", "v", options) == "c=v; Path=/"


def test_clear_cookie_expires_immediately():
    assert build_clear_cookie("linkedin_card_data") == (
        "linkedin_card_data=; Max-Age=0; Path=/; HttpOnly; Secure; SameSite=Lax"
    )

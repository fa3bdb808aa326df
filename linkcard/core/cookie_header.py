"""Cookie Header — parse Cookie and build Set-Cookie directives for the state blob.

Invariants:
    - PURE string functions, no framework types
    - Values are percent-encoded on write and decoded on read
    - A clear directive is the same cookie with an empty value and Max-Age=0

Design Decisions:
    - Directives built by hand rather than via http.cookies.SimpleCookie: the blob
      is JSON, and SimpleCookie would quote it instead of percent-encoding it
"""

from dataclasses import dataclass
from typing import Literal
from urllib.parse import quote, unquote

STATE_COOKIE_NAME = "linkedin_card_data"
STATE_COOKIE_MAX_AGE = 30 * 24 * 60 * 60

# Same set encodeURIComponent leaves untouched
_COOKIE_SAFE = "!~*'()"


@dataclass(frozen=True)
class CookieOptions:
    max_age: int | None = STATE_COOKIE_MAX_AGE
    path: str = "/"
    http_only: bool = True
    secure: bool = True
    same_site: Literal["strict", "lax", "none"] | None = "lax"


DEFAULT_COOKIE_OPTIONS = CookieOptions()


def parse_cookie_header(header: str | None) -> dict[str, str]:
    """Cookie header → {name: decoded value}. Malformed pairs are skipped."""
    cookies: dict[str, str] = {}
    if not header:
        return cookies
    for pair in header.split(";"):
        name, sep, value = pair.strip().partition("=")
        if not sep or not name:
            continue
        cookies[name] = unquote(value)
    return cookies


def _attributes(options: CookieOptions, max_age: int | None) -> list[str]:
    attrs = []
    if max_age is not None:
        attrs.append(f"Max-Age={max_age}")
    attrs.append(f"Path={options.path}")
    if options.http_only:
        attrs.append("HttpOnly")
    if options.secure:
        attrs.append("Secure")
    if options.same_site:
        attrs.append(f"SameSite={options.same_site.capitalize()}")
    return attrs


def build_set_cookie(
    name: str, value: str, options: CookieOptions = DEFAULT_COOKIE_OPTIONS,
) -> str:
    pair = f"{name}={quote(value, safe=_COOKIE_SAFE)}"
    return "; ".join([pair, *_attributes(options, options.max_age)])


def build_clear_cookie(
    name: str, options: CookieOptions = DEFAULT_COOKIE_OPTIONS,
) -> str:
    return "; ".join([f"{name}=", *_attributes(options, 0)])

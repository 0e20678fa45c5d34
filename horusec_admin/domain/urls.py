"""Strict URL grammar check on top of ``urllib.parse``."""

import re
from urllib.parse import SplitResult, urlsplit

_CONTROL_CHARACTER = re.compile(r"[\x00-\x1f\x7f]")
_INVALID_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_INVALID_HOST_CHARACTER = re.compile(r"[^A-Za-z0-9\-._~!$&'()*+,;=%:]")


def _check_escapes(component: str, name: str) -> None:
    match = _INVALID_ESCAPE.search(component)
    if match:
        raise ValueError(
            f"invalid URL escape {component[match.start():match.start() + 3]!r} in {name}"
        )


def _check_host(hostname: str) -> None:
    match = _INVALID_HOST_CHARACTER.search(hostname)
    if match:
        raise ValueError(f"invalid character {match.group()!r} in host name")


def parse_url(raw: str) -> SplitResult:
    """Parse ``raw`` into its components, raising ``ValueError`` on bad grammar.

    ``urlsplit`` alone accepts almost anything, so control characters, a
    missing scheme before ``:``, illegal host characters, broken escapes and
    bad ports are rejected here. Query strings are left as they are. The
    empty string yields an empty URL.
    """
    if _CONTROL_CHARACTER.search(raw):
        raise ValueError("invalid control character in URL")
    if raw.startswith(":"):
        raise ValueError("missing protocol scheme")

    parsed = urlsplit(raw)
    if not parsed.netloc and parsed.path.startswith("//"):
        # Would serialize back with the path taken as the authority.
        raise ValueError("empty host followed by a path starting with '//'")
    if parsed.hostname:
        _check_host(parsed.hostname)
    _check_escapes(parsed.netloc, "host")
    _check_escapes(parsed.path, "path")
    _check_escapes(parsed.fragment, "fragment")
    # Accessing the port validates it.
    _ = parsed.port
    return parsed

"""
Host and URL parsing for trust decisions and authority endpoints.
"""

import ipaddress
import re
from typing import Union

import httpx

from shared.errors import MalformedInputError

UrlLike = Union[str, httpx.URL]

_HOST_LABEL = re.compile(r"^(?!-)[a-z0-9_-]{1,63}(?<!-)$")
_BARE_HOST = re.compile(r"^(?P<host>[^:/?#]+)(?::(?P<port>\d{1,5}))?(?:[/?#].*)?$")
_WHITESPACE = re.compile(r"\s")
_ALLOWED_SCHEMES = ("http", "https")


def is_valid_host(host: str) -> bool:
    """Return True if ``host`` is a DNS name or an IP address literal."""
    if not host or len(host) > 253:
        return False
    try:
        ipaddress.ip_address(host.strip("[]"))
        return True
    except ValueError:
        pass
    labels = host.lower().rstrip(".").split(".")
    return all(_HOST_LABEL.match(label) for label in labels)


def ascii_host(url: httpx.URL) -> str:
    """Return the host of ``url`` in ASCII form, IDNA-encoding unicode names."""
    try:
        return url.raw_host.decode("ascii").lower()
    except UnicodeDecodeError as exc:
        raise MalformedInputError("URL has no valid host", details={"value": str(url)}) from exc


def parse_url(value: UrlLike) -> httpx.URL:
    """Parse an absolute http(s) URL.

    Raises:
        MalformedInputError: If the value is not a string or URL, contains
            whitespace, has an unsupported scheme, or lacks a valid host.
    """
    if isinstance(value, httpx.URL):
        url = value
    else:
        if not isinstance(value, str):
            raise MalformedInputError("URL must be a string", details={"value": repr(value)})
        if _WHITESPACE.search(value):
            raise MalformedInputError("URL contains whitespace", details={"value": value})
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise MalformedInputError(f"Invalid URL: {exc}", details={"value": value}) from exc

    if url.scheme not in _ALLOWED_SCHEMES:
        raise MalformedInputError("URL scheme must be http or https", details={"value": str(url)})
    if not is_valid_host(ascii_host(url)):
        raise MalformedInputError("URL has no valid host", details={"value": str(url)})
    return url


def host_of(value: UrlLike) -> str:
    """Return the lowercase ASCII host of a URL or of a bare ``host[:port]`` string.

    Internationalized names are keyed by their punycode form, so
    ``bücher.example`` and ``xn--bcher-kva.example`` are the same host.
    """
    if isinstance(value, httpx.URL) or (isinstance(value, str) and "://" in value):
        return ascii_host(parse_url(value))

    if not isinstance(value, str) or _WHITESPACE.search(value):
        raise MalformedInputError("Malformed host", details={"value": repr(value)})

    if not _BARE_HOST.match(value):
        raise MalformedInputError("Malformed host", details={"value": value})
    try:
        return ascii_host(parse_url(f"http://{value}"))
    except MalformedInputError as exc:
        raise MalformedInputError("Malformed host", details={"value": value}) from exc

"""nuri.uri
Splits a URI into scheme, authority (userinfo, host, port), path, query and fragment.
Every component is found with str.partition/str.find and a few fully anchored
single-class patterns, so parsing is linear in the length of the input.
"""

import dataclasses
import logging
import re

from typing import NamedTuple, Self

LOGGER = logging.getLogger(__name__)

# scheme = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME: str = r"[A-Za-z][A-Za-z0-9+\-.]*"
_SCHEME_PAT: re.Pattern[str] = re.compile(_SCHEME)

# port = *DIGIT
_PORT: str = r"[0-9]*"
_PORT_PAT: re.Pattern[str] = re.compile(_PORT)

# pct-encoded = "%" HEXDIG HEXDIG (the "%" is matched by the scanner)
_HEX_PAIR: str = r"[0-9A-Fa-f]{2}"
_HEX_PAIR_PAT: re.Pattern[str] = re.compile(_HEX_PAIR)

_MAX_PORT: int = 65535

# Text codec applied to decoded bytes. surrogateescape keeps bytes that are not
# valid UTF-8 recoverable through percent_decode(...).encode("utf-8", "surrogateescape").
_DEFAULT_ENCODING: str = "utf-8"
_DEFAULT_ERRORS: str = "surrogateescape"


class UriError(ValueError):
    """Base class for every parse failure. ``value`` is the substring that was rejected."""

    default_message: str = "invalid URI component"

    def __init__(self: Self, value: str, message: str | None = None) -> None:
        self.value: str = value
        self.message: str = message if message is not None else self.default_message
        super().__init__(f"{self.message}: {value!r}")


class InvalidUri(UriError):
    """The input does not match scheme ":" authority-and-path ["?" query] ["#" fragment]."""

    default_message = "invalid URI"


class InvalidAuthority(UriError):
    """The text following "//" is not [userinfo "@"] host [":" port]."""

    default_message = "invalid URI authority"


class InvalidPort(UriError):
    """The port is not a decimal number in [0, 65535]."""

    default_message = "invalid port"


class MalformedEscape(UriError):
    """A "%" that is not followed by two hexadecimal digits, or a character with no UTF-8 form (a lone surrogate)."""

    default_message = "malformed percent-escape"


def _encode_literal(text: str) -> bytes:
    try:
        return text.encode(_DEFAULT_ENCODING, _DEFAULT_ERRORS)
    except UnicodeEncodeError as exc:
        bad: str = exc.object[exc.start : exc.end]
        LOGGER.debug("rejecting unencodable %r in %r", bad, text)
        raise MalformedEscape(bad, "character has no UTF-8 encoding") from exc


def percent_decode_to_bytes(data: str) -> bytes:
    """Replaces every %XX escape in data with the byte it names.
    Characters that are not part of an escape are copied as their UTF-8 bytes.
    e.g. percent_decode_to_bytes("caf%C3%A9") == b"caf\\xc3\\xa9"
    """
    result: bytearray = bytearray()
    start: int = 0
    while (percent := data.find("%", start)) >= 0:
        result += _encode_literal(data[start:percent])
        escape: str = data[percent + 1 : percent + 3]
        if _HEX_PAIR_PAT.fullmatch(escape) is None:
            bad: str = data[percent : percent + 3]
            LOGGER.debug("rejecting percent-escape %r in %r", bad, data)
            raise MalformedEscape(bad)
        result.append(int(escape, base=16))
        start = percent + 3
    result += _encode_literal(data[start:])
    return bytes(result)


def percent_decode(data: str, encoding: str = _DEFAULT_ENCODING, errors: str = _DEFAULT_ERRORS) -> str:
    """Percent-decodes data and returns the resulting bytes as text.
    e.g. percent_decode("100%25") == "100%"
    """
    return percent_decode_to_bytes(data).decode(encoding, errors)


def parse_query_params(query: str) -> tuple[tuple[str, str], ...]:
    """Splits an already-decoded query into (name, value) pairs, in order of appearance.
    A parameter without "=" gets the value "". Parameters with an empty name are dropped.
    e.g. parse_query_params("a=1&b=&c") == (("a", "1"), ("b", ""), ("c", ""))
    """
    params: list[tuple[str, str]] = []
    if len(query) == 0:
        return ()
    for param in query.split("&"):
        name, _, value = param.partition("=")
        if len(name) == 0:
            continue
        params.append((name, value))
    return tuple(params)


class Authority(NamedTuple):
    username: str
    password: str
    host: str
    port: int


def _parse_port(raw_port: str) -> int:
    if _PORT_PAT.fullmatch(raw_port) is None:
        raise InvalidPort(raw_port)
    if len(raw_port) == 0:
        return 0
    # Checked before int() so that an absurdly long run of digits is never converted.
    digits: str = raw_port.lstrip("0")
    if len(digits) > len(str(_MAX_PORT)):
        raise InvalidPort(raw_port)
    port: int = int(digits or "0", base=10)
    if port > _MAX_PORT:
        raise InvalidPort(raw_port)
    return port


def parse_authority(data: str) -> Authority:
    """Splits the text between "//" and the next "/" into username, password, host and port.

    authority = [ userinfo "@" ] host [ ":" port ]
    userinfo  = user [ ":" password ]
    host      = "[" *( any but "]" ) "]" / *( any but "[" / ":" )

    Userinfo runs up to the first "@". The brackets of an IP literal stay in host.
    An empty or absent port is reported as 0.
    """
    userinfo, at, hostport = data.partition("@")
    if len(at) == 0:
        userinfo, hostport = "", data
    username, _, password = userinfo.partition(":")

    host: str
    rest: str
    if hostport.startswith("["):
        end: int = hostport.find("]")
        if end < 0:
            LOGGER.debug("rejecting authority %r: unterminated IP literal", data)
            raise InvalidAuthority(data)
        host, rest = hostport[: end + 1], hostport[end + 1 :]
    else:
        colon: int = hostport.find(":")
        if colon < 0:
            host, rest = hostport, ""
        else:
            host, rest = hostport[:colon], hostport[colon:]
        if "[" in host:
            LOGGER.debug("rejecting authority %r: '[' inside host name", data)
            raise InvalidAuthority(data)

    port: int = 0
    if len(rest) > 0:
        if not rest.startswith(":"):
            LOGGER.debug("rejecting authority %r: unexpected %r after host", data, rest)
            raise InvalidAuthority(data)
        port = _parse_port(rest[1:])

    return Authority(
        username=percent_decode(username),
        password=percent_decode(password),
        host=percent_decode(host),
        port=port,
    )


@dataclasses.dataclass(frozen=True)
class Uri:
    """A parsed URI. You should not instantiate this directly. Instead use parse_uri.

    port is 0 both when the URI names no port and when it names port 0 explicitly.
    query_params is derived from query when the object is built and is never passed in.
    """

    scheme: str
    has_authority: bool = False
    username: str = ""
    password: str = ""
    host: str = ""
    port: int = 0
    path: str = ""
    query: str = ""
    fragment: str = ""
    query_params: tuple[tuple[str, str], ...] = dataclasses.field(init=False)

    def __post_init__(self: Self) -> None:
        if _SCHEME_PAT.fullmatch(self.scheme) is None or self.scheme != self.scheme.lower():
            raise InvalidUri(self.scheme, "scheme must be a lowercase identifier")
        if not 0 <= self.port <= _MAX_PORT:
            raise InvalidPort(str(self.port))
        # Frozen, so the derived field has to be set through object.__setattr__.
        object.__setattr__(self, "query_params", parse_query_params(self.query))

    @classmethod
    def parse(cls: type[Self], data: str) -> Self:
        return parse_uri(data, cls)

    @property
    def authority(self: Self) -> str:
        """[username[":"password]"@"]host[":"port]"""
        result: str = ""
        if len(self.username) > 0 or len(self.password) > 0:
            result += self.username
            if len(self.password) > 0:
                result += f":{self.password}"
            result += "@"
        result += self.host
        if self.port != 0:
            result += f":{self.port}"
        return result

    @property
    def hostname(self: Self) -> str:
        if self.host.startswith("["):
            return self.host[1:-1]
        return self.host

    def get_query_params(self: Self) -> tuple[tuple[str, str], ...]:
        return self.query_params


def parse_uri(data: str, factory: type[Uri] = Uri) -> Uri:
    """Parses scheme ":" authority-and-path ["?" query] ["#" fragment].

    When authority-and-path starts with "//", the text up to the next "/" is the
    authority and the remainder is the (percent-decoded) path. Otherwise the whole
    block is kept as the path, verbatim. Query and fragment are percent-decoded.
    Raises InvalidUri, InvalidAuthority, InvalidPort or MalformedEscape.
    """
    scheme, colon, rest = data.partition(":")
    if len(colon) == 0 or _SCHEME_PAT.fullmatch(scheme) is None:
        LOGGER.debug("rejecting %r: no valid scheme", data)
        raise InvalidUri(data)

    # The query ends at the first "#", so "#" has to be split off first.
    rest, _, fragment = rest.partition("#")
    authority_and_path, _, query = rest.partition("?")

    authority: Authority = Authority(username="", password="", host="", port=0)
    has_authority: bool = authority_and_path.startswith("//")
    path: str
    if has_authority:
        raw_authority, slash, raw_path = authority_and_path[len("//") :].partition("/")
        authority = parse_authority(raw_authority)
        path = percent_decode(slash + raw_path)
    else:
        path = authority_and_path

    return factory(
        scheme=scheme.lower(),
        has_authority=has_authority,
        username=authority.username,
        password=authority.password,
        host=authority.host,
        port=authority.port,
        path=path,
        query=percent_decode(query),
        fragment=percent_decode(fragment),
    )

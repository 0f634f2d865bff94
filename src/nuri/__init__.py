__version__ = "0.1"

from .uri import Authority, InvalidAuthority, InvalidPort, InvalidUri, MalformedEscape, Uri, UriError, parse_authority, parse_query_params, parse_uri, percent_decode, percent_decode_to_bytes

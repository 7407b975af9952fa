"""Turn an incoming request into a subdirectory key and a refresh flag"""

import logging
from dataclasses import dataclass
from urllib.parse import parse_qsl, quote, unquote, urlsplit

logger = logging.getLogger(__name__)

REFRESH_PARAM = "refresh_cache"


@dataclass(frozen=True)
class RequestTarget:
    subdir: str
    refresh_cache: bool = False


def decode_subdir(raw_tail: str) -> str:
    """Percent-decode the path tail, keeping it raw if it isn't valid UTF-8."""
    try:
        return unquote(raw_tail, errors="strict")
    except UnicodeDecodeError:
        return raw_tail


def parse_refresh_flag(query_string: str) -> bool:
    """True only when the first `refresh_cache` parameter is exactly "true"."""
    if not query_string:
        return False

    for key, value in parse_qsl(query_string, keep_blank_values=True):
        if key == REFRESH_PARAM:
            return value == "true"
    return False


def raw_path_tail(environ: dict) -> str:
    """
    The undecoded path after the leading slash.

    Werkzeug and Gunicorn keep the request line in RAW_URI / REQUEST_URI.
    Other servers only give us the decoded PATH_INFO, which is quoted again.
    """
    raw_uri = environ.get("RAW_URI") or environ.get("REQUEST_URI")
    if raw_uri:
        if raw_uri.startswith("/"):
            path = raw_uri.split("?", 1)[0]
        else:
            # absolute-form request target
            path = urlsplit(raw_uri).path
        script_name = environ.get("SCRIPT_NAME", "")
        if script_name and path.startswith(script_name):
            path = path[len(script_name):]
    else:
        # WSGI strings carry the raw bytes as latin-1
        path_bytes = environ.get("PATH_INFO", "").encode("latin-1")
        path = quote(path_bytes, safe="/")

    return path[1:] if path.startswith("/") else path


def parse_request(environ: dict) -> RequestTarget:
    query_string = environ.get("QUERY_STRING", "")
    # WSGI strings carry the raw bytes as latin-1
    query_string = query_string.encode("latin-1").decode("utf-8", "replace")
    logger.debug(f"Raw query string: {query_string}")

    refresh_cache = parse_refresh_flag(query_string)
    logger.debug(f"Parsed refresh_cache: {refresh_cache}")

    return RequestTarget(
        subdir=decode_subdir(raw_path_tail(environ)),
        refresh_cache=refresh_cache,
    )

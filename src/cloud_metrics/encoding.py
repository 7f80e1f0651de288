"""
Translation of events into Google Analytics Measurement Protocol requests.

Every event is reported as a "virtual" pageview: the event type, object
type and name become a synthetic page path, and the event metadata becomes
the page title. Custom dimensions carry the remaining fields.

Parameter reference:
    https://developers.google.com/analytics/devguides/collection/protocol/v1/parameters
"""

from __future__ import annotations

from random import Random
from typing import Mapping
from urllib.parse import urlencode

from .events import Event, check_not_none


# Google Analytics URL receiving metrics reports
GA_ENDPOINT_URL = "https://www.google-analytics.com/collect"

# User agent of metric-reporting HTTP requests
USER_AGENT = "Automated"

CONTENT_TYPE = "application/x-www-form-urlencoded"

VIRTUAL_PAGE_PREFIX = "/virtual"

# Standard parameters
PARAM_CACHEBUSTER = "z"
PARAM_CLIENT_ID = "cid"
PARAM_IS_NON_INTERACTIVE = "ni"
PARAM_PAGE = "dp"
PARAM_PAGE_TITLE = "dt"
PARAM_HOSTNAME = "dh"
PARAM_PROPERTY_ID = "tid"
PARAM_PROTOCOL = "v"
PARAM_TYPE = "t"

# Custom dimensions
PARAM_PROJECT_NUM_HASH = "cd31"
PARAM_USER_SIGNED_IN = "cd17"
PARAM_USER_INTERNAL = "cd16"
PARAM_USER_TRIAL_ELIGIBLE = "cd22"
PARAM_BILLING_ID_HASH = "cd18"
PARAM_EVENT_TYPE = "cd19"
PARAM_EVENT_NAME = "cd20"
PARAM_IS_VIRTUAL = "cd21"

# Values
PROTOCOL_VERSION = "1"
VALUE_TYPE_PAGEVIEW = "pageview"
VALUE_TRUE = "1"
VALUE_FALSE = "0"

# Metadata escapes: , = \  ->  \, \= \\
_METADATA_ESCAPES = {",": "\\,", "=": "\\=", "\\": "\\\\"}
_METADATA_ESCAPER = str.maketrans(_METADATA_ESCAPES)


def _to_value(flag: bool) -> str:
    return VALUE_TRUE if flag else VALUE_FALSE


def _next_cache_buster(random: Random) -> int:
    """Draw a signed 64-bit integer from the random source."""
    value = random.getrandbits(64)
    if value >= 1 << 63:
        value -= 1 << 64
    return value


def build_combined_type(event_type: str, object_type: str | None) -> str:
    """Combine event type and optional object type into a single type string."""
    return "/".join(s for s in (event_type, object_type) if s is not None)


def build_virtual_page_name(
    event_type: str,
    object_type: str | None,
    event_name: str,
) -> str:
    """
    Create the virtual page name (relative URL) of an event.

    Example:
        >>> build_virtual_page_name("click", None, "button")
        '/virtual/click/button'
    """
    segments = (VIRTUAL_PAGE_PREFIX, event_type, object_type, event_name)
    return "/".join(s for s in segments if s is not None)


def escape_metadata(text: str) -> str:
    """Escape the title separators in a metadata key or value."""
    return text.translate(_METADATA_ESCAPER)


def build_virtual_page_title(metadata: Mapping[str, str]) -> str:
    """
    Create the virtual page title from metadata key/value pairs.

    Pairs are rendered as key=value and joined with commas, in the
    mapping's iteration order. Empty metadata gives an empty title.
    """
    check_not_none(metadata, "metadata")
    return ",".join(
        f"{escape_metadata(key)}={escape_metadata(value)}"
        for key, value in metadata.items()
    )


def unescape_metadata(text: str) -> str:
    """Reverse escape_metadata()."""
    out: list[str] = []
    chars = iter(text)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        escaped = next(chars, None)
        if escaped is None:
            raise ValueError(f"Dangling escape at end of {text!r}")
        if escaped not in _METADATA_ESCAPES:
            raise ValueError(f"Unknown escape '\\{escaped}' in {text!r}")
        out.append(escaped)
    return "".join(out)


def _split_unescaped(text: str, separator: str) -> list[str]:
    """Split on separators not preceded by an escape, keeping escapes intact."""
    parts: list[str] = []
    current: list[str] = []
    escaped = False
    for ch in text:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\":
            current.append(ch)
            escaped = True
        elif ch == separator:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def parse_virtual_page_title(title: str) -> dict[str, str]:
    """
    Recover the metadata encoded by build_virtual_page_title().

    Raises:
        ValueError: If the title is not a valid escaped metadata string
    """
    if not title:
        return {}

    metadata: dict[str, str] = {}
    for pair in _split_unescaped(title, ","):
        key_value = _split_unescaped(pair, "=")
        if len(key_value) != 2:
            raise ValueError(f"Malformed metadata pair {pair!r}")
        key, value = key_value
        metadata[unescape_metadata(key)] = unescape_metadata(value)
    return metadata


def build_parameters(
    analytics_id: str,
    client_id: str,
    virtual_page_name: str,
    virtual_page_title: str,
    event_type: str,
    event_name: str,
    is_user_signed_in: bool,
    is_user_internal: bool,
    is_user_trial_eligible: bool | None,
    project_number_hash: str | None,
    billing_id_hash: str | None,
    client_hostname: str | None,
    random: Random,
) -> list[tuple[str, str]]:
    """
    Create the parameters recording a single Google Analytics hit.

    Optional values are left out when absent; hostname and hashes are also
    left out when empty. Trial eligibility is sent whenever it is known,
    including when it is False.

    Returns:
        Ordered list of (name, value) pairs
    """
    check_not_none(analytics_id, "analytics_id")
    check_not_none(client_id, "client_id")
    check_not_none(virtual_page_name, "virtual_page_name")
    check_not_none(virtual_page_title, "virtual_page_title")
    check_not_none(event_type, "event_type")
    check_not_none(event_name, "event_name")
    check_not_none(random, "random")

    params: list[tuple[str, str]] = [
        # Analytics information
        (PARAM_PROTOCOL, PROTOCOL_VERSION),
        (PARAM_PROPERTY_ID, analytics_id),
        (PARAM_TYPE, VALUE_TYPE_PAGEVIEW),
        (PARAM_IS_NON_INTERACTIVE, VALUE_FALSE),
        (PARAM_CACHEBUSTER, str(_next_cache_buster(random))),
        # Event information
        (PARAM_EVENT_TYPE, event_type),
        (PARAM_EVENT_NAME, event_name),
    ]
    if client_hostname:
        params.append((PARAM_HOSTNAME, client_hostname))

    # User information
    params.append((PARAM_CLIENT_ID, client_id))
    if project_number_hash:
        params.append((PARAM_PROJECT_NUM_HASH, project_number_hash))
    if billing_id_hash:
        params.append((PARAM_BILLING_ID_HASH, billing_id_hash))
    params.append((PARAM_USER_SIGNED_IN, _to_value(is_user_signed_in)))
    params.append((PARAM_USER_INTERNAL, _to_value(is_user_internal)))
    if is_user_trial_eligible is not None:
        params.append((PARAM_USER_TRIAL_ELIGIBLE, _to_value(is_user_trial_eligible)))

    # Virtual page information
    params.append((PARAM_IS_VIRTUAL, VALUE_TRUE))
    params.append((PARAM_PAGE, virtual_page_name))
    if virtual_page_title:
        params.append((PARAM_PAGE_TITLE, virtual_page_title))

    return params


def build_post_body(event: Event, analytics_id: str, random: Random) -> bytes:
    """
    Create the POST body reporting a single event.

    Args:
        event: The event to report
        analytics_id: Google Analytics ID receiving the report
        random: Random source used for cache busting

    Returns:
        UTF-8 form-encoded body in the format Google Analytics expects
    """
    check_not_none(event, "event")
    check_not_none(analytics_id, "analytics_id")
    check_not_none(random, "random")

    params = build_parameters(
        analytics_id=analytics_id,
        client_id=event.client_id,
        virtual_page_name=build_virtual_page_name(event.type, event.object_type, event.name),
        virtual_page_title=build_virtual_page_title(event.metadata),
        event_type=build_combined_type(event.type, event.object_type),
        event_name=event.name,
        is_user_signed_in=event.is_user_signed_in,
        is_user_internal=event.is_user_internal,
        is_user_trial_eligible=event.is_user_trial_eligible,
        project_number_hash=event.project_number_hash,
        billing_id_hash=event.billing_id_hash,
        client_hostname=event.client_hostname,
        random=random,
    )
    return urlencode(params, encoding="utf-8").encode("utf-8")

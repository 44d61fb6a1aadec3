"""
Credential resolution for inbound requests.

Each credential field has an ordered tuple of strategies. A strategy looks at
one source (a header, a body field, the session cookie) and returns a value or
None; the first non-empty value wins. Reordering a tuple changes precedence,
nothing else.
"""
import json
import logging
from typing import Callable, Iterable, List, Optional, Tuple
from urllib.parse import unquote

from domain.value_objects import Credentials, InboundRequest, mask_token

Strategy = Callable[[InboundRequest], Optional[str]]

SESSION_COOKIE_NAMES = ("currentUser", "user", "authUser")
BEARER_PREFIX = "Bearer "


def first_present(strategies: Iterable[Strategy], request: InboundRequest) -> Optional[str]:
    """Return the first non-empty value produced by the strategies, in order."""
    for strategy in strategies:
        value = strategy(request)
        if value:
            return value
    return None


def _body_string(request: InboundRequest, field: str, allow_numbers: bool = False) -> Optional[str]:
    value = request.body.get(field)
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if allow_numbers and isinstance(value, (int, float)):
        return str(value)
    return None


def parse_cookie_header(header: Optional[str]) -> List[Tuple[str, str]]:
    """Split a Cookie header into (name, value) pairs, keeping raw values."""
    if not header:
        return []
    pairs = []
    for part in header.split(";"):
        name, sep, value = part.strip().partition("=")
        name = name.strip()
        if not name or not sep:
            continue
        pairs.append((name, value.strip()))
    return pairs


def cookie_names(request: InboundRequest) -> List[str]:
    return [name for name, _ in parse_cookie_header(request.header("Cookie"))]


def _token_from_user_data(user_data: dict) -> Optional[str]:
    data = user_data.get("data")
    if not isinstance(data, dict):
        data = {}
    for candidate in (
        user_data.get("accessToken"),
        data.get("accessToken"),
        user_data.get("token"),
        data.get("token"),
    ):
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


# Token strategies

def token_from_authorization_header(request: InboundRequest) -> Optional[str]:
    header = request.header("Authorization")
    if not header:
        return None
    if header.startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):].strip() or None
    return header.strip() or None


def token_from_body(request: InboundRequest) -> Optional[str]:
    return _body_string(request, "token")


def token_from_session_cookie(request: InboundRequest) -> Optional[str]:
    """Pull an access token out of the JSON user cookie the web app sets."""
    cookies = dict(parse_cookie_header(request.header("Cookie")))
    raw_value = next((cookies[name] for name in SESSION_COOKIE_NAMES if cookies.get(name)), None)
    if raw_value is None:
        return None

    try:
        user_data = json.loads(unquote(raw_value))
    except (ValueError, RecursionError) as e:
        logging.warning(f"⚠️ Could not parse user cookie: {e}")
        return None

    if not isinstance(user_data, dict):
        logging.warning(f"⚠️ User cookie is not a JSON object ({type(user_data).__name__})")
        return None

    token = _token_from_user_data(user_data)
    logging.info(f"🍪 Extracted token from cookie: {mask_token(token) if token else 'No token found'}")
    return token


# User id strategies

def user_id_from_path(request: InboundRequest) -> Optional[str]:
    return request.path_params.get("id") or None


def user_id_from_body(request: InboundRequest) -> Optional[str]:
    return _body_string(request, "userId", allow_numbers=True)


def user_id_from_header(request: InboundRequest) -> Optional[str]:
    return request.header("x-user-id") or None


# Role strategies

def role_from_header(request: InboundRequest) -> Optional[str]:
    return request.header("x-user-role") or None


def role_from_body(request: InboundRequest) -> Optional[str]:
    return _body_string(request, "role")


TOKEN_STRATEGIES: Tuple[Strategy, ...] = (
    token_from_authorization_header,
    token_from_body,
    token_from_session_cookie,
)

USER_ID_STRATEGIES: Tuple[Strategy, ...] = (
    user_id_from_path,
    user_id_from_body,
    user_id_from_header,
)

ROLE_STRATEGIES: Tuple[Strategy, ...] = (
    role_from_header,
    role_from_body,
)


def resolve_credentials(request: InboundRequest) -> Credentials:
    """Resolve token, user id and role. Never raises; missing fields are None."""
    credentials = Credentials(
        token=first_present(TOKEN_STRATEGIES, request),
        user_id=first_present(USER_ID_STRATEGIES, request),
        role=first_present(ROLE_STRATEGIES, request),
    )
    logging.info(
        f"🔑 Credentials: token={credentials.masked_token or 'none'}, "
        f"user={credentials.user_id}, role={credentials.role}"
    )
    return credentials

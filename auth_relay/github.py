"""
GitHub OAuth endpoints used by the relay: authorize URL, code -> access token, token -> user profile.
Each call raises UpstreamError on any failure; callers map that to a single 500 response.
Never put tokens or the client secret into exception messages or logs.
"""
import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
TOKEN_URL = "https://github.com/login/oauth/access_token"
USER_URL = "https://api.github.com/user"

# Read-only profile access
SCOPE = "read:user"

CALLBACK_PATH = "/auth/github/callback"

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """GitHub call failed, timed out, or returned something unusable."""


@dataclass(frozen=True)
class GitHubUser:
    login: str
    id: int | None = None
    name: str | None = None
    avatar_url: str | None = None


def callback_url(base_url: str | None) -> str | None:
    """Relay callback URL from its public base URL, or None to use the one registered at GitHub."""
    if not base_url:
        return None
    return f"{base_url.rstrip('/')}{CALLBACK_PATH}"


def build_authorize_url(*, client_id: str, redirect_uri: str | None = None, scope: str = SCOPE) -> str:
    """GitHub /login/oauth/authorize URL. Public values only."""
    params = {"client_id": client_id, "scope": scope}
    if redirect_uri:
        params["redirect_uri"] = redirect_uri
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def _json_body(r: httpx.Response, what: str) -> dict:
    try:
        data = r.json()
    except ValueError:
        raise UpstreamError(f"{what}: response is not JSON (status {r.status_code})") from None
    if not isinstance(data, dict):
        raise UpstreamError(f"{what}: unexpected JSON body")
    return data


def exchange_code(
    code: str,
    *,
    client_id: str,
    client_secret: str,
    redirect_uri: str | None = None,
    timeout: float = 10.0,
) -> str:
    """
    POST the authorization code to GitHub's token endpoint; return the access token.
    GitHub answers 200 with {"error": ...} for bad or reused codes, so the body is checked, not just the status.
    """
    data = {"client_id": client_id, "client_secret": client_secret, "code": code}
    if redirect_uri:
        data["redirect_uri"] = redirect_uri
    try:
        r = httpx.post(
            TOKEN_URL,
            data=data,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
    except httpx.HTTPError as e:
        raise UpstreamError(f"token exchange request failed: {type(e).__name__}") from e

    if not r.is_success:
        raise UpstreamError(f"token exchange returned status {r.status_code}")

    body = _json_body(r, "token exchange")
    if body.get("error"):
        raise UpstreamError(f"token exchange rejected: {body['error']}")
    access_token = body.get("access_token")
    if not access_token or not isinstance(access_token, str):
        raise UpstreamError("token exchange response has no access_token")

    logger.debug("token exchange ok (token_type=%s, scope=%s)", body.get("token_type"), body.get("scope"))
    return access_token


def fetch_user(access_token: str, *, timeout: float = 10.0) -> GitHubUser:
    """GET /user with the access token as bearer credential."""
    try:
        r = httpx.get(
            USER_URL,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/vnd.github+json",
            },
            timeout=timeout,
        )
    except httpx.HTTPError as e:
        raise UpstreamError(f"profile request failed: {type(e).__name__}") from e

    if not r.is_success:
        raise UpstreamError(f"profile fetch returned status {r.status_code}")

    body = _json_body(r, "profile fetch")
    login = body.get("login")
    if not login or not isinstance(login, str):
        raise UpstreamError("profile response has no login")
    return GitHubUser(
        login=login,
        id=body.get("id"),
        name=body.get("name"),
        avatar_url=body.get("avatar_url"),
    )

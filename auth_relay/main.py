"""
OAuth redirect relay between the SPA and GitHub.
GET / (health), /auth/github (redirect to GitHub), /auth/github/callback (code -> token -> profile -> SPA).
Nothing is stored: token and login leave in the redirect to the front end. Default port 4000.
"""
import logging
import sys
from urllib.parse import urlencode

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, RedirectResponse

from auth_relay import github
from auth_relay.config import ConfigError, Settings, load_settings

logger = logging.getLogger(__name__)

OAUTH_ERROR_BODY = "GitHub OAuth Error"

router = APIRouter()


def get_settings(request: Request) -> Settings:
    """Settings the app was built with (injected, never read from the environment per request)."""
    return request.app.state.settings


def frontend_redirect_url(frontend_url: str, access_token: str, login: str) -> str:
    """<frontend>/?token=...&login=... with the base's trailing slashes normalized."""
    query = urlencode({"token": access_token, "login": login})
    return f"{frontend_url.rstrip('/')}/?{query}"


@router.get("/", response_class=PlainTextResponse)
def health():
    """Liveness check for the hosting platform."""
    return PlainTextResponse("OK")


@router.get("/auth/github")
def auth_github(settings: Settings = Depends(get_settings)):
    """Redirect the browser to GitHub's authorize page. No state parameter is sent."""
    url = github.build_authorize_url(
        client_id=settings.client_id,
        redirect_uri=github.callback_url(settings.callback_base_url),
    )
    return RedirectResponse(url=url, status_code=302)


@router.get("/auth/github/callback")
def auth_github_callback(
    code: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
    settings: Settings = Depends(get_settings),
):
    """
    GitHub redirects here after consent. Exchange code for a token, fetch the login, hand both to the SPA.
    Any failure after the code check is a 500 with a generic body; the cause is only logged.
    """
    code = (code or "").strip()
    if not code:
        if error:
            logger.info("GitHub authorization not granted: %s", error)
            return PlainTextResponse(
                f"GitHub authorization failed: {error_description or error}",
                status_code=400,
            )
        return PlainTextResponse("Missing code parameter", status_code=400)

    try:
        access_token = github.exchange_code(
            code,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_uri=github.callback_url(settings.callback_base_url),
            timeout=settings.http_timeout,
        )
        # Profile fetch depends on the token above; strictly after it
        user = github.fetch_user(access_token, timeout=settings.http_timeout)
    except github.UpstreamError as e:
        logger.error("GitHub OAuth failed: %s", e)
        return PlainTextResponse(OAUTH_ERROR_BODY, status_code=500)
    except Exception:
        logger.exception("Unexpected error in GitHub OAuth callback")
        return PlainTextResponse(OAUTH_ERROR_BODY, status_code=500)

    logger.info("GitHub login ok for %s; redirecting to front end", user.login)
    return RedirectResponse(
        url=frontend_redirect_url(settings.frontend_url, access_token, user.login),
        status_code=302,
    )


def create_app(settings: Settings) -> FastAPI:
    """Build the relay app around an already validated Settings."""
    app = FastAPI(title="OAuth Relay", version="1.0.0")
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.include_router(router, tags=["auth"])
    return app


def run() -> None:
    """
    Entry point: load .env, validate config, then serve.
    Exits with status 1 on bad configuration before any port is bound.
    """
    import uvicorn

    load_dotenv()
    try:
        settings = load_settings()
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    logging.basicConfig(level=settings.log_level)
    logger.info("Auth relay listening on http://%s:%s", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

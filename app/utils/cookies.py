from fastapi import Response

from app import config


def _cookie_options(max_age: int) -> dict:
    return {
        "httponly": True,
        "secure": config.IS_PRODUCTION,
        "samesite": "strict",
        "max_age": max_age,
        "path": "/",
    }


def set_auth_cookies(response: Response, identity_token: str, session_token: str) -> None:
    max_age = config.SESSION_TTL_DAYS * 24 * 60 * 60
    response.set_cookie(config.AUTH_COOKIE_NAME, identity_token, **_cookie_options(max_age))
    response.set_cookie(config.SESSION_COOKIE_NAME, session_token, **_cookie_options(max_age))


def clear_auth_cookies(response: Response) -> None:
    # Expire immediately
    response.set_cookie(config.AUTH_COOKIE_NAME, "", **_cookie_options(0))
    response.set_cookie(config.SESSION_COOKIE_NAME, "", **_cookie_options(0))

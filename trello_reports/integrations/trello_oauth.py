"""
Three-legged OAuth 1.0a handshake with Trello.
Signing is delegated to authlib; this module only wires Trello's endpoints.
"""

import logging
from typing import Tuple

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.httpx_client import OAuth1Client

from trello_reports.core.config import settings
from trello_reports.core.errors import RemoteAPIError

logger = logging.getLogger(__name__)

REQUEST_TOKEN_URL = "https://trello.com/1/OAuthGetRequestToken"
AUTHORIZE_URL = "https://trello.com/1/OAuthAuthorizeToken"
ACCESS_TOKEN_URL = "https://trello.com/1/OAuthGetAccessToken"


def get_request_token_and_url() -> Tuple[str, str, str]:
    """Returns (request_token, request_secret, authorize_url)."""
    try:
        with OAuth1Client(
            settings.TRELLO_API_KEY,
            settings.TRELLO_API_SECRET,
            redirect_uri=settings.TRELLO_CALLBACK_URL,
        ) as client:
            token = client.fetch_request_token(REQUEST_TOKEN_URL)
            url = client.create_authorization_url(
                AUTHORIZE_URL,
                request_token=token["oauth_token"],
                name=settings.TRELLO_APP_NAME,
                scope="read,write",
                expiration="never",
            )
    except (httpx.HTTPError, AuthlibBaseError, KeyError) as e:
        logger.error(f"Failed to obtain Trello request token: {e}")
        raise RemoteAPIError("Error connecting to Trello") from e

    return token["oauth_token"], token["oauth_token_secret"], url


def get_access_token(request_token: str, request_secret: str, verifier: str) -> Tuple[str, str]:
    """Exchange an authorized request token for (access_token, access_secret)."""
    try:
        with OAuth1Client(
            settings.TRELLO_API_KEY,
            settings.TRELLO_API_SECRET,
            token=request_token,
            token_secret=request_secret,
        ) as client:
            token = client.fetch_access_token(ACCESS_TOKEN_URL, verifier=verifier)
        return token["oauth_token"], token["oauth_token_secret"]
    except (httpx.HTTPError, AuthlibBaseError, KeyError) as e:
        logger.error(f"Failed to exchange Trello access token: {e}")
        raise RemoteAPIError("Error completing Trello authorization") from e

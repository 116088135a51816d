import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from trello_reports.core.errors import RemoteAPIError
from trello_reports.integrations import trello_oauth
from trello_reports.integrations.trello_integration import TrelloIntegration
from trello_reports.routes.deps import get_trello_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
def home(request: Request):
    return {
        "message": "Trello reporting agent is running!",
        "authenticated": bool(request.session.get("access_token")),
        "login_url": "/login",
    }


@router.get("/login")
def login(request: Request):
    """Start the OAuth handshake and send the user to Trello."""
    try:
        token, secret, authorize_url = trello_oauth.get_request_token_and_url()
    except RemoteAPIError:
        raise HTTPException(status_code=502, detail="Error connecting to Trello")

    request.session["request_token"] = token
    request.session["request_secret"] = secret
    return RedirectResponse(authorize_url, status_code=307)


@router.get("/callback")
def callback(request: Request, oauth_verifier: str = Query("")):
    request_token = request.session.get("request_token")
    request_secret = request.session.get("request_secret")
    if not request_token or not request_secret:
        raise HTTPException(status_code=400, detail="No request token found")
    if not oauth_verifier:
        raise HTTPException(status_code=400, detail="No verification code found")

    try:
        access_token, access_secret = trello_oauth.get_access_token(
            request_token, request_secret, oauth_verifier
        )
    except RemoteAPIError:
        raise HTTPException(status_code=502, detail="Error completing Trello authorization")

    request.session.pop("request_token", None)
    request.session.pop("request_secret", None)
    request.session["access_token"] = access_token
    request.session["access_secret"] = access_secret
    logger.info("Trello authorization completed")
    return RedirectResponse("/dashboard", status_code=303)


@router.get("/logout")
def logout(request: Request):
    request.session.clear()
    return RedirectResponse("/", status_code=307)


@router.get("/dashboard")
def dashboard(trello: TrelloIntegration = Depends(get_trello_client)):
    """Boards the signed-in user can generate reports for."""
    try:
        boards = trello.list_boards()
    except RemoteAPIError as e:
        logger.error(f"Error getting boards: {e}")
        raise HTTPException(status_code=500, detail="Something went wrong, please try again.")

    return {
        "boards": [
            {
                "id": b.id,
                "name": b.name,
                "description": b.description,
                "url": b.url,
                "reports_url": f"/reports?board_id={b.id}",
            }
            for b in boards
        ]
    }

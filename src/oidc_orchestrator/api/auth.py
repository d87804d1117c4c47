from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from oidc_orchestrator.oauth import AccessToken, OAuthService, ProviderError, get_oauth_service
from oidc_orchestrator.security import code_challenge_s256, generate_code_verifier


router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

# Session keys
STATE_KEY = "oauth_state"
VERIFIER_KEY = "code_verifier"
TOKEN_KEY = "oauth_token"
CLAIMS_KEY = "claims"
ERROR_KEY = "auth_error"


def _error_payload(e: ProviderError) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": e.error or "oauth_error",
        "error_description": e.description or str(e),
        "status_code": e.status_code,
    }
    if e.details:
        payload["details"] = e.details
    return payload


def _session_token(request: Request) -> AccessToken | None:
    serialized = request.session.get(TOKEN_KEY)
    if not serialized:
        return None
    try:
        return AccessToken.from_json(serialized)
    except (TypeError, ValueError):
        logger.warning("discarding unreadable session token")
        request.session.pop(TOKEN_KEY, None)
        return None


@router.get("/login")
async def login(request: Request, service: OAuthService = Depends(get_oauth_service)):
    options: Dict[str, str] = {}
    code_verifier = None
    if service.settings.use_pkce:
        code_verifier = generate_code_verifier()
        options["code_challenge"] = code_challenge_s256(code_verifier)
        options["code_challenge_method"] = "S256"

    authorize_url = await service.get_authorization_url(request, options)

    # Persist minimal state needed for callback validation
    request.session[STATE_KEY] = service.get_state()
    if code_verifier:
        request.session[VERIFIER_KEY] = code_verifier
    return RedirectResponse(url=authorize_url)


@router.get("/callback")
async def callback(request: Request, service: OAuthService = Depends(get_oauth_service)):
    # Provider sign-in error
    if "error" in request.query_params:
        request.session[ERROR_KEY] = {
            "error": request.query_params.get("error"),
            "error_description": request.query_params.get("error_description"),
        }
        return RedirectResponse(url="/auth/me")

    # Validate state
    state_param = request.query_params.get("state")
    if not state_param or state_param != request.session.get(STATE_KEY):
        raise HTTPException(status_code=400, detail="Invalid state (check cookie SameSite/HTTPS)")

    code_param = request.query_params.get("code")
    if not code_param:
        raise HTTPException(status_code=400, detail="Missing authorization code")

    try:
        token = await service.get_access_token(code_param, code_verifier=request.session.get(VERIFIER_KEY))
    except ProviderError as e:
        request.session[ERROR_KEY] = _error_payload(e)
        return RedirectResponse(url="/auth/me")

    # Rotate transient values and persist results
    for k in (STATE_KEY, VERIFIER_KEY, ERROR_KEY):
        request.session.pop(k, None)
    request.session[TOKEN_KEY] = token.to_json()

    if service.settings.endpoint_userinfo:
        try:
            owner = await service.get_resource_owner(token)
            request.session[CLAIMS_KEY] = owner.to_dict()
        except ProviderError as e:
            request.session[ERROR_KEY] = _error_payload(e)

    return RedirectResponse(url="/auth/me")


@router.post("/refresh")
async def refresh(request: Request, service: OAuthService = Depends(get_oauth_service)):
    serialized = request.session.get(TOKEN_KEY)
    if not serialized:
        raise HTTPException(status_code=400, detail="No access token in session")

    token = await service.get_fresh_access_token(serialized)
    if token is None:
        request.session.pop(TOKEN_KEY, None)
        request.session[ERROR_KEY] = {
            "error": "token_refresh_failed",
            "error_description": "Stored token is invalid or could not be refreshed",
        }
        raise HTTPException(status_code=401, detail="Access token could not be refreshed")

    request.session[TOKEN_KEY] = token.to_json()
    return {"expires": token.expires, "has_refresh_token": bool(token.refresh_token)}


@router.get("/me")
async def me(request: Request):
    token = _session_token(request)
    return {
        "authenticated": token is not None,
        "expires": token.expires if token else None,
        "expired": token.has_expired() if token else None,
        "claims": request.session.get(CLAIMS_KEY),
        "error": request.session.get(ERROR_KEY),
    }


@router.post("/logout")
@router.get("/logout")
async def logout(request: Request, service: OAuthService = Depends(get_oauth_service)):
    token = _session_token(request)
    if token is not None:
        try:
            await service.revoke_token(token)
        except ProviderError as e:
            logger.warning("token revocation failed: %s", e.description or e)
    request.session.clear()
    return RedirectResponse(url="/")

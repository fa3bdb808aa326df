"""State Routes — read and update the cookie-held user state.

Invariants:
    - State lives only in the client cookie; the server keeps nothing between requests
    - A corrupt/expired cookie is answered with empty state plus a clear directive
      (never an error)
    - A refused write (too_large) sets no cookie: the client keeps its previous state
    - Effective rendererConfig/preferences fall back to defaults when absent
"""

from fastapi import APIRouter, Depends, Request, Response

from linkcard.api.dependencies import client_id_from, get_state_manager
from linkcard.core.domain_types import Err
from linkcard.core.errors import error_from_detail
from linkcard.schemas.identifier import NormalizeRequest
from linkcard.schemas.renderer import RendererConfig, RendererConfigUpdate
from linkcard.schemas.state import Preferences, PreferencesUpdate
from linkcard.services.state_manager import StateManager, StateResponse

router = APIRouter(prefix="/api/v1/state", tags=["state"])


def _cookie_header(request: Request) -> str | None:
    return request.headers.get("cookie")


def _render(result: StateResponse, response: Response) -> dict:
    if result.set_cookie:
        response.headers.append("set-cookie", result.set_cookie)
    state = result.state
    return {
        "success": True,
        "data": {
            "state": (
                state.model_dump(mode="json", by_alias=True, exclude_none=True)
                if state else None
            ),
            "rendererConfig": (
                (state and state.renderer_config) or RendererConfig()
            ).model_dump(mode="json", by_alias=True),
            "preferences": (
                (state and state.preferences) or Preferences()
            ).model_dump(mode="json", by_alias=True),
            "warnings": result.warnings,
            "wasReset": result.was_reset,
            "wasSanitized": result.was_sanitized,
        },
    }


def _unwrap(outcome, request: Request) -> StateResponse:
    if isinstance(outcome, Err):
        raise error_from_detail(outcome.error, client_id_from(request))
    return outcome.value


@router.get("")
async def get_state(
    request: Request,
    response: Response,
    manager: StateManager = Depends(get_state_manager),
):
    return _render(manager.get_state(_cookie_header(request)), response)


@router.put("/identifier")
async def store_identifier(
    body: NormalizeRequest,
    request: Request,
    response: Response,
    manager: StateManager = Depends(get_state_manager),
):
    """Normalize the input and store it as the current profile."""
    outcome = manager.store_identifier(_cookie_header(request), body.input)
    return _render(_unwrap(outcome, request), response)


@router.put("/renderer-config")
async def update_renderer_config(
    body: RendererConfigUpdate,
    request: Request,
    response: Response,
    manager: StateManager = Depends(get_state_manager),
):
    outcome = manager.update_renderer_config(_cookie_header(request), body)
    return _render(_unwrap(outcome, request), response)


@router.put("/preferences")
async def update_preferences(
    body: PreferencesUpdate,
    request: Request,
    response: Response,
    manager: StateManager = Depends(get_state_manager),
):
    outcome = manager.update_preferences(_cookie_header(request), body)
    return _render(_unwrap(outcome, request), response)


@router.post("/identifier/usage")
async def increment_usage(
    request: Request,
    response: Response,
    manager: StateManager = Depends(get_state_manager),
):
    outcome = manager.increment_usage(_cookie_header(request))
    return _render(_unwrap(outcome, request), response)


@router.delete("")
async def clear_state(
    response: Response,
    manager: StateManager = Depends(get_state_manager),
):
    response.headers.append("set-cookie", manager.clear_state())
    return {"success": True, "data": {"cleared": True}}

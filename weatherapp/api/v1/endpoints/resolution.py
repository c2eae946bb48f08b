from fastapi import APIRouter, Depends

from weatherapp.api.v1.deps import get_controller
from weatherapp.schemas.resolution import ResolutionStateResponse, SearchRequest, SearchTextUpdate
from weatherapp.services.resolution import ResolutionController


router = APIRouter()


def _snapshot(controller: ResolutionController) -> ResolutionStateResponse:
    state = controller.state
    return ResolutionStateResponse(
        phase=state.phase,
        record=getattr(state, "record", None),
        message=getattr(state, "message", None),
        search_text=controller.search_text,
        attempt=controller.attempt,
    )


@router.get("/state", response_model=ResolutionStateResponse)
async def get_state(controller: ResolutionController = Depends(get_controller)):
    return _snapshot(controller)


@router.put("/search-text", response_model=ResolutionStateResponse)
async def update_search_text(
    payload: SearchTextUpdate,
    controller: ResolutionController = Depends(get_controller),
):
    controller.set_search_text(payload.text)
    return _snapshot(controller)


@router.post("/refresh", response_model=ResolutionStateResponse)
async def refresh(controller: ResolutionController = Depends(get_controller)):
    await controller.refresh()
    return _snapshot(controller)


@router.post("/search", response_model=ResolutionStateResponse)
async def search(
    payload: SearchRequest,
    controller: ResolutionController = Depends(get_controller),
):
    await controller.search_by_name(payload.query)
    return _snapshot(controller)

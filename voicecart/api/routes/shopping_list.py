"""
Shopping List API Routes
Direct list management outside the voice path
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from voicecart.adapters.list_store import StoreError
from voicecart.api.dependencies import get_dispatcher
from voicecart.config.constants import ActionType, OutcomeError, VoiceResponses
from voicecart.config.settings import settings
from voicecart.core.dispatcher import CommandDispatcher
from voicecart.schemas.items import ListItem, Suggestion
from voicecart.schemas.outcomes import OutcomeResponse
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/list", tags=["shopping-list"])


class ShoppingListResponse(BaseModel):
    items: List[ListItem]
    groups: Dict[str, List[ListItem]]


class ListStatsResponse(BaseModel):
    total: int
    completed: int
    pending: int
    by_category: Dict[str, int]
    completion_rate: int


class ItemUpdateRequest(BaseModel):
    """Partial update; quantity of zero or less removes the item"""
    quantity: Optional[int] = None
    priority: Optional[int] = Field(default=None, ge=1, le=5)
    completed: Optional[bool] = None


async def _load(dispatcher: CommandDispatcher) -> List[ListItem]:
    try:
        return await dispatcher.refresh()
    except StoreError as e:
        logger.error(f"Failed to load shopping list: {e}")
        raise HTTPException(status_code=503, detail=VoiceResponses.LIST_LOAD_FAILED)


def _raise_for_failure(outcome) -> OutcomeResponse:
    if not outcome.success:
        status_code = 404 if outcome.error == OutcomeError.NOT_FOUND else 503
        raise HTTPException(status_code=status_code, detail=outcome.message)
    return OutcomeResponse.from_outcome(outcome)


@router.get("", response_model=ShoppingListResponse)
async def get_list(dispatcher: CommandDispatcher = Depends(get_dispatcher)):
    items = await _load(dispatcher)
    return ShoppingListResponse(items=items, groups=dispatcher.grouped())


@router.get("/stats", response_model=ListStatsResponse)
async def get_stats(dispatcher: CommandDispatcher = Depends(get_dispatcher)):
    await _load(dispatcher)
    return ListStatsResponse(**dispatcher.statistics())


@router.get("/export")
async def export_list(dispatcher: CommandDispatcher = Depends(get_dispatcher)):
    """Download the list as a JSON file"""
    await _load(dispatcher)
    snapshot = dispatcher.export()
    filename = f"shopping-list-{snapshot['exported_at'][:10]}.json"
    return JSONResponse(
        content=snapshot,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/suggestions", response_model=List[Suggestion])
async def get_suggestions(dispatcher: CommandDispatcher = Depends(get_dispatcher)):
    """
    Recommendations for the current list
    Empty when suggestions are disabled or the provider fails
    """
    if not settings.SUGGESTIONS_ENABLED or dispatcher.suggestions is None:
        return []

    items = await _load(dispatcher)
    try:
        return await dispatcher.suggestions.generate(items)
    except Exception as e:
        logger.warning(f"Suggestion generation failed: {e}")
        return []


@router.patch("/{item_id}", response_model=OutcomeResponse)
async def update_item(
    item_id: str,
    request: ItemUpdateRequest,
    dispatcher: CommandDispatcher = Depends(get_dispatcher)
):
    if request.quantity is None and request.priority is None and request.completed is None:
        raise HTTPException(status_code=422, detail="Nothing to update")

    outcome = None
    if request.quantity is not None:
        outcome = _raise_for_failure(await dispatcher.set_quantity(item_id, request.quantity))
        if request.quantity <= 0:
            return outcome

    if request.priority is not None:
        outcome = _raise_for_failure(await dispatcher.set_priority(item_id, request.priority))

    if request.completed is not None:
        await _load(dispatcher)
        current = next((i for i in dispatcher.items if i.id == item_id), None)
        if current is None or current.completed != request.completed:
            outcome = _raise_for_failure(await dispatcher.toggle_completed(item_id))
        elif outcome is None:
            outcome = OutcomeResponse(
                action=ActionType.UPDATE,
                success=True,
                message=VoiceResponses.ITEM_UPDATED.format(name=current.name),
                item=current
            )

    return outcome


@router.delete("/{item_id}", response_model=OutcomeResponse)
async def delete_item(
    item_id: str,
    dispatcher: CommandDispatcher = Depends(get_dispatcher)
):
    return _raise_for_failure(await dispatcher.set_quantity(item_id, 0))


@router.delete("", response_model=OutcomeResponse)
async def clear_list(dispatcher: CommandDispatcher = Depends(get_dispatcher)):
    return _raise_for_failure(await dispatcher.clear())

"""API routes for searching the selected source."""

import typing as t

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ...controller import TrackerController
from ...schemas import ActionResp, ViewResp
from ..deps import get_tracker, view_payload

router = APIRouter()


class SearchInput(BaseModel):
    """Body of a search keystroke."""

    query: str = ""


@router.get("/search", response_model=ViewResp)
async def search(
    q: str = Query(default=""),  # noqa: B008
    tracker: TrackerController = Depends(get_tracker),  # noqa: B008
) -> dict[str, t.Any]:
    """Search immediately; an empty query restores the paged view.

    :param q: Search text.
    :param tracker: The application's tracker.
    :return: Resulting view.
    """
    await tracker.search(q)
    return view_payload(tracker)


@router.post("/search/input", response_model=ActionResp, status_code=202)
async def search_input(
    body: SearchInput,
    tracker: TrackerController = Depends(get_tracker),  # noqa: B008
) -> dict[str, t.Any]:
    """Feed a debounced keystroke; results show up on ``GET /assets``.

    :param body: Current text of the search input.
    :param tracker: The application's tracker.
    :return: Acknowledgement plus the view at the time of the call.
    """
    tracker.on_search_input(body.query)
    return {"ok": True, "accepted": True, "view": view_payload(tracker)}

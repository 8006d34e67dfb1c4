"""API routes for source selection."""

import typing as t

from fastapi import APIRouter, Depends, HTTPException, Path

from ...controller import TrackerController
from ...schemas import ActionResp, SourcesResp
from ..deps import get_tracker, view_payload

router = APIRouter()


@router.get("/sources", response_model=SourcesResp)
def list_sources(
    tracker: TrackerController = Depends(get_tracker),  # noqa: B008
) -> dict[str, t.Any]:
    """List selectable sources.

    :param tracker: The application's tracker.
    :return: Source ids and the selected one.
    """
    return {
        "items": tracker.available_sources(),
        "selected": tracker.state.selected_source,
    }


@router.put("/sources/{name}", response_model=ActionResp)
async def select_source(
    name: str = Path(..., min_length=1),  # noqa: B008
    tracker: TrackerController = Depends(get_tracker),  # noqa: B008
) -> dict[str, t.Any]:
    """Switch the tracker to another source.

    :param name: Source id.
    :param tracker: The application's tracker.
    :return: Whether the switch was committed, plus the resulting view.
    """
    try:
        accepted = await tracker.change_source(name)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="unknown source") from exc
    view = view_payload(tracker)
    return {"ok": view["status"] != "error", "accepted": accepted, "view": view}

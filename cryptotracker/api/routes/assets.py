"""API routes for the paged asset view."""

import typing as t

from fastapi import APIRouter, Depends

from ...controller import TrackerController
from ...schemas import ActionResp, ViewResp
from ..deps import get_tracker, view_payload

router = APIRouter()


@router.get("/assets", response_model=ViewResp)
def get_assets(
    tracker: TrackerController = Depends(get_tracker),  # noqa: B008
) -> dict[str, t.Any]:
    """Return the currently rendered view.

    :param tracker: The application's tracker.
    :return: Current view.
    """
    return view_payload(tracker)


@router.post("/assets/load-more", response_model=ActionResp)
async def load_more(
    tracker: TrackerController = Depends(get_tracker),  # noqa: B008
) -> dict[str, t.Any]:
    """Append the next page of the selected source.

    :param tracker: The application's tracker.
    :return: Whether a page was appended, plus the resulting view.
    """
    accepted = await tracker.load_more()
    view = view_payload(tracker)
    return {"ok": view["status"] != "error", "accepted": accepted, "view": view}


@router.post("/assets/refresh", response_model=ActionResp)
async def refresh(
    tracker: TrackerController = Depends(get_tracker),  # noqa: B008
) -> dict[str, t.Any]:
    """Reload the accumulated pages.

    :param tracker: The application's tracker.
    :return: Whether the list was reloaded, plus the resulting view.
    """
    accepted = await tracker.refresh()
    view = view_payload(tracker)
    return {"ok": view["status"] != "error", "accepted": accepted, "view": view}

"""Shared FastAPI dependencies."""

import typing as t

from fastapi import Request

from ..controller import TrackerController
from ..render import SnapshotRenderer


def get_tracker(request: Request) -> TrackerController:
    """Return the tracker installed on the application.

    :param request: The current request.
    :return: The application's tracker.
    """
    return request.app.state.tracker


def view_payload(tracker: TrackerController) -> dict[str, t.Any]:
    """Describe what the tracker's renderer currently shows.

    :param tracker: The application's tracker.
    :return: Payload matching ``ViewResp``.
    """
    renderer = tracker.renderer
    if isinstance(renderer, SnapshotRenderer):
        snap = renderer.snapshot()
    else:
        snap = {
            "status": "items" if tracker.assets else "empty",
            "items": tracker.view(),
            "error": None,
            "updatedAt": None,
        }
    return {
        **snap,
        "source": tracker.state.selected_source,
        "page": tracker.state.current_page,
        "query": tracker.search_coordinator.active_query,
    }

from fastapi import (
    FastAPI,
    Request,
    Query,
    Form,
    HTTPException,
    Response,
    Depends
)
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from datetime import datetime
from typing import Optional
import logging

from poll.api.state import get_board, mount_board, unmount_board
from poll.api.routes import participants, weeks
from poll.domain.Board import AvailabilityBoard, NotFoundError
from poll.events.web_observers import (
    start as start_event_observers,
    stop as stop_event_observers,
    get_events as get_web_events
)
from poll.infra.pdf_utils import generate_pdf_for_board
from poll.logic.summary import best_week_ids
from poll.utilities.config import EVENTS_POLL_INTERVAL_MS, STATIC_DIR, TEMPLATES_DIR
from poll.utilities.constants import CLEAR_CONFIRM_PROMPT
from poll.utilities.validators import ClearRequest

# Logging
logger = logging.getLogger("poll_app")

TRUTHY_FORM_VALUES = {"1", "true", "on", "yes"}

# Initialize FastAPI app
app = FastAPI(title="Weekly Availability Poll")

# Include routers
app.include_router(participants.router)
app.include_router(weeks.router)

# Static files
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Templates
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


@app.on_event("startup")
def _startup_board():
    """Register web observers, then mount the board on the configured backend."""
    start_event_observers()
    logger.info("Web observers for board events started")
    mount_board()


@app.on_event("shutdown")
def _shutdown_board():
    unmount_board()
    stop_event_observers()


def _ts() -> int:
    """Cache-busting timestamp for static assets."""
    return int(datetime.now().timestamp())


def _back_home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


# -------------------- UI PAGE --------------------
@app.get("/", response_class=HTMLResponse)
def main_page(request: Request, edit: Optional[int] = Query(default=None),
              board: AvailabilityBoard = Depends(get_board)):
    snapshot = board.snapshot()
    weeks = board.weeks
    # Edit mode belongs to this browser's URL, not to the shared board
    editing = next((w for w in weeks if w.id == edit), None)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "request": request,
            "weeks": weeks,
            "rows": board.rows(),
            "totals": snapshot["totals"],
            "best_week_ids": snapshot["best_week_ids"],
            "editing_week_id": editing.id if editing else None,
            "editing_label": editing.label if editing else "",
            "error": snapshot["error"],
            "backend": snapshot["backend"],
            "confirm_prompt": CLEAR_CONFIRM_PROMPT,
            "events_cursor": get_web_events()["next_cursor"],
            "poll_interval_ms": EVENTS_POLL_INTERVAL_MS,
            "time": _ts(),
        }
    )


# -------------------- Form actions (redirect back to the grid) --------------------
@app.post("/participants")
def add_participant_form(name: str = Form(""), board: AvailabilityBoard = Depends(get_board)):
    board.add_participant(name)
    return _back_home()


@app.post("/participants/{participant_id}/remove")
def remove_participant_form(participant_id: str, board: AvailabilityBoard = Depends(get_board)):
    try:
        board.remove_participant(participant_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _back_home()


@app.post("/participants/{participant_id}/toggle/{week_index}")
def toggle_availability_form(participant_id: str, week_index: int,
                             board: AvailabilityBoard = Depends(get_board)):
    try:
        board.toggle_availability(participant_id, week_index)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _back_home()


@app.post("/weeks/{week_id}/edit")
def start_editing_week_form(week_id: int, board: AvailabilityBoard = Depends(get_board)):
    if all(w.id != week_id for w in board.weeks):
        raise HTTPException(status_code=404, detail=f"Week '{week_id}' not found.")
    return RedirectResponse(url=f"/?edit={week_id}", status_code=303)


@app.post("/weeks/{week_id}/save")
def save_week_label_form(week_id: int, label: str = Form(""),
                         board: AvailabilityBoard = Depends(get_board)):
    try:
        board.rename_week(week_id, label)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _back_home()


@app.post("/clear")
def clear_all_form(confirmed: str = Form(""), board: AvailabilityBoard = Depends(get_board)):
    accepted = confirmed.strip().lower() in TRUTHY_FORM_VALUES
    board.clear_all_data(confirm=lambda _prompt: accepted)
    return _back_home()


# -------------------- API: State, summary, clear --------------------
@app.get("/api/state")
def api_state(board: AvailabilityBoard = Depends(get_board)):
    return board.snapshot()


@app.get("/api/summary")
def api_summary(board: AvailabilityBoard = Depends(get_board)):
    """Available participants per week.

    Response JSON structure:
        {
          "totals": [ { week_id, label, available, total, names } ],
          "best_week_ids": [ <int>, ... ]
        }
    """
    totals = board.week_totals()
    return {"totals": totals, "best_week_ids": best_week_ids(totals)}


@app.post("/api/clear")
def api_clear(payload: ClearRequest, board: AvailabilityBoard = Depends(get_board)):
    cleared = board.clear_all_data(confirm=lambda _prompt: payload.confirmed)
    return {"cleared": cleared, **board.snapshot()}


# -------------------- API: Events (polled by the page) --------------------
@app.get("/api/events")
def api_events(since: Optional[int] = Query(default=None)):
    return get_web_events(since)


# -------------------- Export --------------------
@app.get("/export_pdf")
def export_pdf(board: AvailabilityBoard = Depends(get_board)):
    pdf_bytes = generate_pdf_for_board(board.weeks, board.participants, board.week_totals())
    filename = f"availability_poll_{datetime.now().strftime('%Y%m%d')}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )

from fastapi import APIRouter, Depends, HTTPException

from poll.api.state import get_board
from poll.domain.Board import AvailabilityBoard, NotFoundError
from poll.utilities.validators import WeekLabelInput

router = APIRouter(prefix="/api/weeks", tags=["weeks"])


@router.get("")
def list_weeks(board: AvailabilityBoard = Depends(get_board)):
    return {"weeks": [w.to_dict() for w in board.weeks]}


@router.put("/{week_id}")
def rename_week(week_id: int, payload: WeekLabelInput, board: AvailabilityBoard = Depends(get_board)):
    """Replace a week label; a blank label leaves it unchanged (changed=false)."""
    try:
        changed = board.rename_week(week_id, payload.label)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"changed": changed, "weeks": [w.to_dict() for w in board.weeks], "error": board.error}

from fastapi import APIRouter, Depends, HTTPException

from poll.api.state import get_board
from poll.domain.Board import AvailabilityBoard, NotFoundError
from poll.utilities.validators import ParticipantInput, ToggleInput

router = APIRouter(prefix="/api/participants", tags=["participants"])


@router.get("")
def list_participants(board: AvailabilityBoard = Depends(get_board)):
    return {"participants": [p.to_dict() for p in board.participants]}


@router.post("")
def add_participant(payload: ParticipantInput, board: AvailabilityBoard = Depends(get_board)):
    """Add a participant; a blank name changes nothing (added=false)."""
    participant = board.add_participant(payload.name)
    return {
        "added": participant is not None,
        "participant": participant.to_dict() if participant else None,
        "count": len(board.participants),
        "error": board.error,
    }


@router.delete("/{participant_id}")
def remove_participant(participant_id: str, board: AvailabilityBoard = Depends(get_board)):
    try:
        removed = board.remove_participant(participant_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"removed": removed.to_dict(), "count": len(board.participants), "error": board.error}


@router.post("/{participant_id}/toggle")
def toggle_availability(participant_id: str, payload: ToggleInput,
                        board: AvailabilityBoard = Depends(get_board)):
    try:
        participant = board.toggle_availability(participant_id, payload.week_index)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"participant": participant.to_dict(), "error": board.error}

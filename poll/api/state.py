"""Holder for the board mounted by the web application.

The app mounts exactly one board at startup; request handlers get it through
the get_board dependency (tests override that dependency with their own board).
"""
import logging
from typing import Optional

from fastapi import HTTPException

from poll.domain.Board import AvailabilityBoard
from poll.infra.backend_factory import build_backend

logger = logging.getLogger(__name__)

_board: Optional[AvailabilityBoard] = None


def get_board() -> AvailabilityBoard:
    if _board is None:
        raise HTTPException(status_code=503, detail="Availability board is not mounted")
    return _board


def mount_board(board: Optional[AvailabilityBoard] = None) -> AvailabilityBoard:
    """Mount the given board (or one built from configuration) as the app's board."""
    global _board
    if _board is not None:
        return _board
    board = board or AvailabilityBoard(build_backend())
    board.mount()
    _board = board
    logger.info("Availability board mounted on %s backend", board.backend.name)
    return board


def unmount_board() -> None:
    """Cancel the board's subscriptions and release its backend."""
    global _board
    board, _board = _board, None
    if board is None:
        return
    board.unmount()
    board.backend.close()
    logger.info("Availability board unmounted")

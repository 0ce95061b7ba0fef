from typing import Final

# Local storage keys (one serialized sequence per key)
WEEKS_KEY: Final[str] = "availabilityPollWeeks"
PARTICIPANTS_KEY: Final[str] = "availabilityPollParticipants"

# Document store paths
WEEKS_PATH: Final[str] = "weeks"
PARTICIPANTS_PATH: Final[str] = "participants"

DEFAULT_WEEKS: Final[tuple[tuple[int, str], ...]] = (
    (1, "Jan 15-21"),
    (2, "Jan 22-28"),
    (3, "Jan 29-Feb 4"),
    (4, "Feb 5-11"),
)
DEFAULT_PARTICIPANT_NAME: Final[str] = "You"

CLEAR_CONFIRM_PROMPT: Final[str] = "Are you sure you want to clear all data? This cannot be undone."

# Banner messages
MSG_LOAD_FAILED: Final[str] = "Error loading data. Please refresh the page."
MSG_TOGGLE_FAILED: Final[str] = "Failed to update availability. Please try again."
MSG_ADD_FAILED: Final[str] = "Failed to add participant. Please try again."
MSG_REMOVE_FAILED: Final[str] = "Failed to remove participant. Please try again."
MSG_LABEL_FAILED: Final[str] = "Failed to update week label. Please try again."
MSG_CLEAR_FAILED: Final[str] = "Failed to clear data. Please try again."

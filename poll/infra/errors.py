class PersistenceError(RuntimeError):
    """Raised when a backend read, write or subscription fails."""

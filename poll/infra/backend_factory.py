"""Build the persistence backend selected by configuration."""
import logging
from pathlib import Path
from typing import Optional

from poll.infra.Document_Store import InMemoryDocumentStore
from poll.infra.Local_Storage import LocalStorage
from poll.infra.Poll_Backend import PollBackend, LocalBackend, RemoteBackend
from poll.infra.Remote_Document_Store import RemoteDocumentStore
from poll.infra.paths import LOCAL_STORE_FILE
from poll.utilities import config

logger = logging.getLogger(__name__)

BACKEND_KINDS = ("local", "remote", "memory")


def build_backend(kind: Optional[str] = None, store_file: Optional[Path] = None) -> PollBackend:
    kind = (kind or config.POLL_BACKEND).strip().lower()
    if kind == "local":
        path = Path(store_file) if store_file else LOCAL_STORE_FILE
        logger.info("Using local storage backend at %s", path)
        return LocalBackend(LocalStorage(path))
    if kind == "remote":
        if not config.FIREBASE_DATABASE_URL:
            raise ValueError("POLL_BACKEND=remote needs FIREBASE_DATABASE_URL")
        logger.info("Using remote document store at %s", config.FIREBASE_DATABASE_URL)
        store = RemoteDocumentStore(config.FIREBASE_DATABASE_URL, auth=config.FIREBASE_AUTH,
                                    timeout=config.REMOTE_TIMEOUT)
        return RemoteBackend(store)
    if kind == "memory":
        logger.info("Using in-memory shared document store (data is lost on restart)")
        return RemoteBackend(InMemoryDocumentStore())
    raise ValueError(f"Unknown POLL_BACKEND '{kind}'; expected one of {', '.join(BACKEND_KINDS)}")

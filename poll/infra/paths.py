from poll.utilities.config import DATA_DIR as _CONFIGURED_DATA_DIR

# Centralized paths for data files (single source of truth)
DATA_DIR = _CONFIGURED_DATA_DIR.resolve()
LOCAL_STORE_FILE = DATA_DIR / 'local_storage.json'

__all__ = ['DATA_DIR', 'LOCAL_STORE_FILE']

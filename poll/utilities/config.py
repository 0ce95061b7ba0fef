"""Configuration management for the Availability Poll application."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Persistence backend: 'local' (key/value file), 'remote' (Firebase REST) or 'memory'
POLL_BACKEND: Final[str] = os.getenv('POLL_BACKEND', 'local').strip().lower()

# Remote document store
FIREBASE_DATABASE_URL: Final[str] = os.getenv('FIREBASE_DATABASE_URL', '')
FIREBASE_AUTH: Final[str] = os.getenv('FIREBASE_AUTH', '')
REMOTE_TIMEOUT: Final[float] = float(os.getenv('REMOTE_TIMEOUT', '10'))

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'

# How often the browser asks the event feed for changes
EVENTS_POLL_INTERVAL_MS: Final[int] = int(os.getenv('EVENTS_POLL_INTERVAL_MS', '2000'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('POLL_DATA_DIR', str(BASE_DIR / 'data')))
STATIC_DIR: Final[Path] = BASE_DIR / 'static'
TEMPLATES_DIR: Final[Path] = BASE_DIR / 'templates'

"""Loads the project .env before any configuration module reads os.environ."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Project root (one level above this package)
BASE_DIR = Path(__file__).resolve().parents[1]

ENV_FILE = Path(os.getenv("PATTERN_REPLAY_ENV_FILE", BASE_DIR / ".env"))

# Values already exported in the shell win over the file
load_dotenv(ENV_FILE, override=False)

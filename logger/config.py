import os

import core.env  # noqa: F401  (LOG_* may come from .env)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE") or None

# Batch fetches run on worker threads, so the thread name is part of every line
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Rotating file: 10 MB per file, 3 backups
MAX_LOG_SIZE = 10 * 1024 * 1024
BACKUP_COUNT = 3

SEPARATOR = "=" * 70

# Data provider libraries that log every request at INFO
QUIET_LOGGERS = ("urllib3", "yfinance", "peewee")

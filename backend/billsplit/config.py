from __future__ import annotations

import os


class Config:
    DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
    HISTORY_MAX_SIZE = int(os.getenv("HISTORY_MAX_SIZE", "50"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

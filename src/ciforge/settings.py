from __future__ import annotations
import os

DATABASE_URL = os.environ.get("CIFORGE_DATABASE_URL", "sqlite+aiosqlite:///./ciforge.db")
STORE_DIR = os.environ.get("CIFORGE_STORE_DIR", ".ciforge")
HISTORY_LIMIT = int(os.environ.get("CIFORGE_HISTORY_LIMIT", "10"))

"""
Runtime settings.

Values come from the environment (optionally seeded from .env):

    MENTORMATCH_BACKEND    sqlite | supabase (default: sqlite)
    MENTORMATCH_DB         SQLite file path (default: data/mentormatch.db)
    MENTORMATCH_LOG_LEVEL  DEBUG, INFO, ... (default: INFO)
    MENTORMATCH_LOG_DIR    write daily log files here when set
    SUPABASE_URL           project URL, e.g. https://xyz.supabase.co
    SUPABASE_KEY           anon or service-role key
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .env import load_env
from .store import MatchStore, SQLiteStore, SupabaseStore

BACKENDS = ("sqlite", "supabase")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    backend: str = "sqlite"
    db_path: Path = Path("data/mentormatch.db")
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{self.backend}'. Use one of: {', '.join(BACKENDS)}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level '{self.log_level}'. Use one of: {', '.join(LOG_LEVELS)}")


def load_settings(**overrides) -> Settings:
    """Read settings from the environment; keyword overrides that are not None win."""
    load_env()
    log_dir = os.getenv("MENTORMATCH_LOG_DIR")
    values = {
        "backend": os.getenv("MENTORMATCH_BACKEND", "sqlite").strip().lower(),
        "db_path": Path(os.getenv("MENTORMATCH_DB", "data/mentormatch.db")),
        "log_level": os.getenv("MENTORMATCH_LOG_LEVEL", "INFO").strip().upper(),
        "log_dir": Path(log_dir) if log_dir else None,
        "supabase_url": os.getenv("SUPABASE_URL"),
        "supabase_key": os.getenv("SUPABASE_KEY"),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)


def build_store(settings: Settings) -> MatchStore:
    """Instantiate the store backend the settings ask for."""
    if settings.backend == "supabase":
        return SupabaseStore(settings.supabase_url, settings.supabase_key)
    return SQLiteStore(Path(settings.db_path))

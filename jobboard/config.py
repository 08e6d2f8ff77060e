"""
Runtime settings for the job board client.

Values come from the environment, optionally seeded from a .env file in
the working directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:5000/api"
CACHE_BACKENDS = ("json", "sqlite")


def load_env(env_path: Optional[Path] = None) -> bool:
    """Load .env from the working directory if present. Existing vars win."""
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path, override=False)


@dataclass
class Settings:
    api_url: str = DEFAULT_API_URL
    token: Optional[str] = None
    timeout: float = 15.0
    cache_backend: str = "json"
    cache_path: Path = Path("data/cache.json")
    log_level: str = "INFO"
    log_dir: Path = Path("logs")


def load_settings() -> Settings:
    load_env()

    backend = os.getenv("JOBBOARD_CACHE_BACKEND", "json").strip().lower()
    if backend not in CACHE_BACKENDS:
        raise ValueError(f"Unsupported cache backend '{backend}'. Use one of: {', '.join(CACHE_BACKENDS)}")

    default_cache = "data/cache.db" if backend == "sqlite" else "data/cache.json"
    timeout = os.getenv("JOBBOARD_TIMEOUT")

    return Settings(
        api_url=os.getenv("JOBBOARD_API_URL", DEFAULT_API_URL).rstrip("/"),
        token=os.getenv("JOBBOARD_TOKEN") or None,
        timeout=float(timeout) if timeout else 15.0,
        cache_backend=backend,
        cache_path=Path(os.getenv("JOBBOARD_CACHE_PATH", default_cache)),
        log_level=os.getenv("JOBBOARD_LOG_LEVEL", "INFO"),
        log_dir=Path(os.getenv("JOBBOARD_LOG_DIR", "logs")),
    )

"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent
PACKAGE_DIR = Path(__file__).resolve().parent


class Settings:
    ENV: str
    DATABASE_URL: str
    STATIC_DIR: Path
    ALLOW_DEV_CORS: bool
    HOST: str
    PORT: int
    LOG_LEVEL: str
    SEED_ON_STARTUP: bool

    def __init__(self, **overrides):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'academia.db'}")
        self.STATIC_DIR = Path(os.getenv("STATIC_DIR", str(PACKAGE_DIR / "static")))
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.HOST = os.getenv("HOST", "127.0.0.1")
        self.PORT = _int_env("PORT", 3000)
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "true").lower() == "true"
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"unknown setting: {key}")
            setattr(self, key, value)
        self.STATIC_DIR = Path(self.STATIC_DIR)
        self._validate()

    def _validate(self):
        if self.PORT <= 0:
            raise RuntimeError("PORT must be a positive integer")
        if self.ENV != "dev" and self.DATABASE_URL.rstrip("/") in ("sqlite:", "sqlite:///:memory:"):
            raise RuntimeError("an in-memory database is only allowed when ENV=dev")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


settings = Settings()

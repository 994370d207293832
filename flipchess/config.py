# flipchess/config.py
from dataclasses import dataclass
import logging
import os

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    cpu_delay: float = 0.5  # seconds before the CPU answers a human move
    room_idle_timeout: int = 5 * 60  # seconds an unwatched room is kept
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @staticmethod
    def from_env(environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        cfg = Settings()
        cfg.log_level = env.get("FLIPCHESS_LOG_LEVEL", cfg.log_level).upper()
        cfg.host = env.get("FLIPCHESS_HOST", cfg.host)
        # numbers keep their defaults when the variable does not parse
        for name, key, cast in (
            ("cpu_delay", "FLIPCHESS_CPU_DELAY", float),
            ("room_idle_timeout", "FLIPCHESS_ROOM_IDLE_TIMEOUT", int),
            ("port", "FLIPCHESS_PORT", int),
        ):
            raw = env.get(key)
            if not raw:
                continue
            try:
                setattr(cfg, name, cast(raw))
            except ValueError:
                logger.warning("Ignoring %s=%r, keeping %s", key, raw, getattr(cfg, name))
        return cfg


# single globally importable settings instance
SETTINGS = Settings.from_env()

"""Process-wide logging setup, split around the litellm import.

``setup_logging()`` runs first (before anything imports litellm, which
reads ``LITELLM_LOG`` once at import). ``cleanup_third_party_handlers()``
runs after all imports and strips the stream handlers litellm attaches
to its own loggers, so its records reach the root handler only once.
Both steps run at most once per process.
"""

import logging
import os

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

_LITELLM_LOGGERS = ("LiteLLM", "LiteLLM Router", "LiteLLM Proxy")

# Chatty libraries and the level they are capped at
_QUIET_LOGGERS: dict[str, int] = {
    **dict.fromkeys(_LITELLM_LOGGERS, logging.WARNING),
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}

_done: set[str] = set()


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger; ``level`` defaults to $LOG_LEVEL."""
    if "setup" in _done:
        return
    _done.add("setup")

    os.environ.setdefault("LITELLM_LOG", "WARNING")
    resolved = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, resolved, logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
    for name, cap in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(cap)


def cleanup_third_party_handlers() -> None:
    """Drop litellm's own handlers and let its records propagate."""
    if "cleanup" in _done:
        return
    _done.add("cleanup")

    for name in _LITELLM_LOGGERS:
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.propagate = True

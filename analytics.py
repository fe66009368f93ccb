# ==============================================================
# analytics.py - Named gameplay events
# ==============================================================

from loguru import logger


def log_event(name, **params):
    """Default event sink: record the event in the log stream."""
    if params:
        details = ", ".join(f"{key}={value}" for key, value in params.items())
        logger.info(f"[event] {name}: {details}")
    else:
        logger.info(f"[event] {name}")

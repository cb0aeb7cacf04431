import logging
import os
from pathlib import Path

# -------------------------
# Logging setup
# -------------------------

LOG_FILE = os.environ.get("FLIGHT_SCHEDULER_LOG_FILE")

logger = logging.getLogger("flight_scheduler")
logger.setLevel(logging.INFO)

# Only add handlers once (important if the module is imported multiple times)
if not logger.handlers:
    if LOG_FILE:
        handler = logging.FileHandler(Path(LOG_FILE), encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)

    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    handler.setFormatter(formatter)

    logger.addHandler(handler)

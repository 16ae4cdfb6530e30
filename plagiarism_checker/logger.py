# logger.py
import logging

from plagiarism_checker.config import LOG_LEVEL, LOG_FILE

_handlers = [logging.StreamHandler()]
if LOG_FILE:
    _handlers.append(logging.FileHandler(LOG_FILE))

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    handlers=_handlers,
)

logger = logging.getLogger("plagiarism_checker")

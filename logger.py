import sys
from typing import Optional

from loguru import logger

from config import LOG_FILE_PATH, LOG_LEVEL, LOG_TO_FILE

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | user={extra[user_id]} project={extra[project_id]} | "
    "{name}:{function}:{line} - {message}"
)


class JsonLogger:
    def __init__(self):
        self.logger = logger
        self._configure_logger()

    def _configure_logger(self):
        self.logger.remove()
        # records logged without bound context still render
        self.logger.configure(extra={"user_id": "-", "project_id": "-"})

        self.logger.add(
            sys.stdout,
            level=LOG_LEVEL,
            format=LOG_FORMAT,
            serialize=False,
            enqueue=True
        )
        if LOG_TO_FILE:
            self.logger.add(
                LOG_FILE_PATH,
                level=LOG_LEVEL,
                format=LOG_FORMAT,
                serialize=False,
                rotation="10 MB",
                compression="zip",
                enqueue=True
            )
            self.logger.debug(f"Logging to file {LOG_FILE_PATH} is enabled.")


json_logger = JsonLogger().logger


def intake_logger(user_id: str, project_id: Optional[str] = None):
    """Logger bound to the user and project an intake request acts for."""
    return json_logger.bind(user_id=user_id, project_id=project_id or "-")

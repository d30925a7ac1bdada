import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger


def setup_logging(level: str = "INFO", log_file: Optional[Union[str, Path]] = None) -> None:
    """Configure loguru sinks: colored stderr, plus an optional rotating file."""
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>",
        colorize=True,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {module}:{line} | {message}",
            rotation="10 MB",
            retention="7 days",
        )

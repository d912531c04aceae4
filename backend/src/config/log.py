import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import Config


def setup_logging(
    level: str | int | None = None,
    log_file: str = "papercards.log",
) -> None:
    """
    Console + rotating file logging for the API process.

    Safe to call more than once: handlers are only installed the first time.
    """
    root = logging.getLogger()
    if getattr(root, "_papercards_configured", False):
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # ---- Console ----
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [console_handler]

    # ---- File (rotating) ----
    log_dir = Path(Config.log_dir)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / log_file,
            maxBytes=20 * 1024 * 1024,  # 20MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    except OSError as e:
        console_handler.stream.write(f"⚠ File logging disabled ({log_dir}): {e}\n")

    logging.basicConfig(
        level=level or Config.log_level,
        handlers=handlers,
    )
    root._papercards_configured = True

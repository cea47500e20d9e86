import logging
from pathlib import Path
from typing import Optional


def setup_logger(log_path: Optional[Path] = Path("logs/firi.log"), level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger("firi")
    logger.setLevel(level.upper())
    if not logger.handlers:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)
    # urllib3 logs full URLs at DEBUG; keep it quiet
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return logger


def mask_secret(value: Optional[str]) -> str:
    if not value:
        return ""
    if len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]

import logging
import os
import sys
from datetime import datetime

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def configure_logging(level: str = "INFO", log_dir: str = "") -> None:
    """configure root logging: stdout, plus a dated file when log_dir is set"""
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_dir:
        # create logs directory if it doesn't exist
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f'render_server_{datetime.now().strftime("%Y%m%d")}.log')
        handlers.append(logging.FileHandler(log_file, mode='a'))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )

def get_logger(name: str) -> logging.Logger:
    """get a configured logger instance"""
    return logging.getLogger(name)

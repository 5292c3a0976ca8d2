import logging
import sys

from badgeforge.config import settings


def setup_logging(level: str = None):
    """Configure application logging"""
    
    logger = logging.getLogger()
    logger.setLevel(level or settings.LOG_LEVEL)
    
    # Remove existing handlers
    logger.handlers.clear()
    
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(console_handler)
    
    # Silence noisy libraries
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('databases').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

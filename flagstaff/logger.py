"""Package logger shared by every flagstaff module."""
import logging

logger = logging.getLogger("flagstaff")
logger.addHandler(logging.NullHandler())

__all__ = ("logger",)

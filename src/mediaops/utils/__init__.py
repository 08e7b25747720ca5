"""
Constants, structured logging and small system helpers shared by all tools.
"""

from .constants import (
    COLOR_FAILURE,
    COLOR_SUCCESS,
    STATUS_DRY_RUN,
    STATUS_FAIL,
    STATUS_OK,
)
from .logger import LogLevel

__all__ = [
    "COLOR_FAILURE",
    "COLOR_SUCCESS",
    "STATUS_DRY_RUN",
    "STATUS_FAIL",
    "STATUS_OK",
    "LogLevel",
]

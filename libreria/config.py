"""
Settings and logging setup.

Settings come from environment variables prefixed with ``LIBRERIA_`` (a
``.env`` file in the working directory is honoured), falling back to the
defaults below.
"""

from __future__ import annotations
from decimal import Decimal
import logging
import os
import sys
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .fees import LATE_FEE_RATE

ENV_PREFIX = "LIBRERIA_"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Runtime configuration for the reservation core."""

    late_fee_rate: Decimal = Field(
        default=LATE_FEE_RATE,
        description="Fraction of the daily rate charged per day overdue",
    )

    database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL; unset keeps everything in memory",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level for the libreria loggers",
    )

    @field_validator("late_fee_rate")
    @classmethod
    def late_fee_rate_must_not_be_negative(cls, v):
        if v < 0:
            raise ValueError("late_fee_rate must be >= 0")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v):
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("database_url")
    @classmethod
    def blank_database_url_is_unset(cls, v):
        return v or None


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides) -> Settings:
    """
    Build ``Settings`` from ``environ`` (``os.environ`` after loading ``.env``
    when omitted). Keyword overrides win over the environment.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    values = {}
    for name in Settings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in environ:
            values[name] = environ[key]
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a console handler to the ``libreria`` logger (once)."""
    logger = logging.getLogger("libreria")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger

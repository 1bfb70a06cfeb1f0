"""Parser thresholds read from the environment (and a local `.env`)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)

DEFAULT_TYPE_GUESS_MAX_DISTANCE = 4
DEFAULT_TYPE_GUESS_MIN_LENGTH = 4


@dataclass(frozen=True)
class Settings:
    # Largest edit distance at which leftover cell text still counts as a
    # special lesson type.
    type_guess_max_distance: int = DEFAULT_TYPE_GUESS_MAX_DISTANCE
    # Leftover text must be strictly longer than this to be guessed at all.
    type_guess_min_length: int = DEFAULT_TYPE_GUESS_MIN_LENGTH


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Invalid %s=%r, falling back to %d", name, raw, default)
        return default


def get_settings() -> Settings:
    return Settings(
        type_guess_max_distance=_get_int(
            "SCHEDULE_TYPE_GUESS_MAX_DISTANCE", DEFAULT_TYPE_GUESS_MAX_DISTANCE
        ),
        type_guess_min_length=_get_int(
            "SCHEDULE_TYPE_GUESS_MIN_LENGTH", DEFAULT_TYPE_GUESS_MIN_LENGTH
        ),
    )

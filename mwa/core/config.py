"""
Auction configuration parameters for MWA.

Defines the fixed parameters of an auction (duration, winner count,
bid increment) and the operational settings of the engine (logging).
Values come from defaults, an optional JSON file, and MWA_* environment
variables (a .env file is honoured), in that order of precedence.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from mwa.utils.validation import MAX_AMOUNT, MAX_TIMESTAMP

ENV_PREFIX = "MWA_"

DEFAULT_DURATION = 3600
DEFAULT_NUM_WINNERS = 1
DEFAULT_BID_INCREMENT = 0


class AuctionConfig(BaseModel):
    """Parameters fixed at auction creation"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    duration: int = Field(default=DEFAULT_DURATION, gt=0, le=MAX_TIMESTAMP)  # seconds
    num_winners: int = Field(default=DEFAULT_NUM_WINNERS, gt=0, le=MAX_AMOUNT)
    bid_increment: int = Field(default=DEFAULT_BID_INCREMENT, ge=0, le=MAX_AMOUNT)


@dataclass
class EngineSettings:
    """Operational settings (logging)"""

    log_level: int = logging.INFO
    log_dir: Path = Path("logs")
    log_to_file: bool = False


def _env_overrides(fields: Dict[str, str], env_prefix: str) -> Dict[str, str]:
    """Collect {field: raw_value} for every set environment variable."""
    overrides = {}
    for field_name, env_name in fields.items():
        raw = os.getenv(f"{env_prefix}{env_name}")
        if raw is not None and raw.strip():
            overrides[field_name] = raw.strip()
    return overrides


def load_config(
    config_path: Optional[str] = None,
    env_prefix: str = ENV_PREFIX,
) -> AuctionConfig:
    """
    Load auction configuration from file and environment.

    Args:
        config_path: Optional path to a JSON file with any of
            duration, num_winners, bid_increment
        env_prefix: Prefix for environment overrides

    Returns:
        AuctionConfig instance

    Raises:
        pydantic.ValidationError: if the merged values are invalid
        ValueError: if the file is not a JSON object
    """
    load_dotenv(find_dotenv(usecwd=True))

    values: Dict[str, Any] = {}
    if config_path:
        data = json.loads(Path(config_path).read_text())
        if not isinstance(data, dict):
            raise ValueError(f"{config_path} must hold a JSON object")
        values.update(data)

    values.update(_env_overrides(
        {
            "duration": "DURATION",
            "num_winners": "NUM_WINNERS",
            "bid_increment": "BID_INCREMENT",
        },
        env_prefix,
    ))

    return AuctionConfig.model_validate(values)


def load_settings(env_prefix: str = ENV_PREFIX) -> EngineSettings:
    """Load engine settings from the environment."""
    load_dotenv(find_dotenv(usecwd=True))

    settings = EngineSettings()
    raw = _env_overrides(
        {"log_level": "LOG_LEVEL", "log_dir": "LOG_DIR", "log_to_file": "LOG_TO_FILE"},
        env_prefix,
    )

    if "log_level" in raw:
        level = logging.getLevelName(raw["log_level"].upper())
        if isinstance(level, int):
            settings.log_level = level
    if "log_dir" in raw:
        settings.log_dir = Path(raw["log_dir"])
    if "log_to_file" in raw:
        settings.log_to_file = raw["log_to_file"].lower() in ("1", "true", "yes", "on")

    return settings

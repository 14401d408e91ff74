import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".versecoach"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

DEFAULT_INTERVALS = [1, 3, 7, 14, 30, 90]
DEFAULT_RECURRING_BATCH_SIZE = 12


def _parse_intervals(value: Any) -> List[int]:
    if isinstance(value, str):
        value = [item for item in value.split(",") if item.strip()]
    intervals = [int(item) for item in value]
    if not intervals:
        raise ValueError("rehearsal.intervals must not be empty")
    if any(days <= 0 for days in intervals):
        raise ValueError("rehearsal.intervals must contain positive day counts")
    return intervals


def _parse_synonyms(raw: Dict[str, Any]) -> Dict[str, List[str]]:
    synonyms: Dict[str, List[str]] = {}
    for key, members in raw.items():
        if isinstance(members, str):
            members = [members]
        synonyms[key.strip().lower()] = [str(member).strip().lower() for member in members]
    return synonyms


def load_config() -> Dict[str, Any]:
    """Load config from ~/.versecoach/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    grading_cfg = config.get("grading", {})
    config["grading"] = {
        "max_typo_distance": int(os.getenv(
            "MAX_TYPO_DISTANCE", grading_cfg.get("max_typo_distance", 2)
        )),
        "typo_length_divisor": int(os.getenv(
            "TYPO_LENGTH_DIVISOR", grading_cfg.get("typo_length_divisor", 3)
        )),
        "fuzzy_acceptance_threshold": float(os.getenv(
            "FUZZY_ACCEPTANCE_THRESHOLD", grading_cfg.get("fuzzy_acceptance_threshold", 0.8)
        )),
        "passing_accuracy": int(os.getenv(
            "PASSING_ACCURACY", grading_cfg.get("passing_accuracy", 90)
        )),
    }
    if config["grading"]["typo_length_divisor"] <= 0:
        raise ValueError("grading.typo_length_divisor must be positive")
    if not 0.0 <= config["grading"]["fuzzy_acceptance_threshold"] <= 1.0:
        raise ValueError("grading.fuzzy_acceptance_threshold must be between 0 and 1")

    rehearsal_cfg = config.get("rehearsal", {})
    config["rehearsal"] = {
        "intervals": _parse_intervals(os.getenv(
            "REHEARSAL_INTERVALS", rehearsal_cfg.get("intervals", DEFAULT_INTERVALS)
        )),
        "recurring_batch_size": int(os.getenv(
            "RECURRING_BATCH_SIZE",
            rehearsal_cfg.get("recurring_batch_size", DEFAULT_RECURRING_BATCH_SIZE),
        )),
        "initial_delay_days": int(rehearsal_cfg.get("initial_delay_days", 1)),
    }
    if config["rehearsal"]["recurring_batch_size"] < 1:
        raise ValueError("rehearsal.recurring_batch_size must be at least 1")

    config["synonyms"] = _parse_synonyms(config.get("synonyms", {}))

    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config


def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('rehearsal', 'intervals')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value

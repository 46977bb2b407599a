"""
Application settings loaded from the per-user config directory.
"""
import json
import logging
import math
from dataclasses import Field, asdict, dataclass, fields
from pathlib import Path
from typing import Optional, Union, get_args, get_origin

from .resource_loader import get_config_dir

log = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"

# Numeric settings that must be greater than zero; the rest may be zero
POSITIVE_SETTINGS = {"default_point_size", "history_limit", "min_box_px", "image_max_px"}


@dataclass
class AppConfig:
    """Tunable defaults for tools, gestures and exports."""

    # Tool defaults
    default_color: str = "blue"
    default_point_size: int = 12
    default_font: str = "Noto Sans JP"
    default_stamp: str = "ok"

    # History
    history_limit: Optional[int] = None

    # Gestures, in device-independent pixels
    marquee_threshold_px: float = 5
    min_box_px: float = 20
    image_max_px: float = 200

    # Layout
    page_margin_px: float = 40

    # Exports; None means the user's home directory
    export_dir: Optional[str] = None

    def to_dict(self):
        return asdict(self)


def get_settings_path() -> Path:
    return get_config_dir() / SETTINGS_FILENAME


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load settings, falling back to defaults.

    Args:
        path: Settings file; defaults to settings.json in the config dir

    Returns:
        The loaded configuration. A missing or unreadable file yields the
        defaults; unknown keys are ignored and a value of the wrong type
        or range keeps its default.
    """
    file_path = Path(path) if path is not None else get_settings_path()

    if not file_path.exists():
        return AppConfig()

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning("Failed to read settings from %s: %s", file_path, e)
        return AppConfig()

    if not isinstance(data, dict):
        log.warning("Ignoring settings in %s: expected an object", file_path)
        return AppConfig()

    known = {f.name: f for f in fields(AppConfig)}
    for key in sorted(set(data) - set(known)):
        log.warning("Ignoring unknown setting %r in %s", key, file_path)

    values = {}
    for key, value in data.items():
        field = known.get(key)
        if field is None:
            continue
        problem = check_setting(field, value)
        if problem:
            log.warning("Ignoring setting %s=%r in %s: %s", key, value, file_path, problem)
            continue
        values[key] = value
    return AppConfig(**values)


def check_setting(field: Field, value) -> Optional[str]:
    """
    Check a loaded value against its AppConfig field.

    Returns:
        Why the value is unusable, or None if it is fine
    """
    expected = field.type
    if get_origin(expected) is Union:
        if value is None:
            return None
        expected = next(t for t in get_args(expected) if t is not type(None))

    if expected is str:
        return None if isinstance(value, str) else "expected a string"

    # bool is an int subclass but never a valid size
    if isinstance(value, bool):
        return "expected a number"
    if expected is int and not isinstance(value, int):
        return "expected an integer"
    if expected is float and not (isinstance(value, (int, float)) and math.isfinite(value)):
        return "expected a number"

    if field.name in POSITIVE_SETTINGS and value <= 0:
        return "must be greater than zero"
    if value < 0:
        return "must not be negative"
    return None


def save_config(config: AppConfig, path: Optional[Union[str, Path]] = None) -> bool:
    """
    Write settings as JSON.

    Returns:
        True if save was successful
    """
    file_path = Path(path) if path is not None else get_settings_path()
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(config.to_dict(), f, indent=2)
        return True
    except OSError as e:
        log.warning("Failed to save settings to %s: %s", file_path, e)
        return False

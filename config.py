from __future__ import annotations
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_PLAN_DAYS = 7
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
APP_DIR_NAME = "StudyFlow"


@dataclass(frozen=True)
class Config:
    api_key: Optional[str] = None
    model_name: str = DEFAULT_MODEL
    plan_days: int = DEFAULT_PLAN_DAYS
    log_level: str = "INFO"
    data_dir: Path = field(default_factory=lambda: default_data_dir(os.environ))

    @property
    def ai_enabled(self) -> bool:
        return bool(self.api_key)


def default_data_dir(env: Mapping[str, str]) -> Path:
    """
    Where the state file lives when STUDYFLOW_DATA_DIR is not set:
    Application Support on macOS, %APPDATA% on Windows and
    $XDG_DATA_HOME (or ~/.local/share) elsewhere.
    """
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / APP_DIR_NAME
    if sys.platform.startswith("win"):
        roaming = env.get("APPDATA")
        base = Path(roaming) if roaming else home / "AppData" / "Roaming"
        return base / APP_DIR_NAME
    xdg = env.get("XDG_DATA_HOME", "").strip()
    base = Path(xdg) if xdg else home / ".local" / "share"
    return base / APP_DIR_NAME.lower()


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name, "").strip()
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-integer %s=%r", name, value)
        return default
    return parsed if parsed > 0 else default


def load_config(env: Mapping[str, str] | None = None) -> Config:
    """
    Read settings from the environment.
    GEMINI_API_KEY wins over the older API_KEY name.
    """
    env = os.environ if env is None else env
    api_key = (env.get("GEMINI_API_KEY") or env.get("API_KEY") or "").strip() or None
    data_dir = (env.get("STUDYFLOW_DATA_DIR") or "").strip()
    return Config(
        api_key=api_key,
        model_name=(env.get("STUDYFLOW_MODEL") or DEFAULT_MODEL).strip(),
        plan_days=_int_env(env, "STUDYFLOW_PLAN_DAYS", DEFAULT_PLAN_DAYS),
        log_level=(env.get("STUDYFLOW_LOG_LEVEL") or "INFO").strip().upper(),
        data_dir=Path(data_dir).expanduser() if data_dir else default_data_dir(env),
    )


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(level=level, format=LOG_FORMAT)

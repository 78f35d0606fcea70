import json
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from aggregator import DEFAULT_UNIQUE_WINDOW
from records import DEFAULT_ENEMY_KINGDOM, DEFAULT_HOME_KINGDOM, normalize_kingdom_key


@dataclass(frozen=True)
class ReportConfig:
    home_kingdom: Optional[str] = None
    enemy_kingdom: Optional[str] = None
    unique_window: int = DEFAULT_UNIQUE_WINDOW
    default_home_kingdom: str = DEFAULT_HOME_KINGDOM
    default_enemy_kingdom: str = DEFAULT_ENEMY_KINGDOM
    dedupe_outgoing: bool = True

    def analyze_kwargs(self) -> Dict[str, Any]:
        return {
            "home": self.home_kingdom,
            "enemy": self.enemy_kingdom,
            "window": self.unique_window,
            "dedupe_outgoing": self.dedupe_outgoing,
            "default_home": self.default_home_kingdom,
            "default_enemy": self.default_enemy_kingdom,
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def env_truthy(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def default_config_path() -> str:
    return os.getenv("UTOPIA_CONFIG_PATH", "config.json")


def load_json_file(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8-sig") as f:
        return json.load(f)


def parse_kingdom(value: Any, field_name: str, required: bool = False) -> Optional[str]:
    if value is None or str(value).strip() == "":
        if required:
            raise ValueError(f"Missing kingdom for '{field_name}'")
        return None

    key = normalize_kingdom_key(str(value))
    if not key:
        raise ValueError(f"Unsupported kingdom for '{field_name}': {value!r}")
    return key


def parse_window(value: Any) -> int:
    try:
        window = int(str(value).strip())
    except ValueError:
        raise ValueError(f"Unsupported unique window: {value!r}") from None
    if window < 1:
        raise ValueError(f"Unique window must be positive: {value!r}")
    return window


def load_config(path: str = "config.json") -> ReportConfig:
    """
    Load config from file when present, then allow env vars to override.

    Env vars:
    - UTOPIA_HOME_KINGDOM
    - UTOPIA_ENEMY_KINGDOM
    - UTOPIA_UNIQUE_WINDOW
    - UTOPIA_DEFAULT_HOME_KINGDOM
    - UTOPIA_DEFAULT_ENEMY_KINGDOM
    - UTOPIA_DEDUPE_OUTGOING
    """
    file_cfg: Dict[str, Any] = {}
    if path and os.path.exists(path):
        file_cfg = load_json_file(path)

    home = os.getenv("UTOPIA_HOME_KINGDOM", file_cfg.get("home_kingdom"))
    enemy = os.getenv("UTOPIA_ENEMY_KINGDOM", file_cfg.get("enemy_kingdom"))
    window = os.getenv("UTOPIA_UNIQUE_WINDOW", file_cfg.get("unique_window", DEFAULT_UNIQUE_WINDOW))
    default_home = os.getenv("UTOPIA_DEFAULT_HOME_KINGDOM", file_cfg.get("default_home_kingdom", DEFAULT_HOME_KINGDOM))
    default_enemy = os.getenv(
        "UTOPIA_DEFAULT_ENEMY_KINGDOM",
        file_cfg.get("default_enemy_kingdom", DEFAULT_ENEMY_KINGDOM),
    )
    dedupe = env_truthy(os.getenv("UTOPIA_DEDUPE_OUTGOING"), default=bool(file_cfg.get("dedupe_outgoing", True)))

    return ReportConfig(
        home_kingdom=parse_kingdom(home, "home_kingdom"),
        enemy_kingdom=parse_kingdom(enemy, "enemy_kingdom"),
        unique_window=parse_window(window),
        default_home_kingdom=parse_kingdom(default_home, "default_home_kingdom", required=True),
        default_enemy_kingdom=parse_kingdom(default_enemy, "default_enemy_kingdom", required=True),
        dedupe_outgoing=dedupe,
    )

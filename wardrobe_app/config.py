"""Configuration helpers for the Smart Wardrobe service."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

from models.clothing_item import DEFAULT_MAX_USES

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
FALLBACK_SCORING_MODES = ("rule", "randomized")
POSITIVE_INT_FIELDS = (
    "default_max_uses",
    "max_matches",
    "max_outfits",
    "match_max_output_tokens",
    "outfit_max_output_tokens",
)


@dataclass
class AppConfig:
    """Configuration values for the wardrobe service.

    Everything has a local default so the service boots without a reasoning
    service key; in that case every recommendation runs in degraded mode.
    """

    model: str = DEFAULT_GEMINI_MODEL
    api_key: Optional[str] = None
    wardrobe_db_path: str = "data/wardrobe.db"
    preference_store_path: str = "data/preferences"
    default_max_uses: int = DEFAULT_MAX_USES
    max_matches: int = 6
    max_outfits: int = 3
    fallback_scoring: str = "rule"
    match_temperature: float = 0.7
    outfit_temperature: float = 0.8
    match_max_output_tokens: int = 2000
    outfit_max_output_tokens: int = 1500
    environment: str | None = None

    def __post_init__(self) -> None:
        if self.fallback_scoring not in FALLBACK_SCORING_MODES:
            raise ValueError(
                f"Unsupported fallback_scoring '{self.fallback_scoring}'. Allowed: {list(FALLBACK_SCORING_MODES)}"
            )
        for name in POSITIVE_INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        for name in ("match_temperature", "outfit_temperature"):
            if not 0.0 <= getattr(self, name) <= 2.0:
                raise ValueError(f"{name} must be between 0 and 2")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that secrets can be
        injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("WARDROBE_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            value = os.getenv(env_key, yaml_config.get(key, default))
            if value is not None and not str(value).strip():
                return default
            return value

        def get_int(key: str, default: int) -> int:
            raw = get_value(key)
            if raw is None:
                return default
            try:
                return int(str(raw).strip())
            except ValueError as exc:
                raise ValueError(f"{key} must be an integer, got {raw!r}") from exc

        def get_float(key: str, default: float) -> float:
            raw = get_value(key)
            if raw is None:
                return default
            try:
                return float(str(raw).strip())
            except ValueError as exc:
                raise ValueError(f"{key} must be a number, got {raw!r}") from exc

        defaults = cls()
        return cls(
            model=str(get_value("model") or DEFAULT_GEMINI_MODEL),
            api_key=get_value("google_api_key"),
            wardrobe_db_path=str(get_value("wardrobe_db_path") or defaults.wardrobe_db_path),
            preference_store_path=str(get_value("preference_store_path") or defaults.preference_store_path),
            default_max_uses=get_int("default_max_uses", DEFAULT_MAX_USES),
            max_matches=get_int("max_matches", defaults.max_matches),
            max_outfits=get_int("max_outfits", defaults.max_outfits),
            fallback_scoring=str(get_value("fallback_scoring") or defaults.fallback_scoring).lower(),
            match_temperature=get_float("match_temperature", defaults.match_temperature),
            outfit_temperature=get_float("outfit_temperature", defaults.outfit_temperature),
            match_max_output_tokens=get_int("match_max_output_tokens", defaults.match_max_output_tokens),
            outfit_max_output_tokens=get_int("outfit_max_output_tokens", defaults.outfit_max_output_tokens),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config


__all__ = ["AppConfig", "DEFAULT_GEMINI_MODEL", "DEFAULT_MAX_USES", "FALLBACK_SCORING_MODES"]

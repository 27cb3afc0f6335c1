import logging, os, sys
from typing import Mapping, Optional
from pydantic import BaseModel, field_validator

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

def _default_config_dir() -> str:
    return os.path.join(os.path.expanduser("~"), ".config", "rota")

class Settings(BaseModel):
    config_dir: str
    api_keys_path: str
    targets_path: str
    firmware_dir: str
    devices_path: str
    host: str = "localhost"
    port: int = 80
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}")
        return v

    @classmethod
    def for_dir(cls, config_dir: str, **overrides) -> "Settings":
        """Every file lives under one directory (the layout a fresh deployment uses)."""
        values = {
            "config_dir": config_dir,
            "api_keys_path": os.path.join(config_dir, "api_keys"),
            "targets_path": os.path.join(config_dir, "targets"),
            "firmware_dir": config_dir,
            "devices_path": os.path.join(config_dir, "devices.toml"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls.for_dir(
            env.get("ROTA_CONFIG_DIR") or _default_config_dir(),
            api_keys_path=env.get("ROTA_API_KEYS_PATH"),
            targets_path=env.get("ROTA_TARGETS_PATH"),
            firmware_dir=env.get("ROTA_FIRMWARE_DIR"),
            devices_path=env.get("ROTA_DEVICES_PATH"),
            host=env.get("ROTA_HOST"),
            port=env.get("ROTA_PORT"),
            log_level=env.get("ROTA_LOG_LEVEL"),
        )

def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, stream=sys.stdout)

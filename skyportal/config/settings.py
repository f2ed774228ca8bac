import copy
import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skyportal.config.logging_config import mask_value

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "settings.json"

DEFAULT_CONFIG: dict = {
    "check_url": "http://detectportal.firefox.com/success.txt?ipv4",
    "portal_host": "splash.skyadmin.io",
    "api_base_url": "https://skyadmin.io/api/",
    "interval_seconds": 30,
    "log_dir": "logs",
    "log_level": "INFO",
    "http": {
        "timeout_seconds": 10,
        "retries": 3,
        "backoff_seconds": 2,
        "user_agent": "",
    },
    "api": {
        "status_path": "portals",
        "pin_path": "portals",
        "register_path": "portalregistrations",
    },
}


def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[Path] = None) -> dict:
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.is_file():
        logger.warning("Config file not found, using defaults path=%s", config_path)
        return copy.deepcopy(DEFAULT_CONFIG)
    with config_path.open("r", encoding="utf-8") as f:
        return _merge(DEFAULT_CONFIG, json.load(f))


class EnvironmentConfig(BaseSettings):
    """Device, property and guest identity, read from the environment once at startup.

    Every value has a literal fallback so the agent can run on a box where nothing
    has been provisioned yet. Integer ids that do not parse as non-negative
    integers fall back to their default instead of aborting startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    api_token: str = Field(default="b2507058a2c145d60c6d919c0347fe9c", alias="API_TOKEN")
    vlan: str = Field(default="3300", alias="VLAN")
    mac_address: str = Field(default="D4CA6DA65E0E", alias="MAC_ADDRESS")
    ip_address: str = Field(default="10.0.24.21", alias="IP_ADDRESS")
    nseid: str = Field(default="a39d49", alias="NSEID")
    last_name: str = Field(default="Michael", alias="LASTNAME")
    room_number: str = Field(default="101", alias="ROOMNUMBER")
    property_id: int = Field(default=1234, alias="PROPERTYID")
    registration_method_id: int = Field(default=2, alias="REGMETHODID")
    rateplan_id: int = Field(default=3, alias="RATEPLANID")

    @field_validator("property_id", "registration_method_id", "rateplan_id", mode="before")
    @classmethod
    def _int_or_default(cls, value: Any, info: ValidationInfo) -> Any:
        field = cls.model_fields[info.field_name]
        try:
            parsed = int(str(value).strip())
        except (TypeError, ValueError):
            logger.warning(
                "failed to parse %s as int, using default %s", field.alias, field.default
            )
            return field.default
        if parsed < 0:
            logger.warning(
                "%s must not be negative, using default %s", field.alias, field.default
            )
            return field.default
        return parsed


def load_environment(env_file: Optional[str] = ".env") -> EnvironmentConfig:
    env = EnvironmentConfig(_env_file=env_file)
    for name, field in EnvironmentConfig.model_fields.items():
        if name not in env.model_fields_set:
            default = mask_value(field.default) if name == "api_token" else field.default
            logger.warning("%s is not set, using default %s", field.alias, default)
    return env

"""Configuration management for the Storj-Fluree connector."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from errors import ConfigLoadError

logger = logging.getLogger(__name__)

DEFAULT_FLUREE_CONFIG = "./config/db_property.json"
DEFAULT_STORJ_CONFIG = "./config/storj_config.json"

ConfigModel = TypeVar("ConfigModel", bound=BaseModel)


class FlureeConfig(BaseModel):
    """Fluree database connection and local snapshot storage."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    ip: str = ""
    network: str = ""
    dbid: str = ""
    storage_directory: str = Field("", alias="storageDirectory")

    @field_validator("storage_directory", mode="before")
    @classmethod
    def expand_paths(cls, v):
        """Expand environment variables and user home directory."""
        return os.path.expanduser(os.path.expandvars(v)) if v else v

    @property
    def database_name(self) -> str:
        return f"{self.network}/{self.dbid}"


class StorjConfig(BaseModel):
    """Storj bucket credentials and upload location."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    api_key: SecretStr = Field(SecretStr(""), alias="apikey")
    satellite: str = ""
    bucket: str = ""
    upload_path: str = Field("", alias="uploadPath")
    encryption_passphrase: SecretStr = Field(SecretStr(""), alias="encryptionpassphrase")


def _read_config_fields(config_path: str, model: Type[ConfigModel]) -> Dict[str, Any]:
    """Read the JSON keys ``model`` knows about.

    Decoding never fails: malformed JSON or values of the wrong type are
    logged and the affected fields keep their empty defaults.
    """
    config_file = Path(config_path)

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            raw = f.read()
    except FileNotFoundError:
        raise ConfigLoadError(config_path, "file not found")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(config_path, str(e)) from e

    try:
        config_data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring malformed JSON in {config_path}: {e}")
        return {}

    if not isinstance(config_data, dict):
        logger.warning(f"Ignoring {config_path}: expected a JSON object")
        return {}

    fields = {}
    for name, field in model.model_fields.items():
        key = field.alias or name
        if key not in config_data:
            continue
        value = config_data[key]
        if not isinstance(value, str):
            logger.warning(f"Ignoring '{key}' in {config_path}: expected a string")
            continue
        fields[key] = value
    return fields


def load_fluree_config(config_path: str = DEFAULT_FLUREE_CONFIG) -> FlureeConfig:
    """Load the Fluree database configuration (db_property.json)."""
    config = FlureeConfig.model_validate(_read_config_fields(config_path, FlureeConfig))
    logger.debug(
        f"Read Fluree configuration from {config_path}: ip={config.ip} "
        f"network={config.network} dbid={config.dbid} "
        f"storageDirectory={config.storage_directory}"
    )
    return config


def load_storj_config(config_path: str = DEFAULT_STORJ_CONFIG) -> StorjConfig:
    """Load the Storj bucket configuration (storj_config.json)."""
    config = StorjConfig.model_validate(_read_config_fields(config_path, StorjConfig))
    # Key and passphrase are SecretStr and never formatted here.
    logger.debug(
        f"Read Storj configuration from {config_path}: satellite={config.satellite} "
        f"bucket={config.bucket} uploadPath={config.upload_path}"
    )
    return config


def create_default_configs(config_dir: str = "./config") -> Dict[str, Path]:
    """Write template db_property.json and storj_config.json files."""
    directory = Path(config_dir)
    directory.mkdir(parents=True, exist_ok=True)

    default_fluree = {
        "ip": "http://localhost:8090/",
        "network": "test",
        "dbid": "one",
        "storageDirectory": "./data/ledger"
    }
    default_storj = {
        "apikey": "your-access-key",
        "satellite": "https://gateway.storjshare.io",
        "bucket": "fluree-snapshots",
        "uploadPath": "snapshots/",
        "encryptionpassphrase": "your-secret-key"
    }

    written = {}
    for file_name, data in (("db_property.json", default_fluree),
                            ("storj_config.json", default_storj)):
        path = directory / file_name
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        logger.info(f"Created default configuration file: {path}")
        written[file_name] = path

    return written

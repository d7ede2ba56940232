"""Configuration models and loading for landingpage."""

import os
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_REFRESH_INTERVAL = 30

CONFIG_SEARCH_PATHS = [
    Path("config.yaml"),
    Path("landingpage.yaml"),
    Path("/etc/landingpage/config.yaml"),
]


class GlobalConfig(BaseModel):
    """Settings that apply to every cluster."""

    model_config = ConfigDict(populate_by_name=True)

    only_with_annotation: bool = Field(
        False,
        validation_alias=AliasChoices("onlyWithAnnotation", "only_with_annotation"),
        description="Only show ingresses carrying a landingpage annotation",
    )
    refresh_interval_seconds: int = Field(
        DEFAULT_REFRESH_INTERVAL,
        ge=1,
        validation_alias=AliasChoices("refreshIntervalSeconds", "refresh_interval_seconds"),
        description="Seconds between two refresh cycles",
    )


class LocalCluster(BaseModel):
    """The cluster landingpage itself runs in."""

    enabled: bool = Field(False, description="Whether to scan the local cluster")
    description: Optional[str] = Field(None, description="Cluster description")
    namespaces: Optional[List[str]] = Field(None, description="Namespaces to scan, all if unset")


class SecretRef(BaseModel):
    """Reference to a Secret in the local cluster."""

    name: str = Field(..., description="Secret name")
    namespace: str = Field(..., description="Secret namespace")


class RemoteCluster(BaseModel):
    """A remote cluster reached through a kubeconfig stored in a Secret."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Cluster name")
    description: Optional[str] = Field(None, description="Cluster description")
    credential_secret_ref: SecretRef = Field(
        ...,
        validation_alias=AliasChoices("kubeconfigSecret", "credentialSecretRef", "credential_secret_ref"),
        description="Secret holding the kubeconfig under the key 'value'",
    )
    namespaces: Optional[List[str]] = Field(None, description="Namespaces to scan, all if unset")


class Config(BaseModel):
    """Top level landingpage configuration."""

    model_config = ConfigDict(populate_by_name=True)

    global_: GlobalConfig = Field(
        default_factory=GlobalConfig,
        validation_alias=AliasChoices("global", "global_"),
        description="Global settings",
    )
    local: Optional[LocalCluster] = Field(None, description="Local cluster settings")
    remote: Dict[str, List[RemoteCluster]] = Field(
        default_factory=dict, description="Remote clusters keyed by display group"
    )

    @field_validator("global_", "remote", mode="before")
    @classmethod
    def _empty_section(cls, value):
        # an empty YAML section parses as None
        if value is None:
            return {}
        return value

    @property
    def refresh_interval(self) -> int:
        return self.global_.refresh_interval_seconds

    @property
    def only_with_annotation(self) -> bool:
        return self.global_.only_with_annotation

    @property
    def local_enabled(self) -> bool:
        return self.local is not None and self.local.enabled


def find_config_path(explicit: Optional[str] = None) -> Optional[Path]:
    """Locate the configuration file.

    An explicit path wins, then ``$CONFIG_FILE``, then the usual locations.
    """
    if explicit:
        return Path(explicit)
    env_path = os.getenv("CONFIG_FILE")
    if env_path:
        return Path(env_path)
    for path in CONFIG_SEARCH_PATHS:
        if path.exists():
            return path
    return None


def load_config(path: Union[str, Path]) -> Config:
    """Read and validate a YAML configuration file.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    config_path = Path(path)
    logger.debug("Loading configuration file", config_path=str(config_path))
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read configuration file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse configuration file {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    logger.info("Configuration loaded",
                config_path=str(config_path),
                local_enabled=config.local_enabled,
                remote_groups=list(config.remote.keys()),
                refresh_interval=config.refresh_interval)
    return config

"""Configuration file handling.

The configuration is a YAML document holding the profiles and a few
operational settings. Its location is, in order of precedence: the --config
option, $CLOUDSWEEP_CONFIG, ~/.cloudsweep/config.yaml.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..errors import ConfigError
from ..models.profile import Profile

logger = logging.getLogger(__name__)

CONFIG_VERSION = 0


def default_config_dir() -> Path:
    return Path.home() / ".cloudsweep"


def resolve_config_path(path: Optional[Union[str, Path]] = None) -> Path:
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get("CLOUDSWEEP_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return default_config_dir() / "config.yaml"


@dataclass
class Config:
    """cloudsweep configuration.

    Attributes:
        version: Configuration format version
        profiles: Configured cloud profiles
        snapshot_folder_path: Directory holding snapshot files
        log_level: Default log level
        target_delay: Seconds to pause after each target in a deletion pass
        pass_delay: Seconds to pause between deletion passes
        path: File this configuration was loaded from
    """

    version: int = CONFIG_VERSION
    profiles: List[Profile] = field(default_factory=list)
    snapshot_folder_path: Optional[str] = None
    log_level: str = "INFO"
    target_delay: float = 0.1
    pass_delay: float = 1.0
    path: Optional[Path] = None

    def __post_init__(self) -> None:
        if not self.snapshot_folder_path:
            self.snapshot_folder_path = os.environ.get(
                "CLOUDSWEEP_SNAPSHOT_PATH", str(default_config_dir() / "snapshots")
            )

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """Load configuration, falling back to defaults when the file is missing.

        Raises:
            ConfigError: If the file is invalid or from a newer version
        """
        config_path = resolve_config_path(path)

        data: Dict[str, Any] = {}
        if config_path.is_file():
            try:
                with open(config_path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse configuration {config_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"Invalid configuration {config_path}: expected a mapping")
        else:
            logger.debug(f"No configuration file at {config_path}, using defaults")

        try:
            version = int(data.get("version", CONFIG_VERSION))
            if version > CONFIG_VERSION:
                raise ConfigError("configuration version not supported, please upgrade cloudsweep")
            profiles = [Profile.from_dict(p) for p in data.get("profiles") or []]
            config = cls(
                version=version,
                profiles=profiles,
                snapshot_folder_path=data.get("snapshot_folder_path"),
                log_level=os.environ.get("CLOUDSWEEP_LOG_LEVEL", data.get("log_level", "INFO")),
                target_delay=float(data.get("target_delay", 0.1)),
                pass_delay=float(data.get("pass_delay", 1.0)),
                path=config_path,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration {config_path}: {e}") from e

        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "snapshot_folder_path": self.snapshot_folder_path,
            "log_level": self.log_level,
            "target_delay": self.target_delay,
            "pass_delay": self.pass_delay,
            "profiles": [p.to_dict() for p in self.profiles],
        }

    def write(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write configuration to disk, creating parent directories."""
        config_path = resolve_config_path(path or self.path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        # Profiles hold credentials
        os.chmod(config_path, 0o600)
        self.path = config_path
        return config_path

    def get_profile(self, name: str) -> Profile:
        for profile in self.profiles:
            if profile.name == name:
                return profile
        raise ConfigError(f"Profile {name} not found")

    def add_profile(self, profile: Profile) -> None:
        if any(p.name == profile.name for p in self.profiles):
            raise ConfigError(f"Profile {profile.name} already exist")
        self.profiles.append(profile)

    def remove_profile(self, name: str) -> Profile:
        profile = self.get_profile(name)
        self.profiles.remove(profile)
        return profile

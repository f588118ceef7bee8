"""Snapshot storage as one YAML file per snapshot."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

import yaml

from ..errors import ConfigError
from ..models.snapshot import SNAPSHOT_VERSION, Snapshot, validate_snapshot_name

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".yaml"


class SnapshotStorage:
    """Snapshot storage and retrieval.

    Storage structure:
        ~/.cloudsweep/snapshots/
            baseline.yaml
            after-tests.yaml

    Attributes:
        storage_dir: Directory holding snapshot files
    """

    def __init__(self, storage_dir: Optional[Union[str, Path]] = None) -> None:
        """Initialize snapshot storage.

        Args:
            storage_dir: Snapshot directory (default: ~/.cloudsweep/snapshots)
        """
        if storage_dir is None:
            storage_dir = Path.home() / ".cloudsweep" / "snapshots"
        self.storage_dir = Path(storage_dir).expanduser()

    def path_for(self, name: str) -> Path:
        """File holding a snapshot.

        Raises:
            ConfigError: If the name is not a valid snapshot name
        """
        try:
            validate_snapshot_name(name)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        return self.storage_dir / f"{name}{SNAPSHOT_SUFFIX}"

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def save_snapshot(self, snapshot: Snapshot) -> Path:
        """Write a snapshot, replacing any previous file with the same name.

        Raises:
            ValueError: If the snapshot name is invalid
        """
        snapshot.validate()
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(snapshot.name)
        with open(path, "w") as f:
            yaml.safe_dump(snapshot.to_dict(), f, default_flow_style=False, sort_keys=False)
        logger.debug(f"Snapshot {snapshot.name} written to {path}")
        return path

    def load_snapshot(self, name: str) -> Snapshot:
        """Load a snapshot by name.

        Raises:
            FileNotFoundError: If no snapshot has this name
            ConfigError: If the name is invalid, the file is malformed or the
                snapshot was written by a newer version
        """
        path = self.path_for(name)
        if not path.is_file():
            raise FileNotFoundError(f"Snapshot '{name}' not found in {self.storage_dir}")

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse snapshot {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid snapshot {path}: expected a mapping")

        try:
            version = int(data.get("version", 0))
            if version > SNAPSHOT_VERSION:
                raise ConfigError("snapshot version not supported, please upgrade cloudsweep")
            data.setdefault("name", name)
            return Snapshot.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid snapshot {path}: {e}") from e

    def list_snapshots(self) -> List[str]:
        """Names of all loadable snapshots, sorted."""
        if not self.storage_dir.is_dir():
            return []

        names = []
        for path in sorted(self.storage_dir.glob(f"*{SNAPSHOT_SUFFIX}")):
            name = path.name[: -len(SNAPSHOT_SUFFIX)]
            try:
                self.load_snapshot(name)
            except ConfigError as e:
                logger.warning(f"Skipping unreadable snapshot {path.name}: {e}")
                continue
            names.append(name)
        return names

    def delete_snapshot(self, name: str) -> None:
        """Delete a snapshot file.

        Raises:
            FileNotFoundError: If no snapshot has this name
            ConfigError: If the name is not a valid snapshot name
        """
        path = self.path_for(name)
        if not path.is_file():
            raise FileNotFoundError(f"Snapshot '{name}' not found in {self.storage_dir}")
        path.unlink()

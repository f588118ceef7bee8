"""Provider capability contract and helpers built on top of it."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, Dict, List, Mapping, Sequence, Tuple

from ..errors import ConfigError, ReadError
from ..models.object_set import ObjectSet

logger = logging.getLogger(__name__)


class Provider(ABC):
    """Abstract base class for cloud providers.

    Each provider should:
    1. Declare a unique NAME and its ordered RESOURCE_TYPES
    2. List the settings it needs in REQUIRED_SETTINGS
    3. Raise AuthError from authenticate() and ReadError from read_objects()
    4. Never raise from delete_objects(); failures are logged and the ids are
       simply found again on the next read

    RESOURCE_TYPES order is the deletion order: less depended-upon types
    come first.
    """

    NAME: ClassVar[str] = ""
    RESOURCE_TYPES: ClassVar[Tuple[str, ...]] = ()
    REQUIRED_SETTINGS: ClassVar[Dict[str, str]] = {}

    def __init__(self, settings: Mapping[str, str], debug: bool = False) -> None:
        self.check_settings(settings)
        self.settings = dict(settings)
        self.debug = debug

    @classmethod
    def check_settings(cls, settings: Mapping[str, str]) -> None:
        """Validate provider settings.

        Raises:
            ConfigError: If a required setting is missing or empty
        """
        for key, description in cls.REQUIRED_SETTINGS.items():
            if not settings.get(key):
                raise ConfigError(f"{description} is needed ({key})")

    def name(self) -> str:
        return self.NAME

    def resource_types(self) -> List[str]:
        return list(self.RESOURCE_TYPES)

    @abstractmethod
    def authenticate(self) -> None:
        """Check credentials and connectivity.

        Raises:
            AuthError: If credentials are invalid or the endpoint is unreachable
        """

    @abstractmethod
    def read_objects(self, resource_type: str) -> List[str]:
        """List live resource ids of one type.

        Raises:
            ReadError: If the listing failed
        """

    @abstractmethod
    def delete_objects(self, resource_type: str, ids: Sequence[str]) -> None:
        """Delete resources of one type, best effort."""

    def describe(self, resource_id: str, resource_type: str) -> str:
        """Human readable representation of a resource id."""
        return resource_id


def read_all_objects(provider: Provider) -> ObjectSet:
    """Read every resource type of a provider.

    Raises:
        ReadError: If any type cannot be read
    """
    objects: ObjectSet = {}
    for resource_type in provider.resource_types():
        objects[resource_type] = sorted(provider.read_objects(resource_type))
    return objects


def read_pending_objects(provider: Provider, pending: Mapping[str, Sequence[str]]) -> ObjectSet:
    """Re-read only the types that still have pending ids.

    A type whose read fails keeps its pending ids: the deletion could not be
    confirmed, so the ids are reported as still existing.
    """
    objects: ObjectSet = {}
    for resource_type in provider.resource_types():
        pending_ids = pending.get(resource_type) or []
        if not pending_ids:
            continue
        try:
            objects[resource_type] = provider.read_objects(resource_type)
        except ReadError as e:
            logger.warning(f"Cannot confirm deletion of {resource_type} objects: {e}")
            objects[resource_type] = list(pending_ids)
    return objects


def delete_pending_objects(provider: Provider, pending: Mapping[str, Sequence[str]]) -> None:
    """Call delete_objects once per type with pending ids, in provider type order."""
    for resource_type in provider.resource_types():
        ids = list(pending.get(resource_type) or [])
        if not ids:
            continue
        logger.debug(f"Deleting {len(ids)} {resource_type} object(s) with {provider.name()}")
        provider.delete_objects(resource_type, ids)


def describe_objects(provider: Provider, objects: Mapping[str, Sequence[str]]) -> List[Tuple[str, List[str]]]:
    """Describe every id of an object set, grouped by type in sorted order."""
    described = []
    for resource_type in sorted(objects):
        ids = sorted(objects[resource_type] or [])
        if not ids:
            continue
        described.append((resource_type, [provider.describe(i, resource_type) for i in ids]))
    return described

"""Registry mapping provider names to provider classes."""

from __future__ import annotations

import logging
from typing import Dict, List, Type

from ..errors import ProviderNotFoundError
from ..models.profile import Profile
from .base import Provider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Name -> provider class lookup.

    Providers register themselves with the ``register`` decorator, so adding
    a provider does not require touching any dispatch code.
    """

    def __init__(self) -> None:
        self._providers: Dict[str, Type[Provider]] = {}

    def register(self, provider_class: Type[Provider]) -> Type[Provider]:
        if not provider_class.NAME:
            raise ValueError(f"{provider_class.__name__} has no NAME")
        self._providers[provider_class.NAME] = provider_class
        return provider_class

    def get(self, name: str) -> Type[Provider]:
        try:
            return self._providers[name]
        except KeyError:
            raise ProviderNotFoundError(name) from None

    def names(self) -> List[str]:
        return sorted(self._providers)

    def resource_types(self, name: str) -> List[str]:
        return list(self.get(name).RESOURCE_TYPES)

    def create(self, profile: Profile, debug: bool = False) -> Provider:
        """Instantiate the provider of a profile.

        Raises:
            ProviderNotFoundError: If the provider is not registered
            ConfigError: If the profile settings are incomplete
        """
        provider_class = self.get(profile.provider)
        logger.debug(f"Initializing provider {profile.provider} for profile {profile.name}")
        return provider_class(profile.config, debug=debug)


registry = ProviderRegistry()


def register_provider(provider_class: Type[Provider]) -> Type[Provider]:
    """Class decorator adding a provider to the default registry."""
    return registry.register(provider_class)

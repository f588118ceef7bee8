"""Exception hierarchy shared by the CLI, providers and the destroyer."""

from __future__ import annotations

from typing import Optional


class CloudSweepError(Exception):
    """Base class for all errors raised by cloudsweep."""


class ConfigError(CloudSweepError):
    """Invalid configuration or command options.

    Raised before any provider is contacted.
    """


class ProviderNotFoundError(ConfigError):
    """A profile references a provider that is not registered."""

    def __init__(self, provider_name: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"Provider {provider_name} not found")


class AuthError(CloudSweepError):
    """Provider credentials were rejected or the endpoint is unreachable."""


class ReadError(CloudSweepError):
    """A provider failed to list resources of one type."""

    def __init__(self, resource_type: str, message: str, cause: Optional[BaseException] = None) -> None:
        self.resource_type = resource_type
        self.cause = cause
        super().__init__(f"Cannot read {resource_type}: {message}")


class DestroyTimeoutError(CloudSweepError):
    """The destroyer ran out of time with resources still pending.

    Attributes:
        pending: Mapping of profile name to the object set still pending
        passes: Number of completed deletion passes
    """

    def __init__(self, pending: dict[str, dict[str, list[str]]], passes: int) -> None:
        self.pending = pending
        self.passes = passes
        count = sum(len(ids) for objects in pending.values() for ids in objects.values())
        super().__init__(f"Timeout reached after {passes} pass(es), {count} object(s) still pending")

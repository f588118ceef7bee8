"""Cloud providers.

Importing this package registers the bundled providers in the default
registry.
"""

from __future__ import annotations

__all__ = [
    "FileSystemProvider",
    "Provider",
    "ProviderRegistry",
    "S3Provider",
    "register_provider",
    "registry",
]

from .base import Provider
from .fs import FileSystemProvider
from .registry import ProviderRegistry, register_provider, registry
from .s3 import S3Provider

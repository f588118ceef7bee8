"""Local file system provider.

Treats every regular file below a root directory as a resource. Mostly useful
to try cloudsweep without a cloud account, and in tests.
"""

from __future__ import annotations

import logging
import os
from typing import List, Sequence

from ..errors import AuthError, ReadError
from .base import Provider
from .registry import register_provider

logger = logging.getLogger(__name__)

TYPE_FILE = "file"


@register_provider
class FileSystemProvider(Provider):
    """Provider for files below a local directory.

    Resource ids are paths relative to the root directory, using "/" as
    separator.
    """

    NAME = "fs"
    RESOURCE_TYPES = (TYPE_FILE,)
    REQUIRED_SETTINGS = {"path": "folder path"}

    @property
    def root(self) -> str:
        return self.settings["path"]

    def authenticate(self) -> None:
        try:
            os.listdir(self.root)
        except OSError as e:
            raise AuthError(f"cannot access directory {self.root}: {e}") from e

    def read_objects(self, resource_type: str) -> List[str]:
        if resource_type == TYPE_FILE:
            return self._read_files()
        return []

    def delete_objects(self, resource_type: str, ids: Sequence[str]) -> None:
        if resource_type == TYPE_FILE:
            self._delete_files(ids)

    def _read_files(self) -> List[str]:
        if not os.path.isdir(self.root):
            raise ReadError(TYPE_FILE, f"{self.root} is not a directory")

        files = []

        def on_error(error: OSError) -> None:
            logger.warning(f"cannot read directory: {error}")

        for dir_path, _, file_names in os.walk(self.root, onerror=on_error):
            for file_name in file_names:
                full_path = os.path.join(dir_path, file_name)
                if os.path.islink(full_path) or not os.path.isfile(full_path):
                    continue
                relative = os.path.relpath(full_path, self.root)
                files.append(relative.replace(os.sep, "/"))
        return sorted(files)

    def _delete_files(self, files: Sequence[str]) -> None:
        for relative_path in files:
            file_path = os.path.join(self.root, *relative_path.split("/"))
            try:
                os.remove(file_path)
            except FileNotFoundError:
                logger.info(f"File {file_path} already deleted")
            except OSError as e:
                logger.error(f"Cannot remove file {file_path}: {e}")
            else:
                logger.info(f"Deleted file {file_path}")

"""Tests for the local file system provider."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from cloudsweep.errors import AuthError, ConfigError, ReadError
from cloudsweep.providers.fs import FileSystemProvider


class TestFileSystemProvider:
    """Test suite for FileSystemProvider."""

    @pytest.fixture
    def root(self, tmp_path: Path) -> Path:
        root = tmp_path / "root"
        (root / "sub" / "deep").mkdir(parents=True)
        (root / "a.txt").write_text("a")
        (root / "sub" / "b.txt").write_text("b")
        (root / "sub" / "deep" / "c.txt").write_text("c")
        return root

    @pytest.fixture
    def provider(self, root: Path) -> FileSystemProvider:
        return FileSystemProvider({"path": str(root)})

    def test_requires_path_setting(self) -> None:
        with pytest.raises(ConfigError, match="folder path is needed \\(path\\)"):
            FileSystemProvider({})

    def test_authenticate(self, provider: FileSystemProvider) -> None:
        provider.authenticate()

    def test_authenticate_missing_directory(self, tmp_path: Path) -> None:
        provider = FileSystemProvider({"path": str(tmp_path / "missing")})

        with pytest.raises(AuthError):
            provider.authenticate()

    def test_read_files_recursively(self, provider: FileSystemProvider) -> None:
        assert provider.read_objects("file") == ["a.txt", "sub/b.txt", "sub/deep/c.txt"]

    def test_read_unknown_type(self, provider: FileSystemProvider) -> None:
        assert provider.read_objects("bucket") == []

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlinks_are_ignored(self, root: Path, provider: FileSystemProvider) -> None:
        (root / "link.txt").symlink_to(root / "a.txt")

        assert "link.txt" not in provider.read_objects("file")

    def test_read_error_when_root_is_not_a_directory(self, tmp_path: Path) -> None:
        file_path = tmp_path / "plain"
        file_path.write_text("x")
        provider = FileSystemProvider({"path": str(file_path)})

        with pytest.raises(ReadError) as exc_info:
            provider.read_objects("file")

        assert exc_info.value.resource_type == "file"

    def test_delete_files(self, root: Path, provider: FileSystemProvider) -> None:
        provider.delete_objects("file", ["a.txt", "sub/deep/c.txt"])

        assert not (root / "a.txt").exists()
        assert not (root / "sub" / "deep" / "c.txt").exists()
        assert provider.read_objects("file") == ["sub/b.txt"]

    def test_delete_missing_file_is_not_an_error(self, provider: FileSystemProvider) -> None:
        provider.delete_objects("file", ["missing.txt"])

    def test_describe_returns_id(self, provider: FileSystemProvider) -> None:
        assert provider.describe("sub/b.txt", "file") == "sub/b.txt"

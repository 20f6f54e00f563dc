"""
Unit tests for env file discovery.
"""

import pytest

from envarchive.discovery import is_env_file_name, search_env_files


def touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


class TestSearchEnvFiles:
    """Tests for search_env_files."""

    def test_finds_env_and_variants(self, tmp_path):
        """Both .env and .env.* files are found."""
        env = touch(tmp_path / ".env")
        local = touch(tmp_path / ".env.local")

        assert search_env_files(tmp_path) == sorted([env, local])

    def test_recurses(self, tmp_path):
        """Nested directories are searched."""
        deep = touch(tmp_path / "a" / "b" / "c" / ".env.production")

        assert search_env_files(tmp_path) == [deep]

    def test_excludes_node_modules(self, tmp_path):
        """Files under node_modules are never returned."""
        touch(tmp_path / "node_modules" / ".env")
        touch(tmp_path / "app" / "node_modules" / "pkg" / ".env.test")

        assert search_env_files(tmp_path) == []

    def test_ignores_other_files(self, tmp_path):
        """Look-alike names are not env files."""
        touch(tmp_path / ".envrc")
        touch(tmp_path / "env")
        touch(tmp_path / "config.env")
        (tmp_path / ".env.d").mkdir()

        assert search_env_files(tmp_path) == []

    def test_missing_directory(self, tmp_path):
        """A missing root is an error."""
        with pytest.raises(FileNotFoundError):
            search_env_files(tmp_path / "missing")

    def test_not_a_directory(self, tmp_path):
        """A file root is an error."""
        env = touch(tmp_path / ".env")
        with pytest.raises(NotADirectoryError):
            search_env_files(env)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        (".env", True),
        (".env.local", True),
        (".env.", True),
        (".envrc", False),
        ("env", False),
        ("app.env", False),
    ],
)
def test_is_env_file_name(name, expected):
    assert is_env_file_name(name) is expected

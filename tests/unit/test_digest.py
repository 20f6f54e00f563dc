"""
Unit tests for file checksums.
"""

import hashlib

import pytest

from envarchive.digest import CHUNK_SIZE, bytes_checksum, file_checksum


class TestFileChecksum:
    """Tests for file_checksum."""

    def test_known_digest(self, tmp_path):
        """Digest is the hex sha256 of the file bytes."""
        env_file = tmp_path / ".env"
        env_file.write_bytes(b"FOO=BAR")

        assert file_checksum(env_file) == hashlib.sha256(b"FOO=BAR").hexdigest()

    def test_empty_file(self, tmp_path):
        """Empty files hash to the sha256 of nothing."""
        env_file = tmp_path / ".env"
        env_file.write_bytes(b"")

        assert (
            file_checksum(env_file)
            == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_independent_of_path(self, tmp_path):
        """Identical bytes at different paths give identical digests."""
        a = tmp_path / "a.env"
        b = tmp_path / "nested" / "b.env"
        b.parent.mkdir()
        a.write_bytes(b"KEY=value\n")
        b.write_bytes(b"KEY=value\n")

        assert file_checksum(a) == file_checksum(b)
        assert file_checksum(a) == file_checksum(str(a))

    def test_byte_exact(self, tmp_path):
        """Line-ending differences change the digest."""
        unix = tmp_path / "unix.env"
        dos = tmp_path / "dos.env"
        unix.write_bytes(b"A=1\n")
        dos.write_bytes(b"A=1\r\n")

        assert file_checksum(unix) != file_checksum(dos)

    def test_spans_chunks(self, tmp_path):
        """Files larger than one chunk are digested in full."""
        data = b"X" * (CHUNK_SIZE * 3 + 17)
        big = tmp_path / ".env"
        big.write_bytes(data)

        assert file_checksum(big) == hashlib.sha256(data).hexdigest()

    def test_matches_bytes_checksum(self, tmp_path):
        """File and buffer digests agree."""
        env_file = tmp_path / ".env"
        env_file.write_bytes(b"SECRET=1")

        assert file_checksum(env_file) == bytes_checksum(b"SECRET=1")

    def test_missing_file(self, tmp_path):
        """Missing files raise instead of returning a digest."""
        with pytest.raises(FileNotFoundError):
            file_checksum(tmp_path / "missing.env")

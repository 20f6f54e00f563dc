"""
Integration tests for the recovery workflow.

Tests cover:
- Restore into an empty location
- Skip when the local file already matches
- Backup before overwriting a different local file
- Failure modes (unknown name, missing target directory)
"""

from datetime import datetime, timedelta, timezone

import pytest

from envarchive.errors import ArchiveNotFoundError
from envarchive.store import ArchiveStore
from envarchive.tools import RecoverOutcome, RecoveryTool

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestRecoveryTool:
    """Tests for RecoveryTool."""

    @pytest.fixture
    def store(self, tmp_path):
        return ArchiveStore(tmp_path / "archive.db")

    @pytest.fixture
    def source(self, tmp_path):
        """Archived file living in a project directory."""
        path = tmp_path / "project" / ".env"
        path.parent.mkdir()
        path.write_text("FOO=ARCHIVED\n")
        return path

    @pytest.fixture
    def workdir(self, tmp_path):
        path = tmp_path / "restore-here"
        path.mkdir()
        return path

    @pytest.fixture
    def tool(self, store, workdir):
        return RecoveryTool(
            store,
            cwd=workdir,
            name_factory=lambda: "backup-1",
            clock=lambda: T0 + timedelta(hours=1),
        )

    @pytest.mark.asyncio
    async def test_restore_into_empty_target(self, store, source, workdir, tool):
        """Missing target is written, no backup is made."""
        await store.initialize()
        await store.push(source, T0, "snap")

        result = await tool.recover("snap")

        target = workdir / ".env"
        assert result.outcome is RecoverOutcome.RESTORED
        assert result.target == target
        assert result.backup_name is None
        assert target.read_text() == "FOO=ARCHIVED\n"
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_skip_when_identical(self, store, source, workdir, tool):
        """Matching local file is neither rewritten nor backed up."""
        await store.initialize()
        await store.push(source, T0, "snap")
        target = workdir / ".env"
        target.write_text("FOO=ARCHIVED\n")
        mtime = target.stat().st_mtime_ns

        result = await tool.recover("snap")

        assert result.outcome is RecoverOutcome.SKIPPED
        assert target.stat().st_mtime_ns == mtime
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_backup_then_overwrite(self, store, source, workdir, tool):
        """Different local file is archived first, then replaced."""
        await store.initialize()
        await store.push(source, T0, "snap")
        target = workdir / ".env"
        target.write_text("FOO=LOCAL-EDIT\n")

        result = await tool.recover("snap")

        assert result.outcome is RecoverOutcome.BACKED_UP_AND_RESTORED
        assert result.backup_name == "backup-1"
        assert target.read_text() == "FOO=ARCHIVED\n"
        assert await store.count() == 2

        backup, body = await store.get("backup-1")
        assert body == "FOO=LOCAL-EDIT\n"
        assert backup.path == str(target)
        assert backup.created_at == T0 + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_target_uses_file_name_only(self, store, tmp_path, workdir, tool):
        """Only the final path component of the archived path is used."""
        await store.initialize()
        deep = tmp_path / "a" / "b" / ".env.production"
        deep.parent.mkdir(parents=True)
        deep.write_text("MODE=prod")
        await store.push(deep, T0, "prod")

        result = await tool.recover("prod")

        assert result.target == workdir / ".env.production"
        assert (workdir / ".env.production").read_text() == "MODE=prod"

    @pytest.mark.asyncio
    async def test_preserves_line_endings(self, store, tmp_path, workdir, tool):
        """The body is written back byte for byte."""
        await store.initialize()
        crlf = tmp_path / "win" / ".env"
        crlf.parent.mkdir()
        crlf.write_bytes(b"A=1\r\nB=2\r\n")
        await store.push(crlf, T0, "crlf")

        await tool.recover("crlf")

        assert (workdir / ".env").read_bytes() == b"A=1\r\nB=2\r\n"

    @pytest.mark.asyncio
    async def test_unknown_name(self, store, workdir, tool):
        """Unknown names fail without touching disk or store."""
        await store.initialize()

        with pytest.raises(ArchiveNotFoundError):
            await tool.recover("ghost")

        assert list(workdir.iterdir()) == []
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_missing_target_directory(self, store, source, tmp_path):
        """A restore location that does not exist is fatal."""
        await store.initialize()
        await store.push(source, T0, "snap")
        tool = RecoveryTool(store, cwd=tmp_path / "nowhere")

        with pytest.raises(FileNotFoundError):
            await tool.recover("snap")

    @pytest.mark.asyncio
    async def test_defaults_to_process_cwd(self, store, source, tmp_path, monkeypatch):
        """Without an explicit cwd the process working directory is used."""
        await store.initialize()
        await store.push(source, T0, "snap")
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        monkeypatch.chdir(elsewhere)

        result = await RecoveryTool(store).recover("snap")

        assert result.target == elsewhere / ".env"
        assert (elsewhere / ".env").read_text() == "FOO=ARCHIVED\n"

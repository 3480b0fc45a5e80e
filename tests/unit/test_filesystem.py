"""
Unit tests for the file-system ArtifactStore adapter.
"""

from __future__ import annotations

from pathlib import Path

from simpleca.adapters.filesystem import FileArtifactStore
from simpleca.domain.ports import ArtifactStore
from simpleca.railway import ErrorCode, ResultAssertions


class TestFileArtifactStore:
    def test_satisfies_artifact_store_port(self) -> None:
        assert isinstance(FileArtifactStore(), ArtifactStore)

    def test_write_then_read(self, tmp_path: Path) -> None:
        store = FileArtifactStore()
        target = tmp_path / "ca.pem"
        ResultAssertions.assert_success_value(store.write(target, b"pem-bytes"), 9)
        ResultAssertions.assert_success_value(store.read(target), b"pem-bytes")

    def test_existing_file_is_never_overwritten(self, tmp_path: Path) -> None:
        """
        GIVEN an existing key file
        WHEN the store is asked to write to the same path
        THEN the write fails with IO_ERROR and the original content is intact.
        """
        target = tmp_path / "ca.key"
        target.write_bytes(b"original")
        result = FileArtifactStore().write(target, b"replacement")
        ResultAssertions.assert_failure(result, ErrorCode.IO_ERROR)
        assert target.read_bytes() == b"original"

    def test_missing_file_is_io_error(self, tmp_path: Path) -> None:
        result = FileArtifactStore().read(tmp_path / "absent.pem")
        ResultAssertions.assert_failure(result, ErrorCode.IO_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "absent.pem")

    def test_missing_directory_is_io_error(self, tmp_path: Path) -> None:
        result = FileArtifactStore().write(tmp_path / "nope" / "out.pem", b"x")
        ResultAssertions.assert_failure(result, ErrorCode.IO_ERROR)

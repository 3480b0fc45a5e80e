"""
File-system adapter — implements the ArtifactStore port.

Writes open the target with exclusive creation: an existing key or
certificate file is never overwritten, the write fails with IO_ERROR instead.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from simpleca.railway import ErrorCode, Result

log = structlog.get_logger()


class FileArtifactStore:
    """ArtifactStore over local files."""

    def read(self, path: Path) -> Result[bytes]:
        return Result.from_computation(
            lambda: Path(path).read_bytes(),
            ErrorCode.IO_ERROR,
            f"Failed to read {path}",
        )

    def write(self, path: Path, data: bytes) -> Result[int]:
        return Result.from_computation(
            lambda: self._write_new(Path(path), data),
            ErrorCode.IO_ERROR,
            f"Failed to write {path}",
        ).peek(lambda size: log.info("store.written", path=str(path), bytes=size))

    @staticmethod
    def _write_new(path: Path, data: bytes) -> int:
        with path.open("xb") as f:
            return f.write(data)

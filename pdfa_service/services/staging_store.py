"""
Temporary file staging for the rendered report path.
"""
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from pdfa_service.core.error_handling import StagingIOError
from pdfa_service.models.validation_models import StagedArtifact

logger = logging.getLogger(__name__)


class StagingStore:
    """
    Persists request bodies to uniquely named temporary files.

    Each artifact belongs to the request that staged it; callers use
    ``staged()`` so the file is removed however processing ends.
    """

    def __init__(self, directory: Optional[str] = None, prefix: str = "cache", chunk_size: int = 64 * 1024):
        self.directory = directory
        self.prefix = prefix
        self.chunk_size = chunk_size

    def stage(self, stream: BinaryIO) -> StagedArtifact:
        """
        Copy ``stream`` to exhaustion into a new temporary file.

        Raises:
            StagingIOError: If the file cannot be created or written. ``path``
                is set when the file exists and must be discarded.
        """
        try:
            fd, name = tempfile.mkstemp(prefix=self.prefix, dir=self.directory)
        except OSError as exc:
            raise StagingIOError(f"Could not create staging file: {exc}") from exc

        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as fh:
                shutil.copyfileobj(stream, fh, self.chunk_size)
            size = path.stat().st_size
        except OSError as exc:
            raise StagingIOError(f"Could not stage input to {path}: {exc}", path=path) from exc

        logger.debug(f"Staged {size} bytes to {path}")
        return StagedArtifact(path=path, size_bytes=size)

    def discard(self, path: Union[str, Path]):
        """Remove a staged file. Missing files are ignored."""
        try:
            os.remove(path)
            logger.debug(f"Discarded staged file {path}")
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning(f"Failed to remove staged file {path}: {exc}")

    @contextmanager
    def staged(self, stream: BinaryIO) -> Iterator[StagedArtifact]:
        """Stage ``stream`` for the duration of the block, then remove it."""
        try:
            artifact = self.stage(stream)
        except StagingIOError as exc:
            if exc.path is not None:
                self.discard(exc.path)
            raise

        try:
            yield artifact
        finally:
            self.discard(artifact.path)

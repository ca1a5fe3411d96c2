"""
Digest-tracking stream wrapper.

Every byte read through the wrapper feeds a SHA-1 accumulator, so the digest
of a request body is known once the consumer has read it to the end without
buffering the body anywhere.
"""
import hashlib
import io
import logging
from typing import BinaryIO

from pdfa_service.core.constants import DIGEST_ALGORITHM
from pdfa_service.core.error_handling import DigestNotFinalizedError
from pdfa_service.models.validation_models import DigestResult

logger = logging.getLogger(__name__)

DRAIN_CHUNK_SIZE = 64 * 1024


class DigestTracker(io.RawIOBase):
    """
    Readable binary stream that digests everything read through it.

    Read semantics match the wrapped stream. ``exhausted`` becomes true the
    first time a non-empty read returns no bytes.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._hash = hashlib.new(DIGEST_ALGORITHM)
        self.bytes_read = 0
        self.exhausted = False

    @classmethod
    def wrap(cls, stream: BinaryIO) -> "DigestTracker":
        return cls(stream)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if len(buffer) == 0:
            return 0
        data = self._stream.read(len(buffer))
        if not data:
            self.exhausted = True
            return 0
        size = len(data)
        buffer[:size] = data
        self._hash.update(data)
        self.bytes_read += size
        return size

    def drain(self) -> int:
        """
        Read the remainder of the stream so the digest covers all of it.

        Returns:
            Number of bytes consumed by the drain
        """
        drained = 0
        while True:
            chunk = self.read(DRAIN_CHUNK_SIZE)
            if not chunk:
                break
            drained += len(chunk)
        if drained:
            logger.debug(f"Drained {drained} unread bytes before finalizing digest")
        return drained

    def final_digest(self) -> DigestResult:
        """
        Finalize the digest.

        Raises:
            DigestNotFinalizedError: If the stream has not reached end-of-input
        """
        if not self.exhausted:
            raise DigestNotFinalizedError(
                f"Digest requested after {self.bytes_read} bytes, before end of stream"
            )
        return DigestResult(algorithm=DIGEST_ALGORITHM, hex_digest=self._hash.hexdigest())

"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements size-adaptive content fingerprints on top of a pluggable 64-bit hash.

Two strategies are selected by a size threshold:
- Full:    files below the threshold are hashed end to end
- Sampled: larger files are hashed over three 1 KiB windows (start, middle, end)

Both strategies fold the file size into a second hashing round:
    fingerprint = H(le64(H(content)) + le64(size))
so that two files of different size only collide on a true hash collision.
Sampled fingerprints ignore every byte outside the three windows; two large
files that differ only there will share a fingerprint.
"""

import errno
import logging
import os
import struct
from typing import BinaryIO, List, Optional

import xxhash

from dupcatalog.core.errors import FingerprintError, TruncatedFileError
from dupcatalog.core.interfaces import Fingerprinter, HashAlgorithm, StreamingHash
from dupcatalog.core.models import DEFAULT_THRESHOLD, SAMPLE_SIZE

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


# Use the same way to implement and use any other hashing algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    @staticmethod
    def new() -> StreamingHash:
        return xxhash.xxh64(seed=0)

    @staticmethod
    def hash(data: bytes) -> int:
        return xxhash.xxh64_intdigest(data, seed=0)


class FingerprinterImpl(Fingerprinter):
    """
    A fingerprinter that supports any algorithm via the HashAlgorithm interface.

    Attributes:
        algorithm: 64-bit hash primitive used for both hashing rounds
        threshold: Files of this size or larger use the sampled strategy
        chunk_size: Read size used by the full-content strategy
    """

    def __init__(
        self,
        algorithm: Optional[HashAlgorithm] = None,
        threshold: int = DEFAULT_THRESHOLD,
        chunk_size: int = READ_CHUNK_SIZE,
    ):
        self.algorithm = algorithm or XXHashAlgorithmImpl()
        self.threshold = threshold
        self.chunk_size = chunk_size

    def fingerprint(self, handle: BinaryIO, size: int, path: Optional[str] = None) -> int:
        """
        Computes the fingerprint of an open file.

        Args:
            handle: Open binary handle positioned at the start of the file
            size: Declared file size; selects the strategy and is folded into the result
            path: Path attached to raised errors (defaults to handle.name)

        Returns:
            int: Unsigned 64-bit fingerprint

        Raises:
            FingerprintError: If reading fails
            TruncatedFileError: If the file ends before a non-final sample window
        """
        if path is None:
            path = str(getattr(handle, "name", "<stream>"))

        if self.is_sampled(size):
            digest = self._sampled_digest(handle, size, path)
        else:
            digest = self._full_digest(handle, path)

        return self.algorithm.hash(self.fold_size(digest, size))

    def fingerprint_path(self, path: str) -> int:
        """Opens, sizes and fingerprints a single file."""
        try:
            with open(path, 'rb') as f:
                size = os.fstat(f.fileno()).st_size
                return self.fingerprint(f, size, path)
        except FingerprintError:
            raise
        except OSError as e:
            raise FingerprintError(f"Cannot open file: {e}", path=path) from e

    def is_sampled(self, size: int) -> bool:
        return size >= self.threshold

    @staticmethod
    def sample_offsets(size: int) -> List[int]:
        """Start, middle and end window offsets for the sampled strategy."""
        return [0, size // 2, size - SAMPLE_SIZE]

    @staticmethod
    def fold_size(digest: int, size: int) -> bytes:
        """Serializes digest and size as two little-endian uint64 values."""
        return struct.pack("<QQ", digest, size)

    def _full_digest(self, handle: BinaryIO, path: str) -> int:
        state = self.algorithm.new()
        try:
            for chunk in iter(lambda: handle.read(self.chunk_size), b""):
                state.update(chunk)
        except OSError as e:
            raise FingerprintError(f"Read failed: {e}", path=path) from e
        return state.intdigest()

    def _sampled_digest(self, handle: BinaryIO, size: int, path: str) -> int:
        offsets = self.sample_offsets(size)
        last = len(offsets) - 1
        state = self.algorithm.new()

        for i, offset in enumerate(offsets):
            window = self._read_window(handle, offset, path)
            if len(window) < SAMPLE_SIZE:
                if i < last:
                    raise TruncatedFileError(
                        f"Unexpected end of file in sample window at offset {offset}",
                        path=path,
                    )
                # The final window may run past EOF if the file shrank
                logger.debug(f"Short final window in {path}: {len(window)} bytes")
                window = window.ljust(SAMPLE_SIZE, b"\0")
            state.update(window)

        return state.intdigest()

    @staticmethod
    def _read_window(handle: BinaryIO, offset: int, path: str) -> bytes:
        """Reads up to SAMPLE_SIZE bytes at offset. Negative offsets are an I/O error."""
        try:
            if offset < 0:
                raise OSError(errno.EINVAL, f"Negative read offset {offset}")
            handle.seek(offset)
            return handle.read(SAMPLE_SIZE)
        except OSError as e:
            raise FingerprintError(f"Read failed at offset {offset}: {e}", path=path) from e

"""
Chunk arithmetic for the resumable-upload range protocol.

Ranges for indices ``0..total_chunks-1`` are contiguous, non-overlapping and
cover exactly ``file_size`` bytes.
"""

from typing import Iterator

from ....core.domain.session import ByteRange


def total_chunks(file_size: int, chunk_size: int) -> int:
    """Number of chunks needed for ``file_size`` bytes (ceiling division)."""
    if file_size <= 0 or chunk_size <= 0:
        raise ValueError("file_size and chunk_size must be positive")
    return (file_size + chunk_size - 1) // chunk_size


def chunk_range(chunk_index: int, chunk_size: int, file_size: int) -> ByteRange:
    """
    Byte range of chunk ``chunk_index``.

    The last chunk is truncated at ``file_size - 1``.
    """
    if chunk_index < 0 or chunk_index >= total_chunks(file_size, chunk_size):
        raise ValueError(f"Chunk index {chunk_index} out of range")
    start = chunk_index * chunk_size
    end = min(start + chunk_size - 1, file_size - 1)
    return ByteRange(start=start, end=end)


def iter_ranges(file_size: int, chunk_size: int) -> Iterator[ByteRange]:
    for index in range(total_chunks(file_size, chunk_size)):
        yield chunk_range(index, chunk_size, file_size)

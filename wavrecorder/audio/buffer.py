"""Per-channel storage of captured sample chunks."""

import logging
from typing import List

import numpy as np

logger = logging.getLogger(__name__)


class ChannelBuffer:
    """Ordered sample chunks for a single audio channel.

    The buffer itself is not locked; the owning session serializes every
    mutation across all of its channels.
    """

    def __init__(self):
        self.chunks: List[np.ndarray] = []
        self.total_samples = 0

    def __len__(self) -> int:
        return len(self.chunks)

    def append(self, chunk: np.ndarray) -> None:
        """Append a chunk, copying it so the producer may reuse its array."""
        data = np.array(chunk, dtype=np.float32, copy=True).reshape(-1)
        self.chunks.append(data)
        self.total_samples += len(data)

    def truncate(self, chunk_index: int, keep_samples: int, total_samples: int) -> None:
        """Cut the buffer at ``chunk_index``.

        Chunk ``chunk_index`` is replaced by its first ``keep_samples``
        samples (dropped entirely when ``keep_samples`` is 0) and every later
        chunk is discarded.

        Args:
            chunk_index: Index of the chunk containing the cut point
            keep_samples: Samples of that chunk to keep
            total_samples: Resulting sample count of the buffer
        """
        if keep_samples > 0:
            self.chunks[chunk_index] = self.chunks[chunk_index][:keep_samples]
            del self.chunks[chunk_index + 1:]
        else:
            del self.chunks[chunk_index:]
        self.total_samples = total_samples

    def to_array(self) -> np.ndarray:
        """Return all samples concatenated in capture order."""
        if not self.chunks:
            return np.zeros(0, dtype=np.float32)
        return np.concatenate(self.chunks)

    def clear(self) -> None:
        """Drop all chunks."""
        self.chunks = []
        self.total_samples = 0

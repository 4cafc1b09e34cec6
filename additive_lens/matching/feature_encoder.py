"""
Lexical feature encoding for query strings.

Produces the same hand-built, non-trained feature vector that the catalog
embeddings are compared against. The vector is a deterministic fingerprint
of characters, word lengths and a few chemical name fragments; it is not a
semantic embedding. Score thresholds were tuned against this exact
arithmetic, so it runs in float32, sequentially, in a fixed order.
"""

import logging
from typing import Tuple

import numpy as np

logger = logging.getLogger(__name__)

# Name fragments, in feature-index order
CHEMICAL_PATTERNS: Tuple[str, ...] = ("acid", "ate", "ine", "ium", "ide", "oxy", "meth", "eth", "prop")

CHAR_SCALE = np.float32(0.1)
LENGTH_SCALE = np.float32(10.0)
PATTERN_WEIGHT = np.float32(0.5)
WORD_STRIDE = 10
LENGTH_STRIDE = 7
PATTERN_STRIDE = 23
PATTERN_WORD_STRIDE = 5


class LexicalFeatureEncoder:
    """
    Hash-style feature encoder for additive names.

    For every word ``i`` of ``N`` (lowercased, whitespace-split):
    - each character ``j`` adds ``sin(ascii * 0.1) * (1/N) * (1 - i/N)`` at
      ``(j + 10*i) mod D``
    - the word length adds ``tanh(len / 10) * (1/N)`` at ``(7*len) mod D``
    - each contained chemical fragment ``k`` adds ``0.5 * (1/N)`` at
      ``(23*k + 5*i) mod D``

    The result is L2-normalized; empty input gives the zero vector.
    Stateless and thread-safe.
    """

    def __init__(self, dimension: int):
        """
        Args:
            dimension: Output vector length; must match the catalog dimension

        Raises:
            ValueError: If dimension is not positive
        """
        if dimension <= 0:
            raise ValueError(f"Encoder dimension must be positive, got {dimension}")
        self.dimension = dimension

    def encode(self, text: str) -> np.ndarray:
        """
        Encode text to a unit-length float32 feature vector.

        Args:
            text: Query text

        Returns:
            Vector of shape (dimension,), L2 norm 1 (or all zeros)
        """
        dimension = self.dimension
        embedding = np.zeros(dimension, dtype=np.float32)

        words = text.lower().split()
        if not words:
            return embedding

        word_count = np.float32(len(words))
        for word_index, word in enumerate(words):
            word_weight = np.float32(1.0) / word_count
            position_weight = np.float32(1.0) - (np.float32(word_index) / word_count)

            # Character features
            for char_index, char in enumerate(word):
                code = ord(char)
                ascii_value = np.float32(code if code < 128 else 0)
                index = (char_index + word_index * WORD_STRIDE) % dimension
                embedding[index] += np.sin(ascii_value * CHAR_SCALE) * word_weight * position_weight

            # Word length feature
            length = np.float32(len(word))
            length_index = (len(word) * LENGTH_STRIDE) % dimension
            embedding[length_index] += np.tanh(length / LENGTH_SCALE) * word_weight

            # Chemical pattern features
            for pattern_index, pattern in enumerate(CHEMICAL_PATTERNS):
                if pattern in word:
                    pattern_embedding_index = (
                        pattern_index * PATTERN_STRIDE + word_index * PATTERN_WORD_STRIDE
                    ) % dimension
                    embedding[pattern_embedding_index] += PATTERN_WEIGHT * word_weight

        magnitude = np.sqrt(_sequential_sum_of_squares(embedding))
        if magnitude > 0:
            embedding = embedding / magnitude

        return embedding


def _sequential_sum_of_squares(vector: np.ndarray) -> np.float32:
    """Left-to-right float32 sum of squares (no pairwise reduction)."""
    total = np.float32(0.0)
    for component in vector:
        total = np.float32(total + component * component)
    return total

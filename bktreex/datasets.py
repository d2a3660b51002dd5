from __future__ import annotations

from typing import List

import numpy as np
from numpy.random import Generator, default_rng

from bktreex.core.metrics import HammingCode, Integer, MetricElement, Word

_DEFAULT_ALPHABET = "abcdefghijklmnopqrstuvwxyz"


def _ensure_rng(rng: Generator | None) -> Generator:
    return rng or default_rng()


def random_words(
    rng: Generator | None,
    count: int,
    *,
    min_length: int = 3,
    max_length: int = 8,
    alphabet: str = _DEFAULT_ALPHABET,
) -> List[Word]:
    """Sample ``count`` words with lengths drawn uniformly from the given range."""

    if count <= 0:
        return []
    if min_length < 0 or max_length < min_length:
        raise ValueError("Word lengths must satisfy 0 <= min_length <= max_length.")
    if not alphabet:
        raise ValueError("Alphabet must not be empty.")
    generator = _ensure_rng(rng)
    symbols = np.asarray(list(alphabet))
    lengths = generator.integers(min_length, max_length + 1, size=count)
    return [Word("".join(generator.choice(symbols, size=int(length)))) for length in lengths]


def perturb_words(
    rng: Generator | None,
    words: List[Word],
    *,
    edits: int = 1,
    alphabet: str = _DEFAULT_ALPHABET,
) -> List[Word]:
    """Apply ``edits`` random substitutions to each word (typo simulation)."""

    generator = _ensure_rng(rng)
    perturbed: List[Word] = []
    for word in words:
        chars = list(word.text)
        for _ in range(edits):
            if not chars:
                break
            position = int(generator.integers(0, len(chars)))
            chars[position] = alphabet[int(generator.integers(0, len(alphabet)))]
        perturbed.append(Word("".join(chars)))
    return perturbed


def random_fingerprints(
    rng: Generator | None,
    count: int,
    *,
    bits: int = 64,
) -> List[HammingCode]:
    if count <= 0:
        return []
    generator = _ensure_rng(rng)
    raw = generator.integers(0, 2, size=(count, bits), dtype=np.uint8)
    return [
        HammingCode(int("".join(str(bit) for bit in row), 2), bits=bits) for row in raw
    ]


def random_integers(
    rng: Generator | None,
    count: int,
    *,
    low: int = 0,
    high: int = 1_000,
) -> List[Integer]:
    if count <= 0:
        return []
    generator = _ensure_rng(rng)
    return [Integer(int(value)) for value in generator.integers(low, high, size=count)]


def random_elements(
    rng: Generator | None, metric: str, count: int
) -> List[MetricElement]:
    """Dispatch to the generator matching a registered metric name."""

    name = metric.lower()
    if name == "levenshtein":
        return list(random_words(rng, count))
    if name == "hamming":
        return list(random_fingerprints(rng, count))
    if name == "absolute":
        return list(random_integers(rng, count))
    raise KeyError(f"No dataset generator for metric '{metric}'.")


__all__ = [
    "perturb_words",
    "random_elements",
    "random_fingerprints",
    "random_integers",
    "random_words",
]

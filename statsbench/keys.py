#!/usr/bin/env python3
"""Random, collision-free metric names built from dictionary words."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, Set

from statsbench.errors import KeySpaceExhausted
from statsbench.gauge import is_key_safe

DEFAULT_MAX_WORDS = 5
DEFAULT_SEPARATOR = "_"
DEFAULT_MAX_ATTEMPTS = 1000


class KeyGenerator:
    """Draws keys of 1..max_words words joined by ``separator``.

    ``exclude_last_word`` reproduces the historical selection that never
    picked the final dictionary entry.
    """

    def __init__(
        self,
        words: Sequence[str],
        rng: Optional[random.Random] = None,
        max_words: int = DEFAULT_MAX_WORDS,
        separator: str = DEFAULT_SEPARATOR,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        exclude_last_word: bool = False,
    ):
        if not words:
            raise ValueError("word list is empty")
        if max_words < 1:
            raise ValueError(f"max_words must be >= 1, got {max_words}")
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        if not is_key_safe(separator):
            raise ValueError(f"separator {separator!r} would break the gauge format")
        unsafe = [w for w in words if not is_key_safe(w)]
        if unsafe:
            raise ValueError(f"words would break the gauge format: {unsafe[:5]!r}")
        self.words = list(words)
        self.rng = rng or random.Random()
        self.max_words = max_words
        self.separator = separator
        self.max_attempts = max_attempts
        self._choices = len(self.words)
        if exclude_last_word and self._choices > 1:
            self._choices -= 1

    def candidate(self) -> str:
        length = self.rng.randint(1, self.max_words)
        picked = [self.words[self.rng.randrange(self._choices)] for _ in range(length)]
        return self.separator.join(picked)

    def generate_key(self, seen: Set[str]) -> str:
        for _ in range(self.max_attempts):
            key = self.candidate()
            if key not in seen:
                seen.add(key)
                return key
        raise KeySpaceExhausted(
            f"no unused key after {self.max_attempts} attempts ({len(seen)} keys already taken)"
        )

    def generate_key_pool(self, n: int) -> List[str]:
        if n < 1:
            raise ValueError(f"pool size must be >= 1, got {n}")
        seen: Set[str] = set()
        return [self.generate_key(seen) for _ in range(n)]


def generate_key_pool(words: Sequence[str], n: int, rng: Optional[random.Random] = None, **kwargs) -> List[str]:
    return KeyGenerator(words, rng=rng, **kwargs).generate_key_pool(n)

#!/usr/bin/env python3
"""Word dictionary used to build metric names.

The dictionary is a gzip-compressed, newline-delimited text file. It is
loaded once per path and shared by every caller; each caller receives its
own copy of the sorted word list.
"""

from __future__ import annotations

import gzip
import threading
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Union

from statsbench.errors import DictionaryLoadError
from statsbench.gauge import is_key_safe

DEFAULT_DICTIONARY_PATH = Path(__file__).resolve().parent / "data" / "words.gz"


def parse_words(raw: bytes) -> List[str]:
    words = []
    for line in raw.split(b"\n"):
        line = line.strip()
        if line:
            words.append(line.decode("utf-8"))
    words.sort()
    return words


class WordDictionary:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._words: List[str] = []
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> List[str]:
        if not self._loaded:
            # Late arrivals block on the lock until the first load finishes.
            with self._lock:
                if not self._loaded:
                    self._words = self._read()
                    self._loaded = True
        return list(self._words)

    def _read(self) -> List[str]:
        try:
            with gzip.open(self.path, "rb") as fh:
                raw = fh.read()
        except (OSError, EOFError, zlib.error) as exc:
            raise DictionaryLoadError(f"cannot read word dictionary {self.path}: {exc}") from exc
        try:
            words = parse_words(raw)
        except UnicodeDecodeError as exc:
            raise DictionaryLoadError(f"word dictionary {self.path} is not valid UTF-8: {exc}") from exc
        if not words:
            raise DictionaryLoadError(f"word dictionary {self.path} is empty")
        unsafe = [w for w in words if not is_key_safe(w)]
        if unsafe:
            raise DictionaryLoadError(
                f"word dictionary {self.path} has words that break the gauge format: {unsafe[:5]!r}"
            )
        return words


_REGISTRY: Dict[Path, WordDictionary] = {}
_REGISTRY_LOCK = threading.Lock()


def get_dictionary(path: Optional[Union[str, Path]] = None) -> WordDictionary:
    """Return the shared dictionary for ``path`` (the packaged words by default)."""
    resolved = Path(path).expanduser().resolve() if path else DEFAULT_DICTIONARY_PATH
    with _REGISTRY_LOCK:
        dictionary = _REGISTRY.get(resolved)
        if dictionary is None:
            dictionary = WordDictionary(resolved)
            _REGISTRY[resolved] = dictionary
        return dictionary


def load_words(path: Optional[Union[str, Path]] = None) -> List[str]:
    return get_dictionary(path).load()

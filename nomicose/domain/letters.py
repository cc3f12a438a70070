# nomicose/domain/letters.py
from __future__ import annotations

import logging
import random
from typing import List, Optional

logger = logging.getLogger(__name__)

# Italian alphabet minus J, K, W, X, Y
DEFAULT_LETTERS = "ABCDEFGHILMNOPQRSTUVZ"


class LetterPool:
    """
    Draws one letter per round without repeats.
    The used-letter list lives on the GameSession; the pool only reads and
    appends to it.
    """

    def __init__(self, alphabet: str = DEFAULT_LETTERS, rng: Optional[random.Random] = None) -> None:
        letters = []
        for ch in alphabet.upper():
            if ch.isalpha() and ch not in letters:
                letters.append(ch)
        if not letters:
            raise ValueError("alphabet must contain at least one letter")
        self.alphabet = "".join(letters)
        self._rng = rng or random.Random()

    def remaining(self, used_letters: List[str]) -> List[str]:
        used = set(used_letters)
        return [ch for ch in self.alphabet if ch not in used]

    def draw(self, used_letters: List[str]) -> str:
        candidates = self.remaining(used_letters)
        if not candidates:
            # more rounds than letters: start over
            logger.info("all letters used, resetting pool")
            used_letters.clear()
            candidates = list(self.alphabet)

        letter = self._rng.choice(candidates)
        used_letters.append(letter)
        logger.debug("drew letter %s, used=%s", letter, ",".join(used_letters))
        return letter

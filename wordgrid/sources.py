from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Callable

from wordgrid.trie import MAX_WORD_LENGTH, Trie

logger = logging.getLogger("wordgrid")

SMALL_DICE = 16
LARGE_DICE = 25
FACES = 6
MIN_WORD = 3
MAX_WORD = MAX_WORD_LENGTH

DICE_ERROR = "Unable to read dice from file."
WORDS_ERROR = "Unable to read word list from file."


class SourceError(Exception):
    """Dice or dictionary data could not be read; the message is user-facing."""


def parse_dice(text: str) -> list[list[str]]:
    """Parse one die per line; lines without exactly six faces are skipped."""
    dice = []
    for line in text.splitlines():
        faces = [face.strip().upper() for face in line.split(",")]
        faces = [face for face in faces if face]
        if len(faces) == FACES:
            dice.append(faces)
    return dice


def load_dice(path: str | Path) -> tuple[list[list[str]], list[list[str]]]:
    """Read the dice file and split it into (small board dice, large board dice)."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read dice %s: %s", path, e)
        raise SourceError(DICE_ERROR) from e

    dice = parse_dice(text)
    if len(dice) != SMALL_DICE + LARGE_DICE:
        logger.warning("Dice file %s has %d dice, expected %d", path, len(dice), SMALL_DICE + LARGE_DICE)
        raise SourceError(DICE_ERROR)
    return dice[:SMALL_DICE], dice[SMALL_DICE:]


def parse_words(data: bytes) -> dict[str, list[str]]:
    """Parse dictionary bytes into word -> display spellings.

    The first token of a line is the word; the other tokens are how it is
    displayed. A bare word is displayed in lowercase.
    """
    words: dict[str, list[str]] = {}
    for line in data.decode("utf-8").splitlines():
        spellings = line.split()
        if not spellings:
            continue

        word = spellings[0].upper()
        if len(spellings) == 1:
            spellings = [word.lower()]
        else:
            spellings = spellings[1:]

        if MIN_WORD <= len(word) <= MAX_WORD:
            words[word] = spellings
    return words


class WordCache:
    """Serialized tries stored under a directory, one file per dictionary path."""

    def __init__(self, cache_dir: str | Path):
        self.cache_dir = Path(cache_dir)

    def path_for(self, source: str | Path) -> Path:
        key = hashlib.sha1(str(source).encode("utf-8")).hexdigest()
        return self.cache_dir / key

    def load(self, source: str | Path) -> Trie | None:
        cache_path = self.path_for(source)
        try:
            if cache_path.stat().st_mtime <= Path(source).stat().st_mtime:
                logger.debug("Word cache %s is stale", cache_path)
                return None
            data = cache_path.read_bytes()
        except OSError:
            return None

        trie = Trie.deserialize(data)
        if trie is None or not len(trie):
            logger.debug("Word cache %s has an unknown format, rebuilding", cache_path)
            return None
        return trie

    def save(self, source: str | Path, trie: Trie):
        cache_path = self.path_for(source)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path.write_bytes(trie.serialize())
        except OSError as e:
            logger.warning("Could not write word cache %s: %s", cache_path, e)
            return
        logger.info("Cached %d words to %s", len(trie), cache_path)


def load_words(
    path: str | Path,
    cache: WordCache | None = None,
    on_event: Callable[[str], None] | None = None,
) -> Trie:
    """Load the dictionary at ``path``, going through ``cache`` when given.

    ``on_event`` is told when a slow uncached build starts and finishes.
    """
    if cache is not None:
        trie = cache.load(path)
        if trie is not None:
            logger.info("Loaded %d words from cache for %s", len(trie), path)
            return trie

    if on_event:
        on_event("optimizing_started")
    try:
        try:
            words = parse_words(Path(path).read_bytes())
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read words %s: %s", path, e)
            raise SourceError(WORDS_ERROR) from e

        if not words:
            logger.warning("Word list %s has no usable words", path)
            raise SourceError(WORDS_ERROR)

        trie = Trie(words)
        logger.info("Built trie of %d words from %s", len(trie), path)
        if cache is not None:
            cache.save(path, trie)
    finally:
        if on_event:
            on_event("optimizing_finished")
    return trie

from __future__ import annotations

import struct
from typing import Iterable, Iterator

MAGIC = 0x54524945
VERSION = 1
MAX_WORD_LENGTH = 25

_HEADER = struct.Struct(">II")
_COUNT = struct.Struct(">H")


class TrieNode:
    __slots__ = ("children", "spellings")

    def __init__(self):
        self.children: dict[str, TrieNode] = {}
        self.spellings: tuple[str, ...] | None = None

    @property
    def is_word(self) -> bool:
        return self.spellings is not None


class Trie:
    """Prefix tree of uppercase words, each carrying its display spellings.

    Build it once (from a mapping or through ``insert``) and only read it
    afterwards; readers never mutate nodes, so a built trie can be shared
    by several solvers running on different threads.
    """

    def __init__(self, words: dict[str, Iterable[str]] | None = None):
        self.root = TrieNode()
        self._count = 0
        if words:
            for word, spellings in words.items():
                self.insert(word, spellings)

    def insert(self, word: str, spellings: Iterable[str] = ()):
        node = self.root
        for ch in word:
            if ch not in node.children:
                node.children[ch] = TrieNode()
            node = node.children[ch]

        if node.spellings is None:
            node.spellings = tuple(spellings)
            self._count += 1
        else:
            merged = list(node.spellings)
            merged.extend(s for s in spellings if s not in merged)
            node.spellings = tuple(merged)

    @staticmethod
    def descend(node: TrieNode, symbol: str) -> TrieNode | None:
        """Step from ``node`` through every letter of ``symbol`` ("QU" walks two)."""
        if not symbol:
            return None
        for ch in symbol:
            node = node.children.get(ch)
            if node is None:
                return None
        return node

    @staticmethod
    def is_terminal(node: TrieNode) -> tuple[bool, tuple[str, ...]]:
        if node.spellings is None:
            return False, ()
        return True, node.spellings

    def find(self, word: str) -> TrieNode | None:
        return self.descend(self.root, word)

    def spellings(self, word: str) -> tuple[str, ...]:
        node = self.find(word)
        if node is None or node.spellings is None:
            return ()
        return node.spellings

    def words(self) -> dict[str, tuple[str, ...]]:
        return dict(self._walk(self.root, ""))

    def _walk(self, node: TrieNode, prefix: str) -> Iterator[tuple[str, tuple[str, ...]]]:
        if node.spellings is not None:
            yield prefix, node.spellings
        for ch in sorted(node.children):
            yield from self._walk(node.children[ch], prefix + ch)

    def __len__(self) -> int:
        return self._count

    def __contains__(self, word: str) -> bool:
        node = self.find(word)
        return node is not None and node.is_word

    def __eq__(self, other) -> bool:
        if not isinstance(other, Trie):
            return NotImplemented
        return self.words() == other.words()

    # ---------- Binary cache format ----------

    def serialize(self) -> bytes:
        out = bytearray(_HEADER.pack(MAGIC, VERSION))
        self._write_node(self.root, out)
        return bytes(out)

    @classmethod
    def _write_node(cls, node: TrieNode, out: bytearray):
        if node.spellings is None:
            out.append(0)
        else:
            out.append(1)
            out += _COUNT.pack(len(node.spellings))
            for spelling in node.spellings:
                _write_text(spelling, out)

        out += _COUNT.pack(len(node.children))
        for ch in sorted(node.children):
            _write_text(ch, out)
            cls._write_node(node.children[ch], out)

    @classmethod
    def deserialize(cls, data: bytes) -> Trie | None:
        """Rebuild a trie from ``serialize()`` output.

        Returns None when the header does not match or the payload is
        damaged, so callers can treat the data as a missing cache.
        """
        if len(data) < _HEADER.size:
            return None
        magic, version = _HEADER.unpack_from(data, 0)
        if magic != MAGIC or version != VERSION:
            return None

        trie = cls()
        try:
            offset = trie._read_node(trie.root, data, _HEADER.size, 0)
        except (struct.error, UnicodeDecodeError, ValueError):
            return None
        if offset != len(data):
            return None
        return trie

    def _read_node(self, node: TrieNode, data: bytes, offset: int, depth: int) -> int:
        if depth > MAX_WORD_LENGTH:
            raise ValueError("nodes nested deeper than the longest word")
        flag = data[offset:offset + 1]
        if flag not in (b"\x00", b"\x01"):
            raise ValueError("bad node flag")
        offset += 1

        if flag == b"\x01":
            (count,) = _COUNT.unpack_from(data, offset)
            offset += _COUNT.size
            spellings = []
            for _ in range(count):
                text, offset = _read_text(data, offset)
                spellings.append(text)
            node.spellings = tuple(spellings)
            self._count += 1

        (children,) = _COUNT.unpack_from(data, offset)
        offset += _COUNT.size
        for _ in range(children):
            ch, offset = _read_text(data, offset)
            if len(ch) != 1 or ch in node.children:
                raise ValueError("bad child key")
            child = node.children[ch] = TrieNode()
            offset = self._read_node(child, data, offset, depth + 1)
        return offset


def _write_text(text: str, out: bytearray):
    raw = text.encode("utf-8")
    out += _COUNT.pack(len(raw))
    out += raw


def _read_text(data: bytes, offset: int) -> tuple[str, int]:
    (length,) = _COUNT.unpack_from(data, offset)
    offset += _COUNT.size
    raw = data[offset:offset + length]
    if len(raw) != length:
        raise ValueError("truncated text")
    return raw.decode("utf-8"), offset + length

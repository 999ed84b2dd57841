from __future__ import annotations

from typing import Iterable, Sequence

from wordgrid.trie import Trie, TrieNode

CellPath = tuple[tuple[int, int], ...]

# Points per word length; anything longer than the table scores LONG_WORD_SCORE.
WORD_SCORES = {3: 1, 4: 1, 5: 2, 6: 3, 7: 5}
LONG_WORD_SCORE = 11


def grid_neighbors(size: int) -> list[list[int]]:
    """Adjacency lists for a size x size grid, diagonals included, row-major indexes."""
    neighbors: list[list[int]] = []
    for idx in range(size * size):
        r, c = divmod(idx, size)
        adj = []
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                nr, nc = r + dr, c + dc
                if 0 <= nr < size and 0 <= nc < size:
                    adj.append(nr * size + nc)
        neighbors.append(adj)
    return neighbors


def ranked_words(words: Iterable[str]) -> list[str]:
    """Longest first, then alphabetical."""
    return sorted(words, key=lambda w: (-len(w), w))


class Cell:
    __slots__ = ("text", "neighbors", "position", "checked")

    def __init__(self, position: tuple[int, int]):
        self.text = ""
        self.neighbors: list[Cell] = []
        self.position = position
        self.checked = False


class Solver:
    """Finds every dictionary word that can be traced through adjacent cells.

    The board is built once; ``solve`` can be called any number of times with
    new letters and replaces the previous solutions. Dictionary descent and
    board traversal happen together, so a branch is abandoned as soon as the
    letters so far stop being a prefix of any word.
    """

    def __init__(self, trie: Trie, size: int, minimum: int, neighbors: Sequence[Sequence[int]] | None = None):
        self._trie = trie
        self.size = size
        self.minimum = minimum
        self._track_positions = True
        self._solutions: dict[str, list[CellPath]] = {}

        adjacency = grid_neighbors(size) if neighbors is None else neighbors
        if len(adjacency) != size * size:
            raise ValueError(f"Adjacency has {len(adjacency)} cells, expected {size * size}")

        # Repeated entries would record the same path twice
        adjacency = [list(dict.fromkeys(n for n in adj if n != idx)) for idx, adj in enumerate(adjacency)]
        for idx, adj in enumerate(adjacency):
            for n in adj:
                if not 0 <= n < len(adjacency) or idx not in adjacency[n]:
                    raise ValueError(f"Adjacency is not symmetric between cells {idx} and {n}")

        self._cells = [Cell(divmod(idx, size)) for idx in range(size * size)]
        for cell, adj in zip(self._cells, adjacency):
            cell.neighbors = [self._cells[n] for n in adj]

        self._word: list[str] = []
        self._positions: list[tuple[int, int]] = []

    def set_track_positions(self, track_positions: bool):
        self._track_positions = track_positions

    def solve(self, letters: Sequence[str]):
        if len(letters) != len(self._cells):
            raise ValueError(f"Expected {len(self._cells)} letters, got {len(letters)}")

        self._solutions = {}
        for cell, text in zip(self._cells, letters):
            cell.text = text.upper()
            cell.checked = False

        root = self._trie.root
        for cell in self._cells:
            self._check_cell(cell, root)

    def _check_cell(self, cell: Cell, node: TrieNode):
        node = Trie.descend(node, cell.text)
        if node is None:
            return

        cell.checked = True
        self._word.append(cell.text)
        if self._track_positions:
            self._positions.append(cell.position)

        if node.spellings is not None:
            word = "".join(self._word)
            if len(word) >= self.minimum:
                paths = self._solutions.setdefault(word, [])
                if self._track_positions:
                    paths.append(tuple(self._positions))

        if node.children:
            for neighbor in cell.neighbors:
                if not neighbor.checked:
                    self._check_cell(neighbor, node)

        self._word.pop()
        if self._track_positions:
            self._positions.pop()
        cell.checked = False

    def count(self) -> int:
        return len(self._solutions)

    def solutions(self) -> dict[str, list[CellPath]]:
        return dict(self._solutions)

    @staticmethod
    def word_score(word: str) -> int:
        length = len(word)
        if length < 3:
            return 0
        return WORD_SCORES.get(length, LONG_WORD_SCORE)

    def score(self, max_words: int = -1) -> int:
        """Total score of the found words, or of the ``max_words`` best ones when non-negative."""
        scores = sorted((self.word_score(w) for w in self._solutions), reverse=True)
        if max_words >= 0:
            scores = scores[:max_words]
        return sum(scores)

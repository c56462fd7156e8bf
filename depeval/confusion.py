import collections.abc
from typing import IO, Literal
from collections.abc import Callable, Iterator, Mapping, Sequence

import numpy as np
from loguru import logger

from depeval.compare import (
    AlignmentError,
    AnnotationError,
    ConfigurationError,
    check_token_alignment,
)
from depeval.deptree import DepNode
from depeval.metrics import Corpus
from depeval.vocab import UD_DEPRELS, UPOS_TAGS, simplify_deprel

Tag = Literal["deprel", "upostag"]

CATEGORY_GETTERS: Mapping[str, tuple[Sequence[str], Callable[[DepNode], str | None]]] = {
    "deprel": (UD_DEPRELS, lambda t: simplify_deprel(t.deprel)),
    "upostag": (UPOS_TAGS, lambda t: t.upos),
}


class ConfusionMatrix(collections.abc.Mapping[tuple[str, str], int | float]):
    """Counts of `(system_category, gold_category)` pairs over a fixed vocabulary.

    Every cell of `categories × categories` is a key, including the zero ones. After
    `normalize()`, nonzero cells hold their share of the total number of pairs as floats while
    zero cells stay as integer `0`.
    """

    def __init__(self, categories: Sequence[str]):
        self.categories = tuple(categories)
        if len(set(self.categories)) != len(self.categories):
            raise ConfigurationError(f"Duplicated categories in {self.categories}")
        self.index = {c: i for i, c in enumerate(self.categories)}
        self.counts = np.zeros((len(self.categories), len(self.categories)), dtype=np.int64)
        self.normalized = False

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def add(self, system_category: str, gold_category: str):
        if self.normalized:
            raise ValueError("Can't add counts to a normalized matrix")
        self.counts[self._cell(system_category, gold_category)] += 1

    def normalize(self):
        """Divide every nonzero cell by the total number of pairs, in place."""
        self.normalized = True

    def _cell(self, system_category: str, gold_category: str) -> tuple[int, int]:
        try:
            return (self.index[system_category], self.index[gold_category])
        except KeyError as e:
            raise AnnotationError(
                f"Unknown category {e.args[0]!r}, expected one of {self.categories}"
            ) from e

    def __getitem__(self, key: tuple[str, str]) -> int | float:
        try:
            count = int(self.counts[self.index[key[0]], self.index[key[1]]])
        except (KeyError, IndexError, TypeError) as e:
            raise KeyError(key) from e
        if count == 0 or not self.normalized:
            return count
        return count / self.total

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return ((c1, c2) for c1 in self.categories for c2 in self.categories)

    def __len__(self) -> int:
        return len(self.categories) ** 2

    def __repr__(self) -> str:
        return f"ConfusionMatrix({len(self.categories)} categories, total={self.total})"


def confusion_matrix(
    system: Corpus,
    gold: Corpus,
    tag: Tag = "deprel",
    normalize: bool = False,
    categories: Sequence[str] | None = None,
) -> ConfusionMatrix:
    """Cross-tabulate the system and gold categories of the tokens of two corpora.

    Tokens are paired by position in the concatenation of the sentences of each corpus. `tag`
    selects which category is counted: `"deprel"` (base relation, subtypes are ignored) or
    `"upostag"`. `categories` replaces the UD vocabulary for other tagsets.
    """
    try:
        vocabulary, get_category = CATEGORY_GETTERS[tag]
    except KeyError as e:
        raise ConfigurationError(
            f"Unsupported tag {tag!r}, expected one of {list(CATEGORY_GETTERS)}"
        ) from e
    if categories is not None:
        vocabulary = categories

    system_tokens = [t for tree in system for t in tree.tokens]
    gold_tokens = [t for tree in gold for t in tree.tokens]
    if len(system_tokens) != len(gold_tokens):
        raise AlignmentError(
            f"System and gold corpora differ in size: {len(system_tokens)} and"
            f" {len(gold_tokens)} tokens"
        )

    matrix = ConfusionMatrix(vocabulary)
    for system_token, gold_token in zip(system_tokens, gold_tokens, strict=True):
        check_token_alignment(system_token, gold_token)
        matrix.add(get_category(system_token), get_category(gold_token))
    logger.debug(f"Built a {tag} confusion matrix over {matrix.total} tokens")

    if normalize:
        matrix.normalize()
    return matrix


def format_matrix(
    matrix: Mapping[tuple[str, str], int | float], float_format: str = ".4f"
) -> str:
    """Render a matrix as a monospaced table.

    Rows are the sorted first coordinates of the keys, columns the sorted second coordinates.
    """
    rows = sorted({k[0] for k in matrix.keys()})
    columns = sorted({k[1] for k in matrix.keys()})

    def fmt(value: int | float) -> str:
        if isinstance(value, float):
            return format(value, float_format)
        return str(value)

    cells = [[fmt(matrix[(r, c)]) for c in columns] for r in rows]
    row_header_width = max((len(r) for r in rows), default=0)
    column_width = max(
        (len(s) for s in (*columns, *(cell for row in cells for cell in row))), default=0
    )
    lines = [
        " ".join([" " * row_header_width, *(c.rjust(column_width) for c in columns)]),
        *(
            " ".join([r.ljust(row_header_width), *(cell.rjust(column_width) for cell in row)])
            for r, row in zip(rows, cells, strict=True)
        ),
    ]
    return "\n".join(lines)


def write_matrix(
    matrix: Mapping[tuple[str, str], int | float],
    ostream: IO[str],
    float_format: str = ".4f",
):
    ostream.write(format_matrix(matrix, float_format=float_format))
    ostream.write("\n")

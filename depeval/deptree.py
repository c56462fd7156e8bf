import itertools
import pathlib
from dataclasses import dataclass
from typing import IO, Self, cast
from collections.abc import Iterable, Sequence

from loguru import logger

from depeval.utils import smart_open

# For use with strip, this is not a list but a concat string, list from
# <https://docs.python.org/3/library/stdtypes.html#str.splitlines>. Interestingly the file, group
# and record separator don't have the Unicode BK Line Break property
# <https://www.unicode.org/reports/tr14>. But they get folded in because they have the bidi property
# <https://github.com/python/cpython/blob/e5237541a098e32a70fc621dee08721a72be7eb8/Tools/unicode/makeunicodedata.py#L440>.
EOL_CHARS = (
    "\t"
    "\n"
    "\r"
    "\N{LINE TABULATION}"
    "\N{FORM FEED}"
    "\N{FILE SEPARATOR}"
    "\N{GROUP SEPARATOR}"
    "\N{RECORD SEPARATOR}"
    "\N{NEXT LINE}"
    "\N{LINE SEPARATOR}"
    "\N{PARAGRAPH SEPARATOR}"
)

SENT_ID_PREFIX = "# sent_id ="


@dataclass(frozen=True)
class DepNode:
    identifier: int
    form: str
    lemma: str | None = None
    upos: str | None = None
    xpos: str | None = None
    feats: str | None = None
    head: int | None = None
    deprel: str | None = None
    deps: str | None = None
    misc: str | None = None

    def to_conll(self) -> str:
        row = [
            str(self.identifier),
            self.form,
            *(
                str(c) if c is not None else "_"
                for c in (
                    self.lemma,
                    self.upos,
                    self.xpos,
                    self.feats,
                    self.head,
                    self.deprel,
                    self.deps,
                    self.misc,
                )
            ),
        ]
        return "\t".join(row)


class DepGraph:
    """A dependency-annotated sentence: an ordered sequence of `DepNode`s and its metadata.

    Contrary to the nodes of a parser's internal representation, there is no dummy root node
    here: `nodes[i]` is the word with identifier `i+1` and heads use `0` as the root marker.
    """

    ROOT = 0

    def __init__(
        self,
        nodes: Iterable[DepNode],
        metadata: Iterable[str] | None = None,
        validate: bool = True,
    ):
        self.nodes = tuple(nodes)

        govs = {n.identifier: n.head for n in self.nodes}
        # Only do checks on completly annotated trees
        if validate and self.nodes and None not in govs.values():
            if self.ROOT not in govs.values():
                raise ValueError(f"Malformed tree: no root in {self.words}")
            if (
                unreachable_heads := set(govs.values())
                .difference(govs.keys())
                .difference((self.ROOT, None))
            ):
                raise ValueError(f"Malformed tree: unreachable heads: {unreachable_heads}")

        self.metadata = [] if metadata is None else list(metadata)

    @property
    def identifier(self) -> str | None:
        """The value of the `sent_id` comment, if there is one."""
        for line in self.metadata:
            if line.startswith(SENT_ID_PREFIX):
                return line[len(SENT_ID_PREFIX) :].strip()
        return None

    @property
    def size(self) -> int:
        return len(self.nodes)

    @property
    def tokens(self) -> Sequence[DepNode]:
        return self.nodes

    @property
    def words(self) -> list[str]:
        return [n.form for n in self.nodes]

    @property
    def pos_tags(self) -> list[str | None]:
        return [n.upos for n in self.nodes]

    @property
    def heads(self) -> list[int | None]:
        return [n.head for n in self.nodes]

    @property
    def deprels(self) -> list[str | None]:
        return [n.deprel for n in self.nodes]

    def arcs(self) -> list[tuple[int, int]]:
        """The `(head, dependent)` arcs of the tree, ignoring nodes without a head."""
        return [(n.head, n.identifier) for n in self.nodes if n.head is not None]

    def is_projective(self) -> bool:
        """Return `True` iff no two arcs cross when drawn above the sentence.

        The arc from the root marker `0` is taken into account, so a word that sits between a
        root word and its dependents while depending on something outside of them makes the tree
        non-projective.
        """
        spans = sorted((min(h, d), max(h, d)) for h, d in self.arcs())
        for (start, end), (other_start, other_end) in itertools.combinations(spans, 2):
            # Since spans are sorted, `start <= other_start`
            if start < other_start < end < other_end:
                return False
        return True

    @classmethod
    def from_conllu(cls, istream: Iterable[str], validate: bool = True) -> Self:
        """Read a conll tree from an input stream, `validate=False` accepts malformed trees."""
        metadata: list[str] = []
        nodes = []
        for line in istream:
            if line.startswith("#"):
                metadata.append(line.rstrip(EOL_CHARS))
                continue

            row = line.rstrip(EOL_CHARS).split("\t")
            # Multi-word token ranges and empty nodes are not syntactic words
            if "-" in row[0] or "." in row[0]:
                logger.debug(f"Skipping non-word line {row[0]!r}")
                continue
            if len(row) < 2:
                raise ValueError(f"Too few columns to build a DepNode: {line!r}")
            elif len(row) < 10:
                processed_row = [*row, *("_" for _ in range(10 - len(row)))]
            else:
                processed_row = list(row)
            cols: list[str | None] = [c if c != "_" else None for c in processed_row[2:10]]
            node = DepNode(
                identifier=int(row[0]),
                form=row[1],
                lemma=cols[0],
                upos=cols[1],
                xpos=cols[2],
                feats=cols[3],
                head=int(cast(str, cols[4])) if cols[4] is not None else None,
                deprel=cols[5],
                deps=cols[6],
                misc=cols[7],
            )
            if node.head is None and node.deprel is not None:
                logger.warning(f"Node with empty head and nonempty deprel: {node}")
            nodes.append(node)
        return cls(nodes=nodes, metadata=metadata, validate=validate)

    def to_conllu(self) -> str:
        """CoNLL-U string for the dep tree"""
        return "\n".join([*self.metadata, *(n.to_conll() for n in self.nodes)])

    def __str__(self):
        return self.to_conllu()

    def __len__(self):
        return len(self.nodes)

    @classmethod
    def read_conll(cls, lines: Iterable[str], validate: bool = True) -> Iterable[Self]:
        current_tree_lines: list[str] = []
        # Add a dummy empty line to flush the last tree even if the CoNLL-U mandatory empty last
        # line is absent
        for line in itertools.chain(lines, [""]):
            if not line or line.isspace():
                if current_tree_lines:
                    yield cls.from_conllu(current_tree_lines, validate=validate)
                    current_tree_lines = []
            else:
                current_tree_lines.append(line)


def read_treebank(
    source: str | pathlib.Path | IO[str], validate: bool = True
) -> list[DepGraph]:
    """Read all the trees in a CoNLL-U file.

    Parser outputs can be malformed (no root, cycles, heads outside of the sentence): read them
    with `validate=False` so that they get evaluated instead of rejected.
    """
    with smart_open(source) as in_stream:
        trees = list(DepGraph.read_conll(in_stream, validate=validate))
    logger.debug(f"Read {len(trees)} trees from {source}")
    return trees

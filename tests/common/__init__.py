import heapq
from typing import Sequence, cast

import numpy as np
from hypothesis import strategies as st

from depeval.deptree import DepGraph, DepNode
from depeval.vocab import UD_DEPRELS, UPOS_TAGS


def seq_to_heads(
    seq: Sequence[int], root: np.intp | int
) -> np.ndarray[tuple[int], np.dtype[np.intp]]:
    """Given a Prüfer sequence for a rooted tree, return the corresponding arborescence as an
    array `heads` encoding all the `(i, heads[i])` directed arcs. `heads[root]` is set to -1. Note
    that *any* sequence of length `n-2` of integers between `0` and `n-1` is a valid Prüfer
    sequence.

    The Prüfer sequence for a rooted tree is build exactly like a regular Prüfer sequence, except
    that at each step, instead of removing the leaf with the lowest index, you remove the leaf with
    the lowest index *that is not the root*.
    """
    _seq = np.asarray(seq, dtype=np.intp)
    n = _seq.shape[0] + 2

    degrees = np.ones(n, dtype=np.intp)
    values, counts = np.unique(_seq, return_counts=True)
    degrees[values] += counts
    # Not the actual degree of the root, but this way it can't ever enter the leaves heap
    degrees[root] = 0
    leaves = cast(list[int | np.intp], np.flatnonzero(degrees == 1).tolist())
    heapq.heapify(leaves)

    heads = np.full(n, fill_value=-1, dtype=np.intp)

    # Replay the sequence building: the leaf popped at each step is the lowest non-root leaf and
    # its sole neighbour is the current element of the sequence.
    for h in _seq:
        leaf = heapq.heappop(leaves)
        heads[leaf] = h
        if degrees[h] == 2:
            heapq.heappush(leaves, h)
        elif h != root:
            degrees[h] -= 1

    # The last leaf left in the heap can only be attached to the root
    heads[leaves[0]] = root

    return heads


def make_tree(
    heads: Sequence[int],
    deprels: Sequence[str] | None = None,
    upos: Sequence[str] | None = None,
    forms: Sequence[str] | None = None,
    sent_id: str | None = None,
    validate: bool = True,
) -> DepGraph:
    """Build a tree from 1-indexed heads (`0` is the root)."""
    if deprels is None:
        deprels = ["root" if h == 0 else "dep" for h in heads]
    if upos is None:
        upos = ["X"] * len(heads)
    if forms is None:
        forms = [f"w{i}" for i in range(1, len(heads) + 1)]
    return DepGraph(
        nodes=[
            DepNode(identifier=i, form=f, upos=u, head=h, deprel=r)
            for i, (f, u, h, r) in enumerate(zip(forms, upos, heads, deprels, strict=True), start=1)
        ],
        metadata=[] if sent_id is None else [f"# sent_id = {sent_id}"],
        validate=validate,
    )


deprels_st = st.one_of(
    st.sampled_from(UD_DEPRELS),
    st.tuples(st.sampled_from(UD_DEPRELS), st.sampled_from(["pass", "poss", "tmod", "relcl"])).map(
        ":".join
    ),
)

upos_st = st.sampled_from(UPOS_TAGS)


@st.composite
def heads_lists(draw: st.DrawFn, n_words: int) -> list[int]:
    """1-indexed heads of a random well-formed tree with `n_words` words."""
    if n_words == 1:
        return [0]
    heads = seq_to_heads(
        draw(st.lists(st.integers(0, n_words - 1), min_size=n_words - 2, max_size=n_words - 2)),
        root=draw(st.integers(0, n_words - 1)),
    )
    return [int(h) + 1 for h in heads]


@st.composite
def trees(draw: st.DrawFn, forms: Sequence[str] | None = None, max_size: int = 12) -> DepGraph:
    if forms is None:
        n_words = draw(st.integers(1, max_size))
        forms = [f"w{i}" for i in range(1, n_words + 1)]
    n_words = len(forms)
    return make_tree(
        heads=draw(heads_lists(n_words)),
        deprels=draw(st.lists(deprels_st, min_size=n_words, max_size=n_words)),
        upos=draw(st.lists(upos_st, min_size=n_words, max_size=n_words)),
        forms=forms,
    )


@st.composite
def tree_pairs(draw: st.DrawFn, max_size: int = 12) -> tuple[DepGraph, DepGraph]:
    """Two independent annotations of the same sentence"""
    first = draw(trees(max_size=max_size))
    second = draw(trees(forms=first.words))
    return first, second


corpora = st.lists(trees(), min_size=1, max_size=5)

corpus_pairs = st.lists(tree_pairs(), min_size=1, max_size=5).map(
    lambda pairs: ([s for s, _ in pairs], [g for _, g in pairs])
)

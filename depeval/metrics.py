"""Corpus-level dependency parsing metrics.

All the functions here take a system corpus and a gold corpus, as sequences of `DepGraph` that
are aligned pairwise by position. Metrics with an empty denominator are undefined and return
`None` rather than `0.0`, so that "no examples" and "everything wrong" can be told apart.
"""

import operator
from dataclasses import dataclass
from functools import cached_property
from collections.abc import Callable, Iterable, Mapping, Sequence

from loguru import logger

from depeval.compare import (
    AlignmentError,
    ConfigurationError,
    EqualityTest,
    chosen_deprel,
    disagreeing_words,
    sentence_diff,
)
from depeval.deptree import DepGraph
from depeval.vocab import LAS_FIELDS, UAS_FIELDS, UD_DEPRELS

Corpus = Sequence[DepGraph]


@dataclass(frozen=True)
class Score:
    correct: int
    total: int

    @cached_property
    def accuracy(self) -> float | None:
        if self.total == 0:
            return None
        return self.correct / self.total


def sentence_pairs(system: Corpus, gold: Corpus) -> Iterable[tuple[DepGraph, DepGraph]]:
    if len(system) != len(gold):
        raise AlignmentError(
            f"System and gold corpora differ in size: {len(system)} and {len(gold)} sentences"
        )
    return zip(system, gold, strict=True)


def attachment_score_by_sentence(
    system: Corpus,
    gold: Corpus,
    fields: Iterable[str] = LAS_FIELDS,
    include_punct: bool = False,
    simplify_relation: bool = True,
    equality_test: EqualityTest = operator.eq,
) -> float | None:
    """Macro-averaged attachment score: the mean of the per-sentence scores.

    With `fields=("head",)` this is the UAS, with `fields=("head", "deprel")` the LAS. The
    per-sentence score is `1 - n_errors/n_gold_tokens`, where the denominator counts every gold
    token, punctuation included.
    """
    fields = list(fields)
    scores = []
    for system_tree, gold_tree in sentence_pairs(system, gold):
        diff = sentence_diff(
            system_tree,
            gold_tree,
            fields=fields,
            equality_test=equality_test,
            simplify_relation=simplify_relation,
            include_punct=include_punct,
        )
        if gold_tree.size == 0:
            logger.debug(f"Skipping empty sentence {gold_tree.identifier}")
            continue
        scores.append(1 - len(diff) / gold_tree.size)
    if not scores:
        return None
    return sum(scores) / len(scores)


def attachment_score_by_word(
    system: Corpus,
    gold: Corpus,
    fields: Iterable[str] = LAS_FIELDS,
    include_punct: bool = False,
    simplify_relation: bool = True,
    equality_test: EqualityTest = operator.eq,
) -> float | None:
    """Micro-averaged attachment score: `1 - n_errors/n_gold_tokens` over the whole corpus."""
    fields = list(fields)
    n_errors = 0
    n_words = 0
    for system_tree, gold_tree in sentence_pairs(system, gold):
        n_errors += len(
            sentence_diff(
                system_tree,
                gold_tree,
                fields=fields,
                equality_test=equality_test,
                simplify_relation=simplify_relation,
                include_punct=include_punct,
            )
        )
        n_words += gold_tree.size
    logger.debug(f"{n_errors} errors on {fields} over {n_words} words")
    if n_words == 0:
        return None
    return 1 - n_errors / n_words


def _relation_score(
    system: Corpus,
    gold: Corpus,
    relation: str,
    head_error: bool,
    label_error: bool,
    simplify_relation: bool,
    on_gold: bool,
) -> Score:
    if not (head_error or label_error):
        raise ConfigurationError("At least one of head_error and label_error must be set")
    total = 0
    n_errors = 0
    for system_tree, gold_tree in sentence_pairs(system, gold):
        reference = gold_tree if on_gold else system_tree
        total += sum(
            1 for t in reference.tokens if chosen_deprel(t, simplify_relation) == relation
        )
        for system_token, gold_token in disagreeing_words(
            system_tree,
            gold_tree,
            head_error=head_error,
            label_error=label_error,
            simplify_relation=simplify_relation,
        ):
            reference_token = gold_token if on_gold else system_token
            if chosen_deprel(reference_token, simplify_relation) == relation:
                n_errors += 1
    return Score(correct=total - n_errors, total=total)


def recall(
    system: Corpus,
    gold: Corpus,
    relation: str,
    head_error: bool = True,
    label_error: bool = True,
    simplify_relation: bool = True,
) -> float | None:
    """Among the gold tokens with relation `relation`, the proportion that the system got right.

    `head_error` and `label_error` select what counts as a mistake (at least one is required).
    """
    return _relation_score(
        system,
        gold,
        relation=relation,
        head_error=head_error,
        label_error=label_error,
        simplify_relation=simplify_relation,
        on_gold=True,
    ).accuracy


def precision(
    system: Corpus,
    gold: Corpus,
    relation: str,
    head_error: bool = True,
    label_error: bool = True,
    simplify_relation: bool = True,
) -> float | None:
    """Among the system tokens with relation `relation`, the proportion that are right."""
    return _relation_score(
        system,
        gold,
        relation=relation,
        head_error=head_error,
        label_error=label_error,
        simplify_relation=simplify_relation,
        on_gold=False,
    ).accuracy


def relation_scores(
    system: Corpus,
    gold: Corpus,
    relations: Iterable[str] = UD_DEPRELS,
    head_error: bool = True,
    label_error: bool = True,
    simplify_relation: bool = True,
) -> dict[str, tuple[float | None, float | None]]:
    """`(precision, recall)` for every relation in `relations`."""
    return {
        r: (
            precision(
                system,
                gold,
                relation=r,
                head_error=head_error,
                label_error=label_error,
                simplify_relation=simplify_relation,
            ),
            recall(
                system,
                gold,
                relation=r,
                head_error=head_error,
                label_error=label_error,
                simplify_relation=simplify_relation,
            ),
        )
        for r in relations
    }


def is_nonprojective(tree: DepGraph) -> bool:
    return not tree.is_projective()


def _projectivity_flags(
    system: Corpus, gold: Corpus, predicate: Callable[[DepGraph], bool]
) -> list[tuple[bool, bool]]:
    return [(predicate(s), predicate(g)) for s, g in sentence_pairs(system, gold)]


def projectivity_accuracy(
    system: Corpus,
    gold: Corpus,
    is_nonprojective: Callable[[DepGraph], bool] = is_nonprojective,
) -> float | None:
    """Proportion of sentences whose non-projectivity is the same in system and gold."""
    flags = _projectivity_flags(system, gold, is_nonprojective)
    return Score(correct=sum(1 for s, g in flags if s == g), total=len(flags)).accuracy


def projectivity_precision(
    system: Corpus,
    gold: Corpus,
    is_nonprojective: Callable[[DepGraph], bool] = is_nonprojective,
) -> float | None:
    """Proportion of the sentences that are non-projective in the system that also are in
    gold."""
    flags = _projectivity_flags(system, gold, is_nonprojective)
    return Score(
        correct=sum(1 for s, g in flags if s and g), total=sum(1 for s, _ in flags if s)
    ).accuracy


def projectivity_recall(
    system: Corpus,
    gold: Corpus,
    is_nonprojective: Callable[[DepGraph], bool] = is_nonprojective,
) -> float | None:
    """Proportion of the sentences that are non-projective in gold that also are in the
    system."""
    flags = _projectivity_flags(system, gold, is_nonprojective)
    return Score(
        correct=sum(1 for s, g in flags if s and g), total=sum(1 for _, g in flags if g)
    ).accuracy


def evaluate(
    system: Corpus,
    gold: Corpus,
    include_punct: bool = False,
    simplify_relation: bool = True,
    uas_fields: Iterable[str] = UAS_FIELDS,
    las_fields: Iterable[str] = LAS_FIELDS,
) -> Mapping[str, float | None]:
    """The standard set of metrics, keyed by name.

    UPOS accuracy is always computed on every token: `include_punct` only applies to the
    attachment scores.
    """
    uas_fields = list(uas_fields)
    las_fields = list(las_fields)
    common = {"include_punct": include_punct, "simplify_relation": simplify_relation}
    return {
        # Punctuation filtering relies on the predicted tags, which are what is evaluated here
        "UPOS": attachment_score_by_word(
            system,
            gold,
            fields=["upostag"],
            include_punct=True,
            simplify_relation=simplify_relation,
        ),
        "UAS": attachment_score_by_word(system, gold, fields=uas_fields, **common),
        "LAS": attachment_score_by_word(system, gold, fields=las_fields, **common),
        "UAS (sentences)": attachment_score_by_sentence(
            system, gold, fields=uas_fields, **common
        ),
        "LAS (sentences)": attachment_score_by_sentence(
            system, gold, fields=las_fields, **common
        ),
        "NP accuracy": projectivity_accuracy(system, gold),
        "NP precision": projectivity_precision(system, gold),
        "NP recall": projectivity_recall(system, gold),
    }

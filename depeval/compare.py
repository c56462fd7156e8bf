"""Token- and sentence-level comparison of a system annotation against a gold one."""

import operator
from typing import Any, NamedTuple
from collections.abc import Callable, Iterable, Mapping, Sequence

from loguru import logger

from depeval.deptree import DepGraph, DepNode
from depeval.vocab import DEPREL_FIELD, PUNCT_TAG, simplify_deprel

EqualityTest = Callable[[Any, Any], bool]


class EvaluationError(Exception):
    pass


class AlignmentError(EvaluationError):
    """Two sentences (or corpora) that should correspond do not."""


class ConfigurationError(EvaluationError, ValueError):
    """Unsupported evaluation parameters."""


class AnnotationError(EvaluationError):
    """A token carries an annotation that can't be evaluated."""


FIELD_GETTERS: Mapping[str, Callable[[DepNode], Any]] = {
    "id": operator.attrgetter("identifier"),
    "form": operator.attrgetter("form"),
    "lemma": operator.attrgetter("lemma"),
    "upostag": operator.attrgetter("upos"),
    "xpostag": operator.attrgetter("xpos"),
    "feats": operator.attrgetter("feats"),
    "head": operator.attrgetter("head"),
    "deprel": operator.attrgetter("deprel"),
    "deps": operator.attrgetter("deps"),
    "misc": operator.attrgetter("misc"),
}


class FieldDiff(NamedTuple):
    field: str
    system_value: Any
    gold_value: Any


class SentenceDiff(NamedTuple):
    identifier: int
    diffs: Sequence[FieldDiff]


def get_field(token: DepNode, field: str) -> Any:
    try:
        getter = FIELD_GETTERS[field]
    except KeyError as e:
        raise ConfigurationError(
            f"Unknown field {field!r}, expected one of {list(FIELD_GETTERS)}"
        ) from e
    return getter(token)


def chosen_deprel(token: DepNode, simplify_relation: bool) -> str | None:
    """The relation of `token`, without its subtype if `simplify_relation` is set."""
    if simplify_relation:
        return simplify_deprel(token.deprel)
    return token.deprel


def token_diff(
    system_token: DepNode,
    gold_token: DepNode,
    fields: Iterable[str],
    equality_test: EqualityTest = operator.eq,
    simplify_relation: bool = False,
) -> list[FieldDiff]:
    """Compare two tokens on `fields` and return the fields where they differ, in `fields` order.

    The relation field is compared without subtypes if `simplify_relation` is set, but the values
    reported in the diffs are always the raw ones.
    """
    res = []
    for field in fields:
        system_value = get_field(system_token, field)
        gold_value = get_field(gold_token, field)
        if field == DEPREL_FIELD and simplify_relation:
            compared = (simplify_deprel(system_value), simplify_deprel(gold_value))
        else:
            compared = (system_value, gold_value)
        if not equality_test(*compared):
            res.append(FieldDiff(field, system_value, gold_value))
    return res


def is_punct(token: DepNode) -> bool:
    return token.upos == PUNCT_TAG


def sentence_diff(
    system: DepGraph,
    gold: DepGraph,
    fields: Iterable[str],
    equality_test: EqualityTest = operator.eq,
    simplify_relation: bool = False,
    include_punct: bool = True,
) -> list[SentenceDiff]:
    """Return the tokens of `system` that differ from the gold ones on `fields`, keyed by the
    system token identifier.

    When `include_punct` is false, punctuation is removed from each sentence independently and
    the remaining tokens are paired by position, not by identifier: if the sentences don't agree
    on which tokens are punctuation, the pairing is shifted.
    """
    if system.size != gold.size:
        raise AlignmentError(
            f"Sentences {system.identifier} and {gold.identifier} differ in size:"
            f" {system.size} and {gold.size} tokens"
        )
    fields = list(fields)
    system_tokens: Sequence[DepNode] = system.tokens
    gold_tokens: Sequence[DepNode] = gold.tokens
    if not include_punct:
        system_tokens = [t for t in system_tokens if not is_punct(t)]
        gold_tokens = [t for t in gold_tokens if not is_punct(t)]
        if len(system_tokens) != len(gold_tokens):
            logger.debug(
                f"Sentence {gold.identifier}: punctuation differs between system and gold,"
                " pairing by position anyway"
            )
    res = []
    for system_token, gold_token in zip(system_tokens, gold_tokens):
        if diffs := token_diff(
            system_token,
            gold_token,
            fields=fields,
            equality_test=equality_test,
            simplify_relation=simplify_relation,
        ):
            res.append(SentenceDiff(system_token.identifier, diffs))
    return res


def check_alignment(system: DepGraph, gold: DepGraph):
    """Raise an `AlignmentError` unless both sentences have the same tokens (identifiers and
    forms) in the same order."""
    if system.size != gold.size:
        raise AlignmentError(
            f"Sentences {system.identifier} and {gold.identifier} differ in size:"
            f" {system.size} and {gold.size} tokens"
        )
    for system_token, gold_token in zip(system.tokens, gold.tokens, strict=True):
        check_token_alignment(system_token, gold_token)


def check_token_alignment(system_token: DepNode, gold_token: DepNode):
    if (system_token.identifier, system_token.form) != (gold_token.identifier, gold_token.form):
        raise AlignmentError(
            f"Mismatched tokens: system has {system_token.identifier}:{system_token.form!r}"
            f" where gold has {gold_token.identifier}:{gold_token.form!r}"
        )


def disagreeing_words(
    system: DepGraph,
    gold: DepGraph,
    head_error: bool = True,
    label_error: bool = False,
    pos_error: bool = False,
    remove_punct: bool = False,
    simplify_relation: bool = False,
) -> list[tuple[DepNode, DepNode]]:
    """Return the `(system, gold)` token pairs that disagree on at least one of the selected
    criteria.

    - `head_error`: the heads differ
    - `label_error`: the relations differ (without subtypes if `simplify_relation` is set)
    - `pos_error`: the UPOS tags differ

    Disagreements on criteria that are not selected are ignored. If `remove_punct` is set, pairs
    where the system token is punctuation are never reported.
    """
    check_alignment(system, gold)
    if not (head_error or label_error or pos_error):
        raise ConfigurationError("At least one error criterion must be selected")

    res = []
    for system_token, gold_token in zip(system.tokens, gold.tokens, strict=True):
        if remove_punct and is_punct(system_token):
            continue
        if (
            (head_error and system_token.head != gold_token.head)
            or (
                label_error
                and chosen_deprel(system_token, simplify_relation)
                != chosen_deprel(gold_token, simplify_relation)
            )
            or (pos_error and system_token.upos != gold_token.upos)
        ):
            res.append((system_token, gold_token))
    return res

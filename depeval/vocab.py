"""Closed label sets and field names of the Universal Dependencies v2 annotation scheme."""

# Base relations of UD v2, language-specific subtypes (`nmod:poss`, `obl:tmod`…) reduce to these.
UD_DEPRELS: tuple[str, ...] = (
    "acl",
    "advcl",
    "advmod",
    "amod",
    "appos",
    "aux",
    "case",
    "cc",
    "ccomp",
    "clf",
    "compound",
    "conj",
    "cop",
    "csubj",
    "dep",
    "det",
    "discourse",
    "dislocated",
    "expl",
    "fixed",
    "flat",
    "goeswith",
    "iobj",
    "list",
    "mark",
    "nmod",
    "nsubj",
    "nummod",
    "obj",
    "obl",
    "orphan",
    "parataxis",
    "punct",
    "reparandum",
    "root",
    "vocative",
    "xcomp",
)

UPOS_TAGS: tuple[str, ...] = (
    "ADJ",
    "ADP",
    "ADV",
    "AUX",
    "CCONJ",
    "DET",
    "INTJ",
    "NOUN",
    "NUM",
    "PART",
    "PRON",
    "PROPN",
    "PUNCT",
    "SCONJ",
    "SYM",
    "VERB",
    "X",
)

PUNCT_TAG = "PUNCT"

# Names of the CoNLL-U columns as they can be used in comparison field sets
FIELDS: tuple[str, ...] = (
    "id",
    "form",
    "lemma",
    "upostag",
    "xpostag",
    "feats",
    "head",
    "deprel",
    "deps",
    "misc",
)
DEPREL_FIELD = "deprel"
UAS_FIELDS: tuple[str, ...] = ("head",)
LAS_FIELDS: tuple[str, ...] = ("head", "deprel")

SUBTYPE_SEPARATOR = ":"


def simplify_deprel(relation: str | None) -> str | None:
    """Strip the language-specific subtype of a relation: `nmod:poss` → `nmod`."""
    if relation is None:
        return None
    return relation.split(SUBTYPE_SEPARATOR, maxsplit=1)[0]

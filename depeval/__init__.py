from depeval.compare import (
    AlignmentError,
    AnnotationError,
    ConfigurationError,
    EvaluationError,
    disagreeing_words,
    sentence_diff,
    token_diff,
)
from depeval.confusion import ConfusionMatrix, confusion_matrix, format_matrix, write_matrix
from depeval.deptree import DepGraph, DepNode, read_treebank
from depeval.metrics import (
    attachment_score_by_sentence,
    attachment_score_by_word,
    evaluate,
    precision,
    projectivity_accuracy,
    projectivity_precision,
    projectivity_recall,
    recall,
    relation_scores,
)
from depeval.vocab import simplify_deprel

__all__ = [
    "AlignmentError",
    "AnnotationError",
    "ConfigurationError",
    "ConfusionMatrix",
    "DepGraph",
    "DepNode",
    "EvaluationError",
    "attachment_score_by_sentence",
    "attachment_score_by_word",
    "confusion_matrix",
    "disagreeing_words",
    "evaluate",
    "format_matrix",
    "precision",
    "projectivity_accuracy",
    "projectivity_precision",
    "projectivity_recall",
    "read_treebank",
    "recall",
    "relation_scores",
    "sentence_diff",
    "simplify_deprel",
    "token_diff",
    "write_matrix",
]

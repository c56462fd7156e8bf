import json
import pathlib
import sys
from typing import IO, Literal, Optional

import click
import click_pathlib
from rich import box
from rich.console import Console
from rich.table import Table

from depeval import metrics
from depeval.compare import EvaluationError
from depeval.config import EvaluationConfig, load_config
from depeval.confusion import confusion_matrix, write_matrix
from depeval.deptree import DepGraph, read_treebank
from depeval.utils import format_score, make_markdown_metrics_table, setup_logging

verbose_opt = click.option(
    "--verbose",
    is_flag=True,
    help="How much info should we dump to the console",
)

config_opt = click.option(
    "--config",
    "config_path",
    type=click_pathlib.Path(resolve_path=True, exists=True, dir_okay=False),
    help="A YAML evaluation config, command line options take precedence over it.",
)

punct_opt = click.option(
    "--include-punct/--exclude-punct",
    default=None,
    help="Whether punctuation tokens are evaluated.  [default: exclude]",
)

simplify_opt = click.option(
    "--simplify/--no-simplify",
    "simplify_relation",
    default=None,
    help="Whether relation subtypes are ignored.  [default: simplify]",
)

treebanks_args = [
    click.argument(
        "system_path",
        type=click.Path(resolve_path=True, exists=True, dir_okay=False, allow_dash=True),
    ),
    click.argument(
        "gold_path",
        type=click.Path(resolve_path=True, exists=True, dir_okay=False),
    ),
]


def treebanks(f):
    for arg in reversed(treebanks_args):
        f = arg(f)
    return f


def load_treebanks(system_path: str, gold_path: str) -> tuple[list[DepGraph], list[DepGraph]]:
    try:
        return read_treebank(system_path, validate=False), read_treebank(gold_path)
    except ValueError as e:
        raise click.ClickException(f"Invalid treebank: {e}") from e


def get_config(config_path: Optional[pathlib.Path], **overrides) -> EvaluationConfig:
    try:
        return load_config(config_path, **overrides)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e


@click.group(help="Evaluate dependency parses against a gold treebank")
def cli():
    pass


@cli.command(help="Compute attachment scores for a parsed treebank")
@treebanks
@config_opt
@punct_opt
@simplify_opt
@click.option(
    "--to",
    "out_format",
    type=click.Choice(("json", "md", "terminal")),
    default="terminal",
    help="The output format for the scores",
    show_default=True,
)
@verbose_opt
def score(
    config_path: Optional[pathlib.Path],
    gold_path: str,
    include_punct: Optional[bool],
    out_format: Literal["json", "md", "terminal"],
    simplify_relation: Optional[bool],
    system_path: str,
    verbose: bool,
):
    setup_logging(verbose=verbose)
    config = get_config(
        config_path, include_punct=include_punct, simplify_relation=simplify_relation
    )
    system_set, gold_set = load_treebanks(system_path, gold_path)
    try:
        scores = metrics.evaluate(
            system_set,
            gold_set,
            include_punct=config.include_punct,
            simplify_relation=config.simplify_relation,
            uas_fields=config.uas_fields,
            las_fields=config.las_fields,
        )
    except EvaluationError as e:
        raise click.ClickException(str(e)) from e

    if out_format == "md":
        click.echo(make_markdown_metrics_table(scores))
    elif out_format == "terminal":
        metrics_table = Table(box=box.HORIZONTALS)
        for m in scores:
            metrics_table.add_column(m, justify="center")
        metrics_table.add_row(*(format_score(v) for v in scores.values()))
        console = Console()
        console.print(metrics_table)
    elif out_format == "json":
        json.dump(scores, sys.stdout)
    else:
        raise ValueError(f"Unkown format {out_format!r}.")


@cli.command(help="Per-relation precision and recall")
@treebanks
@config_opt
@simplify_opt
@click.option(
    "--errors",
    type=click.Choice(("head", "label", "both")),
    default="both",
    help="What makes a token wrong: its head, its relation or any of them.",
    show_default=True,
)
@click.option(
    "--show-undefined",
    is_flag=True,
    help="Also list the relations that appear neither in the system nor in the gold treebank.",
)
@verbose_opt
def relations(
    config_path: Optional[pathlib.Path],
    errors: Literal["head", "label", "both"],
    gold_path: str,
    show_undefined: bool,
    simplify_relation: Optional[bool],
    system_path: str,
    verbose: bool,
):
    setup_logging(verbose=verbose)
    config = get_config(config_path, simplify_relation=simplify_relation)
    system_set, gold_set = load_treebanks(system_path, gold_path)
    try:
        scores = metrics.relation_scores(
            system_set,
            gold_set,
            relations=config.relations,
            head_error=errors in ("head", "both"),
            label_error=errors in ("label", "both"),
            simplify_relation=config.simplify_relation,
        )
    except EvaluationError as e:
        raise click.ClickException(str(e)) from e

    relations_table = Table(box=box.HORIZONTALS)
    relations_table.add_column("Relation")
    relations_table.add_column("Precision", justify="center")
    relations_table.add_column("Recall", justify="center")
    for relation, (p, r) in scores.items():
        if p is None and r is None and not show_undefined:
            continue
        relations_table.add_row(relation, format_score(p), format_score(r))
    console = Console()
    console.print(relations_table)


@cli.command(help="Confusion matrix of relations or POS tags (rows: system, columns: gold)")
@treebanks
@click.argument(
    "output_path",
    type=click.File("w"),
    default="-",
)
@click.option(
    "--tag",
    type=click.Choice(("deprel", "upostag")),
    default="deprel",
    help="The annotation to cross-tabulate.",
    show_default=True,
)
@click.option(
    "--normalize",
    is_flag=True,
    help="Show proportions of the total number of tokens instead of counts.",
)
@verbose_opt
def confusion(
    gold_path: str,
    normalize: bool,
    output_path: IO[str],
    system_path: str,
    tag: Literal["deprel", "upostag"],
    verbose: bool,
):
    setup_logging(verbose=verbose)
    system_set, gold_set = load_treebanks(system_path, gold_path)
    try:
        matrix = confusion_matrix(system_set, gold_set, tag=tag, normalize=normalize)
    except EvaluationError as e:
        raise click.ClickException(str(e)) from e
    write_matrix(matrix, output_path)


if __name__ == "__main__":
    cli()

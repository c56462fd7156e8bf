import contextlib
import pathlib
import sys
from typing import IO, Generator, Mapping, Optional, Union, cast
import warnings

import rich.console
from loguru import logger


@contextlib.contextmanager
def smart_open(
    f: Union[pathlib.Path, str, IO], mode: str = "r", *args, **kwargs
) -> Generator[IO, None, None]:
    """Open files, paths and i/o streams transparently."""
    fh: IO
    if f == "-":
        if "r" in mode:
            stream = sys.stdin
        else:
            stream = sys.stdout
        if "b" in mode:
            fh = stream.buffer
        else:
            fh = stream
        close = False
    elif hasattr(f, "write") or hasattr(f, "read"):
        fh = cast(IO, f)
        close = False
    else:
        fh = open(cast(Union[pathlib.Path, str], f), mode, *args, **kwargs)
        close = True

    try:
        yield fh
    finally:
        if close:
            try:
                fh.close()
            except AttributeError:
                pass


def format_score(score: Optional[float]) -> str:
    """Percentage with two decimals, undefined scores are shown as `N/A`."""
    if score is None:
        return "N/A"
    return f"{100*score:05.2f}"


# TODO: use rich table markdown style for this instead
def make_markdown_metrics_table(metrics: Mapping[str, Optional[float]]) -> str:
    column_width = max(7, *(len(k) for k in metrics.keys()))
    keys, values = zip(*metrics.items())
    headers = "|".join(k.center(column_width) for k in keys)
    midrule = "|".join([f":{'-'*(column_width-2)}:"] * len(keys))
    row = "|".join(format_score(v).center(column_width) for v in values)
    return "\n".join(f"|{r}|" for r in (headers, midrule, row))


def setup_logging(
    console: Optional[rich.console.Console] = None,
    verbose: bool = False,
    log_file: Optional[pathlib.Path] = None,
    replace_warnings: bool = True,
):
    if console is None:
        console = rich.console.Console(stderr=True)
    logger.remove()  # Remove the default logger
    appname = "depeval"

    if verbose:
        log_level = "DEBUG"
        log_fmt = (
            f"\\[{appname}]"
            " [green]{time:YYYY-MM-DD HH:mm:ss.SSS}[/green] | [blue]{level: <8}[/blue] |"
            " {message}"
        )
    else:
        log_level = "INFO"
        log_fmt = (
            f"\\[{appname}]"
            " [green]{time:YYYY-MM-DD}T{time:HH:mm:ss}[/green] {level} "
            " {message}"
        )

    logger.add(
        lambda m: console.print(m, end=""),
        colorize=True,
        format=log_fmt,
        level=log_level,
    )

    if log_file:
        logger.add(
            log_file,
            colorize=False,
            format=(f"[{appname}] {{time:YYYY-MM-DD HH:mm:ss.SSS}} | {{level: <8}} | {{message}}"),
            level="DEBUG",
        )

    # Deal with stdlib.warnings
    def showwarning(message, category, filename, lineno, file=None, line=None):
        logger.warning(warnings.formatwarning(message, category, filename, lineno, None).strip())

    if replace_warnings:
        warnings.showwarning = showwarning

"""Click option helpers shared by agentdocs commands."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

import click

from agentdocs.cli.console import print_error
from agentdocs.domain.exceptions import AgentDocsError


def json_option[F: Callable[..., Any]](func: F) -> F:
    """
    Decorator adding ``--json`` to a command.

    Options added:
        --json: Print machine-readable JSON instead of rich output
    """

    @click.option(
        "--json",
        "as_json",
        is_flag=True,
        help="Print JSON instead of formatted output",
    )
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def reports_errors[F: Callable[..., Any]](func: F) -> F:
    """
    Decorator turning domain errors into a printed error and exit status 1.

    Unknown collection, bundle, rule or schema names surface as KeyError.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except AgentDocsError as e:
            print_error(str(e))
            raise click.exceptions.Exit(1) from e
        except KeyError as e:
            print_error(str(e.args[0]) if e.args else "Unknown name")
            raise click.exceptions.Exit(1) from e

    return wrapper  # type: ignore[return-value]

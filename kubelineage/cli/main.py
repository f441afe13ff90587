"""``kubelineage`` command group.

Every command reads one JSON batch (a descriptor list, a Kubernetes List
or a ``{"resources": [...], "root_name": ...}`` object) from ``--file``
or stdin, builds the graph and prints one view of it to stdout. Logs go to
stderr.
"""

from __future__ import annotations

import json
from typing import IO, Any

import click

from kubelineage import __version__
from kubelineage.config import load_config
from kubelineage.graph.builder import build_lineage_graph, load_descriptors
from kubelineage.graph.diagnostics import format_missing_report, missing_reference_report
from kubelineage.graph.errors import LineageError
from kubelineage.graph.export import EXPORT_FORMATS, export_graph
from kubelineage.graph.lineage_graph import LineageGraph
from kubelineage.models.config import LineageConfig
from kubelineage.observability.logging import get_logger, setup_logging

_logger = get_logger("cli")


def _load_graph(ctx: click.Context) -> LineageGraph:
    opts: dict[str, Any] = ctx.obj
    config: LineageConfig = opts["config"]
    stream: IO[str] = opts["file"]
    try:
        payload = json.load(stream)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"input is not valid JSON: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise click.ClickException(f"input is not valid UTF-8: {exc}") from exc
    try:
        descriptors, embedded_root = load_descriptors(payload)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    root_name = opts["root_name"] or embedded_root or config.graph.root_name
    try:
        return build_lineage_graph(descriptors, root_name, validate=config.graph.validate_ownership)
    except LineageError as exc:
        _logger.error("graph_build_failed", error=str(exc))
        raise click.ClickException(str(exc)) from exc


def _require_key(graph: LineageGraph, key: str) -> None:
    if key not in graph:
        raise click.ClickException(f"no resource with key {key!r}")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__)
@click.option(
    "--file",
    "-f",
    "input_file",
    type=click.File("r", encoding="utf-8"),
    default="-",
    show_default=True,
    help="JSON batch to read ('-' for stdin).",
)
@click.option("--root-name", default=None, help="Name of the cluster root node.")
@click.option("--no-validate", is_flag=True, default=False, help="Skip the ownership cycle check.")
@click.pass_context
def cli(ctx: click.Context, input_file: IO[str], root_name: str | None, no_validate: bool) -> None:
    """Build a resource lineage graph from a JSON batch and query it."""
    try:
        config = load_config()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    if no_validate:
        config.graph.validate_ownership = False
    setup_logging(config.log.level, json_output=config.log.json_output)
    ctx.obj = {"config": config, "file": input_file, "root_name": root_name}


@cli.command()
@click.pass_context
def graph(ctx: click.Context) -> None:
    """Print the serialized tree (every node, sorted by key)."""
    lineage = _load_graph(ctx)
    click.echo(json.dumps(lineage.to_tree_result(), indent=2))


@cli.command()
@click.pass_context
def orphans(ctx: click.Context) -> None:
    """Print orphaned resource keys, one per line."""
    for key in _load_graph(ctx).find_orphans():
        click.echo(key)


@cli.command()
@click.argument("key")
@click.pass_context
def related(ctx: click.Context, key: str) -> None:
    """Print every resource related to KEY."""
    lineage = _load_graph(ctx)
    _require_key(lineage, key)
    for related_key in lineage.get_related_items(key):
        click.echo(related_key)


@cli.command()
@click.argument("key")
@click.pass_context
def impact(ctx: click.Context, key: str) -> None:
    """Print the resources affected by a change to KEY."""
    lineage = _load_graph(ctx)
    _require_key(lineage, key)
    for entry in lineage.compute_impact(key):
        click.echo(f"{entry.key}\t{entry.reason}")


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(EXPORT_FORMATS, case_sensitive=False),
    default=None,
    help="Output format (default: KUBELINEAGE_EXPORT_FORMAT).",
)
@click.option("--key", default=None, help="Only export the subgraph around this resource.")
@click.pass_context
def export(ctx: click.Context, fmt: str | None, key: str | None) -> None:
    """Render the graph as Graphviz DOT or a Mermaid flowchart."""
    lineage = _load_graph(ctx)
    if key is not None:
        _require_key(lineage, key)
    config: LineageConfig = ctx.obj["config"]
    click.echo(export_graph(lineage, (fmt or config.export.format).lower(), key), nl=False)


@cli.command()
@click.pass_context
def missing(ctx: click.Context) -> None:
    """Print declared references whose target is not in the batch."""
    for line in format_missing_report(missing_reference_report(_load_graph(ctx))):
        click.echo(line)

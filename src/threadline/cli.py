from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from threadline.adapters import default_input_path, get_adapter
from threadline.engine import ConvertResult, convert_archive, index_path_for, load_index
from threadline.linearize import StructuralViolation
from threadline.redact import redact_value
from threadline.render import FORMATS, render_tree

SOURCE_SYSTEM = "chatgpt"

app = typer.Typer(help="Linearize ChatGPT conversation exports into YAML or JSON.", no_args_is_help=True)


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug details to stderr."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _resolve_input(input_path: Path | None) -> Path:
    if input_path is not None:
        resolved = input_path.expanduser().resolve()
    else:
        resolved = default_input_path(SOURCE_SYSTEM).resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"Path does not exist: {resolved}")
    return resolved


def _print_convert_summary(result: ConvertResult, *, output_path: Path, history_subpath: str) -> None:
    console = Console()
    paths = Panel(
        f"[dim]output_path[/]\n{output_path}\n\n[dim]history_root[/]\n{output_path / history_subpath}",
        title="[bold]Output",
        border_style="dim",
    )
    console.print(paths)

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Metric", style="dim")
    table.add_column("Count", justify="right")
    table.add_row("[bold]Discovered[/]", str(result.discovered))
    table.add_row("Exported", str(result.exported))
    table.add_row("Updated", str(result.updated))
    table.add_row("Skipped", str(result.skipped))
    table.add_row("Failed", str(result.failed))
    if result.dry_run:
        table.add_row("[dim]dry_run[/]", "[yellow]true[/]")
    console.print(table)


@app.command("convert")
def convert_command(
    input_path: Path | None = typer.Option(
        None,
        "--input-path",
        help="conversations.json, the export folder, or the export .zip.",
    ),
    output_path: Path = typer.Option(
        ..., "--output-path", help="Folder that receives the converted conversations."
    ),
    history_subpath: str = typer.Option(
        "history",
        "--history-subpath",
        help="Subpath inside the output folder where month folders are written.",
    ),
    fmt: str = typer.Option("yaml", "--format", help="Output format: yaml or json."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Plan the conversion without writing files."
    ),
    no_redact: bool = typer.Option(
        False, "--no-redact", help="Do not redact API keys, tokens, or passwords in output."
    ),
) -> None:
    """Convert every conversation of an export, grouped by month."""
    fmt = fmt.strip().lower()
    if fmt not in FORMATS:
        raise typer.BadParameter(f"Unsupported format {fmt!r}; choose one of: {', '.join(FORMATS)}")
    source_input = _resolve_input(input_path)
    output = output_path.expanduser().resolve()
    console = Console()
    with console.status(f"Converting {source_input.name}...", spinner="dots") as status:
        try:
            result = convert_archive(
                adapter=get_adapter(SOURCE_SYSTEM),
                input_path=source_input,
                output_path=output,
                history_subpath=history_subpath,
                source_system=SOURCE_SYSTEM,
                fmt=fmt,
                dry_run=dry_run,
                redact=not no_redact,
            )
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        status.update(f"discovered={result.discovered} exported={result.exported}")
    _print_convert_summary(result, output_path=output, history_subpath=history_subpath)
    if result.failed:
        console.print(f"[yellow]{result.failed} conversation(s) could not be converted; run with --verbose for details.[/]")


@app.command("show")
def show_command(
    conversation_id: str = typer.Argument(..., help="Id of the conversation to display."),
    input_path: Path | None = typer.Option(
        None,
        "--input-path",
        help="conversations.json, the export folder, or the export .zip.",
    ),
    no_redact: bool = typer.Option(
        False, "--no-redact", help="Show secrets instead of [REDACTED]."
    ),
) -> None:
    """Print one linearized conversation as a tree of teasers."""
    adapter = get_adapter(SOURCE_SYSTEM)
    source_input = _resolve_input(input_path)
    try:
        raw = adapter.find_conversation(source_input, conversation_id)
    except KeyError:
        typer.echo(f"Conversation not found: {conversation_id}")
        raise typer.Exit(1)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    try:
        conversation = adapter.parse_conversation(raw, redact=not no_redact)
    except StructuralViolation as exc:
        typer.echo(f"Broken message tree: {exc}")
        raise typer.Exit(1)
    Console().print(render_tree(redact_value(conversation.to_dict(), redact=not no_redact)))


@app.command("stats")
def stats_command(
    output_path: Path = typer.Option(
        ..., "--output-path", help="Folder containing converted conversations."
    ),
) -> None:
    """Show index totals and last update time."""
    index_path = index_path_for(output_path.expanduser().resolve())
    if not index_path.exists():
        typer.echo("index_found=false conversations=0")
        return
    conversations = load_index(index_path)["conversations"]
    timestamps = sorted(record.get("updated_at", "") for record in conversations.values())
    last_updated = timestamps[-1] if timestamps else ""
    months = sorted({record.get("month", "") for record in conversations.values()})
    typer.echo(
        f"index_found=true conversations={len(conversations)} months={len(months)} last_updated={last_updated}"
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()

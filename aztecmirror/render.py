"""
Rendering functions for aztecmirror output.

The format_* functions turn api result dicts into the plain text returned
by MCP tools. The render_* functions print rich tables for the CLI.
"""

from itertools import groupby
from typing import Any, Dict, Optional

from rich import box
from rich.console import Console
from rich.table import Table

console = Console()


# === PLAIN TEXT (MCP tool results) ===

def format_sync_result(result: Dict[str, Any]) -> str:
    lines = [
        "✓ Sync completed" if result['success'] else "⚠ Sync completed with errors",
        "",
        f"Version: {result['version']}",
        result['message'],
        "",
        "Repositories:",
    ]

    for repo in result['repos']:
        icon = "✓" if repo.get('ok', True) else "✗"
        lines.append(f"  {icon} {repo['name']}: {repo['status']}")

    return "\n".join(lines)


def format_status(status: Dict[str, Any]) -> str:
    lines = [
        "Aztec MCP Server Status",
        "",
        f"Repos directory: {status['repos_dir']}",
        "",
        "Repositories:",
    ]

    for repo in status['repos']:
        icon = "✓" if repo['cloned'] else "○"
        commit = f" ({repo['commit']})" if repo.get('commit') else ""
        lines.append(f"  {icon} {repo['name']}{commit}")
        lines.append(f"    {repo['description']}")

    if not any(repo['cloned'] for repo in status['repos']):
        lines.append("")
        lines.append("No repositories cloned. Run aztec_sync_repos to get started.")

    return "\n".join(lines)


def format_search_results(result: Dict[str, Any]) -> str:
    """Matches as markdown: a bold file:line heading over a fenced snippet."""
    lines = [result['message'], ""]

    if not result['success'] or not result['results']:
        return "\n".join(lines)

    for match in result['results']:
        location = match['file'] if match.get('line') is None else f"{match['file']}:{match['line']}"
        lines.append(f"**{location}**")
        lines.append("```")
        lines.append(match['content'])
        lines.append("```")
        lines.append("")

    return "\n".join(lines)


def format_examples_list(result: Dict[str, Any]) -> str:
    """Example names grouped by owning repository, in discovery order."""
    lines = [result['message'], ""]

    if not result['success'] or not result['examples']:
        return "\n".join(lines)

    order = []
    for example in result['examples']:
        if example['repo'] not in order:
            order.append(example['repo'])

    by_repo = sorted(result['examples'], key=lambda e: order.index(e['repo']))
    for repo, examples in groupby(by_repo, key=lambda e: e['repo']):
        lines.append(f"**{repo}:**")
        for example in examples:
            lines.append(f"  - {example['name']}")
        lines.append("")

    return "\n".join(lines)


def format_example_content(result: Dict[str, Any]) -> str:
    if not result['success'] or not result.get('content'):
        return result['message']

    example = result['example']
    lines = [
        f"**{example['name']}** ({example['repo']})",
        f"Path: {example['path']}",
        "",
        "```noir",
        result['content'],
        "```",
    ]
    return "\n".join(lines)


def format_file_content(result: Dict[str, Any]) -> str:
    if not result['success'] or not result.get('content'):
        return result['message']
    return result['content']


# === TABLES (CLI --table) ===

def _table(title: Optional[str]) -> Table:
    return Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )


def render_sync_table(result: Dict[str, Any]) -> None:
    """
    Render a sync result as a table.

    Args:
        result: Dict returned by AztecMirror.sync()
    """
    if not result['repos']:
        console.print(f"[yellow]{result['message']}[/yellow]")
        return

    table = _table(f"Sync @ {result['version']}")
    table.add_column("Repository", style="cyan")
    table.add_column("Action", style="green")
    table.add_column("Commit", style="dim")
    table.add_column("Status")

    for repo in result['repos']:
        style = "" if repo.get('ok', True) else "red"
        table.add_row(
            repo['name'],
            repo.get('action', ''),
            repo.get('commit', ''),
            f"[{style}]{repo['status']}[/{style}]" if style else repo['status'],
        )

    console.print(table)
    colour = "green" if result['success'] else "yellow"
    console.print(f"[{colour}]{result['message']}[/{colour}]")


def render_status_table(status: Dict[str, Any]) -> None:
    table = _table("Repository Status")
    table.add_column("Repository", style="cyan")
    table.add_column("Cloned", style="green")
    table.add_column("Commit", style="dim")
    table.add_column("Tag", style="blue")
    table.add_column("Description")

    for repo in status['repos']:
        table.add_row(
            repo['name'],
            "✓" if repo['cloned'] else "○",
            repo.get('commit', ''),
            repo.get('tag', ''),
            repo['description'],
        )

    console.print(table)
    console.print(f"[dim]{status['repos_dir']}[/dim]")


def render_search_table(result: Dict[str, Any]) -> None:
    if not result['success'] or not result['results']:
        console.print(f"[yellow]{result['message']}[/yellow]")
        return

    table = _table(result['message'])
    table.add_column("File", style="cyan", overflow="fold")
    table.add_column("Line", style="dim", justify="right")
    table.add_column("Content")

    for match in result['results']:
        line = match.get('line')
        table.add_row(match['file'], "" if line is None else str(line), match['content'])

    console.print(table)


def render_examples_table(result: Dict[str, Any]) -> None:
    if not result['success'] or not result['examples']:
        console.print(f"[yellow]{result['message']}[/yellow]")
        return

    table = _table(result['message'])
    table.add_column("Example", style="cyan")
    table.add_column("Repository", style="green")
    table.add_column("Path", style="dim", overflow="fold")

    for example in result['examples']:
        table.add_row(example['name'], example['repo'], example['path'])

    console.print(table)

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from aliasforge import __version__
from aliasforge.block import block_text, locate_block
from aliasforge.config import Config
from aliasforge.engine import AliasForge
from aliasforge.errors import AliasForgeError
from aliasforge.grammars import get_grammar, supported_shells
from aliasforge.models import AliasRecord, is_valid_name
from aliasforge.porter import FORMATS, format_for_path
from aliasforge.rollback import LATEST
from aliasforge.storage import AliasStorage

console = Console()
storage = AliasStorage()
config = Config()
forge = AliasForge(config)

SHELL_CHOICE = click.Choice(supported_shells(), case_sensitive=False)

# Pygments lexer per shell id for --dry-run output
LEXERS = {"fish": "fish", "powershell": "powershell", "cmd": "batch"}


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def resolve_shell(shell):
    """The requested shell, or the detected one"""
    return shell or forge.detect_shell().default_shell.value


def print_issues(issues, limit=10):
    for issue in issues[:limit]:
        console.print(f"[yellow]⚠[/] Skipped {issue.message}")
    if len(issues) > limit:
        console.print(f"[dim]   ... and {len(issues) - limit} more[/]")


def merge_imported(aliases):
    added = storage.merge(aliases)
    for alias in added:
        console.print(f"[green]✔[/] Imported: [cyan]{alias.name}[/]")
    skipped = len(aliases) - len(added)
    console.print("\n[bold green]Import Complete![/]")
    console.print(f"  Imported: {len(added)} aliases")
    if skipped:
        console.print(f"  Skipped: {skipped} existing aliases")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.version_option(version=__version__, prog_name="aliasforge")
def main(verbose):
    """aliasforge - move aliases between your collection and your shells"""
    setup_logging(verbose)


@main.command()
def detect():
    """Show the detected platform, shell and config file"""
    info = forge.detect_shell()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_row("Platform", info.platform)
    table.add_row("Shell", f"[cyan]{info.default_shell.value}[/]")
    table.add_row("Binary", info.shell_path)
    table.add_row("Config", str(info.config_path))
    console.print(table)


@main.command(name="list")
@click.option("--tag", "-t", help="Only show aliases with this tag")
def list_aliases(tag):
    """List aliases in your collection"""
    aliases = storage.list_all()
    if tag:
        aliases = [a for a in aliases if tag in a.tags]
    if not aliases:
        console.print("[yellow]No aliases found[/]")
        return

    table = Table(title=f"Aliases ({len(aliases)})", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Command", style="white")
    table.add_column("Description", style="dim")
    table.add_column("Tags", style="yellow")
    table.add_column("Enabled")

    for alias in sorted(aliases, key=lambda a: a.name):
        table.add_row(
            alias.name,
            alias.command[:50] + "..." if len(alias.command) > 50 else alias.command,
            alias.description or "—",
            ", ".join(alias.tags),
            "[green]yes[/]" if alias.enabled else "[red]no[/]",
        )
    console.print(table)


@main.command()
@click.option("--name", "-n", prompt=True, help="Alias name")
@click.option("--command", "-c", prompt=True, help="Command to alias")
@click.option("--description", "-d", default="", help="Description of the alias")
@click.option("--tags", "-t", help="Comma-separated tags for the alias")
@click.option("--profile", "-p", help="Profile the alias belongs to")
def add(name, command, description, tags, profile):
    """Add a new alias to your collection"""
    if not is_valid_name(name):
        console.print(f"[red]✗[/] Invalid alias name '{name}'")
        console.print("[dim]   Names start with a letter or '_' and use letters, digits, '_' or '-'[/]")
        raise SystemExit(1)

    tag_list = []
    if tags:
        tag_list = [tag.strip() for tag in tags.split(",") if tag.strip()]

    alias = AliasRecord(name=name, command=command, description=description, tags=tag_list, profile=profile)
    if storage.add(alias):
        console.print(f"[green]✔[/] Added alias: [cyan]{name}[/] = '{command}'")
        console.print("[dim]💡 Run 'aliasforge export shell' to write it to your shell config[/]")
    else:
        console.print(f"[red]✗[/] Alias '{name}' already exists!")


@main.command()
@click.argument("name")
def remove(name):
    """Remove an alias from your collection"""
    if storage.remove(name):
        console.print(f"[green]✔[/] Removed alias: [cyan]{name}[/]")
    else:
        console.print(f"[red]✗[/] Alias '{name}' not found!")


@main.command()
@click.argument("name")
def enable(name):
    """Include an alias in shell exports"""
    if storage.set_enabled(name, True):
        console.print(f"[green]✔[/] Enabled [cyan]{name}[/]")
    else:
        console.print(f"[red]✗[/] Alias '{name}' not found!")


@main.command()
@click.argument("name")
def disable(name):
    """Leave an alias out of shell exports"""
    if storage.set_enabled(name, False):
        console.print(f"[green]✔[/] Disabled [cyan]{name}[/]")
    else:
        console.print(f"[red]✗[/] Alias '{name}' not found!")


@main.group(name="import")
def import_group():
    """Import aliases from a shell, a config file or a document"""


@import_group.command(name="shell")
@click.argument("shell", required=False, type=SHELL_CHOICE)
def import_shell(shell):
    """Import the aliases a live shell currently defines"""
    shell = resolve_shell(shell)
    with console.status(f"Asking {shell} for its aliases..."):
        result = forge.import_from_shell(shell)
    if not result.success:
        console.print(f"[red]✗[/] {result.error}")
        raise SystemExit(1)

    console.print(f"[cyan]Found {len(result.aliases)} active aliases[/]")
    print_issues(result.issues)
    merge_imported(result.aliases)


@import_group.command(name="config")
@click.argument("shell", required=False, type=SHELL_CHOICE)
@click.option("--file", "-f", "filepath", type=click.Path(), help="Config file to scan")
def import_config(shell, filepath):
    """Import alias statements from a shell config file"""
    result = forge.scan_config(resolve_shell(shell), filepath)
    if not result.success:
        console.print(f"[red]✗[/] {result.error}")
        raise SystemExit(1)

    console.print(f"[cyan]Found {len(result.aliases)} aliases[/]")
    print_issues(result.issues)
    merge_imported(result.aliases)


@import_group.command(name="file")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", type=click.Choice(FORMATS), help="Document format (default: from suffix)")
def import_file(filepath, fmt):
    """Import aliases from a JSON or YAML export"""
    path = Path(filepath)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"[red]✗[/] Cannot read {path}: {exc}")
        raise SystemExit(1)
    result = forge.import_from_file(
        text,
        existing_names=storage.names(),
        format=fmt or format_for_path(path),
    )
    if not result.success:
        console.print(f"[red]✗[/] {result.error}")
        raise SystemExit(1)

    for record in result.invalid:
        console.print(f"[yellow]⚠[/] Invalid {record.message}")
    for alias in result.duplicates:
        console.print(f"[dim]  Duplicate skipped: {alias.name}[/]")
    merge_imported(result.valid)


@main.group(name="export")
def export_group():
    """Export aliases to a shell config or a document"""


@export_group.command(name="shell")
@click.argument("shell", required=False, type=SHELL_CHOICE)
@click.option("--file", "-f", "filepath", type=click.Path(), help="Custom config file path")
@click.option("--dry-run", is_flag=True, help="Preview the new managed block without writing")
def export_shell(shell, filepath, dry_run):
    """Write enabled aliases into the shell's managed block"""
    shell = resolve_shell(shell)
    aliases = storage.list_all()

    if dry_run:
        try:
            target, previous, new_text = forge.preview_export(aliases, shell, filepath)
        except AliasForgeError as exc:
            console.print(f"[red]✗[/] {exc.message}")
            raise SystemExit(1)
        console.print(f"[cyan]Dry run for {target.config_path}[/]")
        if previous:
            console.print("[dim]Current managed block will be replaced[/]")
        grammar = get_grammar(shell)
        block = block_text(new_text, locate_block(new_text, grammar.start_marker, grammar.end_marker))
        console.print(Syntax(block, LEXERS.get(grammar.shell_id, "bash"), theme="ansi_dark", word_wrap=True))
        return

    result = forge.export_to_shell(aliases, shell, filepath)
    if not result.success:
        console.print(f"[red]✗[/] {result.error}")
        raise SystemExit(1)

    console.print(f"[green]✔[/] Exported {result.count} aliases to {result.path}")
    if result.backup_path:
        console.print(f"[dim]   Backup: {result.backup_path}[/]")
    console.print(f"[dim]   Run: source {result.path}[/]")


@export_group.command(name="file")
@click.argument("filepath", type=click.Path(dir_okay=False))
@click.option("--format", "fmt", type=click.Choice(FORMATS), help="Document format (default: from suffix)")
@click.option("--tag", "-t", help="Only export aliases with this tag")
def export_file(filepath, fmt, tag):
    """Save your collection as a JSON or YAML document"""
    path = Path(filepath)
    aliases = storage.list_all()
    if tag:
        aliases = [a for a in aliases if tag in a.tags]
    text = forge.export_to_file(aliases, format=fmt or format_for_path(path))
    try:
        forge.fs.write_text(path, text)
    except AliasForgeError as exc:
        console.print(f"[red]✗[/] {exc.message}")
        raise SystemExit(1)
    console.print(f"[green]✔[/] Exported {len(aliases)} aliases to {path}")


@main.group()
def backups():
    """Inspect and create config file backups"""


@backups.command(name="list")
@click.argument("filepath", required=False, type=click.Path())
@click.option("--shell", "-s", type=SHELL_CHOICE, help="Use this shell's config file")
def list_backups(filepath, shell):
    """List backups of a config file, oldest first"""
    try:
        path = Path(filepath) if filepath else forge.target_for(resolve_shell(shell)).config_path
        snapshots = forge.list_backups(path)
    except AliasForgeError as exc:
        console.print(f"[red]✗[/] {exc.message}")
        raise SystemExit(1)
    if not snapshots:
        console.print(f"[yellow]No backups found for {path}[/]")
        return

    table = Table(title=f"Backups of {path}", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan")
    table.add_column("Created (UTC)", style="white")
    table.add_column("File", style="dim")
    for snapshot in snapshots:
        table.add_row(
            snapshot.backup_id,
            snapshot.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            snapshot.backup_path.name,
        )
    console.print(table)


@backups.command(name="create")
@click.argument("filepath", type=click.Path())
def create_backup(filepath):
    """Back up a file right now"""
    result = forge.backup_file(filepath)
    if not result.success:
        console.print(f"[red]✗[/] {result.error}")
        raise SystemExit(1)
    console.print(f"[green]✔[/] Backup created: {result.backup_path}")


@main.command()
@click.argument("filepath", type=click.Path())
@click.option("--backup", "-b", "backup_id", default=LATEST, show_default=True, help="Backup ID or file name")
def restore(filepath, backup_id):
    """Restore a file from one of its backups"""
    result = forge.restore_file(filepath, backup_id)
    if not result.success:
        console.print(f"[red]✗[/] {result.error}")
        raise SystemExit(1)
    console.print(f"[green]✔[/] Restored {result.path} from {result.backup_path.name}")


if __name__ == "__main__":
    main()

import copy
import logging
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel

from .cli_config import (
    ReleaseToolConfig,
    create_sample_config,
    get_config,
    load_config,
    parse_git_configs,
)
from .error_handling import ReleaseToolError, get_error_handler, setup_error_handling
from .git_client import GitClient
from .release import ReleaseNotes, build_release, load_release, parse_tag
from .render import get_template, render_release_notes
from .reporting import ReleaseReporter
from .structured_logging import configure_logging

__version__ = "0.1.0"

# Status output goes to stderr; stdout is reserved for the rendered notes.
console = Console(stderr=True)


def release_source_options(func):
    """Options shared by every command that assembles release notes."""
    decorators = [
        click.argument("release_file", type=click.Path(dir_okay=False)),
        click.option("--tag", "-t", help="Release tag (default: release file name without .toml)"),
        click.option(
            "--repository",
            "-r",
            type=click.Path(exists=True, file_okay=False),
            help="Path of the git repository (default from config or .)",
        ),
        click.option(
            "--git-config",
            "-c",
            "git_config",
            multiple=True,
            help="git config override as key=value, may be repeated",
        ),
        click.option(
            "--linkify", "-l", is_flag=True, help="Link commits and pull requests to GitHub"
        ),
        click.option("--debug", "-d", is_flag=True, help="Enable debug logging"),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _effective_config(
    repository: Optional[str],
    git_config: Tuple[str, ...],
    linkify: bool,
    debug: bool,
    template: Optional[str] = None,
) -> ReleaseToolConfig:
    config = copy.deepcopy(load_config())

    if repository:
        config.git.repository = repository
    if git_config:
        try:
            config.git.configs.update(parse_git_configs(list(git_config)))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--git-config")
    if template:
        config.output.template = template
    config.output.linkify = linkify or config.output.linkify
    if debug:
        config.logging.log_level = "DEBUG"

    configure_logging(config.logging.log_level)
    setup_error_handling(log_level=getattr(logging, config.logging.log_level.upper()))
    return config


def _fail(error: ReleaseToolError, debug: bool) -> click.ClickException:
    stats = get_error_handler().get_error_stats()
    if debug and stats:
        console.print("Logged errors:", style="dim")
        for key, count in sorted(stats.items()):
            console.print(f"  {key}: {count}", style="dim")
    return click.ClickException(str(error))


def _assemble(release_file: str, tag: Optional[str], config: ReleaseToolConfig) -> ReleaseNotes:
    release = load_release(release_file)
    git = GitClient.from_config(config.git)
    return build_release(
        release,
        git,
        tag or parse_tag(release_file),
        linkify=config.output.linkify,
    )


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version information")
@click.pass_context
def cli(ctx, version):
    """
    📦 release-tool: release notes from git history

    Summarizes the commits, contributors and dependency updates between two
    revisions of a project.
    """
    if version:
        console.print(f"release-tool version {__version__}", style="bold blue")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@release_source_options
@click.option(
    "--template",
    "-T",
    type=click.Path(dir_okay=False),
    help="Jinja2 template for the notes (default from config or the built-in template)",
)
@click.option(
    "--output",
    "-o",
    "output_file",
    type=click.Path(dir_okay=False, writable=True),
    help="Write the notes to a file instead of stdout",
)
def generate(
    release_file: str,
    tag: Optional[str],
    repository: Optional[str],
    git_config: Tuple[str, ...],
    linkify: bool,
    debug: bool,
    template: Optional[str],
    output_file: Optional[str],
) -> None:
    """
    Generate release notes from a release file.

    Examples:

      release-tool generate releases/v1.2.0.toml

      release-tool generate releases/v1.2.0.toml --linkify -o NOTES.md

      release-tool generate v1.2.0.toml -r ../project -c core.abbrev=12
    """
    config = _effective_config(repository, git_config, linkify, debug, template)

    try:
        notes = _assemble(release_file, tag, config)
        rendered = render_release_notes(notes, get_template(config.output.template))
    except ReleaseToolError as e:
        raise _fail(e, debug)

    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(rendered)
        console.print(f"✅ Release notes saved to {output_file}", style="green")
    else:
        click.echo(rendered, nl=False)


@cli.command()
@release_source_options
def summary(
    release_file: str,
    tag: Optional[str],
    repository: Optional[str],
    git_config: Tuple[str, ...],
    linkify: bool,
    debug: bool,
) -> None:
    """
    Show the dependency changes, commits and contributors of a release.

    Examples:

      release-tool summary releases/v1.2.0.toml
    """
    config = _effective_config(repository, git_config, linkify, debug)

    try:
        notes = _assemble(release_file, tag, config)
    except ReleaseToolError as e:
        raise _fail(e, debug)

    ReleaseReporter(Console()).print_summary(notes)


@cli.command()
def info():
    """Show supported manifests, release file keys and environment variables."""
    info_text = """
[bold blue]📋 Supported Manifests:[/bold blue]

• [green]vendor.conf[/green] - name commit [clone-url] per line, # comments
• [green]go.mod[/green] - require ( ... ) block, // comments

The manifest is read at both revisions; vendor.conf is tried before go.mod.

[bold blue]📄 Release File (TOML):[/bold blue]

• [cyan]project_name[/cyan], [cyan]github_repo[/cyan] (owner/repo)
• [cyan]commit[/cyan] (required), [cyan]previous[/cyan], [cyan]pre_release[/cyan], [cyan]preface[/cyan]
• [cyan]\\[notes.<key>][/cyan] and [cyan]\\[breaking.<key>][/cyan] with title and description
• [cyan]\\[rename_deps.<key>][/cyan] with old and new import paths

[bold blue]🌍 Environment Variables:[/bold blue]

• [cyan]RELEASE_TOOL_REPOSITORY[/cyan] - Repository path
• [cyan]RELEASE_TOOL_GIT[/cyan] - git executable
• [cyan]RELEASE_TOOL_GIT_CONFIG[/cyan] - key=value,key=value git config overrides
• [cyan]RELEASE_TOOL_TEMPLATE[/cyan] - Template file
• [cyan]RELEASE_TOOL_LINKIFY[/cyan] - Link commits and pull requests
• [cyan]RELEASE_TOOL_LOG_LEVEL[/cyan] - Log level

[bold blue]💡 Usage Examples:[/bold blue]

  release-tool generate releases/v1.2.0.toml
  release-tool generate releases/v1.2.0.toml --linkify -o NOTES.md
  release-tool summary releases/v1.2.0.toml
  release-tool config init
"""
    console.print(
        Panel(
            info_text,
            title="[bold]release-tool Information[/bold]",
            border_style="blue",
        )
    )


@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command("init")
@click.option(
    "--path",
    type=click.Path(),
    default=".release-tool.json",
    help="Path where to create the config file",
    show_default=True,
)
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def config_init(path: str, force: bool):
    """Create a sample configuration file."""
    config_path = Path(path)

    if config_path.exists() and not force:
        console.print(f"⚠️  Config file already exists at {config_path}", style="yellow")
        console.print("Use --force to overwrite", style="dim")
        return

    try:
        config_path.write_text(create_sample_config(), encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Failed to create config file: {e}")

    console.print(f"✅ Created configuration file at {config_path}", style="green")
    console.print("Edit this file to customize your settings", style="dim")


@config.command("show")
def config_show():
    """Show current configuration settings."""
    current_config = get_config()
    out = Console()

    out.print(Panel("[bold blue]🔧 Configuration[/bold blue]", border_style="blue"))

    out.print("\n[bold cyan]🌳 Git Settings:[/bold cyan]")
    out.print(f"  Repository: {current_config.git.repository}")
    out.print(f"  Executable: {current_config.git.executable}")
    for key, value in current_config.git.configs.items():
        out.print(f"  -c {key}={value}")

    out.print("\n[bold cyan]📝 Output Settings:[/bold cyan]")
    out.print(f"  Template: {current_config.output.template}")
    out.print(f"  Linkify: {current_config.output.linkify}")

    out.print("\n[bold cyan]📋 Logging Settings:[/bold cyan]")
    out.print(f"  Log Level: {current_config.logging.log_level}")


if __name__ == "__main__":
    cli()

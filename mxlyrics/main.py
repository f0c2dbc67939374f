"""
Main CLI interface for mxlyrics

Command-line access to the lyrics service, mostly for trying queries and
checking the token state by hand:

- lyrics: look up plain or synchronized lyrics for a query
- token: show (or force) the current Musixmatch user token
- config show / config set: view or update the configuration
"""

import json
import sys
import time
import click
import functools
from pathlib import Path

from . import __version__
from .config.settings import get_settings, reload_settings
from .service import get_lyrics_service, reset_lyrics_service
from .utils.logger import configure_from_settings, setup_logging, get_logger, get_current_log_file


logger = get_logger(__name__)


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except click.ClickException:
            raise
        except Exception as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
        finally:
            reset_lyrics_service()
    return wrapper


def mask_token(value: str) -> str:
    """Show only the edges of a token"""
    if len(value) <= 12:
        return "*" * len(value)
    return f"{value[:6]}...{value[-6:]}"


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    mxlyrics - Musixmatch lyrics from the command line
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"mxlyrics v{__version__}")
        return

    if config:
        reload_settings(config)

    if verbose:
        ctx.obj['verbose'] = True
        setup_logging(level="DEBUG", colored_output=get_settings().logging.colored_output)
        logger.debug(f"Using {get_settings()}")
    else:
        configure_from_settings()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument('query', required=False)
@click.option('--artist', '-a', help='Artist name (use with --title instead of QUERY)')
@click.option('--title', '-t', help='Track title (use with --artist instead of QUERY)')
@click.option('--synced', is_flag=True, help='Print synchronized lyrics in LRC format')
@click.option('--json', 'as_json', is_flag=True, help='Print the full result as JSON')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write lyrics to a file')
@handle_error
def lyrics(query, artist, title, synced, as_json, output):
    """
    Look up lyrics for QUERY ("Artist - Title")
    """
    if not query and not title:
        raise click.UsageError("Provide a QUERY or --title (optionally with --artist)")

    service = get_lyrics_service()
    if query:
        result = service.find_lyrics(query)
    else:
        result = service.load_lyrics(artist, title)

    if result is None:
        click.echo(click.style("No lyrics found", fg='yellow'), err=True)
        sys.exit(1)

    if as_json:
        text = json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
    elif synced:
        text = result.to_lrc()
        if text is None:
            click.echo(click.style("No synchronized lyrics available, showing plain text", fg='yellow'), err=True)
            text = result.plain_text or ""
    else:
        text = result.plain_text or ""

    if output:
        Path(output).write_text(text + "\n", encoding='utf-8')
        click.echo(click.style(f"Lyrics saved to {output}", fg='green'))
    else:
        if result.track_name and not as_json:
            header = f"{result.artist_name} - {result.track_name}" if result.artist_name else result.track_name
            click.echo(click.style(header, fg='green', bold=True))
            click.echo()
        click.echo(text)


@cli.command()
@click.option('--refresh', is_flag=True, help='Acquire a new token even if the current one is valid')
@handle_error
def token(refresh):
    """
    Show the current Musixmatch user token
    """
    service = get_lyrics_service()
    current = service.token_manager.get_token(force_refresh=refresh)
    app_id_source = "scraped" if service.app_identity.discovered else "configured"

    click.echo(f"Token:   {mask_token(current.value)}")
    click.echo(f"Expires: in {current.remaining(time.time()):.0f}s")
    click.echo(f"App ID:  {service.app_identity.app_id} ({app_id_source})")
    click.echo(f"Stored:  {service.token_manager.store.path}")


# Configuration commands group
@cli.group()
def config():
    """
    Configuration management
    """
    pass


@config.command()
@handle_error
def show():
    """
    Show the effective configuration
    """
    settings = get_settings()

    sections = {
        'Musixmatch': settings.musixmatch,
        'Cache': settings.cache,
        'Network': settings.network,
        'Logging': settings.logging,
        'Security': settings.security,
    }
    for name, section in sections.items():
        click.echo(click.style(f"{name}:", fg='cyan', bold=True))
        for key, value in section.__dict__.items():
            click.echo(f"  {key}: {value}")

    log_file = get_current_log_file()
    click.echo(f"Log file: {log_file or '(console only)'}")

    if not settings.validate():
        sys.exit(1)


@config.command()
@click.option('--app-id', help='Set the Musixmatch app id sent before one is scraped')
@click.option('--cache-ttl', type=float, help='Set result cache lifetime in seconds')
@click.option('--timeout', type=float, help='Set HTTP request timeout in seconds')
@click.option('--token-file', type=click.Path(dir_okay=False), help='Set where the user token is stored')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Set logging level')
@handle_error
def set(app_id, cache_ttl, timeout, token_file, log_level):
    """
    Update configuration settings

    Changes are written to the user config file and apply from the next run.
    """
    settings = get_settings()
    changes = []

    if app_id:
        settings.musixmatch.app_id = app_id
        changes.append(f"App id: {app_id}")

    if cache_ttl is not None:
        settings.cache.ttl = cache_ttl
        changes.append(f"Cache TTL: {cache_ttl:g}s")

    if timeout is not None:
        settings.network.request_timeout = timeout
        changes.append(f"Request timeout: {timeout:g}s")

    if token_file:
        settings.security.token_storage_path = token_file
        changes.append(f"Token file: {token_file}")

    if log_level:
        settings.logging.level = log_level.upper()
        changes.append(f"Log level: {log_level.upper()}")

    if not changes:
        click.echo("No changes specified")
        return

    if not settings.validate():
        sys.exit(1)

    settings.save_config()
    click.echo("Configuration updated:")
    for change in changes:
        click.echo(f"   • {change}")


if __name__ == '__main__':
    cli()

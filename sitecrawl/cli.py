#!/usr/bin/env python3
"""
Command-line entry point of the sitecrawl crawler.

Usage:
  crawl [OPTIONS] <start-url> [num-threads]

Arguments:
  start-url           Absolute http(s) URL; its scheme and host bound the crawl
  num-threads         Number of worker threads (default 4)

Options:
  --config PATH       YAML/JSON file with defaults for any setting
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Also write logs to this file
  --log-format FORMAT Format string for log records
  --user-agent TEXT   User-Agent header
  --connect-timeout S Connect timeout per request
  --timeout S         Total timeout per request
  --insecure          Do not verify TLS certificates
  --robots            Honour robots.txt of the crawled site
  --json              Print the crawl summary as JSON
  --pretty            Indent the JSON summary
  --version, -v       Show the sitecrawl version

Example:
  crawl https://example.com/ 8 --robots --json --pretty
"""
import sys
from pathlib import Path
from urllib.parse import urlsplit

import click

from sitecrawl import __version__
from sitecrawl.config import load_config
from sitecrawl.engine import start_crawl
from sitecrawl.logger import DEFAULT_FORMAT, init_logging

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])
USAGE = "Usage: crawl [OPTIONS] <start-url> [num-threads]"


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _is_absolute(url: str) -> bool:
    parts = urlsplit(url)
    return parts.scheme.lower() in ("http", "https") and bool(parts.netloc)


class CrawlCommand(click.Command):
    """Reports malformed command lines with exit status 1."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            exc.exit_code = 1
            raise


@click.command(cls=CrawlCommand, context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='sitecrawl, version %(version)s')
@click.argument('start_url', required=False)
@click.argument('num_threads', required=False)
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML/JSON file with default settings.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (console only if omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Format string for log records'
)
@click.option('--user-agent', 'user_agent', default=None, help='User-Agent header')
@click.option(
    '--connect-timeout', 'connect_timeout',
    type=float, default=None,
    help='Connect timeout per request (seconds) [default: 10]'
)
@click.option(
    '--timeout', 'total_timeout',
    type=float, default=None,
    help='Total timeout per request (seconds) [default: 20]'
)
@click.option('--insecure', is_flag=True, help='Do not verify TLS certificates')
@click.option('--robots/--no-robots', 'respect_robots', default=None, help='Honour robots.txt')
@click.option('--json', 'as_json', is_flag=True, help='Print the summary as JSON')
@click.option('--pretty', is_flag=True, help='Indent the JSON summary (2 spaces)')
def cli(start_url, num_threads, config_path, log_level, log_file, log_format,
        user_agent, connect_timeout, total_timeout, insecure, respect_robots, as_json, pretty):
    """Crawl every page reachable from START_URL on the same scheme and host."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    if not start_url:
        print_error(USAGE)
    if not _is_absolute(start_url):
        print_error(f'Start URL must be an absolute http(s) URL: {start_url}\n{USAGE}')

    threads = None
    if num_threads is not None:
        try:
            threads = int(num_threads)
        except ValueError:
            threads = 0
        if threads < 1:
            print_error(f'num-threads must be a positive integer, got {num_threads!r}\n{USAGE}')

    try:
        cfg = load_config(
            config_path,
            start_url=start_url,
            threads=threads,
            user_agent=user_agent,
            connect_timeout=connect_timeout,
            total_timeout=total_timeout,
            verify_tls=False if insecure else None,
            respect_robots=respect_robots,
        )
    except Exception as e:
        print_error(f'Configuration error: {e}')

    try:
        summary = start_crawl(cfg)
    except Exception as e:
        print_error(f'Crawl failed: {e}')

    if as_json:
        click.echo(summary.json(pretty=pretty))
    else:
        click.echo(f'Total unique pages visited: {summary.visited_count}')
    if summary.interrupted:
        sys.exit(130)


if __name__ == "__main__":
    cli()

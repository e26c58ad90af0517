"""Command-line interface for ssg-cache.

Run ``ssg-cache init`` once at the start of every build so all build workers
share a fresh cache namespace.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
import sys

from rich.console import Console

from ssgcache.core.caching import BuildCache, BuildIdentity, CacheError
from ssgcache.core.config import CacheConfig, load_cache_config
from ssgcache.core.io import RealFileSystem, absolute_path
from ssgcache.core.utils.logging import configure_logging, get_logger

console = Console()


def _load_config(args: argparse.Namespace) -> CacheConfig:
    config = load_cache_config(Path(args.config) if args.config else None)
    if args.cache_dir:
        config = config.model_copy(update={"cache_dir": Path(args.cache_dir)})
    return config


async def init_build_async(config: CacheConfig) -> str:
    """Create and persist a new build id."""
    return await BuildCache.init(config)


async def read_build_id_async(config: CacheConfig) -> str | None:
    """Read the current build id without creating one."""
    identity = BuildIdentity(
        RealFileSystem(),
        absolute_path(config.resolved_cache_dir()),
        filename=config.build_id_filename,
    )
    return await identity.read()


def run_init(args: argparse.Namespace) -> int:
    """Start a new build namespace."""
    config = _load_config(args)
    cache_dir = config.resolved_cache_dir()
    log = get_logger(__name__, cache_dir=str(cache_dir))

    try:
        build_id = asyncio.run(init_build_async(config))
    except (OSError, CacheError) as e:
        log.error(f"Build init failed: {e}")
        console.print(f"[red]ERROR: Could not initialize build in {cache_dir}: {e}[/red]")
        return 1

    if args.quiet:
        print(build_id)
    else:
        console.print(f"[green]✅ New build:[/green] {build_id}")
        console.print(f"   Cache dir: {cache_dir}")
    return 0


def run_info(args: argparse.Namespace) -> int:
    """Show cache location, current build and effective settings."""
    config = _load_config(args)
    cache_dir = config.resolved_cache_dir()
    build_id = asyncio.run(read_build_id_async(config))

    console.print(f"[bold]Cache dir:[/bold] {cache_dir}")
    if build_id:
        console.print(f"[bold]Build ID:[/bold] {build_id}")
    else:
        console.print("[yellow]Build ID: none (run `ssg-cache init`)[/yellow]")
    console.print(f"[bold]Max wait:[/bold] {config.max_wait_seconds}s")
    console.print(
        f"[bold]Retries:[/bold] {config.retry_attempts} attempts, "
        f"{config.retry_delay_seconds}s apart"
    )
    console.print(f"[bold]Lock files:[/bold] {'on' if config.use_lock_files else 'off'}")
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="ssg-cache",
        description="ssg-cache - build-time memoizing cache for static-site generation",
    )
    p.add_argument("--config", default=None, help="Path to config file (.json/.yaml)")
    p.add_argument("--cache-dir", default=None, help="Cache root directory override")
    p.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    sub = p.add_subparsers(dest="cmd", required=True)

    init = sub.add_parser("init", help="Start a new build (writes a fresh BUILD_ID)")
    init.add_argument("-q", "--quiet", action="store_true", help="Print only the build id")

    sub.add_parser("info", help="Show cache location and current build")

    return p


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    try:
        configure_logging(level=args.log_level)
        if args.cmd == "init":
            return run_init(args)
        return run_info(args)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]ERROR: {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())

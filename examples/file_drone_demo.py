#!/usr/bin/env python3
"""
Demonstration script for the file drone.

This script watches a directory, prints every added, changed and removed file
as it happens, and shows how pausing, resuming and the updates guard behave.

Usage:
    python examples/file_drone_demo.py [--watch-dir PATH] [--duration SECONDS] [--pattern REGEX]
"""

import asyncio
import logging
import logging.config
import time
from pathlib import Path

import click
from file_drone import (
    ApplicationLifecycle,
    DroneConfig,
    FilesChangedNotification,
    NotificationCenter,
    WatchSetupError,
    default_controller,
)
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn, track
from rich.table import Table

logger = logging.getLogger(__name__)

# Initialize rich console
console = Console()


def create_stats_table(stats: dict) -> Table:
    """Create a rich table for surveillance statistics."""
    table = Table(title="📊 Surveillance Statistics", show_header=True)
    table.add_column("Metric", style="cyan", width=20)
    table.add_column("Value", style="white", width=15)
    table.add_column("Details", style="dim", width=30)

    refresh_stats = stats["refresh_stats"]
    signals = refresh_stats["signals"]

    table.add_row("🛰️  State", stats["state"], stats["directory"])
    table.add_row("📁 Tracked Files", str(stats["tracked_files"]), "Files in the committed baseline")
    table.add_row("🔄 Refreshes", str(refresh_stats["refreshes"]), "Completed enumerations")
    table.add_row("💾 Commits", str(refresh_stats["commits"]), "Baselines replaced")
    table.add_row("📡 Signals", str(signals["received"]), f"{signals['coalesced']} coalesced")
    table.add_row("🙈 Ignored", str(signals["ignored"]), "Signals while paused")

    if refresh_stats["errors"]:
        table.add_row("🔴 Recent Errors", str(len(refresh_stats["errors"])), "See logs for details")

    return table


def print_changes(notification: FilesChangedNotification) -> None:
    """Subscriber printing each broadcast change."""
    if notification.failed:
        console.print(f"⚠️  [red]Refresh of {notification.directory} failed:[/red] {notification.error}")
        return

    if not (notification.added or notification.changed or notification.removed):
        return

    table = Table(title=f"🔍 Changes in {notification.directory}", show_header=True)
    table.add_column("Change", style="cyan")
    table.add_column("File", style="white")

    changed_only = [path for path in notification.changed if path not in notification.added]
    for path in notification.added:
        table.add_row("➕ added", path.name)
    for path in changed_only:
        table.add_row("✏️  changed", path.name)
    for path in notification.removed:
        table.add_row("🗑️  removed", path.name)

    console.print(table)


async def demonstrate_file_drone(config: DroneConfig, duration: int):
    """
    Demonstrate automatic surveillance with pause/resume and the updates guard.

    Args:
        config: Drone configuration naming the watched directory
        duration: How long to watch (in seconds)
    """
    publisher = NotificationCenter()
    publisher.subscribe(print_changes)
    lifecycle = ApplicationLifecycle()
    controller = default_controller(config, publisher=publisher, lifecycle=lifecycle)

    console.print(
        Panel.fit(
            "🔍 [bold blue]File Drone Demo[/bold blue]\n"
            "• Initial baseline: every file reported as added\n"
            "• Live change detection while watching\n"
            "• Background/foreground pause and resume halfway through\n"
            "• Guarded refresh that leaves the baseline untouched\n\n"
            f"📁 Watching: [cyan]{controller.directory}[/cyan] | "
            f"⏱️  Duration: [yellow]{duration}s[/yellow]",
            title="File Drone",
            border_style="blue",
        )
    )

    try:
        controller.start()
    except WatchSetupError as e:
        console.print(f"❌ [red]Cannot watch directory:[/red] {e}")
        return

    await controller.wait_for_refreshes()
    console.print(f"✅ [bold green]Watching {len(controller.file_paths)} files[/bold green]")

    start_time = time.time()
    elapsed_time = 0.0
    paused = False

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        watch_task = progress.add_task("⏱️  Watching", total=duration)

        while elapsed_time < duration:
            await asyncio.sleep(1)
            elapsed_time = time.time() - start_time
            progress.update(watch_task, completed=elapsed_time)

            # Simulate the host going to the background for a few seconds
            if not paused and elapsed_time >= duration / 2:
                paused = True
                console.print("🌙 [yellow]Application entered background, pausing[/yellow]")
                lifecycle.enter_background()
                await asyncio.sleep(3)
                console.print("☀️  [yellow]Application entered foreground, resuming[/yellow]")
                lifecycle.enter_foreground()
                await controller.wait_for_refreshes()

    console.print("\n🔒 [bold yellow]Guarded refresh (baseline frozen)...[/bold yellow]")
    controller.disable_updates()
    try:
        diff = await controller.refresh()
        console.print(f"Delivered: {diff} | baseline still holds {len(controller.snapshot)} files")
    finally:
        controller.enable_updates()

    console.print(create_stats_table(controller.get_surveillance_stats()))

    console.print("\n🛑 [yellow]Stopping surveillance...[/yellow]")
    controller.stop()
    console.print("✅ [bold green]Surveillance stopped[/bold green]")


def create_sample_files(directory: Path):
    """Create some sample files to watch."""
    directory.mkdir(parents=True, exist_ok=True)

    sample_files = {
        "README.md": "# Sample\n\nFiles in this folder are watched by the file drone.\n",
        "notes.txt": "Remember to edit me while the demo runs.\n",
        "data.csv": "id,value\n1,42\n",
    }

    for name, content in track(sample_files.items(), description="Creating files..."):
        (directory / name).write_text(content, encoding='utf-8')

    console.print(f"✅ [bold green]Created {len(sample_files)} sample files in {directory}[/bold green]")


@click.command()
@click.option(
    '--watch-dir',
    '-d',
    type=click.Path(path_type=Path),
    default=Path('./watched'),
    help='Directory to watch (will be created if it doesn\'t exist)',
)
@click.option('--duration', '-t', type=int, default=30, help='Duration to run the demo in seconds')
@click.option('--pattern', '-p', default=None, help='Regular expression file names must match')
@click.option('--recursive', '-r', is_flag=True, help='Re-enumerate subdirectories on every refresh')
@click.option('--create-samples', '-s', is_flag=True, help='Create sample files for testing')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def main(watch_dir: Path, duration: int, pattern: str | None, recursive: bool, create_samples: bool, verbose: bool):
    """
    Run the file drone demonstration.

    Example usage:

        # Watch ./watched for 30 seconds
        python examples/file_drone_demo.py -s

        # Watch only text files in a specific directory for 2 minutes
        python examples/file_drone_demo.py -d /path/to/docs -t 120 -p '\\.txt$'
    """
    config = DroneConfig(
        directory_path=watch_dir,
        file_name_pattern=pattern,
        recursive=recursive,
        log_level="DEBUG" if verbose else "INFO",
    )
    logging.config.dictConfig(config.get_log_config())

    if create_samples:
        create_sample_files(watch_dir)

    try:
        asyncio.run(demonstrate_file_drone(config, duration))
    except KeyboardInterrupt:
        console.print("\n⚡ [yellow]Demo interrupted by user[/yellow]")
    except Exception as e:
        console.print(f"❌ [red]Demo failed:[/red] {e}")
        logger.exception("Full error details:")
        return 1

    console.print("\n🎉 [bold green]Demo completed successfully![/bold green]")
    return 0


if __name__ == '__main__':
    exit(main())

"""Shared formatting and file utilities for commands."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from rich.console import Console
from rich.table import Table

from blobstream_toolkit.verification.types import VerificationReport

# Shared console instance
console = Console()


def format_hash(value: str, length: int = 18) -> str:
    """
    Shorten a hex hash to its first and last characters.

    Args:
        value: Hex string, with or without 0x prefix
        length: Strings up to this length are returned unchanged

    Returns:
        Formatted hash like "0x12345678...9abcdef0"
    """
    if not value:
        return "N/A"
    if len(value) <= length:
        return value
    return f"{value[:10]}...{value[-8:]}"


def save_json_output(
    data: Dict[str, Any],
    filename: str,
    output_dir: str = "output",
    print_path: bool = True,
) -> str:
    """
    Save data to a JSON file with automatic directory creation.

    Args:
        data: Data to save
        filename: Output filename (can include subdirectories)
        output_dir: Base output directory (default: 'output')
        print_path: Whether to print the saved file path

    Returns:
        Full path to saved file
    """
    filepath = Path(output_dir) / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    if print_path:
        console.print(f"[cyan]Data saved to:[/cyan] {filepath}")

    return str(filepath)


def generate_timestamped_filename(prefix: str, extension: str = "json") -> str:
    """
    Generate a filename with timestamp.

    Args:
        prefix: Filename prefix
        extension: File extension (without dot)

    Returns:
        Filename like "prefix_20240315_123456.json"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"


def create_report_table(report: VerificationReport) -> Table:
    """One row per pipeline stage with what it produced."""
    table = Table(title=f"Blob verification {format_hash(report.tx_hash)}")
    table.add_column("Stage", style="cyan")
    table.add_column("Result")
    table.add_column("Details", style="dim")

    data = report.to_dict()
    failed = report.failed_stage

    def status(stage: str, done: bool) -> str:
        if failed == stage:
            return "[red]FAILED[/red]"
        return "[green]OK[/green]" if done else "[dim]skipped[/dim]"

    locator = data.get("locator", {})
    share_range = data.get("share_range", {})
    table.add_row(
        "locate",
        status("locate", "locator" in data),
        (
            f"height {locator['block_height']}, tx {locator['tx_index']}, "
            f"shares [{share_range['start']}, {share_range['end']})"
            if locator
            else ""
        ),
    )

    share_proof = data.get("share_proof", {})
    table.add_row(
        "share_inclusion",
        status("share_inclusion", bool(share_proof)),
        (
            f"{share_proof['share_count']} shares, rows "
            f"[{share_proof['start_row']}, {share_proof['end_row']}]"
            if share_proof
            else ""
        ),
    )

    inclusion = data.get("inclusion_proof", {})
    table.add_row(
        "batch_inclusion",
        status("batch_inclusion", bool(inclusion)),
        (
            f"leaf {inclusion['index']} of {inclusion['total']}, "
            f"{len(inclusion['aunts'])} aunts"
            if inclusion
            else ""
        ),
    )

    attestation = data["attestation"]
    table.add_row(
        "attestation",
        status("attestation", report.valid),
        f"nonce {attestation['nonce']}, batch "
        f"[{attestation['start_block']}, {attestation['end_block']})",
    )
    return table

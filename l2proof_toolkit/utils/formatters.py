"""Shared formatting and file utilities for commands."""

import json
from pathlib import Path
from typing import Any, Dict

from rich.console import Console
from rich.table import Table

from l2proof_toolkit.proofs.types import ProofBundle, RollupStateRoot
from l2proof_toolkit.utils.blockchain import to_hex

# Shared console instance
console = Console()


def format_hash(value: str, length: int = 10) -> str:
    """
    Shorten a hex hash or address for display.

    Args:
        value: 0x-prefixed hex string
        length: Total visible characters (default: 10)

    Returns:
        Formatted value like "0x1234...5678"
    """
    if not value:
        return "N/A"
    if len(value) <= length:
        return value
    return f"{value[:6]}...{value[-4:]}"


def save_json_output(
    data: Dict[str, Any],
    filename: str,
    output_dir: str = "output",
) -> str:
    """
    Save data to a JSON file with automatic directory creation.

    Args:
        data: Data to save
        filename: Output filename (can include subdirectories)
        output_dir: Base output directory (default: 'output')

    Returns:
        Full path to saved file
    """
    filepath = Path(output_dir) / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    return str(filepath)


def state_root_table(state_root: RollupStateRoot) -> Table:
    """Rich table describing a committed state root"""
    header = state_root.batch_header
    table = Table(title="Latest committed state root", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("State root", to_hex(state_root.value))
    table.add_row("Batch index", str(state_root.batch_index))
    table.add_row("Index in batch", str(state_root.index_within_batch))
    table.add_row("Batch root", to_hex(header.batch_root))
    table.add_row("Batch size", str(header.batch_size))
    table.add_row("Prev total elements", str(header.prev_total_elements))
    table.add_row("L2 block", str(state_root.producing_block_number))
    return table


def proof_bundle_table(bundle: ProofBundle) -> Table:
    """Rich table summarising a proof bundle's storage proofs"""
    table = Table(title=f"Storage proofs for {bundle.target}")
    table.add_column("#", justify="right")
    table.add_column("Kind", style="magenta")
    table.add_column("Slot", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Nodes", justify="right")
    for position, proof in enumerate(bundle.storage_proofs):
        table.add_row(
            str(position),
            f"{proof.kind.value}[{proof.sequence}]",
            format_hash(to_hex(proof.slot_key), 14),
            format_hash(to_hex(proof.raw_value), 14),
            str(len(proof.trie_witness)),
        )
    return table

"""
TxBridge - Command Line Interface
===================================
Developer tools for inspecting node payloads.

Commands:
- decode: Decode a raw transaction hex
- txid: Print txid and wtxid of a raw transaction
- verify: Check a getrawtransaction (verbose) dump against its own hex
- address: Validate an address for the configured network
- version: Show version
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

# Internal imports
from tx_bridge.codec.consensus import Transaction
from tx_bridge.config import get_settings
from tx_bridge.constants import Network
from tx_bridge.domain.addressing import Address
from tx_bridge.domain.amount import format_amount
from tx_bridge.domain.transaction import VerboseRawTransaction
from tx_bridge.domain.wire import loads
from tx_bridge.errors import (
    AddressFormatError,
    ConfigError,
    DecodeError,
    InconsistentTransactionError,
    TxBridgeException,
    format_decode_error,
)
from tx_bridge.logging_setup import PerformanceLogger, get_logger, setup_logging
from tx_bridge.version import __version__


# ============================================================================
# CLI APP
# ============================================================================

app = typer.Typer(
    name="txbridge",
    help="TxBridge - Bitcoin Core transaction inspection CLI",
    add_completion=False
)

console = Console()
logger = get_logger("cli")


def _fail(message: str, error: Optional[TxBridgeException] = None):
    if isinstance(error, DecodeError):
        detail = format_decode_error(error)
    elif error is not None:
        detail = error.message
    else:
        detail = ""

    text = f"{message}: {detail}" if detail else message
    console.print(f"[red]{escape(text)}[/red]")
    raise typer.Exit(1)


def _decode(hex_data: str) -> Transaction:
    try:
        with PerformanceLogger(logger, "decode"):
            return Transaction.from_hex(hex_data.strip())
    except DecodeError as e:
        _fail("Invalid transaction", e)


# ============================================================================
# TRANSACTION COMMANDS
# ============================================================================

@app.command("decode")
def decode(
    hex_data: str = typer.Argument(..., metavar="HEX", help="Raw transaction hex")
):
    """Decode a raw transaction"""
    tx = _decode(hex_data)

    console.print(Panel.fit(
        f"[bold]txid:[/bold]  {tx.txid()}\n"
        f"[bold]wtxid:[/bold] {tx.wtxid()}\n"
        f"version {tx.version} | locktime {tx.lock_time} | "
        f"size {tx.size()} | vsize {tx.vsize()} | weight {tx.weight()}",
        title="Coinbase Transaction" if tx.is_coinbase() else "Transaction",
        border_style="cyan"
    ))

    inputs = Table(title=f"Inputs ({len(tx.inputs)})")
    inputs.add_column("#", style="cyan")
    inputs.add_column("Previous output", overflow="fold")
    inputs.add_column("Script", justify="right")
    inputs.add_column("Sequence", justify="right")
    inputs.add_column("Witness", justify="right")

    for index, txin in enumerate(tx.inputs):
        previous = "coinbase" if txin.previous_output.is_null() else str(txin.previous_output)
        inputs.add_row(
            str(index),
            previous,
            f"{len(txin.script_sig)} B",
            f"0x{txin.sequence:08x}",
            str(len(txin.witness))
        )

    outputs = Table(title=f"Outputs ({len(tx.outputs)})")
    outputs.add_column("#", style="cyan")
    outputs.add_column("Value", style="green", justify="right")
    outputs.add_column("Script", overflow="fold")

    for index, txout in enumerate(tx.outputs):
        outputs.add_row(str(index), format_amount(txout.value), txout.script_pubkey.hex())

    console.print(inputs)
    console.print(outputs)


@app.command("txid")
def txid(
    hex_data: str = typer.Argument(..., metavar="HEX", help="Raw transaction hex")
):
    """Print the txid and wtxid of a raw transaction"""
    tx = _decode(hex_data)
    console.print(f"txid:  {tx.txid()}")
    console.print(f"wtxid: {tx.wtxid()}")


@app.command("verify")
def verify(
    path: Path = typer.Argument(
        ...,
        metavar="FILE",
        exists=True,
        dir_okay=False,
        readable=True,
        help="JSON from getrawtransaction <txid> true"
    )
):
    """Check that a verbose transaction's fields reproduce its hex"""
    try:
        data = loads(path.read_text(encoding="utf-8"))

        # Accept a whole JSON-RPC response as well as the bare result
        if isinstance(data, dict) and isinstance(data.get("result"), dict):
            data = data["result"]

        with PerformanceLogger(logger, "verify"):
            verbose = VerboseRawTransaction.from_rpc(data)
            verbose.verify_consistency()

    except InconsistentTransactionError as e:
        _fail("Inconsistent transaction", e)
    except TxBridgeException as e:
        _fail("Invalid transaction", e)

    console.print(f"[green]✅ Consistent[/green] {verbose.txid}")
    console.print(
        f"inputs {len(verbose.vin)} | outputs {len(verbose.vout)} | "
        f"confirmations {verbose.confirmations}"
    )


# ============================================================================
# ADDRESS COMMANDS
# ============================================================================

@app.command("address")
def address(
    value: str = typer.Argument(..., metavar="ADDR", help="Address to validate"),
    network: Optional[Network] = typer.Option(
        None,
        "--network",
        "-n",
        help="Network to check against (default: configured network)"
    )
):
    """Validate an address"""
    target = network or get_settings().network

    try:
        parsed = Address.parse(value)
    except AddressFormatError as e:
        _fail("Invalid address", e)

    table = Table(title="Address", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green", overflow="fold")

    table.add_row("Kind", parsed.kind.value)
    table.add_row("Networks", ", ".join(n.value for n in parsed.networks))
    table.add_row("Payload", parsed.payload.hex())
    if parsed.witness_version is not None:
        table.add_row("Witness version", str(parsed.witness_version))

    console.print(table)

    try:
        parsed.require_network(target)
    except AddressFormatError as e:
        _fail("Wrong network", e)

    console.print(f"[green]✅ Valid on {target.value}[/green]")


# ============================================================================
# VERSION
# ============================================================================

@app.command("version")
def version():
    """Show version"""
    console.print(f"txbridge {__version__}")


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose output (DEBUG logging)"
    )
):
    """
    TxBridge - Bitcoin Core transaction inspection CLI

    Decode raw transactions and check node payloads offline.
    """
    try:
        settings = get_settings()
    except ConfigError as e:
        _fail("Invalid configuration", e)

    setup_logging(
        log_level="DEBUG" if verbose else settings.log_level,
        log_to_file=settings.log_to_file,
        log_dir=settings.log_dir,
        log_format=settings.log_format,
        enable_console=settings.enable_console_log
    )

    if verbose:
        console.print("[dim]Verbose mode enabled[/dim]")


if __name__ == "__main__":
    app()


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "app",
]

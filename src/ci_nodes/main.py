#!/usr/bin/env python3
"""Command line entry point.

Runs a rule chain file: every node in order against a single message,
stopping at the first failure.

Usage:
    ci-nodes run config/chain.yaml
    ci-nodes run config/chain.yaml -m gitHttpUrl=https://example.com/repo.git -m ref=main
    ci-nodes list-nodes
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from loguru import logger

from ci_nodes.context import RecordingContext
from ci_nodes.models.config import ChainConfig, LoggingConfig, NodeDefinition
from ci_nodes.models.message import DataType, RuleMsg
from ci_nodes.models.results import NodeOutcome
from ci_nodes.nodes import create_node, registered_types
from ci_nodes.utils.config_loader import load_chain_config
from ci_nodes.utils.logging import setup_logging

# Credentials referenced by chain files may live in .env
load_dotenv()

app = typer.Typer()


def print_header(title: str) -> None:
    """Print a formatted header."""
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80 + "\n")


def print_stats(label: str, value: Any) -> None:
    """Print a formatted stat line."""
    print(f"  • {label}: {value}")


def parse_metadata(pairs: list[str] | None) -> dict[str, str]:
    """Parse ``key=value`` pairs given on the command line.

    Raises:
        typer.BadParameter: If a pair has no ``=``
    """
    metadata: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {pair!r}")
        metadata[key.strip()] = value
    return metadata


def run_chain(
    chain: ChainConfig, msg: RuleMsg
) -> list[tuple[NodeDefinition, NodeOutcome]]:
    """
    Run every node of ``chain`` in order against ``msg``.

    Nodes share the message, so metadata written by one node (``workDir``,
    ``hash``) is visible to the next. Execution stops at the first failure.

    Args:
        chain: Chain configuration
        msg: Message handed to the first node

    Returns:
        (node definition, outcome) for every node that ran
    """
    results: list[tuple[NodeDefinition, NodeOutcome]] = []
    for definition in chain.nodes:
        node = create_node(definition.type, definition.configuration)
        ctx = RecordingContext()
        logger.info(f"Running node {definition.id}", type=definition.type)
        try:
            node.on_msg(ctx, msg)
        finally:
            node.destroy()

        outcome = ctx.last
        if outcome is None:
            raise RuntimeError(f"node {definition.id} reported no outcome")
        results.append((definition, outcome))
        if not outcome.success:
            logger.error(f"Chain stopped at node {definition.id}", error=outcome.error)
            break
    return results


def print_summary(results: list[tuple[NodeDefinition, NodeOutcome]], elapsed: float) -> None:
    """Print final chain summary."""
    print_header("📈 Chain Summary")

    for definition, outcome in results:
        print(f"{definition.id} ({definition.type}):")
        print_stats("Status", "✅ Success" if outcome.success else "❌ Failed")
        for key in ("workDir", "hash"):
            if key in outcome.msg.metadata:
                print_stats(key, outcome.msg.metadata[key])
        if outcome.error:
            print_stats("Error", f"{outcome.error_type}: {outcome.error}")
        print()

    if results:
        print_stats("Final data", results[-1][1].msg.data[:500] or "<empty>")

    print("\n" + "=" * 80)
    print(f"⏱️  Total execution time: {elapsed:.2f}s")
    print("=" * 80)


@app.command()
def run(
    chain_file: Annotated[
        Path,
        typer.Argument(help="Path to rule chain configuration file"),
    ] = Path("config/chain.yaml"),
    metadata: Annotated[
        list[str] | None,
        typer.Option("--metadata", "-m", help="Message metadata as key=value, repeatable"),
    ] = None,
    data: Annotated[
        str,
        typer.Option("--data", "-d", help="Message body"),
    ] = "",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
) -> None:
    """
    Run a rule chain once.

    Executes the chain's nodes in order with one message and exits non-zero
    when a node fails.
    """
    try:
        chain = load_chain_config(chain_file)
        logging_config = chain.logging or LoggingConfig()
        if verbose:
            logging_config = logging_config.model_copy(update={"level": "DEBUG"})
        setup_logging(logging_config, log_to_file=chain.logging is not None)

        msg = RuleMsg(
            type="cli",
            data_type=DataType.JSON if data.lstrip().startswith(("{", "[")) else DataType.TEXT,
            data=data,
            metadata=parse_metadata(metadata),
        )

        print_header(f"🚀 Rule chain: {chain.name}")
        print(f"  Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"  Config: {chain_file}")
        print(f"  Nodes: {len(chain.nodes)}")

        start = datetime.now()
        results = run_chain(chain, msg)
        print_summary(results, (datetime.now() - start).total_seconds())

        failed = len(results) < len(chain.nodes) or any(not o.success for _, o in results)
        sys.exit(1 if failed else 0)

    except KeyboardInterrupt:
        print("\n\n⚠️  Chain interrupted by user")
        logger.warning("Chain interrupted by user")
        sys.exit(130)  # Standard exit code for SIGINT

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to start chain: {e}")
        print(f"\n❌ Failed to start chain: {e}")
        sys.exit(1)


@app.command("list-nodes")
def list_nodes() -> None:
    """List registered node types."""
    for node_type in registered_types():
        print(node_type)


if __name__ == "__main__":
    app()

"""
txnctl Main Application

Command-line entry point. ``txnctl txn`` reads a conditional transaction from
standard input, submits it to the store and prints which request list ran.
"""

import logging
import sys

import click

from src.txn.collector import TxnCollector
from src.txn.config import get_config
from src.txn.exceptions import BadArgumentsError, TxnCtlException
from src.txn.services.kv_client import KVClient
from src.txn.submitter import TxnSubmitter, result_line

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout carries prompts and the result line."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def exit_with_error(ctx: click.Context, err: TxnCtlException) -> None:
    """Print the error on stderr and exit with its exit code."""
    logger.debug("Aborting", extra=err.to_dict())
    click.echo(f"Error:  {err.message}", err=True)
    ctx.exit(int(err.exit_code))


@click.group()
@click.option(
    "--endpoint",
    default=None,
    help="Store endpoint, host:port or http(s) URL [default: from TXNCTL_ENDPOINT or 127.0.0.1:2379]",
)
@click.pass_context
def cli(ctx: click.Context, endpoint):
    """A simple command line client for a transactional key-value store."""
    config = get_config()
    configure_logging(config.log_level)
    ctx.obj = {
        "config": config,
        "endpoint": endpoint or config.endpoint,
    }


@cli.command("txn", context_settings={"ignore_unknown_options": True})
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def txn_command(ctx: click.Context, args):
    """Txn processes all the requests in one transaction.

    \b
    Comparison lines, ended by an empty line:
        key ver|c|m|val g|e|l expected_value
    Success, then failure request lines, each list ended by an empty line:
        r|range key [range_end]
        p|put key value
        d|deleteRange key [range_end]
    """
    if args:
        exit_with_error(ctx, BadArgumentsError("txn command does not accept argument."))

    config = ctx.obj["config"]
    endpoint = ctx.obj["endpoint"]

    try:
        txn = TxnCollector(sys.stdin, echo=click.echo).run()
        with KVClient.dial(endpoint, config) as kv_client:
            succeeded = TxnSubmitter(kv_client).submit(txn)
    except TxnCtlException as e:
        exit_with_error(ctx, e)
        return

    click.echo(result_line(succeeded))


# CLI entrypoint
if __name__ == "__main__":
    cli()

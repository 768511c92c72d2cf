"""Main CLI entry point."""

import logging

import click

from sepadd.cli.commands import render as render_cmd
from sepadd.domain.account import AccountValidationConfig, create_account_validator


@click.group()
@click.option(
    "--skip-iban-checksum",
    is_flag=True,
    default=False,
    help="Only check the IBAN format, not its check digits "
    "(overrides SEPADD_SKIP_IBAN_CHECKSUM environment variable)",
    envvar="SEPADD_SKIP_IBAN_CHECKSUM",
)
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr")
@click.pass_context
def cli(ctx, skip_iban_checksum: bool, verbose: bool):
    """sepadd - SEPA direct debit file builder.

    Validate debtor records from a CSV file and render them as a
    pain.008.003.02 direct debit initiation.
    """
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    config = AccountValidationConfig(verify_iban_checksum=not skip_iban_checksum)
    ctx.obj["account_validator"] = create_account_validator(config)


# Register all commands
render_cmd.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()

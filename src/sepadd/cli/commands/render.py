"""Render and validate commands."""

import click

from sepadd.cli.error_handling import handle_domain_error
from sepadd.domain.codes import LocalInstrument, SequenceType
from sepadd.domain.csv_import import import_csv
from sepadd.domain.direct_debit import DirectDebitBatch
from sepadd.domain.errors import DomainError
from sepadd.utils.amount_parser import format_amount
from sepadd.utils.date_parser import parse_collection_date
from sepadd.xml.renderer import render


def batch_options(command):
    """Options shared by commands that build a batch."""
    options = [
        click.argument("csv_file", type=click.Path(exists=True, dir_okay=False)),
        click.option("--creditor-id", required=True, help="SEPA creditor identifier"),
        click.option("--name", required=True, help="Creditor name"),
        click.option("--iban", required=True, help="Creditor IBAN"),
        click.option("--bic", required=True, help="Creditor BIC"),
        click.option(
            "--collection-date",
            required=True,
            help="Collection date (YYYY-MM-DD or relative like 'tomorrow', 'next friday')",
        ),
        click.option(
            "--sequence-type",
            type=click.Choice([code.value for code in SequenceType]),
            default=SequenceType.RECURRING.value,
            show_default=True,
            help="Sequence type of all collections in the file",
        ),
        click.option(
            "--local-instrument",
            type=click.Choice([code.value for code in LocalInstrument]),
            default=LocalInstrument.CORE.value,
            show_default=True,
            help="Direct debit scheme",
        ),
        click.option("--original-creditor-name", help="Creditor name before it changed"),
        click.option("--original-creditor-id", help="Creditor identifier before it changed"),
        click.option("--message-id", help="Message id (generated if not provided)"),
        click.option("--payment-id", help="Payment information id (generated if not provided)"),
        click.option(
            "--delimiter",
            default=None,
            help="CSV field delimiter (detected from the file if not provided)",
        ),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def _build_batch(ctx, csv_file: str, delimiter: str, **fields) -> DirectDebitBatch:
    try:
        collection_date = parse_collection_date(fields.pop("collection_date"))
    except ValueError as e:
        click.echo(f"Error: Invalid collection date: {e}", err=True)
        ctx.exit(1)

    try:
        batch = DirectDebitBatch.create_batch(
            ctx.obj["account_validator"],
            creditor_identifier=fields["creditor_id"],
            name=fields["name"],
            iban=fields["iban"],
            bic=fields["bic"],
            collection_date=collection_date,
            sequence_type=fields["sequence_type"],
            local_instrument=fields["local_instrument"],
            original_creditor_name=fields["original_creditor_name"],
            original_creditor_id=fields["original_creditor_id"],
            message_id=fields["message_id"],
            payment_id=fields["payment_id"],
        )
        batch.set_transactions(import_csv(csv_file, batch, delimiter))
    except DomainError as e:
        handle_domain_error(ctx, e)
    return batch


@click.command("render")
@batch_options
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    default="-",
    envvar="SEPADD_OUTPUT",
    help="Output file (default: stdout)",
)
@click.pass_context
def render_batch(ctx, csv_file: str, delimiter: str, output: str, **fields):
    """Render a pain.008 direct debit file from a CSV file.

    CSV columns: mandate id; mandate date; debtor name; IBAN; BIC; amount;
    remittance message; bank changed (1/0); [original mandate id];
    [original debtor IBAN]

    Examples:
        sepadd render debits.csv --creditor-id DE98ZZZ09999999999 --name "Club e.V."
            --iban DE89370400440532013000 --bic COBADEFFXXX --collection-date "in 5 days"
    """
    batch = _build_batch(ctx, csv_file, delimiter, **fields)

    with click.open_file(output, "wb") as f:
        f.write(render(batch))

    if output != "-":
        click.echo(
            f"Wrote {len(batch.transactions)} transactions "
            f"({format_amount(batch.control_sum())}) to {output}"
        )


@click.command("validate")
@batch_options
@click.pass_context
def validate_batch(ctx, csv_file: str, delimiter: str, **fields):
    """Validate a CSV file without rendering it."""
    batch = _build_batch(ctx, csv_file, delimiter, **fields)

    amended = sum(1 for tx in batch.transactions if tx.amendment_indicator)
    click.echo("Validation complete:")
    click.echo(f"  Transactions: {len(batch.transactions)}")
    click.echo(f"  Amended mandates: {amended}")
    click.echo(f"  Control sum: {format_amount(batch.control_sum())}")


def register_commands(cli):
    """Register render commands with main CLI."""
    cli.add_command(render_batch)
    cli.add_command(validate_batch)

import csv
import datetime
from dataclasses import dataclass, field, replace
from pathlib import Path

import click
from babel.dates import parse_date
from pydantic import ValidationError

from ynab_ledger.errors import ConversionError, InvalidRowError
from ynab_ledger.grouping import diagnose, group
from ynab_ledger.ledger import render
from ynab_ledger.models import AccountType, ConversionResult, RawRow
from ynab_ledger.money import resolve_locale

# Constants
DEFAULT_CULTURE = "en-US"
DEFAULT_DELIMITER = ","
DEFAULT_OUTPUT = "register.dat"
DEFAULT_ENCODING = "utf-8-sig"
ACCOUNT_TYPE_ANSWERS = ("a", "asset", "assets", "l", "liability", "liabilities")


@dataclass
class ConverterConfig:
    """Configuration for converting one YNAB register export.

    Attributes:
        account_types: Ledger account type for every YNAB account and transfer
                    target, e.g. {'Checking Account': AccountType.ASSETS}.
        culture: Culture the export's amounts and dates are written in
                    (e.g. 'en-US', 'fr-FR').
        use_clear: When True, headers carry '*' for cleared transactions and
                    '!' for everything else.
        delimiter: Field delimiter of the export file.
        currency: Optional ISO currency code. When None, the culture's own
                    currency is used.
        encoding: Text encoding of the export file. The default tolerates a BOM.

    Example:
        config = ConverterConfig(
            account_types={
                'Checking Account': AccountType.ASSETS,
                'Visa': AccountType.LIABILITIES,
            },
            culture='fr-FR',
            delimiter=';',
        )
    """
    account_types: dict[str, AccountType] = field(default_factory=dict)
    culture: str = DEFAULT_CULTURE
    use_clear: bool = True
    delimiter: str = DEFAULT_DELIMITER
    currency: str | None = None
    encoding: str = DEFAULT_ENCODING


def parse_export_date(text: str, culture: str) -> datetime.date:
    """Parse an export date, either ISO or in the culture's numeric layout.

    Args:
        text: The date as written in the export, e.g. '2019-01-15' or '01/15/2019'.
        culture: The culture the export was written in.
    Returns:
        A datetime.date instance.
    """
    text = text.strip()
    try:
        return datetime.date.fromisoformat(text)
    except ValueError:
        pass
    return parse_date(text, locale=resolve_locale(culture), format="short")


class Converter:
    """Converter from a YNAB register export to a ledger document."""

    def __init__(self, config: ConverterConfig, debug: bool = False):
        """
        Initialize the converter from a configuration object.

        Args:
            config: A ConverterConfig with the culture and account types.
            debug: Print progress information (default: False).
        """
        self.account_types = config.account_types
        self.culture = config.culture
        self.use_clear = config.use_clear
        self.delimiter = config.delimiter
        self.currency = config.currency
        self.encoding = config.encoding
        self.debug = debug

    def read_rows(self, filepath: str | Path) -> list[RawRow]:
        """Read every row of a delimited YNAB export.

        Raises:
            InvalidRowError: A row has an unreadable date or fails validation.
        """
        rows = []
        with open(filepath, newline="", encoding=self.encoding) as f:
            reader = csv.DictReader(f, delimiter=self.delimiter)
            for line_number, record in enumerate(reader, 2):
                record = {
                    (key or "").strip(): value
                    for key, value in record.items()
                    if key is not None
                }
                try:
                    record["Date"] = parse_export_date(record.get("Date") or "", self.culture)
                    rows.append(RawRow.model_validate(record))
                except (ValueError, IndexError, ValidationError) as e:
                    raise InvalidRowError(f"{filepath}, line {line_number}: {e}") from e

        if self.debug:
            print(f"Read {len(rows)} rows from {filepath}")
        return rows

    @staticmethod
    def accounts(rows: list[RawRow]) -> list[str]:
        """Every account and transfer target the rows mention, in first-seen order."""
        names: dict[str, None] = {}
        for row in rows:
            names.setdefault(row.account, None)
            if row.is_transfer:
                names.setdefault(row.transfer_account, None)
        return list(names)

    def convert(self, rows: list[RawRow]) -> ConversionResult:
        """
        Group rows into transactions and render the ledger.

        Grouping merges split rows and drops the receiving side of every
        transfer. Data-entry problems that don't stop the conversion are
        returned as diagnostics.

        Args:
            rows: Export rows in file order.

        Returns:
            The ledger text with the transactions and diagnostics behind it.
        """
        transactions = group(
            rows, self.account_types, self.use_clear, self.culture, self.currency
        )
        text = render(transactions)
        diagnostics = diagnose(transactions)

        if self.debug:
            print(f"Grouped {len(rows)} rows into {len(transactions)} transactions")
            print(f"Found {len(diagnostics)} diagnostic(s)")

        return ConversionResult(text=text, transactions=transactions, diagnostics=diagnostics)

    def convert_file(self, filepath: str | Path) -> ConversionResult:
        """Read an export file and convert it."""
        return self.convert(self.read_rows(filepath))


def parse_account_type_option(ctx, param, values) -> dict[str, AccountType]:
    """click callback for repeated ``--account-type NAME=TYPE`` options."""
    account_types = {}
    for value in values:
        name, sep, answer = value.rpartition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected NAME=TYPE, got {value!r}")
        try:
            account_types[name.strip()] = AccountType.from_answer(answer)
        except ValueError as e:
            raise click.BadParameter(str(e)) from e
    return account_types


def prompt_account_types(accounts: list[str], known: dict[str, AccountType]) -> dict[str, AccountType]:
    """Ask for the type of every account not already classified."""
    account_types = dict(known)
    for account in accounts:
        if account in account_types:
            continue
        answer = click.prompt(
            f"Specify account type for '{account}' [Asset/Liability] use [a/l] for short",
            type=click.Choice(ACCOUNT_TYPE_ANSWERS, case_sensitive=False),
            show_choices=False,
        )
        account_types[account] = AccountType.from_answer(answer)
    return account_types


@click.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o", "--output", type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_OUTPUT, show_default=True, help="Ledger file to write.",
)
@click.option(
    "--use-clear/--no-use-clear", default=True, prompt="Use Cleared column",
    help="Mark headers '*' (cleared) or '!' (uncleared).",
)
@click.option("--culture", default=DEFAULT_CULTURE, prompt="Culture", show_default=True)
@click.option("--delimiter", default=DEFAULT_DELIMITER, prompt="CSV Delimiter", show_default=True)
@click.option("--currency", default=None, help="ISO currency code, if not the culture's own.")
@click.option(
    "--account-type", "account_types", multiple=True, metavar="NAME=TYPE",
    callback=parse_account_type_option,
    help="Classify an account as Assets or Liabilities (a/l). Repeatable.",
)
@click.option("-f", "--force", is_flag=True, help="Replace the output file without asking.")
@click.option("--debug", is_flag=True, help="Print progress information.")
def main(input_file, output, use_clear, culture, delimiter, currency, account_types, force, debug):
    """Convert a YNAB register export into a ledger file.

    Every account and transfer target in the export needs an account type;
    the ones not given with --account-type are asked for.
    """
    if output.exists() and not force:
        click.confirm(
            f"The output file {output} already exists. Do you want to replace it?",
            default=False, abort=True,
        )

    config = ConverterConfig(
        culture=culture,
        use_clear=use_clear,
        delimiter=delimiter,
        currency=currency,
    )
    try:
        rows = Converter(config, debug=debug).read_rows(input_file)
        config = replace(
            config,
            account_types=prompt_account_types(Converter.accounts(rows), account_types),
        )
        result = Converter(config, debug=debug).convert(rows)
    except ConversionError as e:
        raise click.ClickException(str(e)) from e

    for diagnostic in result.diagnostics:
        click.echo(
            f"Warning: {diagnostic.date} {diagnostic.account} / {diagnostic.payee}: "
            f"{diagnostic.message}",
            err=True,
        )

    output.write_text(result.text, encoding="utf-8")
    click.echo(f"Wrote {len(result.transactions)} transactions to {output}", err=True)


if __name__ == '__main__':
    main()

"""Shared pytest fixtures for ynab-ledger tests.

The fixtures mirror the stages of a conversion:

    export file → RawRow → Transaction → ledger text

Most rows come from ``make_row``, which fills in a plain cleared expense on
the checking account so each test only spells out what it cares about.
"""

import datetime
from pathlib import Path

import pytest

from ynab_ledger.convert import Converter, ConverterConfig
from ynab_ledger.models import AccountType, RawRow


YNAB_HEADERS = [
    "Account", "Flag", "Check Number", "Date", "Payee", "Category",
    "Master Category", "Sub Category", "Memo", "Outflow", "Inflow",
    "Cleared", "Running Balance",
]


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def account_types() -> dict[str, AccountType]:
    """Classification for every account the sample rows mention."""
    return {
        "Checking Account": AccountType.ASSETS,
        "Savings Account": AccountType.ASSETS,
        "Compte Chèque": AccountType.ASSETS,
        "Visa": AccountType.LIABILITIES,
    }


@pytest.fixture
def basic_config(account_types) -> ConverterConfig:
    """en-US configuration with cleared marks enabled."""
    return ConverterConfig(account_types=account_types, culture="en-US", use_clear=True)


@pytest.fixture
def converter(basic_config) -> Converter:
    return Converter(basic_config, debug=False)


# =============================================================================
# Row Fixtures
# =============================================================================


@pytest.fixture
def make_row():
    """Factory for RawRow with sensible en-US defaults."""
    def _make_row(**overrides) -> RawRow:
        fields = dict(
            account="Checking Account",
            flag="",
            check_number="",
            date=datetime.date(2019, 1, 1),
            payee="Megacorp LLC",
            category="Everyday Expenses:Groceries",
            master_category="Every Expenses",
            sub_category="Groceries",
            memo="",
            outflow="$0.00",
            inflow="$0.00",
            cleared="C",
            running_balance="1,234.56",
        )
        fields.update(overrides)
        return RawRow(**fields)
    return _make_row


@pytest.fixture
def income_row(make_row) -> RawRow:
    """A January bonus deposited into checking."""
    return make_row(
        category="Income:Available this month",
        master_category="Income",
        sub_category="Available this month",
        memo="January Bonus",
        inflow="$1,234.56",
    )


@pytest.fixture
def expense_row(make_row) -> RawRow:
    """A grocery purchase paid from checking."""
    return make_row(
        category="Expenses:Groceries",
        master_category="Expenses",
        memo="Food for party",
        outflow="$42.42",
    )


@pytest.fixture
def split_rows(make_row) -> list[RawRow]:
    """One grocery receipt split in two, exported in reverse order."""
    return [
        make_row(check_number="123456", memo="(Split 2/2) Meat", outflow="$42.42"),
        make_row(check_number="123456", memo="(Split 1/2) Produce", outflow="$12.42"),
    ]


@pytest.fixture
def transfer_rows(make_row) -> list[RawRow]:
    """Both copies YNAB exports for one checking → savings transfer."""
    return [
        make_row(
            check_number="123456",
            payee="Transfer : Savings Account",
            category="",
            master_category="",
            sub_category="",
            memo="Saving up for college",
            outflow="$42.42",
        ),
        make_row(
            account="Savings Account",
            check_number="123456",
            payee="Transfer : Checking Account",
            category="",
            master_category="",
            sub_category="",
            memo="Saving up for college",
            inflow="$42.42",
        ),
    ]


# =============================================================================
# Export File Fixtures
# =============================================================================


def _write_export(path: Path, records: list[list[str]], delimiter: str = ",", encoding: str = "utf-8") -> Path:
    lines = [delimiter.join(f'"{value}"' for value in YNAB_HEADERS)]
    lines.extend(delimiter.join(f'"{value}"' for value in record) for record in records)
    path.write_text("\n".join(lines) + "\n", encoding=encoding)
    return path


@pytest.fixture
def write_export():
    """Writer for YNAB-style exports: header row plus quoted records."""
    return _write_export


@pytest.fixture
def export_file(tmp_path) -> Path:
    """An en-US export with an expense, a split, and both halves of a transfer."""
    return _write_export(tmp_path / "register.csv", [
        ["Checking Account", "", "", "01/01/2019", "Megacorp LLC", "Everyday Expenses:Groceries",
         "Every Expenses", "Groceries", "For the picnic", "$42.42", "$0.00", "C", "$1,192.14"],
        ["Checking Account", "Blue", "123456", "01/02/2019", "Megacorp LLC", "Everyday Expenses:Groceries",
         "Every Expenses", "Groceries", "(Split 1/2) Produce", "$12.42", "$0.00", "C", "$1,137.30"],
        ["Checking Account", "Blue", "123456", "01/02/2019", "Megacorp LLC", "Everyday Expenses:Groceries",
         "Every Expenses", "Groceries", "(Split 2/2) Meat", "$42.42", "$0.00", "C", "$1,137.30"],
        ["Checking Account", "", "", "01/03/2019", "Transfer : Savings Account", "",
         "", "", "Saving up for college", "$100.00", "$0.00", "U", "$1,037.30"],
        ["Savings Account", "", "", "01/03/2019", "Transfer : Checking Account", "",
         "", "", "Saving up for college", "$0.00", "$100.00", "U", "$100.00"],
    ])


@pytest.fixture
def export_file_ledger() -> str:
    """The ledger `export_file` converts to."""
    return """\
2019-01-01 * Megacorp LLC
 ; For the picnic
 Assets:Checking Account  -$42.42
 Expenses:Every Expenses:Groceries  $42.42

2019-01-02 (123456) * Megacorp LLC
 ; :Blue:
 Assets:Checking Account  -$54.84
 Expenses:Every Expenses:Groceries  $12.42 ; Produce
 Expenses:Every Expenses:Groceries  $42.42 ; Meat

2019-01-03 !
 ; Saving up for college
 Assets:Checking Account  -$100.00
 Assets:Savings Account  $100.00
"""

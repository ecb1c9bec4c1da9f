"""Data models for YNAB export rows and ledger transactions."""

import datetime
import re
from collections.abc import Mapping, Sequence
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ynab_ledger.errors import (
    InconsistentGroupError,
    SplitTransferError,
    UnknownAccountError,
)
from ynab_ledger.money import display_amount, parse_amount, resolve_locale

TRANSFER_PREFIX = "Transfer : "
SPLIT_KEYWORD = "(Split"
SPLIT_MEMO = re.compile(r"\(Split (\d+)/(\d+)\)(.*)")


def transfer_target(payee: str) -> str | None:
    """The account named by a ``Transfer : <account>`` payee, else None."""
    if TRANSFER_PREFIX not in payee:
        return None
    return payee.replace(TRANSFER_PREFIX, "", 1)


class AccountType(str, Enum):
    """Top-level ledger account a YNAB account belongs under."""
    ASSETS = "Assets"
    LIABILITIES = "Liabilities"

    @classmethod
    def from_answer(cls, answer: str) -> "AccountType":
        """Interpret an interactive answer such as ``a`` or ``liability``."""
        normalized = (answer or "").strip().lower()
        if normalized in ("a", "asset", "assets"):
            return cls.ASSETS
        if normalized in ("l", "liability", "liabilities"):
            return cls.LIABILITIES
        raise ValueError(f"Unsupported account type: {answer!r}")


class RawRow(BaseModel):
    """One row of a YNAB register export, amounts still as formatted text."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    account: str = Field("", alias="Account")
    flag: str = Field("", alias="Flag")
    check_number: str = Field("", alias="Check Number")
    date: datetime.date = Field(alias="Date")
    payee: str = Field("", alias="Payee")
    category: str = Field("", alias="Category")
    master_category: str = Field("", alias="Master Category")
    sub_category: str = Field("", alias="Sub Category")
    memo: str = Field("", alias="Memo")
    outflow: str = Field("", alias="Outflow")
    inflow: str = Field("", alias="Inflow")
    cleared: str = Field("", alias="Cleared")
    running_balance: str = Field("", alias="Running Balance")

    @field_validator(
        "account", "flag", "check_number", "payee", "category", "master_category",
        "sub_category", "memo", "outflow", "inflow", "cleared", "running_balance",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v):
        """CSV readers hand over None for short rows."""
        return "" if v is None else v

    @property
    def is_split(self) -> bool:
        return SPLIT_KEYWORD in self.memo

    @property
    def is_transfer(self) -> bool:
        return TRANSFER_PREFIX in self.payee

    @property
    def transfer_account(self) -> str | None:
        return transfer_target(self.payee)

    @property
    def key(self) -> "GroupingKey":
        return GroupingKey(
            flag=self.flag,
            check_number=self.check_number,
            date=self.date,
            cleared=self.cleared,
            running_balance=self.running_balance,
        )


class GroupingKey(BaseModel):
    """Fields every row of one logical transaction must share."""
    model_config = ConfigDict(frozen=True)

    flag: str
    check_number: str
    date: datetime.date
    cleared: str
    running_balance: str


def memo_without_split(memo: str | None) -> str | None:
    """Strip a leading ``(Split i/n)`` marker from a memo.

    Returns None when nothing but the marker (or whitespace) is left.
    """
    if not memo or not memo.strip():
        return None
    if SPLIT_KEYWORD in memo:
        m = SPLIT_MEMO.search(memo)
        if m:
            rest = m.group(3).strip()
            return rest or None
    return memo.strip()


class LineItem(BaseModel):
    """One export row inside a transaction, with its amounts parsed."""
    model_config = ConfigDict(frozen=True)

    account: str
    payee: str
    category: str = ""
    master_category: str = ""
    sub_category: str = ""
    memo: str = ""
    inflow: str = ""
    outflow: str = ""
    inflow_amount: Decimal = Decimal("0")
    outflow_amount: Decimal = Decimal("0")

    @classmethod
    def from_row(cls, row: RawRow, culture: str, currency: str | None = None) -> "LineItem":
        return cls(
            account=row.account,
            payee=row.payee,
            category=row.category,
            master_category=row.master_category,
            sub_category=row.sub_category,
            memo=row.memo,
            inflow=display_amount(row.inflow),
            outflow=display_amount(row.outflow),
            inflow_amount=parse_amount(row.inflow, culture, currency),
            outflow_amount=parse_amount(row.outflow, culture, currency),
        )

    @property
    def has_inflow(self) -> bool:
        return bool(self.inflow) and self.inflow_amount > 0

    @property
    def has_outflow(self) -> bool:
        return bool(self.outflow) and self.outflow_amount > 0

    @property
    def is_transfer(self) -> bool:
        return TRANSFER_PREFIX in self.payee

    @property
    def transfer_account(self) -> str | None:
        """The account on the other side of a transfer."""
        return transfer_target(self.payee)

    @property
    def memo_without_split(self) -> str | None:
        return memo_without_split(self.memo)

    def sort_key(self) -> tuple[Decimal, Decimal, str]:
        return (self.inflow_amount, self.outflow_amount, self.payee)


class Transaction(BaseModel):
    """A logical accounting event built from one row or a whole split group.

    Line items are kept in ascending (inflow, outflow, payee) order, which is
    the order their postings are written in.
    """
    model_config = ConfigDict(frozen=True)

    date: datetime.date
    check_number: str = ""
    flag: str = ""
    cleared: str = ""
    running_balance: str = ""
    culture: str = "en_US"
    currency: str | None = None
    use_clear: bool = True
    account_types: dict[str, AccountType] = Field(default_factory=dict)
    line_items: list[LineItem]

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[RawRow],
        account_types: Mapping[str, AccountType | str],
        use_clear: bool,
        culture: str,
        currency: str | None = None,
    ) -> "Transaction":
        """Build a transaction from rows that belong together.

        Raises:
            InconsistentGroupError: No rows, or rows with differing grouping keys.
            SplitTransferError: A transfer row is part of a multi-row group.
        """
        if not rows:
            raise InconsistentGroupError("A transaction needs at least one row")
        keys = {row.key for row in rows}
        if len(keys) != 1:
            raise InconsistentGroupError(
                f"Rows of one transaction must share flag, check number, date, "
                f"cleared and running balance; got {len(keys)} distinct keys"
            )

        locale_name = str(resolve_locale(culture))
        items = sorted(
            (LineItem.from_row(row, locale_name, currency) for row in rows),
            key=LineItem.sort_key,
        )
        if len(items) > 1:
            for item in items:
                if item.is_transfer:
                    raise SplitTransferError(item.payee)

        first = rows[0]
        return cls(
            date=first.date,
            check_number=first.check_number,
            flag=first.flag,
            cleared=first.cleared,
            running_balance=first.running_balance,
            culture=locale_name,
            currency=currency,
            use_clear=use_clear,
            account_types={name: AccountType(kind) for name, kind in account_types.items()},
            line_items=items,
        )

    @property
    def key(self) -> GroupingKey:
        return GroupingKey(
            flag=self.flag,
            check_number=self.check_number,
            date=self.date,
            cleared=self.cleared,
            running_balance=self.running_balance,
        )

    @property
    def total_amount(self) -> Decimal:
        """Net change to the primary account: inflows minus outflows."""
        return sum(
            (item.inflow_amount - item.outflow_amount for item in self.line_items),
            Decimal("0"),
        )

    @property
    def total_inflow(self) -> Decimal:
        return sum((item.inflow_amount for item in self.line_items), Decimal("0"))

    @property
    def total_outflow(self) -> Decimal:
        return sum((item.outflow_amount for item in self.line_items), Decimal("0"))

    @property
    def payees(self) -> list[str]:
        return list(dict.fromkeys(item.payee for item in self.line_items))

    @property
    def accounts(self) -> list[str]:
        return list(dict.fromkeys(item.account for item in self.line_items))

    @property
    def is_transfer(self) -> bool:
        return any(item.is_transfer for item in self.line_items)

    def account_type(self, account: str) -> AccountType:
        """Look up the classification of ``account``.

        Raises:
            UnknownAccountError: The account wasn't classified.
        """
        try:
            return self.account_types[account]
        except KeyError:
            raise UnknownAccountError(account) from None


class DiagnosticKind(str, Enum):
    """Non-fatal data-entry problems found while converting."""
    NO_MONEY_MOVED = "no-money-moved"
    INFLOW_AND_OUTFLOW = "inflow-and-outflow"


class Diagnostic(BaseModel):
    """A warning about one line item; conversion carries on regardless."""
    kind: DiagnosticKind
    message: str
    date: datetime.date
    account: str
    payee: str


class ConversionResult(BaseModel):
    """Everything a conversion produces."""
    text: str
    transactions: list[Transaction] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

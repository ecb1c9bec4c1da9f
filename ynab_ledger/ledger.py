"""Render transactions as a plain-text ledger document.

Each transaction becomes one block::

    2019-01-01 (123456) * Megacorp LLC
     ; :Blue:
     Assets:Checking Account  -$54.84
     Expenses:Every Expenses:Groceries  $12.42 ; Produce
     Expenses:Every Expenses:Groceries  $42.42 ; Meat

Blocks are separated by one blank line and the document ends with exactly
one newline (ledger misreads files without a final newline).
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from ynab_ledger.models import LineItem, Transaction
from ynab_ledger.money import format_amount

DATE_FORMAT = "%Y-%m-%d"
CLEARED = "C"
MULTIPLE_PAYEES = "Multiple Payees"


def sort_key(txn: Transaction) -> tuple[date, Decimal, Decimal, str]:
    return (txn.date, txn.total_inflow, txn.total_outflow, txn.line_items[0].payee)


def sort_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Order by date, total inflow, total outflow, then first payee (stable)."""
    return sorted(transactions, key=sort_key)


def _header(txn: Transaction) -> str:
    check_number = f"({txn.check_number.strip()}) " if txn.check_number.strip() else ""
    cleared = ""
    if txn.use_clear:
        cleared = "* " if txn.cleared == CLEARED else "! "

    if len(txn.payees) > 1:
        payee = MULTIPLE_PAYEES
    elif txn.is_transfer:
        payee = ""
    else:
        payee = txn.line_items[0].payee

    return f"{txn.date.strftime(DATE_FORMAT)} {check_number}{cleared}{payee}".rstrip()


def _expense_comment(item: LineItem, multiple_payees: bool, multiple_items: bool) -> str:
    """Trailing comment for an expense posting, e.g. `` ; Payee: Microcorp LLC, Produce``.

    There is always a space after the ``;``.
    """
    parts = []
    if multiple_payees:
        parts.append(f"Payee: {item.payee}")
    memo = item.memo_without_split
    if memo and multiple_items:
        parts.append(memo)
    return f" ; {', '.join(parts)}" if parts else ""


def _item_postings(txn: Transaction, item: LineItem) -> list[str]:
    multiple_payees = len(txn.payees) > 1
    multiple_accounts = len(txn.accounts) > 1

    def money(value: Decimal) -> str:
        return format_amount(value, txn.culture, txn.currency)

    if item.has_inflow:
        postings = [f" Income:{item.payee}  -{money(item.inflow_amount)}"]
        if multiple_accounts:
            account_type = txn.account_type(item.account).value
            postings.append(f" {account_type}:{item.account}  {money(item.inflow_amount)}")
        return postings

    if txn.is_transfer:
        target = item.transfer_account
        target_type = txn.account_type(target).value
        return [f" {target_type}:{target}  {money(item.outflow_amount)}"]

    comment = _expense_comment(item, multiple_payees, len(txn.line_items) > 1)
    return [f" Expenses:{item.master_category}:{item.sub_category}  {item.outflow}{comment}"]


def render_transaction(txn: Transaction) -> str:
    """Render one transaction block, without a trailing newline."""
    first = txn.line_items[0]
    lines = [_header(txn)]

    # a single line item's memo goes right under the header
    if len(txn.line_items) == 1 and first.memo.strip():
        lines.append(f" ; {first.memo.strip()}")

    if txn.flag.strip():
        lines.append(f" ; :{txn.flag}:")

    account_type = txn.account_type(first.account).value
    total = format_amount(txn.total_amount, txn.culture, txn.currency)
    lines.append(f" {account_type}:{first.account}  {total}")

    for item in txn.line_items:
        lines.extend(_item_postings(txn, item))

    return "\n".join(lines)


def render(transactions: Iterable[Transaction]) -> str:
    """Render the whole ledger document."""
    blocks = [render_transaction(txn) for txn in sort_transactions(transactions)]
    return "\n\n".join(blocks).strip() + "\n"

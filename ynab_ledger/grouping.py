"""Reassemble YNAB export rows into logical transactions.

YNAB writes a split transaction as one row per split, each memo starting
with ``(Split i/n)``. Splits may arrive in any order (``3/3, 1/3, 2/3``) and
one split may follow another directly (``1/2, 2/2, 1/3, 2/3, 3/3``), so the
rows are folded through a small state machine:

    state = (expected split count, {split index: row})

A non-split row, or a split index that is already buffered, closes the
buffered group. Closed groups and single rows become ``Transaction``s.

Transfers are exported once per account. Only the paying side is kept: a
single-row transfer with no outflow is the receiving account's copy and is
dropped.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

from ynab_ledger.errors import IncompleteSplitError, MalformedSplitError
from ynab_ledger.models import (
    SPLIT_MEMO,
    AccountType,
    Diagnostic,
    DiagnosticKind,
    RawRow,
    Transaction,
)


@dataclass(frozen=True)
class SplitState:
    """Buffered parts of the split transaction currently being read."""
    expected: int = 0
    parts: dict[int, RawRow] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.parts


def parse_split_marker(memo: str) -> tuple[int, int]:
    """Return ``(index, total)`` from a ``(Split i/n)`` memo.

    Raises:
        MalformedSplitError: The memo has no well-formed marker.
    """
    m = SPLIT_MEMO.search(memo)
    if not m:
        raise MalformedSplitError(memo)
    return int(m.group(1)), int(m.group(2))


def _close(state: SplitState) -> list[RawRow]:
    if len(state.parts) != state.expected:
        raise IncompleteSplitError(state.expected, sorted(state.parts))
    return [state.parts[index] for index in sorted(state.parts)]


def step(state: SplitState, row: RawRow) -> tuple[SplitState, list[list[RawRow]]]:
    """Feed one row to the split buffer.

    Returns:
        The next state and the row groups completed by this row, in order.
    """
    if not row.is_split:
        completed = [] if state.is_empty else [_close(state)]
        completed.append([row])
        return SplitState(), completed

    index, total = parse_split_marker(row.memo)
    completed = []
    if state.is_empty:
        state = SplitState(expected=total)
    elif index in state.parts:
        # back to back splits
        completed.append(_close(state))
        state = SplitState(expected=total)

    return SplitState(state.expected, {**state.parts, index: row}), completed


def finish(state: SplitState) -> list[list[RawRow]]:
    """Close whatever is still buffered once the rows run out."""
    return [] if state.is_empty else [_close(state)]


def row_groups(rows: Iterable[RawRow]) -> Iterator[list[RawRow]]:
    """Yield the rows of each logical transaction, in export order."""
    state = SplitState()
    for row in rows:
        state, completed = step(state, row)
        yield from completed
    yield from finish(state)


def is_duplicate_transfer(txn: Transaction) -> bool:
    """True for the receiving account's copy of a transfer."""
    if len(txn.line_items) != 1:
        return False
    item = txn.line_items[0]
    return item.is_transfer and not item.has_outflow


def group(
    rows: Iterable[RawRow],
    account_types: Mapping[str, AccountType | str],
    use_clear: bool,
    culture: str,
    currency: str | None = None,
) -> list[Transaction]:
    """Group export rows into transactions, dropping duplicate transfers.

    Args:
        rows: Export rows in file order.
        account_types: Classification of every account and transfer target.
        use_clear: Whether rendered headers carry a ``*``/``!`` cleared mark.
        culture: Locale the amounts are formatted in, e.g. ``en-US``.
        currency: ISO code overriding the locale's own currency.

    Returns:
        Transactions in export order.
    """
    transactions = [
        Transaction.from_rows(members, account_types, use_clear, culture, currency)
        for members in row_groups(rows)
    ]
    return [txn for txn in transactions if not is_duplicate_transfer(txn)]


def diagnose(transactions: Iterable[Transaction]) -> list[Diagnostic]:
    """Collect warnings for line items that move no money, or move it both ways."""
    diagnostics = []
    for txn in transactions:
        for item in txn.line_items:
            if not item.has_inflow and not item.has_outflow:
                kind = DiagnosticKind.NO_MONEY_MOVED
                message = "record doesn't transfer any money"
            elif item.has_inflow and item.has_outflow:
                kind = DiagnosticKind.INFLOW_AND_OUTFLOW
                message = "record has both inflow and outflow"
            else:
                continue
            diagnostics.append(Diagnostic(
                kind=kind,
                message=message,
                date=txn.date,
                account=item.account,
                payee=item.payee,
            ))
    return diagnostics

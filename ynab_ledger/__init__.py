from .convert import Converter, ConverterConfig  # noqa: F401

# Grouping and rendering engine
from .grouping import (
    diagnose,  # diagnose(transactions) -> [Diagnostic]
    group,     # group(rows, account_types, use_clear, culture) -> [Transaction]
)
from .ledger import render  # render(transactions) -> str

# Locale-aware money handling
from .money import format_amount, parse_amount

# Errors
from .errors import (
    AmountParseError,
    ConversionError,
    IncompleteSplitError,
    InconsistentGroupError,
    InvalidRowError,
    MalformedSplitError,
    SplitTransferError,
    UnknownAccountError,
    UnknownLocaleError,
)

# Data models
from .models import (
    AccountType,
    ConversionResult,
    Diagnostic,
    DiagnosticKind,
    GroupingKey,
    LineItem,
    RawRow,
    Transaction,
)

__all__ = [
    # Conversion entry points
    "Converter",
    "ConverterConfig",
    "group",
    "diagnose",
    "render",
    "format_amount",
    "parse_amount",
    # Errors
    "AmountParseError",
    "ConversionError",
    "IncompleteSplitError",
    "InconsistentGroupError",
    "InvalidRowError",
    "MalformedSplitError",
    "SplitTransferError",
    "UnknownAccountError",
    "UnknownLocaleError",
    # Data models
    "AccountType",
    "ConversionResult",
    "Diagnostic",
    "DiagnosticKind",
    "GroupingKey",
    "LineItem",
    "RawRow",
    "Transaction",
]

"""Fatal conversion errors.

Every structural problem in an export aborts the whole conversion. There is
no partial output, so callers only need to catch ``ConversionError``.
"""


class ConversionError(Exception):
    """Base class for every error that aborts a conversion."""


class MalformedSplitError(ConversionError):
    """A memo mentions a split but doesn't carry a ``(Split i/n)`` marker."""

    def __init__(self, memo: str):
        self.memo = memo
        super().__init__(f"Unexpected split memo: {memo!r}")


class IncompleteSplitError(ConversionError):
    """A split group was flushed with fewer (or more) parts than it declared."""

    def __init__(self, expected: int, found: list[int]):
        self.expected = expected
        self.found = found
        super().__init__(
            f"Missing a split: expected {expected} parts, found {len(found)} "
            f"(indices {', '.join(str(i) for i in found)})"
        )


class SplitTransferError(ConversionError):
    """A transfer appears as one part of a multi-item transaction."""

    def __init__(self, payee: str):
        self.payee = payee
        super().__init__(f"A split transfer is not supported: {payee!r}")


class InconsistentGroupError(ConversionError):
    """Rows grouped into one transaction disagree on their grouping key."""


class UnknownAccountError(ConversionError, LookupError):
    """An account or transfer target has no Assets/Liabilities classification."""

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"No account type configured for {account!r}")


class AmountParseError(ConversionError, ValueError):
    """An amount string can't be read with the active locale."""

    def __init__(self, text: str, locale: str):
        self.text = text
        self.locale = locale
        super().__init__(f"Cannot parse amount {text!r} with locale {locale}")


class UnknownLocaleError(ConversionError):
    """The culture name doesn't resolve to a CLDR locale or currency."""


class InvalidRowError(ConversionError):
    """A row of the export file is missing required data or has a bad date."""

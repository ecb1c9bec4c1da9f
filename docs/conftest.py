"""Run the Python blocks in the usage guide as tests."""

import datetime

from sybil import Sybil
from sybil.parsers.markdown import PythonCodeBlockParser

from ynab_ledger import AccountType, RawRow


def setup(namespace):
    """Names every example in examples.md can use without importing."""
    namespace["datetime"] = datetime
    namespace["AccountType"] = AccountType
    namespace["RawRow"] = RawRow


# Blocks in one file share a namespace, so later examples build on earlier ones
pytest_collect_file = Sybil(
    parsers=[PythonCodeBlockParser()],
    patterns=["examples.md"],
    setup=setup,
).pytest()

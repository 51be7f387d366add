from decimal import Decimal
from typing import Dict, TextIO

from models import ClientAccount

HEADER = ("client", "available", "held", "total", "locked")


def format_decimal(value: Decimal) -> str:
    """Format decimal without trailing zeros or exponent notation."""
    normalized = value.normalize()
    if normalized == 0:
        return "0"
    return f"{normalized:f}"


def format_row(account: ClientAccount) -> str:
    return ", ".join((
        str(account.client_id),
        format_decimal(account.available),
        format_decimal(account.held),
        format_decimal(account.total),
        str(account.locked).lower(),
    ))


def write_report(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    """Write the account snapshot as CSV, one row per client in client id order."""
    stream.write(", ".join(HEADER) + "\n")
    for client_id in sorted(accounts.keys()):
        stream.write(format_row(accounts[client_id]) + "\n")

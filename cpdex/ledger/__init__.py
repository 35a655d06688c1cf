"""Ledger runtime and token program collaborators."""

from cpdex.ledger.store import Ledger
from cpdex.ledger.token import Authority, TokenProgram, TransferService

__all__ = ["Authority", "Ledger", "TokenProgram", "TransferService"]

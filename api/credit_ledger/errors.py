"""Error taxonomy shared by the valuation, registry and settlement services."""

from __future__ import annotations


class CreditLedgerError(Exception):
    """Base class for every error raised by the ledger core."""


class InvalidArgument(CreditLedgerError, ValueError):
    """Empty required string, non-positive number or inverted range."""


class InvalidContribution(InvalidArgument):
    pass


class InvalidWallet(InvalidArgument):
    def __init__(self, address: str, role: str = "wallet"):
        self.address = address
        self.role = role
        super().__init__(f"Invalid {role} address: {address!r}")


class InvalidAmount(InvalidArgument):
    def __init__(self, amount: object):
        self.amount = amount
        super().__init__(f"Payment amount must be greater than zero, got {amount!r}")


class OverlapConflict(CreditLedgerError):
    def __init__(self, file_id: str, existing_id: str, existing_range: tuple[int, int]):
        self.file_id = file_id
        self.existing_id = existing_id
        self.existing_range = existing_range
        start, end = existing_range
        super().__init__(
            f"A contribution already exists for {file_id} lines {start}-{end} (id={existing_id})"
        )


class UnknownContribution(CreditLedgerError, LookupError):
    def __init__(self, contribution_id: str):
        self.contribution_id = contribution_id
        super().__init__(f"Contribution not found: {contribution_id}")


class SettlementVerificationError(CreditLedgerError):
    """Verification of a sent transaction failed; the record stays unverified."""

    def __init__(self, transaction_id: str, reason: str):
        self.transaction_id = transaction_id
        self.reason = reason
        super().__init__(f"verification_failed:{transaction_id}:{reason}")


class SettlementUnavailable(CreditLedgerError):
    """The engine has been shut down and accepts no new transactions."""

    def __init__(self) -> None:
        super().__init__("settlement_engine_shut_down")

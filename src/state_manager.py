from typing import Dict, Optional, Set

from models import ClientAccount, DepositRecord


class StateManager:
    """
    Storage for one ledger: client accounts and the deposits eligible for dispute.
    Owned by a single Ledger, which is driven by a single engine thread, so no locking.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._deposits: Dict[int, DepositRecord] = {}
        # Ids of applied deposits and withdrawals. Withdrawals are never disputable,
        # but their ids still count as taken.
        self._transaction_ids: Set[int] = set()

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create a zeroed one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def has_transaction_id(self, transaction_id: int) -> bool:
        return transaction_id in self._transaction_ids

    def record_transaction_id(self, transaction_id: int) -> None:
        self._transaction_ids.add(transaction_id)

    def store_deposit(self, transaction_id: int, record: DepositRecord) -> None:
        """Store deposit for future dispute lookups."""
        self._deposits[transaction_id] = record

    def get_deposit(self, transaction_id: int) -> Optional[DepositRecord]:
        return self._deposits.get(transaction_id)

    def get_all_deposits(self) -> Dict[int, DepositRecord]:
        return dict(self._deposits)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

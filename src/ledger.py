from typing import Dict, Optional

from models import (
    ClientAccount,
    DepositRecord,
    DisputeState,
    ProcessingResult,
    Transaction,
    TransactionType,
)
from state_manager import StateManager


class Ledger:
    """
    Applies transactions to client accounts.

    Every rule violation is reported through the returned ProcessingResult and
    leaves all state untouched; nothing here raises for bad input or does I/O.
    Amounts for dispute, resolve and chargeback always come from the stored
    deposit, never from the incoming record.
    """

    def __init__(self, state: Optional[StateManager] = None):
        self._state = state if state is not None else StateManager()

    @property
    def accounts(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()

    @property
    def deposits(self) -> Dict[int, DepositRecord]:
        return self._state.get_all_deposits()

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single transaction.

        Returns:
            APPLIED: State was mutated
            anything else: Transaction was ignored, the member names why
        """
        account = self._state.get_or_create_account(transaction.client_id)

        if account.locked:
            return ProcessingResult.ACCOUNT_FROZEN

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)

    def snapshot(self) -> Dict[int, ClientAccount]:
        """Copy of every known account, ordered by client id."""
        accounts = self._state.get_all_accounts()
        return {client_id: accounts[client_id].copy() for client_id in sorted(accounts)}

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None or transaction.amount <= 0:
            return ProcessingResult.INVALID_AMOUNT

        if self._state.has_transaction_id(transaction.transaction_id):
            return ProcessingResult.DUPLICATE_TRANSACTION

        account.credit(transaction.amount)
        self._state.record_transaction_id(transaction.transaction_id)
        self._state.store_deposit(
            transaction.transaction_id,
            DepositRecord(client_id=transaction.client_id, amount=transaction.amount),
        )
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None or transaction.amount <= 0:
            return ProcessingResult.INVALID_AMOUNT

        if self._state.has_transaction_id(transaction.transaction_id):
            return ProcessingResult.DUPLICATE_TRANSACTION

        # All or nothing, never partial.
        if account.available < transaction.amount:
            return ProcessingResult.INSUFFICIENT_FUNDS

        account.debit(transaction.amount)
        self._state.record_transaction_id(transaction.transaction_id)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        deposit = self._find_deposit(transaction, DisputeState.CLEAN)
        if deposit is None:
            return ProcessingResult.NOT_DISPUTABLE

        account.hold(deposit.amount)
        deposit.state = DisputeState.DISPUTED
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        deposit = self._find_deposit(transaction, DisputeState.DISPUTED)
        if deposit is None:
            return ProcessingResult.NOT_RESOLVABLE

        account.release_hold(deposit.amount)
        deposit.state = DisputeState.CLEAN
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        deposit = self._find_deposit(transaction, DisputeState.DISPUTED)
        if deposit is None:
            return ProcessingResult.NOT_CHARGEBACKABLE

        account.remove_held(deposit.amount)
        account.locked = True
        deposit.state = DisputeState.CHARGED_BACK
        return ProcessingResult.APPLIED

    def _find_deposit(self, transaction: Transaction, expected: DisputeState) -> Optional[DepositRecord]:
        """Deposit referenced by transaction, if it belongs to the same client and is in the expected state."""
        deposit = self._state.get_deposit(transaction.transaction_id)
        if deposit is None or deposit.client_id != transaction.client_id or deposit.state is not expected:
            return None
        return deposit

import logging
from typing import Dict, Iterable, Optional

from ledger import Ledger
from message_queue import Channel
from models import ClientAccount, ProcessingStats, Snapshot, Transaction

logger = logging.getLogger(__name__)


class Engine:
    """
    Drains transactions in arrival order into one Ledger.
    One engine owns one ledger; run it from a single thread.
    """

    def __init__(self, ledger: Optional[Ledger] = None, source: str = "<stream>"):
        self._ledger = ledger if ledger is not None else Ledger()
        self._source = source
        self._stats = ProcessingStats()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def run(self, inbound: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply every transaction until the inbound stream ends, then return all accounts."""
        for transaction in inbound:
            result = self._ledger.apply(transaction)
            self._stats.record(result)
            if not result.applied:
                logger.warning(f"{self._source}: ignored {transaction}: {result.value}")

        logger.info(f"{self._source}: {self._stats.summary()}")
        return self._ledger.snapshot()

    def serve(self, inbound: Channel[Transaction], outbound: Channel[Snapshot]) -> None:
        """Run to end of stream and publish exactly one snapshot."""
        accounts = self.run(inbound)
        outbound.publish_message(Snapshot(source=self._source, accounts=accounts))

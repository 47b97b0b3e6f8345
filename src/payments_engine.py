import logging
import threading
from typing import Callable, Dict, List, Optional, Sequence, TextIO

from csv_io import read_transactions, write_accounts
from engine import Engine
from message_queue import Channel
from models import ClientAccount, Snapshot, Transaction

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Orchestrates the producer -> engine -> consumer pipeline.

    Every input file gets its own producer thread, inbound channel, engine thread
    and ledger; nothing is shared between them. A single consumer thread drains the
    outbound snapshot channel and renders the merged result.
    """

    def __init__(self, channel_capacity: int = 0):
        self._channel_capacity = channel_capacity
        self._errors: List[BaseException] = []
        self._errors_lock = threading.Lock()

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process one CSV file and return final account states."""
        return self.process_files([filepath])[0].accounts

    def process_files(self, filepaths: Sequence[str], output: Optional[TextIO] = None) -> List[Snapshot]:
        """
        Process CSV files as independent ledgers.
        Returns one snapshot per file in input order, and renders them to output if given.
        Re-raises the first I/O failure of any stage once every thread has stopped.
        """
        self._errors = []
        outbound: Channel[Snapshot] = Channel(capacity=self._channel_capacity)
        snapshots: List[Snapshot] = []

        logger.info(f"Starting pipeline for {len(filepaths)} input(s)")

        consumer_thread = threading.Thread(
            target=self._guarded, args=(self._consume_snapshots, outbound, filepaths, snapshots, output)
        )
        consumer_thread.start()

        worker_threads = []
        for filepath in filepaths:
            inbound: Channel[Transaction] = Channel(capacity=self._channel_capacity)
            engine = Engine(source=filepath)

            publisher_thread = threading.Thread(target=self._guarded, args=(self._publish_transactions, filepath, inbound))
            engine_thread = threading.Thread(target=self._guarded, args=(engine.serve, inbound, outbound))
            publisher_thread.start()
            engine_thread.start()
            worker_threads.extend([publisher_thread, engine_thread])

        for worker_thread in worker_threads:
            worker_thread.join()
        outbound.close()
        consumer_thread.join()

        logger.info("Pipeline complete")

        if self._errors:
            raise self._errors[0]
        return snapshots

    def _publish_transactions(self, filepath: str, inbound: Channel[Transaction]) -> None:
        """Read CSV and publish transactions. Always closes the channel so the engine can finish."""
        try:
            for transaction in read_transactions(filepath):
                inbound.publish_message(transaction)
        finally:
            inbound.close()

    def _consume_snapshots(
        self,
        outbound: Channel[Snapshot],
        filepaths: Sequence[str],
        snapshots: List[Snapshot],
        output: Optional[TextIO],
    ) -> None:
        """Drain snapshots, order them by input position, and render."""
        received = list(outbound)
        position = {filepath: index for index, filepath in enumerate(filepaths)}
        snapshots.extend(sorted(received, key=lambda snapshot: position[snapshot.source]))

        if output is not None and not self._errors:
            write_accounts(snapshots, output)

    def _guarded(self, target: Callable, *args) -> None:
        try:
            target(*args)
        except Exception as e:
            logger.error(f"Pipeline stage failed: {e}")
            with self._errors_lock:
                self._errors.append(e)

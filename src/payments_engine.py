import logging
import threading
from typing import Dict, Iterable, List, Optional

from ledger_engine import LedgerEngine
from message_queue import InMemoryQueue
from models import ClientAccount, ProcessingStats, Transaction

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays transactions on several worker threads, partitioned by client id.

    Each partition owns its own LedgerEngine and sees its records in input
    order, so per-client ordering is preserved. Results match a single
    LedgerEngine as long as no record references another client's tx id.
    """

    def __init__(self, num_workers: int = 4):
        if num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}")
        self._num_workers = num_workers
        self._stats = ProcessingStats()
        self._queues: List[InMemoryQueue] = []
        self._engines: List[LedgerEngine] = []
        self._errors_lock = threading.Lock()
        self._worker_error: Optional[BaseException] = None

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """
        Process transactions and return final account states.
        Each call is a fresh run. If any worker fails, its exception is re-raised here.
        """
        logger.info(f"Starting partitioned processing with {self._num_workers} workers")

        self._stats = ProcessingStats()
        self._queues = [InMemoryQueue() for _ in range(self._num_workers)]
        self._engines = [LedgerEngine(self._stats) for _ in range(self._num_workers)]
        self._worker_error = None

        worker_threads: List[threading.Thread] = []
        for partition in range(self._num_workers):
            worker_thread = threading.Thread(target=self._consume_transactions, args=(partition,))
            worker_thread.start()
            worker_threads.append(worker_thread)

        try:
            for transaction in transactions:
                self._queues[self._partition_for(transaction.client_id)].publish_message(transaction)
        finally:
            for queue in self._queues:
                queue.shutdown()
            for worker_thread in worker_threads:
                worker_thread.join()

        if self._worker_error is not None:
            logger.error(f"Partitioned run aborted: {self._worker_error}")
            raise self._worker_error

        logger.info(f"Applied: {self._stats.applied}, Ignored: {self._stats.ignored}")

        accounts: Dict[int, ClientAccount] = {}
        for engine in self._engines:
            accounts.update(engine.accounts)
        return accounts

    def _partition_for(self, client_id: int) -> int:
        return client_id % self._num_workers

    def _consume_transactions(self, partition: int) -> None:
        """Worker loop: pull from the partition queue and apply. Stops on the first error."""
        queue = self._queues[partition]
        engine = self._engines[partition]
        while True:
            transaction = queue.consume_message()
            if transaction is None:
                if queue.is_shutdown() and queue.is_empty():
                    break
                continue
            try:
                engine.apply(transaction)
            except Exception as e:
                with self._errors_lock:
                    if self._worker_error is None:
                        self._worker_error = e
                return

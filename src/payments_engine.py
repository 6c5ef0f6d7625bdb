import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Union

from config import EngineConfig
from csv_io import TransactionReader
from exceptions import ChannelClosed
from ledger import Ledger, log_processing_error
from message_queue import Channel, SnapshotQuery
from models import AccountSnapshot, ProcessingError, ProcessingStats, Transaction

logger = logging.getLogger(__name__)

Command = Union[Transaction, SnapshotQuery]


class PaymentsEngine:
    """
    Runs a Ledger on its own thread behind an ordered command channel.

    Transactions and snapshot queries share one channel, so a query is answered
    only after every command sent before it has been applied. Rejections go out
    on a separate error channel drained by an independent sink thread, so a
    slow sink never holds up the ledger.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        error_handler: Optional[Callable[[ProcessingError], None]] = None,
    ):
        self._config = config or EngineConfig()
        self._commands: Channel[Command] = Channel(maxsize=self._config.command_queue_size)
        # Unbounded so a slow sink never blocks the ledger thread.
        self._errors: Channel[ProcessingError] = Channel()
        self._error_handler = error_handler or log_processing_error
        self._ledger = Ledger(error_sink=self._errors.send)
        self._ledger_thread: Optional[threading.Thread] = None
        self._sink_thread: Optional[threading.Thread] = None

    @property
    def stats(self) -> ProcessingStats:
        return self._ledger.stats

    def start(self) -> "PaymentsEngine":
        if self._ledger_thread is not None:
            raise RuntimeError("engine already started")

        self._ledger_thread = threading.Thread(target=self._run_ledger, name="ledger", daemon=True)
        self._sink_thread = threading.Thread(target=self._run_error_sink, name="error-sink", daemon=True)
        self._sink_thread.start()
        self._ledger_thread.start()
        return self

    def submit(self, transaction: Transaction) -> None:
        """Queue a transaction. Raises ChannelClosed after close()."""
        self._commands.send(transaction)

    def submit_all(self, transactions: Iterable[Transaction]) -> None:
        for transaction in transactions:
            self._commands.send(transaction)

    def query_snapshots(self, timeout: Optional[float] = None) -> List[AccountSnapshot]:
        """
        Snapshot every account once all previously submitted commands are applied.
        Raises NoAnswer if the ledger stops before reaching the query.
        """
        query = SnapshotQuery()
        self._commands.send(query)
        return query.reply.receive(timeout=timeout)

    def close(self) -> None:
        """
        Stop accepting commands, apply what is queued, then flush pending errors.
        If the engine never started, queued queries are closed unanswered.
        """
        if self._ledger_thread is None:
            self._abandon_pending_queries()
            self._commands.close()
            self._abandon_pending_queries()
            self._errors.close()
            return

        self._commands.close()
        self._ledger_thread.join()
        self._sink_thread.join()

    def __enter__(self) -> "PaymentsEngine":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def process_file(self, filepath: str) -> Dict[int, AccountSnapshot]:
        """
        Process CSV file and return final account states keyed by client id.
        The calling thread is the producer; rows are parsed lazily and sent as read.
        """
        logger.info(f"Processing {filepath}")

        with open(filepath, "r", newline="") as f, self:
            reader = TransactionReader(f)
            self.submit_all(reader)

            snapshots = self.query_snapshots()
            self.stats.record_skipped(reader.skipped)

        logger.info(
            f"Processed: {self.stats.processed}, "
            f"Failed: {self.stats.failed}, "
            f"Skipped rows: {self.stats.skipped}"
        )
        return {snapshot.client_id: snapshot for snapshot in snapshots}

    def _run_ledger(self) -> None:
        """Consumer loop: apply commands in arrival order until the channel closes."""
        try:
            for command in self._commands:
                if isinstance(command, SnapshotQuery):
                    command.reply.send(self._ledger.snapshot_all())
                else:
                    self._ledger.apply(command)
        finally:
            self._abandon_pending_queries()
            self._errors.close()

    def _abandon_pending_queries(self) -> None:
        # Drops whatever is still queued, closing query replies so callers get NoAnswer.
        while True:
            try:
                command = self._commands.receive(timeout=0)
            except ChannelClosed:
                return
            if command is None:
                return
            if isinstance(command, SnapshotQuery):
                command.reply.close()

    def _run_error_sink(self) -> None:
        for error in self._errors:
            try:
                self._error_handler(error)
            except Exception:
                logger.exception(f"Error handler failed on {error}")

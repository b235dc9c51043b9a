# ============================================================================
# File: synchronizer/engine.py
# Description: Timestamp-driven one-way table synchronization
# ============================================================================
"""
DB Synchronizer - copies new rows from a source database to a destination.

For every table map, in order, one pass:

1. Reads the destination high-water mark: max(destination timestamp)
2. Selects the mapped source columns of rows with a strictly newer
   source timestamp
3. Inserts each selected row into the destination, one statement per row

Failure policy:
- A failed statement is logged and skipped, never retried
- A failed insert abandons only its row
- A failed read abandons only its table for this pass

Known limitations:
- The strict ``>`` comparison means a source row whose timestamp equals the
  current high-water mark is never selected, even if it arrives after the
  row that set the mark
- No timeout is applied to statements; a hung database call hangs the pass
"""

from typing import Any, Dict, Optional
import logging

from core.exceptions import DBSyncException, ReadQueryError, SchedulerError, WriteStatementError
from models.base import SyncStatus
from models.mapping import DBMap, TableMap
from synchronizer.executors import QueryExecutor
from synchronizer.queries import (
    build_insert_statement,
    build_last_sync_timestamp_query,
    build_select_query,
    last_sync_timestamp_from_rows,
)
from synchronizer.scheduler import CancellationToken, RecurringSync

logger = logging.getLogger(__name__)


class DBSynchronizer:
    """
    One-way synchronizer between two databases.

    Responsibilities:
    - Run single passes over the database map (``sync``)
    - Run passes at a fixed period (``live_sync``)
    - Stop cooperatively at row granularity (``stop_sync``)

    Once stopped, a synchronizer stays stopped; create a new one to sync
    again.
    """

    def __init__(
        self,
        source: QueryExecutor,
        destination: QueryExecutor,
        db_map: DBMap,
        token: Optional[CancellationToken] = None
    ):
        self.source = source
        self.destination = destination
        self.db_map = db_map
        self.token = token or CancellationToken()
        self._recurring: Optional[RecurringSync] = None

    @property
    def is_running(self) -> bool:
        return not self.token.cancelled

    async def sync(self) -> Dict[str, Any]:
        """
        Run one synchronization pass.

        Returns:
            Dictionary with pass statistics:
            - status: "success", "partial" or "cancelled"
            - tables_synced: Table maps that completed without a failed read
            - tables_failed: Table maps abandoned because a read failed
            - tables_cancelled: Table maps stopped partway through their rows
            - rows_read: Rows returned by the source
            - rows_written: Rows inserted into the destination
            - rows_failed: Rows whose insert failed
        """
        stats = {
            "tables_synced": 0,
            "tables_failed": 0,
            "tables_cancelled": 0,
            "rows_read": 0,
            "rows_written": 0,
            "rows_failed": 0,
        }
        cancelled = False

        logger.info(f"Starting sync pass over {len(self.db_map.table_maps)} table maps")

        for table_map in self.db_map.table_maps:
            if self.token.cancelled:
                cancelled = True
                break
            outcome = await self._sync_table(table_map, stats)
            stats[f"tables_{outcome}"] += 1
            if self.token.cancelled:
                cancelled = True
                break

        if cancelled:
            status = SyncStatus.CANCELLED
        elif stats["tables_failed"] or stats["rows_failed"]:
            status = SyncStatus.PARTIAL
        else:
            status = SyncStatus.SUCCESS

        result = {"status": status.value, **stats}
        logger.info(
            f"Sync pass completed: {result['status']} - "
            f"Read: {stats['rows_read']}, Written: {stats['rows_written']}, "
            f"Failed: {stats['rows_failed']}"
        )
        return result

    async def _sync_table(self, table_map: TableMap, stats: Dict[str, int]) -> str:
        """Sync one table map and return its outcome: synced, failed or cancelled"""
        source_table = table_map.source_table
        destination_table = table_map.destination_table

        # --------------------------------------------------
        # HIGH-WATER MARK
        # --------------------------------------------------
        hwm_query = build_last_sync_timestamp_query(table_map)
        try:
            last_sync_timestamp = last_sync_timestamp_from_rows(
                await self.destination.execute_read(hwm_query)
            )
        except Exception as e:
            self._log_error(ReadQueryError(
                "Failed to read last sync timestamp",
                context={
                    "table_name": destination_table,
                    "query": hwm_query,
                    "database": "destination"
                },
                original_exception=e
            ))
            return "failed"

        # --------------------------------------------------
        # SELECT NEW SOURCE ROWS
        # --------------------------------------------------
        select_query = build_select_query(table_map, last_sync_timestamp)
        try:
            rows = await self.source.execute_read(select_query)
        except Exception as e:
            self._log_error(ReadQueryError(
                "Failed to read source rows",
                context={
                    "table_name": source_table,
                    "query": select_query,
                    "database": "source"
                },
                original_exception=e
            ))
            return "failed"

        stats["rows_read"] += len(rows)
        logger.info(
            f"{source_table} -> {destination_table}: {len(rows)} rows "
            f"newer than {last_sync_timestamp}"
        )

        # --------------------------------------------------
        # INSERT ROW BY ROW
        # --------------------------------------------------
        for index, row in enumerate(rows):
            if self.token.cancelled:
                logger.info(f"Sync stopped during {source_table} at row {index}")
                return "cancelled"

            statement = None
            try:
                statement = build_insert_statement(table_map, row)
                await self.destination.execute_write(statement)
                stats["rows_written"] += 1
            except Exception as e:
                stats["rows_failed"] += 1
                self._log_error(WriteStatementError(
                    "Failed to insert row",
                    context={
                        "table_name": destination_table,
                        "statement": statement,
                        "row_index": index
                    },
                    original_exception=e
                ))

        return "synced"

    def _log_error(self, error: DBSyncException):
        logger.error(str(error), extra={"error_context": error.to_dict()})

    def live_sync(self, period_seconds: float) -> None:
        """
        Run ``sync`` every ``period_seconds`` until ``stop_sync``.

        The first pass starts one full period from now; call ``sync`` first
        for an immediate pass. A firing is skipped while a pass is still
        running.

        Must be called from within a running event loop.
        """
        if self.token.cancelled:
            raise SchedulerError("Synchronizer has been stopped")
        if self._recurring is not None and self._recurring.running:
            raise SchedulerError("Live sync already running")

        self._recurring = RecurringSync(self.sync, period_seconds, self.token)
        self._recurring.start()

    def stop_sync(self) -> None:
        """
        Stop the running pass at its next row and cancel future passes.

        Nothing already written is rolled back.
        """
        self.token.cancel()
        if self._recurring is not None:
            self._recurring.stop()
        logger.info("Sync stopped")

    async def join(self) -> None:
        """Wait for the scheduled pass in flight, if any, to finish"""
        if self._recurring is not None:
            await self._recurring.wait()

"""
One-way, timestamp-driven database synchronization.

This package turns a DBMap into repeated SELECT/INSERT cycles:

Modules:
    executors: QueryExecutor protocol and its SQLAlchemy implementation
    queries: High-water-mark, SELECT and INSERT text generation
    engine: DBSynchronizer (sync, live_sync, stop_sync)
    scheduler: CancellationToken and APScheduler-backed RecurringSync
    agent: SyncAgent, which owns the connections and drives a synchronizer

Architecture:
    For every table map, a pass reads max(destination timestamp) from the
    destination, selects the source rows with a newer source timestamp and
    inserts them one statement at a time. Failed statements are logged and
    skipped so one broken table or row never blocks the rest of the map.

Usage:
    from synchronizer.engine import DBSynchronizer
    from synchronizer.agent import SyncAgent

Example:
    synchronizer = DBSynchronizer(source_executor, dest_executor, db_map)
    result = await synchronizer.sync()
    print(f"Wrote {result['rows_written']} rows")

    synchronizer.live_sync(30)
    ...
    synchronizer.stop_sync()
"""

__all__ = [
    "QueryExecutor",
    "SQLAlchemyExecutor",
    "DBSynchronizer",
    "CancellationToken",
    "RecurringSync",
    "SyncAgent",
]

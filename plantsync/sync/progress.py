"""
Progress reporting contract shared by export and import.

Per run, callbacks arrive as: any number of on_progress / on_error calls,
one on_table_complete per table attempted, and one on_complete at the end of
a full run (single-table runs skip on_complete).
"""

import logging

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Base reporter. Every callback is a no-op, override what you need."""

    def on_progress(self, table: str, current: int, total: int) -> None:
        pass

    def on_table_complete(self, table: str, success_count: int, error_count: int) -> None:
        pass

    def on_error(self, table: str, message: str) -> None:
        pass

    def on_complete(self, total_success: int, total_errors: int) -> None:
        pass


class LoggingProgressReporter(ProgressReporter):
    """Writes every callback to the log."""

    def __init__(self, log: logging.Logger = None):
        self.log = log or logger

    def on_progress(self, table, current, total):
        self.log.info(f"{table}: {current}/{total}")

    def on_table_complete(self, table, success_count, error_count):
        self.log.info(f"{table} completed: {success_count} ok, {error_count} errors")

    def on_error(self, table, message):
        self.log.error(f"{table}: {message}")

    def on_complete(self, total_success, total_errors):
        self.log.info(f"Transfer finished: {total_success} records, {total_errors} errors")


class CompositeProgressReporter(ProgressReporter):
    """Fans every callback out to several reporters."""

    def __init__(self, *reporters: ProgressReporter):
        self.reporters = list(reporters)

    def on_progress(self, table, current, total):
        for reporter in self.reporters:
            reporter.on_progress(table, current, total)

    def on_table_complete(self, table, success_count, error_count):
        for reporter in self.reporters:
            reporter.on_table_complete(table, success_count, error_count)

    def on_error(self, table, message):
        for reporter in self.reporters:
            reporter.on_error(table, message)

    def on_complete(self, total_success, total_errors):
        for reporter in self.reporters:
            reporter.on_complete(total_success, total_errors)


class SafeReporter:
    """Wraps a reporter so a failing callback is logged instead of aborting a run."""

    def __init__(self, reporter: ProgressReporter = None):
        self.reporter = reporter or ProgressReporter()

    def _call(self, name: str, *args):
        try:
            getattr(self.reporter, name)(*args)
        except Exception as e:
            logger.error(f"Progress callback {name} failed: {e}", exc_info=True)

    def progress(self, table, current, total):
        self._call("on_progress", table, current, total)

    def table_complete(self, table, success_count, error_count):
        self._call("on_table_complete", table, success_count, error_count)

    def error(self, table, message):
        self._call("on_error", table, message)

    def complete(self, total_success, total_errors):
        self._call("on_complete", total_success, total_errors)

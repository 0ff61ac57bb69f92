"""Result types returned by sessions and the orchestrator."""

from dataclasses import dataclass, field


@dataclass
class TableResult:
    """Outcome of transferring one table."""
    table: str
    success_count: int = 0
    error_count: int = 0
    failed: bool = False  # table-level error, counts forced to zero
    timed_out: bool = False  # remote snapshot read never answered

    def fail(self, timed_out: bool = False) -> "TableResult":
        self.success_count = 0
        self.error_count = 0
        self.failed = True
        self.timed_out = timed_out
        return self


@dataclass
class TransferResult:
    """Aggregate of a full run across all tables."""
    direction: str
    tables: list[TableResult] = field(default_factory=list)

    def add(self, result: TableResult) -> None:
        self.tables.append(result)

    @property
    def total_success(self) -> int:
        return sum(t.success_count for t in self.tables)

    @property
    def total_errors(self) -> int:
        return sum(t.error_count for t in self.tables)

    def by_table(self) -> dict[str, TableResult]:
        return {t.table: t for t in self.tables}

"""Result models for statement splitting and dump restore.

Usage:
    from sqlport.dump.models import RestoreOutcome, Statement, StatementError

    outcome = await run_restore(conn, "dumps/shop.sql")
    if not outcome.success:
        print(outcome.format_report())
"""

import os

from pydantic import BaseModel, Field


class Statement(BaseModel):
    """One complete, executable statement taken from a dump."""

    index: int          # 0-based position among emitted statements
    sql: str            # text as sent to the connection
    line_number: int    # 1-based physical line that terminated the statement
    line_count: int     # lines counted outside quoted values
    last_line: str      # terminating line, used in error reports


class StatementError(BaseModel):
    """A statement the backend rejected during restore."""

    statement_index: int
    line_number: int
    code: str
    message: str
    executed: int       # statements submitted before this one


class RestoreOutcome(BaseModel):
    """Result of replaying a dump against a connection.

    Per-statement failures and a rolled-back transaction both end up here;
    neither is raised to the caller.
    """

    errors: list[StatementError] = Field(default_factory=list)
    statements_executed: int = 0
    rolled_back: bool = False
    exception: str | None = None

    @property
    def success(self) -> bool:
        return not self.errors and self.exception is None

    def format_report(self) -> str:
        """Format the outcome as a human-readable multi-line report."""
        report = ""
        for err in self.errors:
            report += f"Error in line {err.line_number}: {err.message}{os.linesep}"
            report += f"Code: {err.code}{os.linesep}"
            report += f"Executed: {err.executed} Queries{os.linesep}"
        if self.exception is not None:
            report += f"Exception caught: {self.exception}"
        return report

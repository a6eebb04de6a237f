# Overview: Service-layer helper for all-or-nothing bulk inserts with per-item skip reporting.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from flask import current_app

from ..extensions import db


@dataclass(frozen=True)
class Skipped:
    """An item the batch deliberately did nothing for. Not a failure."""
    employee_id: Any
    reason: str

    def to_dict(self) -> dict:
        return {"employee_id": self.employee_id, "reason": self.reason}


@dataclass
class BatchReport:
    created: list = field(default_factory=list)
    skipped: list[Skipped] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "created_count": len(self.created),
            "skipped_count": len(self.skipped),
            "records": [record.to_dict() for record in self.created],
            "skipped": [s.to_dict() for s in self.skipped],
        }


def run_batch(employee_ids, build_one: Callable[[Any], Any], *, label: str) -> BatchReport:
    """
    Build one record per employee id inside a single transaction.

    build_one returns either a new model instance or a Skipped. Skips are
    collected into the report; any exception rolls back the whole batch
    and propagates.
    """
    report = BatchReport()
    try:
        for employee_id in employee_ids:
            outcome = build_one(employee_id)
            if isinstance(outcome, Skipped):
                report.skipped.append(outcome)
                continue
            db.session.add(outcome)
            # Flush per item so a later same-batch duplicate is visible to its pre-check
            db.session.flush()
            report.created.append(outcome)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Bulk %s rolled back", label)
        raise

    current_app.logger.info(
        "Bulk %s: %s created, %s skipped", label, len(report.created), len(report.skipped)
    )
    return report

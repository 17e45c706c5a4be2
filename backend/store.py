"""Read/insert access to the survey response collection.

Callers never see database exceptions: every operation returns a
:class:`StoreResult` carrying either data or an error, and nothing is retried.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import SurveyResponse
from schemas import SurveyResponseOut

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreError:
    message: str
    operation: str


@dataclass(frozen=True)
class StoreResult:
    data: Any = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ResponseStore:
    """Survey response collection backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> StoreResult:
        """List every response, newest first.

        Returns:
            StoreResult: data is a list[SurveyResponseOut] on success.
        """
        try:
            rows = self.db.execute(
                select(SurveyResponse).order_by(SurveyResponse.created_at.desc(), SurveyResponse.id.desc())
            ).scalars().all()
            return StoreResult(data=[SurveyResponseOut.model_validate(r) for r in rows])
        except SQLAlchemyError as exc:
            logger.error("Error fetching responses: %s", exc)
            return StoreResult(error=StoreError(str(exc), "list_all"))

    def insert_one(self, record: dict) -> StoreResult:
        """Insert one response.

        Args:
            record (dict): {name, email, responses, suggestions}.

        Returns:
            StoreResult: data is the stored SurveyResponseOut on success.
        """
        row = SurveyResponse(
            name=record["name"],
            email=record["email"],
            responses=dict(record["responses"]),
            suggestions=record.get("suggestions") or "",
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Error inserting response for %s: %s", record.get("email"), exc)
            return StoreResult(error=StoreError(str(exc), "insert_one"))
        logger.info("Stored survey response id=%s", row.id)
        return StoreResult(data=SurveyResponseOut.model_validate(row))

"""Multi-statement writes composed from explicit step results.

Each step is a callable taking the session and returning a `StepResult`.
`run_in_transaction` runs the steps in order on one session, so the whole
sequence uses a single connection, and:

- commits when every step succeeded,
- rolls back at the first failed step and returns that failure,
- rolls back on a SQLAlchemy error and returns a generic `StoreError`.

A step may also raise an `OrderDeskError` instead of returning a failure;
it is handled the same way.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import OrderDeskError, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    value: Any = None
    error: Optional[OrderDeskError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value=None) -> "StepResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: OrderDeskError) -> "StepResult":
        return cls(error=error)


Step = Callable[[Session], StepResult]


def run_in_transaction(db: Session, steps: Iterable[Step], action: str) -> StepResult:
    """Run `steps` as one transaction.

    On success the result's value is the list of step values, in order.
    `action` names the operation for logs and for the generic store message,
    e.g. "delete purchase order 3".
    """
    values: List[Any] = []
    try:
        for step in steps:
            try:
                result = step(db)
            except OrderDeskError as e:
                result = StepResult.failure(e)
            if not result.ok:
                db.rollback()
                logger.info("Rolled back %s: %s", action, result.error)
                return result
            values.append(result.value)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database error while trying to %s", action)
        return StepResult.failure(StoreError(f"Unable to {action}. Please try again later."))
    except Exception:
        db.rollback()
        raise
    logger.debug("Committed %s", action)
    return StepResult.success(values)


@contextmanager
def store_errors(action: str):
    """Turn SQLAlchemy errors raised by plain reads into a generic `StoreError`."""
    try:
        yield
    except SQLAlchemyError:
        logger.exception("Database error while trying to %s", action)
        raise StoreError(f"Unable to {action}. Please try again later.") from None


def run_or_raise(db: Session, steps: Iterable[Step], action: str) -> List[Any]:
    """Like `run_in_transaction` but raises the failure, returning the step values."""
    result = run_in_transaction(db, steps, action)
    if not result.ok:
        raise result.error
    return result.value

"""
ORM-level immutability for archived history records.

History rows are written once by the archiver. These listeners reject any
later UPDATE or DELETE issued through the ORM before SQL reaches the
database.
"""

from sqlalchemy import event

from outpass.config.logging import get_logger
from outpass.core.exceptions import ImmutableRecordError
from outpass.models.history import LeaveHistory, OutingHistory

logger = get_logger("models.immutability")

_PROTECTED = (LeaveHistory, OutingHistory)


def _reject_update(mapper, connection, target):
    logger.error(
        "Blocked update of archived history record",
        extra={"model": type(target).__name__, "record_id": target.id},
    )
    raise ImmutableRecordError(type(target).__name__, target.id, "modified")


def _reject_delete(mapper, connection, target):
    logger.error(
        "Blocked delete of archived history record",
        extra={"model": type(target).__name__, "record_id": target.id},
    )
    raise ImmutableRecordError(type(target).__name__, target.id, "deleted")


def register_immutability_listeners() -> None:
    """Attach the listeners; safe to call more than once."""
    for model in _PROTECTED:
        if not event.contains(model, "before_update", _reject_update):
            event.listen(model, "before_update", _reject_update)
        if not event.contains(model, "before_delete", _reject_delete):
            event.listen(model, "before_delete", _reject_delete)

"""Lookups and saves shared by the customer, order and order item routes."""
import logging

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .exceptions import NotFound, ValidationFailed

log = logging.getLogger(__name__)


def find(db: Session, model, entity_id: int):
    return db.query(model).filter(model.id == entity_id).first()


def get_or_404(db: Session, model, entity_id: int):
    entity = find(db, model, entity_id)
    if entity is None:
        raise NotFound()
    return entity


def exists(db: Session, model, entity_id: int) -> bool:
    return db.query(model.id).filter(model.id == entity_id).first() is not None


def check_path_id(path_id: int, body_id):
    """An update must name the same entity in its path and its body."""
    if body_id != path_id:
        raise ValidationFailed({"Id": [f"The Id in the body ({body_id}) does not match the Id in the path ({path_id})."]})


def require_reference(db: Session, model, entity_id: int, field_name: str):
    if not exists(db, model, entity_id):
        raise ValidationFailed({field_name: [f"{model.__name__} {entity_id} does not exist."]})


def save_changes(db: Session, model, entity_id: int):
    """Commit an update; a version conflict on a row that is gone becomes a 404.

    A conflict on a row that still exists is not recoverable here and propagates.
    """
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        if not exists(db, model, entity_id):
            raise NotFound()
        log.error("Concurrent update of %s %s", model.__name__, entity_id)
        raise

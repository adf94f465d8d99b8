from unittest import mock

import pytest
from sqlalchemy.orm.exc import StaleDataError

from order_api.crud import check_path_id, save_changes
from order_api.database import Base, make_engine, make_session_factory
from order_api.exceptions import NotFound, ValidationFailed
from order_api.models import Customer, Order


def conflicting_session(still_there):
    db = mock.MagicMock()
    db.commit.side_effect = StaleDataError("UPDATE statement on table 'orders' expected to update 1 row(s); 0 were matched.")
    db.query.return_value.filter.return_value.first.return_value = (1,) if still_there else None
    return db


def test_conflict_on_deleted_row_is_not_found():
    db = conflicting_session(still_there=False)
    with pytest.raises(NotFound):
        save_changes(db, Order, 1)
    db.rollback.assert_called_once()


def test_conflict_on_existing_row_propagates():
    db = conflicting_session(still_there=True)
    with pytest.raises(StaleDataError):
        save_changes(db, Order, 1)
    db.rollback.assert_called_once()


def test_save_without_conflict():
    db = mock.MagicMock()
    save_changes(db, Order, 1)
    db.commit.assert_called_once()
    db.query.assert_not_called()


def test_path_id_check():
    check_path_id(3, 3)
    with pytest.raises(ValidationFailed) as excinfo:
        check_path_id(3, 4)
    assert "Id" in excinfo.value.errors
    with pytest.raises(ValidationFailed):
        check_path_id(3, None)


def test_concurrent_update_of_live_row_is_a_server_error(app, client, user_headers, order):
    body = {"Id": order["Id"], "Name": "Renamed", "CustomerId": order["CustomerId"]}
    with mock.patch("sqlalchemy.orm.Session.commit", side_effect=StaleDataError("conflict")):
        with pytest.raises(StaleDataError):
            client.put(f"/api/orders/{order['Id']}", json=body, headers=user_headers)


@pytest.fixture
def two_sessions(tmp_path):
    """Two sessions on one file database, both holding the same order."""
    engine = make_engine(f"sqlite:///{tmp_path / 'orders.db'}")
    Base.metadata.create_all(bind=engine)
    factory = make_session_factory(engine)
    with factory() as setup:
        customer = Customer(name="ACME")
        setup.add(customer)
        setup.flush()
        order = Order(name="First order", customer_id=customer.id)
        setup.add(order)
        setup.commit()
        order_id = order.id

    first, second = factory(), factory()
    try:
        yield first, second, order_id
    finally:
        first.close()
        second.close()
        engine.dispose()


def test_stale_update_of_live_row_propagates(two_sessions):
    first, second, order_id = two_sessions
    mine = first.get(Order, order_id)
    theirs = second.get(Order, order_id)

    theirs.name = "Their name"
    save_changes(second, Order, order_id)

    mine.name = "My name"
    with pytest.raises(StaleDataError):
        save_changes(first, Order, order_id)
    assert first.get(Order, order_id).name == "Their name"


def test_stale_update_of_deleted_row_is_not_found(two_sessions):
    first, second, order_id = two_sessions
    mine = first.get(Order, order_id)
    second.delete(second.get(Order, order_id))
    second.commit()

    mine.name = "My name"
    with pytest.raises(NotFound):
        save_changes(first, Order, order_id)

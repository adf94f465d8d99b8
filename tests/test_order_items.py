import pytest

from order_api.models import OrderItem, Stock

BASE = "/api/orderitems"


def test_requires_bearer_token(client):
    assert client.get(f"{BASE}/all").status_code == 401


def test_create_and_get(client, user_headers, order, order_item):
    assert order_item["OrderId"] == order["Id"]
    assert order_item["Stock"] == "Low"
    assert order_item["Description"] is None

    res = client.get(f"{BASE}/{order_item['Id']}", headers=user_headers)
    assert res.status_code == 200
    assert res.json() == order_item


def test_stock_is_optional(client, user_headers, order):
    res = client.post(f"{BASE}/create", json={"Name": "Anvil", "OrderId": order["Id"]}, headers=user_headers)
    assert res.status_code == 200
    assert res.json()["Stock"] is None


@pytest.mark.parametrize("stock", ["Huge", "low", 7])
def test_unknown_stock_level(client, user_headers, order, stock):
    body = {"Name": "Anvil", "Stock": stock, "OrderId": order["Id"]}
    res = client.post(f"{BASE}/create", json=body, headers=user_headers)
    assert res.status_code == 400
    assert "Stock" in res.json()["errors"]


def test_create_for_missing_order(client, user_headers):
    res = client.post(f"{BASE}/create", json={"Name": "Anvil", "OrderId": 42}, headers=user_headers)
    assert res.status_code == 400
    assert res.json()["errors"]["OrderId"] == ["Order 42 does not exist."]


def test_list(client, user_headers, order_item):
    res = client.get(f"{BASE}/all", headers=user_headers)
    assert res.status_code == 200
    assert res.json() == [order_item]


def test_get_missing(client, user_headers):
    assert client.get(f"{BASE}/42", headers=user_headers).status_code == 404


def test_update(client, db, user_headers, order_item):
    body = {
        "Id": order_item["Id"],
        "Name": "Rocket skates",
        "Description": "Back in stock",
        "Stock": "High",
        "OrderId": order_item["OrderId"],
    }
    res = client.put(f"{BASE}/{order_item['Id']}", json=body, headers=user_headers)
    assert res.status_code == 204

    stored = db.query(OrderItem).filter(OrderItem.id == order_item["Id"]).one()
    assert stored.stock is Stock.High
    assert stored.description == "Back in stock"


def test_update_with_mismatched_ids(client, user_headers, order_item):
    body = {"Id": order_item["Id"] + 1, "Name": "Renamed", "OrderId": order_item["OrderId"]}
    res = client.put(f"{BASE}/{order_item['Id']}", json=body, headers=user_headers)
    assert res.status_code == 400
    assert client.get(f"{BASE}/{order_item['Id']}", headers=user_headers).json() == order_item


def test_update_to_missing_order(client, user_headers, order_item):
    body = {"Id": order_item["Id"], "Name": "Renamed", "OrderId": 42}
    res = client.put(f"{BASE}/{order_item['Id']}", json=body, headers=user_headers)
    assert res.status_code == 400


def test_admin_deletes_order_item(client, admin_headers, order_item):
    res = client.delete(f"{BASE}/{order_item['Id']}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json() == order_item
    assert client.get(f"{BASE}/{order_item['Id']}", headers=admin_headers).status_code == 404


def test_user_cannot_delete_order_item(client, user_headers, order_item):
    res = client.delete(f"{BASE}/{order_item['Id']}", headers=user_headers)
    assert res.status_code == 403
    assert client.get(f"{BASE}/{order_item['Id']}", headers=user_headers).status_code == 200


def test_delete_missing(client, admin_headers):
    assert client.delete(f"{BASE}/42", headers=admin_headers).status_code == 404

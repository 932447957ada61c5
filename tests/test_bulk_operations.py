import io
from decimal import Decimal

import pandas as pd

from conftest import ACTOR


def test_bulk_dispatch_records_every_line(client, make_item):
    lamp = make_item(name="Lamp", quantity=10, price="40")
    fan = make_item(name="Fan", quantity=4, price="300")

    response = client.post(
        "/stock/inventory/dispatch-bulk",
        json={
            "customer": "Asha Stores",
            "lines": [
                {"itemId": lamp["id"], "quantity": 2, "price": "60", "taxPercent": "10"},
                {"itemId": fan["id"], "quantity": 1, "price": "450"},
            ],
        },
        headers=ACTOR,
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert Decimal(body["subtotal"]) == Decimal("570")
    assert Decimal(body["totalTax"]) == Decimal("12")
    assert Decimal(body["grandTotal"]) == Decimal("582")
    assert [t["partyName"] for t in body["transactions"]] == ["Asha Stores", "Asha Stores"]
    assert Decimal(body["transactions"][1]["costPrice"]) == Decimal("300")

    assert client.get(f"/stock/inventory/{lamp['id']}").json()["quantity"] == 8
    assert client.get(f"/stock/inventory/{fan['id']}").json()["quantity"] == 3


def test_bulk_dispatch_is_all_or_nothing(client, make_item):
    lamp = make_item(name="Lamp", quantity=10)
    fan = make_item(name="Fan", quantity=1)

    response = client.post(
        "/stock/inventory/dispatch-bulk",
        json={
            "customer": "Asha",
            "lines": [
                {"itemId": lamp["id"], "quantity": 2, "price": "60"},
                {"itemId": fan["id"], "quantity": 2, "price": "450"},
            ],
        },
    )

    assert response.status_code == 400
    assert client.get(f"/stock/inventory/{lamp['id']}").json()["quantity"] == 10
    assert client.get(f"/stock/inventory/{fan['id']}").json()["quantity"] == 1


def test_bulk_dispatch_counts_repeated_lines_together(client, make_item):
    lamp = make_item(name="Lamp", quantity=3)

    response = client.post(
        "/stock/inventory/dispatch-bulk",
        json={
            "customer": "Asha",
            "lines": [
                {"itemId": lamp["id"], "quantity": 2, "price": "60"},
                {"itemId": lamp["id"], "quantity": 2, "price": "60"},
            ],
        },
    )

    assert response.status_code == 400
    assert client.get(f"/stock/inventory/{lamp['id']}").json()["quantity"] == 3


def excel_upload(rows):
    buffer = io.BytesIO()
    pd.DataFrame(rows).to_excel(buffer, index=False)
    buffer.seek(0)
    return {
        "file": (
            "items.xlsx",
            buffer,
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    }


def test_import_items_from_excel(client, warehouse):
    rows = [
        {"Name": "Cable", "Category": "Wiring", "Quantity": 30, "Price": "₹1,200.50", "Min Threshold": 10, "Source": "Acme"},
        {"Name": "Clip", "Category": "Wiring", "Quantity": 0, "Price": 2, "Min Threshold": None, "Source": None},
        {"Name": None, "Category": "Wiring", "Quantity": 5, "Price": 2, "Min Threshold": None, "Source": None},
        {"Name": "Router", "Category": "Network", "Quantity": 2, "Price": 2500, "Min Threshold": None, "Source": None},
    ]

    response = client.post(
        "/stock/inventory/import-excel",
        data={"warehouse_id": warehouse["id"]},
        files=excel_upload(rows),
    )

    assert response.status_code == 200, response.text
    assert response.json() == {"message": "Import completed successfully", "imported": 2, "skipped": 2}

    items = {i["name"]: i for i in client.get("/stock/inventory/").json()}
    assert Decimal(items["Cable"]["price"]) == Decimal("1200.50")
    assert items["Cable"]["minThreshold"] == 10
    assert items["Router"]["minThreshold"] == 5

    parties = {row["partyName"] for row in client.get("/stock/transactions/").json()}
    assert parties == {"Acme", "Bulk Purchase"}


def test_import_rejects_other_file_types(client, warehouse):
    uploads = [
        ("items.csv", io.BytesIO(b"name,category"), "text/csv"),
        ("items.xls", io.BytesIO(b"\xd0\xcf\x11\xe0"), "application/vnd.ms-excel"),
    ]
    for upload in uploads:
        response = client.post(
            "/stock/inventory/import-excel",
            data={"warehouse_id": warehouse["id"]},
            files={"file": upload},
        )
        assert response.status_code == 400
        assert ".xlsx" in response.json()["detail"]


def test_import_with_only_invalid_rows_is_a_conflict(client, warehouse):
    rows = [{"Name": "Clip", "Category": "Wiring", "Quantity": 0, "Price": 2}]

    response = client.post(
        "/stock/inventory/import-excel",
        data={"warehouse_id": warehouse["id"]},
        files=excel_upload(rows),
    )

    assert response.status_code == 409
    assert client.get("/stock/inventory/").json() == []

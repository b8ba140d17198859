import io

import pytest

from ebay_lister.exceptions import TransportError
from ebay_lister.web import create_app

from .conftest import LEVEL_CSV
from .helpers import fenced, make_payload


@pytest.fixture
def client(session):
    app = create_app(session=session)
    app.config["TESTING"] = True
    return app.test_client()


def upload_categories(client, *contents):
    data = {"files": [(io.BytesIO(c.encode("utf-8")), f"cats{i}.csv") for i, c in enumerate(contents)]}
    return client.post("/api/categories", data=data, content_type="multipart/form-data")


def analyze(client):
    data = {"images": [(io.BytesIO(b"\x89PNG"), "front.png", "image/png")]}
    return client.post("/api/analyze", data=data, content_type="multipart/form-data")


def test_state_endpoint(client):
    response = client.get("/api/state")
    assert response.status_code == 200
    assert response.get_json()["state"] == "idle"


def test_category_upload(client):
    response = upload_categories(client, LEVEL_CSV)
    assert response.status_code == 200
    assert response.get_json()["category_count"] == 1


def test_category_upload_too_many_files(client):
    response = upload_categories(client, LEVEL_CSV, LEVEL_CSV, LEVEL_CSV)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Please upload 1 or 2 eBay category CSV files."


def test_image_upload(client, session):
    data = {"images": [(io.BytesIO(b"a"), "a.webp", "image/webp"), (io.BytesIO(b"b"), "b.jpg", "image/jpeg")]}
    response = client.post("/api/images", data=data, content_type="multipart/form-data")
    assert response.status_code == 200
    assert [image.mime_type for image in session.images] == ["image/webp", "image/jpeg"]


def test_image_upload_without_files(client):
    response = client.post("/api/images", data={}, content_type="multipart/form-data")
    assert response.status_code == 400


def test_analyze_and_refine_flow(client, lister):
    upload_categories(client, LEVEL_CSV)
    lister.generation_replies.append(fenced(make_payload()))

    response = analyze(client)
    assert response.status_code == 200
    listing = response.get_json()["listing"]
    assert listing["condition"] == "Used"
    assert len(listing["sources"]) == 2

    lister.refinement_replies.append(fenced(make_payload(condition="New")))
    response = client.post("/api/refine", json={"instruction": "It is actually new"})
    assert response.status_code == 200
    refined = response.get_json()["listing"]
    assert refined["condition"] == "New"
    assert refined["sources"] == listing["sources"]

    history = client.get("/api/history").get_json()["history"]
    assert [item["id"] for item in history] == [refined["id"], listing["id"]]


def test_analyze_without_categories(client):
    response = analyze(client)
    assert response.status_code == 400


def test_analyze_validation_error(client, lister):
    upload_categories(client, LEVEL_CSV)
    lister.generation_replies.append(fenced(make_payload(condition="Mint")))
    response = analyze(client)
    assert response.status_code == 422
    assert response.get_json()["error"].startswith("AI response failed validation. Details: Field 'condition'")


def test_analyze_transport_error(client, lister):
    upload_categories(client, LEVEL_CSV)
    lister.generation_replies.append(TransportError("Gemini API is experiencing server issues"))
    response = analyze(client)
    assert response.status_code == 502
    assert response.get_json()["error"] == "Gemini API is experiencing server issues"


def test_refine_without_listing(client):
    response = client.post("/api/refine", json={"instruction": "shorter"})
    assert response.status_code == 400


def test_edit_export_and_clear(client, lister):
    upload_categories(client, LEVEL_CSV)
    lister.generation_replies.append(fenced(make_payload()))
    analyze(client)

    response = client.patch("/api/listing", json={"title": "Edited title"})
    assert response.status_code == 200
    assert response.get_json()["listing"]["title"] == "Edited title"

    blocks = client.get("/api/listing/export").get_json()["blocks"]
    assert blocks["title"] == "Edited title"
    assert blocks["item_specifics"] == "Focal Length: 50mm\nMount: Canon EF"

    assert client.post("/api/clear").status_code == 200
    assert client.get("/api/listing/export").status_code == 404
    assert len(client.get("/api/history").get_json()["history"]) == 1


def test_edit_without_body(client):
    assert client.patch("/api/listing", json={}).status_code == 400


def test_history_load_and_clear(client, lister):
    upload_categories(client, LEVEL_CSV)
    lister.generation_replies.append(fenced(make_payload(title="Saved item")))
    listing_id = analyze(client).get_json()["listing"]["id"]
    client.post("/api/clear")

    response = client.post(f"/api/history/{listing_id}/load")
    assert response.status_code == 200
    assert response.get_json()["listing"]["title"] == "Saved item"
    assert client.post("/api/history/listing-nope/load").status_code == 404

    assert client.delete("/api/history").status_code == 200
    assert client.get("/api/history").get_json()["history"] == []


@pytest.mark.parametrize("changes", [
    {"item_specifics": "Color: Black"},
    {"item_specifics": [{"name": "Color"}]},
    {"price_recommendation": {"price": "12", "justification": "x"}},
])
def test_edit_with_wrong_shape_is_rejected(client, lister, changes):
    upload_categories(client, LEVEL_CSV)
    lister.generation_replies.append(fenced(make_payload()))
    analyze(client)

    response = client.patch("/api/listing", json=changes)
    assert response.status_code == 400
    assert response.get_json()["success"] is False

    response = client.get("/api/listing/export")
    assert response.status_code == 200
    blocks = response.get_json()["blocks"]
    assert blocks["price"] == "$89.99"
    assert blocks["item_specifics"] == "Focal Length: 50mm\nMount: Canon EF"


def test_export_after_price_and_specifics_edit(client, lister):
    upload_categories(client, LEVEL_CSV)
    lister.generation_replies.append(fenced(make_payload()))
    analyze(client)

    response = client.patch("/api/listing", json={
        "price_recommendation": {"price": 12, "justification": "x"},
        "item_specifics": [{"name": "Color", "value": "Black"}],
    })
    assert response.status_code == 200

    blocks = client.get("/api/listing/export").get_json()["blocks"]
    assert blocks["price"] == "$12.00"
    assert blocks["item_specifics"] == "Color: Black"


def test_analyze_with_unsupported_image_keeps_listing(client, lister, session):
    upload_categories(client, LEVEL_CSV)
    lister.generation_replies.append(fenced(make_payload()))
    listing_id = analyze(client).get_json()["listing"]["id"]

    data = {"images": [(io.BytesIO(b"GIF89a"), "spin.gif", "image/gif")]}
    response = client.post("/api/analyze", data=data, content_type="multipart/form-data")
    assert response.status_code == 400
    assert "spin.gif" in response.get_json()["error"]
    assert session.listing.id == listing_id
    assert len(lister.generate_calls) == 1

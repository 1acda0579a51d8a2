"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from shopping_history.api.app import create_app
from shopping_history.containers import AppContainer, assemble_container
from shopping_history.services.records import SAVE_FAILED_WARNING, RecordStore
from tests.conftest import (
    FailingStorageSlot,
    FakeInferenceClient,
    InMemoryStorageSlot,
    make_image_bytes,
    make_record,
)


def _upload(client: TestClient, data: bytes):  # type: ignore[no-untyped-def]
    return client.post("/scans", files={"file": ("tag.png", data, "image/png")})


def _seed(container: AppContainer) -> None:
    container.record_store.add(make_record("Milk", 2.5, "2024-01-01T10:00:00Z"))
    container.record_store.add(make_record("Bread", 3.0, "2024-01-02T10:00:00Z"))


def test_health_and_index(container) -> None:
    client = TestClient(create_app(container))

    assert client.get("/health").json() == {"status": "ok"}
    page = client.get("/")
    assert page.status_code == 200
    assert "Shopping History" in page.text


def test_scan_then_confirm_adds_record(
    container, storage_slot: InMemoryStorageSlot
) -> None:
    client = TestClient(create_app(container))

    scan = _upload(client, make_image_bytes(800, 600))

    assert scan.status_code == 200
    draft = scan.json()
    assert draft["productName"] == "Oat Milk"
    assert draft["price"] == 2.49
    assert draft["imageUrl"].startswith("data:image/jpeg;base64,")

    created = client.post(
        "/records",
        json={
            "draftId": draft["id"],
            "name": "  Oat Milk Barista ",
            "price": 2.79,
            "location": {"latitude": 40.4, "longitude": -3.7},
        },
    )

    assert created.status_code == 201
    body = created.json()
    assert body["warning"] is None
    assert body["record"]["name"] == "Oat Milk Barista"
    assert body["record"]["price"] == 2.79
    assert body["record"]["imageUrl"] == draft["imageUrl"]
    assert body["record"]["location"] == {"latitude": 40.4, "longitude": -3.7}
    assert storage_slot.value is not None
    assert body["record"]["id"] in storage_slot.value

    again = client.post(
        "/records", json={"draftId": draft["id"], "name": "Dup", "price": 1.0}
    )
    assert again.status_code == 404


def test_confirm_rejects_negative_price(container) -> None:
    client = TestClient(create_app(container))
    draft = _upload(client, make_image_bytes(20, 20)).json()

    response = client.post(
        "/records", json={"draftId": draft["id"], "name": "Tea", "price": -1}
    )

    assert response.status_code == 422
    assert container.record_store.records == ()


def test_cancel_scan(container) -> None:
    client = TestClient(create_app(container))
    draft = _upload(client, make_image_bytes(20, 20)).json()

    assert client.delete(f"/scans/{draft['id']}").status_code == 200
    assert client.delete(f"/scans/{draft['id']}").status_code == 404


def test_scan_rejects_undecodable_upload(
    container, inference_client: FakeInferenceClient
) -> None:
    client = TestClient(create_app(container))

    response = _upload(client, b"not an image")

    assert response.status_code == 400
    assert response.json()["detail"] == "The selected file is not a readable image."
    assert inference_client.extract_calls == []


def test_scan_rejects_empty_upload(container) -> None:
    client = TestClient(create_app(container))

    assert _upload(client, b"").status_code == 400


def test_scan_inference_failure_returns_502(
    container, inference_client: FakeInferenceClient
) -> None:
    inference_client.error = RuntimeError("upstream down")
    client = TestClient(create_app(container))

    response = _upload(client, make_image_bytes(20, 20))

    assert response.status_code == 502
    assert "debug" not in response.json()["detail"]
    assert not container.scan_guard.busy


def test_local_environment_adds_debug_detail(
    container, inference_client: FakeInferenceClient
) -> None:
    container.settings.environment = "local"
    inference_client.error = RuntimeError("upstream down")
    client = TestClient(create_app(container))

    response = _upload(client, make_image_bytes(20, 20))

    assert "(debug: RuntimeError: upstream down)" in response.json()["detail"]


def test_scan_while_busy_returns_409(container) -> None:
    container.scan_guard.busy = True
    client = TestClient(create_app(container))

    assert _upload(client, make_image_bytes(20, 20)).status_code == 409


def test_list_records_sorted_and_filtered(container) -> None:
    _seed(container)
    client = TestClient(create_app(container))

    everything = client.get("/records").json()
    by_name = client.get("/records", params={"search": "mil"}).json()
    by_day = client.get("/records", params={"date": "2024-01-02"}).json()
    blank = client.get("/records", params={"search": "", "date": ""}).json()

    assert [r["name"] for r in everything["records"]] == ["Bread", "Milk"]
    assert everything["total"] == 2
    assert [r["name"] for r in by_name["records"]] == ["Milk"]
    assert [r["name"] for r in by_day["records"]] == ["Bread"]
    assert blank["total"] == 2


def test_list_records_rejects_bad_date(container) -> None:
    client = TestClient(create_app(container))

    assert client.get("/records", params={"date": "01/02/2024"}).status_code == 400


def test_delete_record(container) -> None:
    _seed(container)
    client = TestClient(create_app(container))
    milk_id = container.record_store.records[1].id

    response = client.delete(f"/records/{milk_id}")

    assert response.status_code == 200
    assert response.json() == {"removed": True, "warning": None}
    assert container.record_store.get(milk_id) is None
    assert client.delete(f"/records/{milk_id}").status_code == 404
    assert len(container.record_store.records) == 1


def test_create_record_reports_storage_warning(settings) -> None:
    container = assemble_container(
        settings,
        record_store=RecordStore(FailingStorageSlot()),
        inference_client=FakeInferenceClient(),
        close_resources=_noop,
    )
    client = TestClient(create_app(container))
    draft = _upload(client, make_image_bytes(20, 20)).json()

    response = client.post(
        "/records", json={"draftId": draft["id"], "name": "Tea", "price": 1.5}
    )

    assert response.status_code == 201
    assert response.json()["warning"] == SAVE_FAILED_WARNING
    assert len(container.record_store.records) == 1


def test_blank_analysis_query_is_a_no_op(
    container, inference_client: FakeInferenceClient
) -> None:
    _seed(container)
    client = TestClient(create_app(container))
    before = container.record_store.records

    response = client.post("/analysis", json={"query": "   "})

    assert response.status_code == 200
    assert response.json() == {"answer": None}
    assert inference_client.prompts == []
    assert container.record_store.records == before


def test_analysis_requires_history(container) -> None:
    client = TestClient(create_app(container))

    assert client.post("/analysis", json={"query": "total?"}).status_code == 409


def test_analysis_returns_answer(
    container, inference_client: FakeInferenceClient
) -> None:
    _seed(container)
    client = TestClient(create_app(container))

    response = client.post("/analysis", json={"query": "How much in total?"})

    assert response.status_code == 200
    assert response.json() == {"answer": "You spent 5.50 in total."}
    assert "Bread" in inference_client.prompts[0]


def test_analysis_failure_returns_502(
    container, inference_client: FakeInferenceClient
) -> None:
    _seed(container)
    inference_client.error = RuntimeError("timeout")
    client = TestClient(create_app(container))

    response = client.post("/analysis", json={"query": "total?"})

    assert response.status_code == 502
    assert not container.analysis_guard.busy


def test_analysis_while_busy_returns_409(container) -> None:
    _seed(container)
    container.analysis_guard.busy = True
    client = TestClient(create_app(container))

    assert client.post("/analysis", json={"query": "total?"}).status_code == 409


async def _noop() -> None:
    return None

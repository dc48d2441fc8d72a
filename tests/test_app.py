"""Tests for crm_sync.app (factory and lifespan)."""

from __future__ import annotations

from fastapi.testclient import TestClient

from crm_sync.app import create_app
from crm_sync.config import Settings
from crm_sync.models import Record
from crm_sync.pipeline import IngestionPipeline
from crm_sync.store import SheetsRecordStore
from crm_sync.worker import IngestionWorker

from tests.conftest import FakeRecordStore, email_field, make_contact_dict


class TestCreateApp:
    def test_wires_components(self, settings: Settings):
        app = create_app(settings)

        assert app.state.settings is settings
        assert isinstance(app.state.store, SheetsRecordStore)
        assert isinstance(app.state.pipeline, IngestionPipeline)
        assert isinstance(app.state.worker, IngestionWorker)

    def test_routes_registered(self, settings: Settings):
        paths = {route.path for route in create_app(settings).routes}
        assert {"/", "/test", "/add-test-email", "/webhook/amocrm", "/health", "/ready"} <= paths


class TestLifespan:
    def test_webhook_batch_processed_in_background(self, settings: Settings):
        store = FakeRecordStore([Record(email="alice@x.com", date="01.01.2024")])
        app = create_app(settings, store=store)

        with TestClient(app) as client:
            assert store.is_started is True
            assert client.get("/ready").json() == {"ready": True}

            resp = client.post(
                "/webhook/amocrm",
                json={
                    "contacts": [
                        make_contact_dict(email_field("ALICE@X.com"), contact_id=1),
                        make_contact_dict(
                            email_field("bob@x.com", code=None, name="Work Email"),
                            email_field("+79990000000", code="PHONE", name="Phone"),
                            contact_id=2,
                        ),
                        make_contact_dict(email_field("bob@x.com "), contact_id=3),
                    ]
                },
            )
            assert resp.status_code == 200

        # Shutdown drains the queue before stopping the store
        assert [email for email, _ in store.append_calls] == ["bob@x.com"]
        assert app.state.pipeline.batches_processed == 1
        assert store.is_started is False

    def test_starts_without_credentials(self, settings: Settings):
        app = create_app(settings)

        with TestClient(app) as client:
            assert client.get("/ready").status_code == 503
            assert client.get("/test").status_code == 500
            resp = client.post("/webhook/amocrm", json={"contacts": []})
            assert resp.status_code == 200

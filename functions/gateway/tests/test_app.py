import asyncio
import unittest

import httpx
from fastapi.testclient import TestClient

from gateway.app import create_app
from gateway.config import Settings
from gateway.dependencies import get_gateway
from gateway.tests.backend_fakes import (
    ANALYSIS,
    HEALTHY,
    PRIMARY,
    SECONDARY,
    FakeBackends,
    make_gateway,
    unreachable,
)


class GatewayApiTests(unittest.TestCase):
    def setUp(self):
        self.app = create_app(
            Settings(backend_url_1=PRIMARY, backend_url_2=SECONDARY)
        )
        self.client = TestClient(self.app)
        self.fake = FakeBackends()

    def tearDown(self):
        self.app.dependency_overrides.clear()
        asyncio.run(self.fake.aclose())

    def use_gateway(self, **kwargs):
        gateway = make_gateway(self.fake, **kwargs)
        self.app.dependency_overrides[get_gateway] = lambda: gateway
        return gateway

    def test_health_selects_primary(self):
        self.fake.on(f"{PRIMARY}/health", httpx.Response(200, json=HEALTHY))
        self.use_gateway()

        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {**HEALTHY, "selected_backend": PRIMARY})

    def test_health_all_down(self):
        self.fake.on(f"{PRIMARY}/health", unreachable)
        self.fake.on(f"{SECONDARY}/health", unreachable)
        self.use_gateway()

        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 503)
        payload = response.json()
        self.assertEqual(payload["status_code"], 503)
        self.assertEqual(payload["selected_backend"], PRIMARY)

    def test_upload_forwards_file(self):
        self.fake.on(f"{PRIMARY}/analyze/", httpx.Response(200, json=ANALYSIS))
        self.use_gateway()

        response = self.client.post(
            "/api/upload",
            files={"file": ("chat.txt", b"[1/1/24] A: hi", "text/plain")},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), ANALYSIS)
        self.assertEqual(len(self.fake.requests), 1)

    def test_upload_uses_preferred_url_query(self):
        self.fake.on(f"{SECONDARY}/analyze/", httpx.Response(200, json=ANALYSIS))
        self.use_gateway()

        response = self.client.post(
            "/api/upload",
            params={"preferredUrl": SECONDARY},
            files={"file": ("chat.txt", b"hi", "text/plain")},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.fake.calls_to(PRIMARY), [])

    def test_upload_without_file_field(self):
        self.use_gateway()

        response = self.client.post(
            "/api/upload",
            files={"attachment": ("chat.txt", b"hi", "text/plain")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "No file uploaded."})
        self.assertEqual(self.fake.requests, [])

    def test_upload_without_api_key(self):
        self.use_gateway(api_key=None)

        response = self.client.post(
            "/api/upload",
            files={"file": ("chat.txt", b"hi", "text/plain")},
        )
        self.assertEqual(response.status_code, 500)
        self.assertIn("API key", response.json()["message"])
        self.assertEqual(self.fake.requests, [])

    def test_upload_reports_last_backend_error(self):
        self.fake.on(f"{PRIMARY}/analyze/", unreachable)
        self.fake.on(f"{SECONDARY}/analyze/", unreachable)
        self.use_gateway()

        response = self.client.post(
            "/api/upload",
            files={"file": ("chat.txt", b"hi", "text/plain")},
        )
        self.assertEqual(response.status_code, 503)
        self.assertIn(SECONDARY, response.json()["message"])

    def test_unexpected_error_becomes_500(self):
        class BrokenGateway:
            async def forward_upload(self, upload, preferred_url=None):
                raise RuntimeError("disk full")

        self.app.dependency_overrides[get_gateway] = BrokenGateway

        response = self.client.post(
            "/api/upload",
            files={"file": ("chat.txt", b"hi", "text/plain")},
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {"message": "Failed to process upload request.", "error": "disk full"},
        )

    def test_default_wiring_uses_app_settings(self):
        self.fake.on(f"{PRIMARY}/health", unreachable)
        self.fake.on(f"{SECONDARY}/health", httpx.Response(200, json=HEALTHY))

        with TestClient(self.app) as client:
            pooled = self.app.state.http_client
            self.app.state.http_client = self.fake.client()
            try:
                response = client.get("/api/health")
            finally:
                self.app.state.http_client = pooled

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["selected_backend"], SECONDARY)

    def test_lifespan_manages_http_client(self):
        with TestClient(self.app):
            client = self.app.state.http_client
            self.assertIsInstance(client, httpx.AsyncClient)
            self.assertFalse(client.is_closed)
        self.assertTrue(client.is_closed)


if __name__ == "__main__":
    unittest.main()

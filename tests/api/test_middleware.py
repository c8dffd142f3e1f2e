"""Tests for request logging middleware."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from productcatalog.api import middleware
from productcatalog.api.middleware import catalog_log_fields


def _request(path_params: dict | None = None, query_string: bytes = b"") -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/products",
            "query_string": query_string,
            "headers": [],
            "path_params": path_params or {},
        }
    )


class TestCatalogLogFields:
    """Tests for catalog_log_fields."""

    def test_sku_from_path(self) -> None:
        """The routed sku is included."""
        assert catalog_log_fields(_request({"sku": "S-1"})) == {"sku": "S-1"}

    def test_listing_filters(self) -> None:
        """Filter parameters are included under their field names."""
        request = _request(query_string=b"brand=Acme&productName=Lamp&minPrice=5&pageSize=3")

        assert catalog_log_fields(request) == {"brand": "Acme", "product_name": "Lamp"}

    def test_nothing_to_bind(self) -> None:
        """Requests without catalog context add no fields."""
        assert catalog_log_fields(_request()) == {}


class TestRequestLog:
    """Tests for the request completion log line."""

    @pytest.fixture
    def request_logger(self, monkeypatch: pytest.MonkeyPatch) -> MagicMock:
        log = MagicMock()
        monkeypatch.setattr(middleware, "logger", log)
        return log

    def test_logs_sku_and_route(
        self,
        client: TestClient,
        product_payload: dict,
        request_logger: MagicMock,
    ) -> None:
        """Single-product calls log the sku and the route template."""
        client.post("/products", json=product_payload)
        request_logger.reset_mock()

        response = client.get("/products/API-1", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"
        request_logger.info.assert_called_once()
        message = request_logger.info.call_args.args[0]
        fields = request_logger.info.call_args.kwargs
        assert message == "Catalog request completed"
        assert fields["sku"] == "API-1"
        assert fields["route"] == "/products/{sku}"
        assert fields["status_code"] == 200

    def test_logs_listing_filters(
        self,
        client: TestClient,
        request_logger: MagicMock,
    ) -> None:
        """Listing calls log their filter criteria."""
        client.get("/products", params={"brand": "Acme", "category": "Home"})

        fields = request_logger.info.call_args.kwargs
        assert fields["brand"] == "Acme"
        assert fields["category"] == "Home"
        assert "sku" not in fields

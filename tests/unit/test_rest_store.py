# =============================================================================
# tests/unit/test_rest_store.py
# Unit Tests for RestStoreClient (HTTP session mocked)
# =============================================================================

import json
from unittest.mock import MagicMock

import pytest
import requests

from inventory_core.api.rest_store import RestStoreClient
from inventory_core.config import InventoryConfig
from inventory_core.domain.records import Record
from inventory_core.errors import NetworkError, NotFoundError, ValidationError


def _response(status=200, body=None, text=""):
    response = MagicMock()
    response.status_code = status
    response.url = "http://backend.test/api/stocks"
    response.text = text
    if body is not None:
        response.content = json.dumps(body).encode()
        response.json.return_value = body
    else:
        response.content = text.encode()
        response.json.side_effect = ValueError("No JSON object could be decoded")
    return response


@pytest.fixture
def client(mock_session):
    config = InventoryConfig(api_base_url="http://backend.test/api", request_timeout=5)
    return RestStoreClient.from_config(config, session=mock_session)


class TestRequests:
    """URLs, methods and bodies"""

    def test_read_uses_resource_endpoint(self, client, mock_session):
        mock_session.request.return_value = _response(body=[{"_id": "1", "name": "Salt"}])

        records = client.read("stocks")

        kwargs = mock_session.request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "http://backend.test/api/stocks"
        assert kwargs["timeout"] == 5
        assert records == [Record(fields={"name": "Salt"}, id="1")]

    def test_read_accepts_wrapped_list(self, client, mock_session):
        mock_session.request.return_value = _response(body={"data": [{"_id": "1"}, {"_id": "2"}]})
        assert [r.id for r in client.read("dispatches")] == ["1", "2"]

    def test_create_posts_payload(self, client, mock_session):
        mock_session.request.return_value = _response(201, body={"_id": "new", "name": "Salt"})

        saved = client.create("stocks", Record(fields={"name": "Salt", "_pending": True}))

        kwargs = mock_session.request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["json"] == {"name": "Salt"}
        assert saved.id == "new"

    def test_create_without_id_is_rejected(self, client, mock_session):
        mock_session.request.return_value = _response(201, body={"name": "Salt"})
        with pytest.raises(ValidationError):
            client.create("stocks", Record(fields={"name": "Salt"}))

    def test_update_puts_to_record_url(self, client, mock_session):
        mock_session.request.return_value = _response(200, text="")

        saved = client.update("stocks", "abc", Record(fields={"name": "Salt"}))

        kwargs = mock_session.request.call_args.kwargs
        assert kwargs["method"] == "PUT"
        assert kwargs["url"] == "http://backend.test/api/stocks/abc"
        assert saved == Record(fields={"name": "Salt"}, id="abc")

    def test_delete(self, client, mock_session):
        mock_session.request.return_value = _response(200, body={"message": "Deleted"})
        client.delete("finished_products", "abc")
        kwargs = mock_session.request.call_args.kwargs
        assert kwargs["method"] == "DELETE"
        assert kwargs["url"] == "http://backend.test/api/finished-products/abc"


class TestErrorMapping:
    """Transport and HTTP failures become inventory errors"""

    def test_connection_refused(self, client, mock_session):
        mock_session.request.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(NetworkError):
            client.read("stocks")

    def test_timeout(self, client, mock_session):
        mock_session.request.side_effect = requests.exceptions.Timeout()
        with pytest.raises(NetworkError) as exc:
            client.read("stocks")
        assert "5s" in exc.value.message

    def test_server_error_is_network_error(self, client, mock_session):
        mock_session.request.return_value = _response(503, text="Service Unavailable")
        with pytest.raises(NetworkError) as exc:
            client.read("stocks")
        assert exc.value.details["status_code"] == 503

    def test_not_found(self, client, mock_session):
        mock_session.request.return_value = _response(404, body={"message": "Not found"})
        with pytest.raises(NotFoundError) as exc:
            client.update("stocks", "gone", Record(fields={"name": "Salt"}))
        assert exc.value.details["record_id"] == "gone"

    def test_client_error_carries_server_message(self, client, mock_session):
        mock_session.request.return_value = _response(400, body={"message": "quantity is required"})
        with pytest.raises(ValidationError) as exc:
            client.create("stocks", Record(fields={}))
        assert exc.value.message == "quantity is required"

    def test_html_answer_is_network_error(self, client, mock_session):
        mock_session.request.return_value = _response(200, text="<html>proxy login</html>")
        with pytest.raises(NetworkError):
            client.read("stocks")


class TestPing:
    """Reachability probe"""

    def test_ping_up(self, client, mock_session):
        mock_session.request.return_value = _response(200, body={"ok": True})
        assert client.ping() is True

    def test_ping_404_still_means_up(self, client, mock_session):
        mock_session.request.return_value = _response(404, text="Cannot GET /ping")
        assert client.ping() is True

    def test_ping_down(self, client, mock_session):
        mock_session.request.side_effect = requests.exceptions.ConnectionError()
        assert client.ping() is False

    def test_test_connection(self, client, mock_session):
        mock_session.request.side_effect = requests.exceptions.ConnectionError()
        assert client.test_connection()["status"] == "error"

"""
REST store connector
CRUD over the inventory backend's resource endpoints (JSON bodies, string ids)
"""
from typing import Any, List, Optional
import logging

import requests

from .base_connector import BaseAPIConnector, APIConfig
from inventory_core.config import InventoryConfig
from inventory_core.domain.records import Record
from inventory_core.domain.resources import get_schema
from inventory_core.errors import InventoryError, NetworkError, ValidationError

logger = logging.getLogger(__name__)


class RestStoreClient(BaseAPIConnector):
    """
    Remote store for every inventory resource

    One request per call, bounded by the configured timeout. No retries here:
    the sync coordinator decides what happens after a failure.

    Usage:
        client = RestStoreClient.from_config(config)
        records = client.read("dispatches")
        saved = client.create("dispatches", Record(fields={...}))
    """

    def __init__(self, config: APIConfig, id_field: str = "_id", session: Optional[requests.Session] = None):
        super().__init__(config, session=session)
        self.id_field = id_field

    @classmethod
    def from_config(cls, config: InventoryConfig, session: Optional[requests.Session] = None) -> "RestStoreClient":
        return cls(
            APIConfig(
                api_name="Inventory backend",
                base_url=config.api_base_url,
                headers=dict(config.headers),
                timeout=config.request_timeout,
            ),
            id_field=config.id_field,
            session=session,
        )

    def _endpoint(self, resource: str, record_id: Optional[str] = None) -> str:
        endpoint = get_schema(resource).endpoint
        return f"{endpoint}/{record_id}" if record_id else endpoint

    def _json(self, response: requests.Response, resource: str) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            # A proxy error page instead of JSON means the backend is not really there
            raise NetworkError(
                f"Backend returned a non-JSON answer for {resource}",
                resource=resource, url=response.url, status_code=response.status_code,
            ) from e

    def _to_record(self, body: Any, resource: str) -> Record:
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        if not isinstance(body, dict):
            raise ValidationError(
                f"Unexpected response for {resource}",
                expected="JSON object", actual=type(body).__name__,
            )
        return Record.from_remote(body, id_field=self.id_field)

    # =========================================================================
    # CRUD
    # =========================================================================

    def read(self, resource: str) -> List[Record]:
        """All records of a resource, in the order the backend lists them"""
        response = self._make_request(self._endpoint(resource), resource=resource)
        body = self._json(response, resource)

        if isinstance(body, dict) and isinstance(body.get("data"), list):
            body = body["data"]
        if body is None:
            return []
        if not isinstance(body, list):
            raise ValidationError(
                f"Unexpected list response for {resource}",
                expected="JSON array", actual=type(body).__name__,
            )

        records = [Record.from_remote(item, id_field=self.id_field) for item in body if isinstance(item, dict)]
        logger.debug(f"Read {len(records)} {resource} records")
        return records

    def create(self, resource: str, record: Record) -> Record:
        """POST a new record; the returned record carries the server id"""
        response = self._make_request(
            self._endpoint(resource), method="POST", data=record.to_payload(), resource=resource,
        )
        body = self._json(response, resource)
        saved = self._to_record(body, resource) if body is not None else Record(fields=record.to_payload())
        if saved.id is None:
            raise ValidationError(
                f"Backend did not assign an identifier to the new {resource} record",
                field=self.id_field, expected="string id", actual="",
            )
        return saved

    def update(self, resource: str, record_id: str, record: Record) -> Record:
        """PUT the full record; an empty answer echoes what was sent"""
        response = self._make_request(
            self._endpoint(resource, record_id), method="PUT", data=record.to_payload(), resource=resource,
        )
        body = self._json(response, resource)
        if body is None:
            return Record(fields=record.to_payload(), id=record_id)

        saved = self._to_record(body, resource)
        if saved.id is None:
            saved.id = record_id
        return saved

    def delete(self, resource: str, record_id: str) -> None:
        self._make_request(self._endpoint(resource, record_id), method="DELETE", resource=resource)

    def ping(self) -> bool:
        """GET <base>/ping; any non-5xx answer means the backend is up"""
        try:
            self._make_request("ping")
        except NetworkError:
            return False
        except InventoryError as e:
            # 404 or another client error still proves the server answered
            logger.debug(f"Ping answered with error: {e}")
            return True
        return True

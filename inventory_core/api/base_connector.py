"""
Base API Connector Class for the inventory backend
Owns the HTTP session and turns transport/HTTP failures into inventory errors
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from dataclasses import dataclass
import logging

import requests

from inventory_core.errors import NetworkError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class APIConfig:
    """Configuration for API connection"""
    api_name: str
    base_url: str
    headers: Optional[Dict[str, str]] = None
    timeout: float = 10.0


class BaseAPIConnector(ABC):
    """Abstract base class for backend connectors"""

    def __init__(self, config: APIConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

        # Set default headers
        if config.headers:
            self.session.headers.update(config.headers)

    @abstractmethod
    def ping(self) -> bool:
        """Cheap request telling whether the backend answers"""
        pass

    def _url(self, endpoint: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _make_request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict] = None,
        data: Optional[Dict] = None,
        resource: Optional[str] = None,
    ) -> requests.Response:
        """
        Make HTTP request with error handling

        Args:
            endpoint: API endpoint (appended to base_url)
            method: HTTP method (GET, POST, etc.)
            params: Query parameters
            data: JSON request body
            resource: Resource name, carried on raised errors

        Returns:
            Response object

        Raises:
            NetworkError: timeout, refused connection, DNS failure or HTTP 5xx
            NotFoundError: HTTP 404
            ValidationError: any other HTTP 4xx
        """
        url = self._url(endpoint)

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=data,
                timeout=self.config.timeout
            )
        except requests.exceptions.Timeout as e:
            raise NetworkError(
                f"{self.config.api_name} did not answer within {self.config.timeout:g}s",
                resource=resource, url=url,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"{self.config.api_name} is unreachable: {e}",
                resource=resource, url=url,
            ) from e

        status = response.status_code
        if status >= 500:
            raise NetworkError(
                f"{self.config.api_name} failed with HTTP {status}",
                resource=resource, url=url, status_code=status,
            )
        if status == 404:
            raise NotFoundError(
                f"Record not found on {self.config.api_name}",
                resource=resource,
                record_id=endpoint.rsplit("/", 1)[-1] if method != "GET" else None,
            )
        if status >= 400:
            raise ValidationError(
                self._server_message(response) or f"Rejected with HTTP {status}",
                field=None, expected=None, actual=str(status),
            )

        logger.debug(f"{method} {url} -> {status}")
        return response

    @staticmethod
    def _server_message(response: requests.Response) -> Optional[str]:
        """Error text from a JSON body ({"message": ...} / {"error": ...}) or plain text"""
        try:
            body = response.json()
        except ValueError:
            return response.text.strip() or None
        if isinstance(body, dict):
            return body.get("message") or body.get("error")
        return None

    def test_connection(self) -> Dict[str, Any]:
        """
        Test API connection and return status

        Returns:
            Dict with status and message
        """
        try:
            reachable = self.ping()
        except Exception as e:
            return {
                "status": "error",
                "message": f"Connection failed: {str(e)}"
            }

        if reachable:
            return {
                "status": "success",
                "message": f"Successfully connected to {self.config.api_name}",
            }
        return {
            "status": "error",
            "message": f"{self.config.api_name} did not answer"
        }

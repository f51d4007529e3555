"""HTTP client for the Aurora API."""

import logging
from pathlib import Path
from typing import Any

import requests

from core.exceptions import ApiError
from core.upload_validation import MAX_UPLOAD_BYTES, validate_upload

logger = logging.getLogger("aurora.client")

DEFAULT_BASE_URL = "http://localhost:8000"
API_PREFIX = "/api/v1"


class AuroraClient:
    """Thin wrapper over the REST API.

    Every error response is raised as ``ApiError`` carrying the server's
    ``{error}`` message as ``[Code: <status>] <message>``.

    Example:
        client = AuroraClient(user_id="user-123")
        upload = client.upload_document("contract.pdf")
        record = client.get_analysis(upload["analysis_id"])
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        user_id: str = "",
        session: requests.Session | None = None,
        timeout: float = 30.0,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_upload_bytes = max_upload_bytes

    def _url(self, path: str) -> str:
        return f"{self.base_url}{API_PREFIX}{path}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self.user_id:
            headers["X-User-Id"] = self.user_id

        try:
            response = self.session.request(
                method, self._url(path), headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise ApiError(f"Request failed: {e}") from e

        if not response.ok:
            raise ApiError(self._error_message(response), status_code=response.status_code)
        return response.json()

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason or "Unknown error"
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.text or "Unknown error"

    # Documents

    def upload_document(self, file_path: str | Path, content_type: str | None = None) -> dict[str, Any]:
        """Upload a document; invalid files are rejected before any request.

        Raises:
            UploadValidationError: Wrong type, empty or over the size limit.
            ApiError: The server rejected the upload.
        """
        path = Path(file_path)
        spec = validate_upload(path.name, content_type, path.stat().st_size, self.max_upload_bytes)

        logger.info(f"Uploading {spec.filename} ({spec.size} bytes, {spec.content_type})")
        with open(path, "rb") as f:
            return self._request(
                "POST",
                "/documents/upload",
                files={"file": (spec.filename, f, spec.content_type)},
            )

    def get_analysis(self, analysis_id: str) -> dict[str, Any]:
        return self._request("GET", f"/documents/{analysis_id}")

    def list_analyses(self) -> list[dict[str, Any]]:
        return self._request("GET", "/documents/")

    def trigger_processing(self, analysis_id: str, file_path: str | None = None) -> dict[str, Any]:
        """Ask the server to (re)process an upload; the result arrives by polling."""
        return self._request(
            "POST",
            "/analysis/process",
            json={"analysis_id": analysis_id, "file_path": file_path},
        )

    # Threats

    def scan_threat(self, scan_type: str, content: str) -> dict[str, Any]:
        return self._request(
            "POST", "/threats/scan", json={"scan_type": scan_type, "content": content}
        )["scan"]

    def list_scans(self) -> list[dict[str, Any]]:
        return self._request("GET", "/threats/")

    # Assistant

    def ask_assistant(
        self,
        query: str,
        analysis_id: str,
        analysis_data: dict[str, Any] | None = None,
    ) -> str:
        payload = {"query": query, "analysis_id": analysis_id, "analysis_data": analysis_data or {}}
        return self._request("POST", "/assistant/query", json=payload)["response"]

    def get_messages(self, analysis_id: str) -> list[dict[str, Any]]:
        return self._request("GET", f"/assistant/{analysis_id}/messages")

"""HTTP-backed repositories talking to the contract service."""
from __future__ import annotations

from typing import Any, Callable, Sequence, TypeVar

import requests

from contract_amortization.config import SETTINGS
from contract_amortization.domain.errors import DataSourceError
from contract_amortization.domain.models import (
    AmortizationEntry,
    AmortizationSchedule,
    Contract,
    ContractPage,
    ContractUpdate,
)
from contract_amortization.domain.repositories import ContractDirectory, SchedulePersistence
from contract_amortization.infrastructure.parsing.payloads import (
    contract_from_payload,
    contract_update_to_payload,
    entries_to_payload,
    page_from_payload,
    schedule_from_payload,
)
from contract_amortization.logging_config import get_logger

logger = get_logger("infrastructure.http")

T = TypeVar("T")


class ApiClient:
    """Thin JSON client; every failure surfaces as DataSourceError."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout_s: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = (base_url or SETTINGS.api_base_url).rstrip("/")
        self._timeout_s = timeout_s or SETTINGS.request_timeout_s
        self._session = session or requests.Session()

    def request(self, method: str, path: str, operation: str, **kwargs: Any) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout_s, **kwargs)
        except requests.RequestException as exc:
            logger.warning("api_request_failed", extra={"url": url, "operation": operation})
            raise DataSourceError(operation, str(exc)) from exc
        if response.status_code >= 400:
            raise DataSourceError(operation, f"HTTP {response.status_code}: {response.text[:200]}")
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise DataSourceError(operation, "response is not valid JSON") from exc


def _decode(operation: str, decoder: Callable[[dict[str, Any]], T], payload: Any) -> T:
    if not isinstance(payload, dict):
        raise DataSourceError(operation, "unexpected response shape")
    try:
        return decoder(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise DataSourceError(operation, f"malformed response: {exc}") from exc


class HttpContractDirectory(ContractDirectory):
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def list(self, page: int, size: int) -> ContractPage:
        payload = self._client.request(
            "GET", "/contracts/list", "list contracts", params={"page": page, "size": size}
        )
        return _decode("list contracts", page_from_payload, payload)

    def fetch_one(self, contract_id: int) -> Contract:
        payload = self._client.request("GET", f"/contracts/{contract_id}", "fetch contract")
        return _decode("fetch contract", contract_from_payload, payload)

    def create(self, file_name: str, content: bytes) -> Contract:
        payload = self._client.request(
            "POST", "/contracts/upload", "upload contract", files={"file": (file_name, content)}
        )
        return _decode("upload contract", contract_from_payload, payload)

    def update(self, contract_id: int, patch: ContractUpdate) -> Contract:
        payload = self._client.request(
            "PUT", f"/contracts/{contract_id}", "update contract", json=contract_update_to_payload(patch)
        )
        return _decode("update contract", contract_from_payload, payload)


class HttpSchedulePersistence(SchedulePersistence):
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def calculate(self, contract_id: int) -> AmortizationSchedule:
        payload = self._client.request(
            "GET", f"/amortization/calculate/{contract_id}", "calculate schedule"
        )
        return _decode("calculate schedule", schedule_from_payload, payload)

    def save_updated(self, contract_id: int, entries: Sequence[AmortizationEntry]) -> None:
        self._client.request(
            "POST",
            f"/amortization/{contract_id}/entries",
            "save schedule",
            json={"entries": entries_to_payload(entries)},
        )

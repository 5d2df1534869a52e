"""Selects the contract/schedule backends from configuration."""
from __future__ import annotations

from dataclasses import dataclass

import requests

from contract_amortization.config import SETTINGS, DataSourceKind, Settings
from contract_amortization.domain.repositories import ContractDirectory, SchedulePersistence
from contract_amortization.domain.services import ScheduleGenerator
from contract_amortization.infrastructure.repositories.http_repositories import (
    ApiClient,
    HttpContractDirectory,
    HttpSchedulePersistence,
)
from contract_amortization.infrastructure.repositories.mock_repositories import (
    InMemoryContractDirectory,
    LocalSchedulePersistence,
)


@dataclass(slots=True, frozen=True)
class DataSource:
    kind: DataSourceKind
    directory: ContractDirectory
    persistence: SchedulePersistence


def build_data_source(
    settings: Settings = SETTINGS,
    session: requests.Session | None = None,
    generator: ScheduleGenerator | None = None,
) -> DataSource:
    if settings.data_source is DataSourceKind.HTTP:
        client = ApiClient(settings.api_base_url, settings.request_timeout_s, session=session)
        return DataSource(
            kind=settings.data_source,
            directory=HttpContractDirectory(client),
            persistence=HttpSchedulePersistence(client),
        )
    directory = InMemoryContractDirectory()
    return DataSource(
        kind=settings.data_source,
        directory=directory,
        persistence=LocalSchedulePersistence(directory, generator),
    )

from contract_amortization.config import DataSourceKind, load_settings
from contract_amortization.infrastructure.factory import build_data_source
from contract_amortization.infrastructure.repositories.http_repositories import (
    HttpContractDirectory,
    HttpSchedulePersistence,
)
from contract_amortization.infrastructure.repositories.mock_repositories import (
    InMemoryContractDirectory,
    LocalSchedulePersistence,
)


def test_mock_source_by_default():
    source = build_data_source(load_settings({}))

    assert source.kind is DataSourceKind.MOCK
    assert isinstance(source.directory, InMemoryContractDirectory)
    assert isinstance(source.persistence, LocalSchedulePersistence)
    assert source.persistence.calculate(1).total_amount == source.directory.fetch_one(1).total_amount


def test_http_source_when_configured():
    source = build_data_source(load_settings({"CONTRACT_AMORT_DATA_SOURCE": "http"}))

    assert source.kind is DataSourceKind.HTTP
    assert isinstance(source.directory, HttpContractDirectory)
    assert isinstance(source.persistence, HttpSchedulePersistence)

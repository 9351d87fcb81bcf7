from __future__ import annotations

import pytest

from cidgraph.config import GatewayConfig
from tests.support.graphs import GATEWAY_URL, gateway_config

MANIFEST_URL = "https://lexicon.test/schema-manifest.json"


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CIDGRAPH_GATEWAY_URL", GATEWAY_URL)
    monkeypatch.setenv("CIDGRAPH_MANIFEST_URL", MANIFEST_URL)
    monkeypatch.delenv("CIDGRAPH_DATA_DIR", raising=False)
    monkeypatch.delenv("CIDGRAPH_GATEWAY_MAX_RPS", raising=False)


@pytest.fixture
def gateway() -> GatewayConfig:
    return gateway_config()

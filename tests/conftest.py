from __future__ import annotations

from collections.abc import Iterator

import pytest

from bunkerweb import BunkerWeb

from fake_api import BASE_URL, FakeBunkerWebAPI


@pytest.fixture
def api() -> FakeBunkerWebAPI:
    return FakeBunkerWebAPI()


@pytest.fixture
def client(api: FakeBunkerWebAPI) -> Iterator[BunkerWeb]:
    client = BunkerWeb(base_url=BASE_URL, api_token="test-token", transport=api.transport)
    try:
        yield client
    finally:
        client.close()

import pytest

import config
from user_store import UserStore


@pytest.fixture
def data_file(tmp_path, monkeypatch):
    path = tmp_path / "userData.json"
    monkeypatch.setattr(config, "USER_DATA_FILE", str(path))
    return path


@pytest.fixture
def store(data_file):
    return UserStore.load(str(data_file))


class FakePriceFetch:
    """Stands in for crypto_prices.fetch_prices and records every call."""

    def __init__(self, prices=None, error=None):
        self.prices = prices or {}
        self.error = error
        self.calls = []

    def __call__(self, ids):
        self.calls.append(set(ids))
        if self.error is not None:
            return {}, self.error
        return {i: {"usd": p} for i, p in self.prices.items() if i in ids}, None


@pytest.fixture
def fake_fetch():
    return FakePriceFetch

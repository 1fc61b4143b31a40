from typing import Any, Callable

import pytest

from panel_fixtures import API_HOST, KEY, NODE_ID, FakePanel
from panelsync.core.config import ApiConfig


@pytest.fixture()
def make_config() -> Callable[..., ApiConfig]:
    def _make(**overrides: Any) -> ApiConfig:
        values: dict[str, Any] = {
            "API_HOST": API_HOST,
            "NODE_ID": NODE_ID,
            "KEY": KEY,
            "NODE_TYPE": "V2ray",
        }
        values.update(overrides)
        return ApiConfig(_env_file=None, **values)

    return _make


@pytest.fixture()
def panel() -> FakePanel:
    return FakePanel()

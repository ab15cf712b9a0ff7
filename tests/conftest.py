"""Shared fixtures: a fully configured mock network and a recording reader."""
from __future__ import annotations

import pytest

from poolfans_tokenizer.config import NETWORK_CONFIGS, NetworkConfig
from poolfans_tokenizer.models import DeploymentIntent, FeePreference, RewardRecipient

from .fakes import ADMIN, ADMIN_2, CONFIG_OVERRIDES, FakeReader


@pytest.fixture()
def network_config() -> NetworkConfig:
    return NETWORK_CONFIGS["base"].with_overrides(**CONFIG_OVERRIDES)


@pytest.fixture()
def fake_reader() -> FakeReader:
    return FakeReader()


@pytest.fixture()
def poolfans_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Expose the mock network through ``POOLFANS_*`` variables for CLI tests."""

    monkeypatch.delenv("PRIVATE_KEY", raising=False)
    monkeypatch.setenv("POOLFANS_NETWORK", "base")
    for name, value in CONFIG_OVERRIDES.items():
        monkeypatch.setenv(f"POOLFANS_{name.upper()}", value)


@pytest.fixture()
def make_intent():
    def _make(**overrides) -> DeploymentIntent:
        fields = {
            "name": "Test Token",
            "symbol": "TEST",
            "token_admin": ADMIN,
            "recipients": (
                RewardRecipient(ADMIN, ADMIN, 6000, FeePreference.BOTH),
                RewardRecipient(ADMIN_2, ADMIN_2, 4000, FeePreference.PAIRED),
            ),
        }
        fields.update(overrides)
        return DeploymentIntent(**fields)

    return _make

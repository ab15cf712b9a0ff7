from __future__ import annotations

import pytest
from eth_abi import decode
from eth_utils import to_checksum_address

from poolfans_tokenizer.errors import ConfigurationError, InvalidSplit, TokenizationStateError
from poolfans_tokenizer.models import (
    DeploymentVersion,
    FeePreference,
    PendingTokenization,
    RewardRecipient,
    TokenizationRequest,
)
from poolfans_tokenizer.schemas import REWARDS
from poolfans_tokenizer.tokenization import (
    TokenizationCoordinator,
    TokenizationState,
    build_finalize_tokenization,
    build_initialize_tokenization,
)

from .fakes import ADMIN, ADMIN_2, EXISTING_TOKEN, VAULTS, FakeReader


def _request(**overrides) -> TokenizationRequest:
    fields = {
        "token": EXISTING_TOKEN,
        "recipients": (
            RewardRecipient(ADMIN, ADMIN, 7000, FeePreference.BOTH),
            RewardRecipient(ADMIN_2, ADMIN_2, 3000, FeePreference.PAIRED),
        ),
    }
    fields.update(overrides)
    return TokenizationRequest(**fields)


@pytest.mark.asyncio
async def test_initialize_predicts_vault_and_encodes_recipients(network_config, fake_reader) -> None:
    result = await build_initialize_tokenization(_request(), network_config, fake_reader)

    assert result.predicted_vault_address == VAULTS[FeePreference.BOTH]
    assert result.pending.source_token == EXISTING_TOKEN
    assert result.pending.pending_id is None
    assert result.call.to == network_config.tokenizer_v4
    assert result.call.signature == "initTokenization(address,((address,address,uint16,uint8)[]))"

    (read,) = fake_reader.calls
    assert read == (network_config.tokenizer_v4, "predictVaultAddress", (EXISTING_TOKEN, network_config.weth, 0))

    data = bytes.fromhex(result.call.calldata[10:])
    token, rewards = decode(["address", REWARDS.abi_type], data)
    assert token == to_checksum_address(EXISTING_TOKEN)
    recipients = REWARDS.from_abi(rewards)["recipients"]
    assert [(row["recipient"], row["bps"], row["token"]) for row in recipients] == [
        (to_checksum_address(ADMIN), 7000, 0),
        (to_checksum_address(ADMIN_2), 3000, 1),
    ]


@pytest.mark.asyncio
async def test_initialize_targets_version_specific_tokenizer(network_config, fake_reader) -> None:
    request = _request(version=DeploymentVersion.V3_1, vault_preference=FeePreference.PROJECT)

    result = await build_initialize_tokenization(request, network_config, fake_reader)

    assert result.call.to == network_config.tokenizer_v3_1
    assert fake_reader.calls[0][0] == network_config.tokenizer_v3_1
    assert result.predicted_vault_address == VAULTS[FeePreference.PROJECT]
    assert result.pending.version is DeploymentVersion.V3_1


@pytest.mark.asyncio
async def test_initialize_rejects_bad_split_before_reading(network_config, fake_reader) -> None:
    request = _request(recipients=(RewardRecipient(ADMIN, ADMIN, 100, FeePreference.BOTH),))

    with pytest.raises(InvalidSplit):
        await build_initialize_tokenization(request, network_config, fake_reader)

    assert fake_reader.calls == []


def test_finalize_encodes_pending_id_and_token(network_config) -> None:
    pending = PendingTokenization(EXISTING_TOKEN, VAULTS[FeePreference.BOTH], pending_id=7)

    call = build_finalize_tokenization(pending, network_config)

    assert call.signature == "finalizeTokenization(uint256,address)"
    pending_id, token = decode(["uint256", "address"], bytes.fromhex(call.calldata[10:]))
    assert pending_id == 7
    assert token == to_checksum_address(EXISTING_TOKEN)


def test_finalize_requires_resolved_pending_id(network_config) -> None:
    pending = PendingTokenization(EXISTING_TOKEN, VAULTS[FeePreference.BOTH])

    with pytest.raises(TokenizationStateError, match="unresolved"):
        build_finalize_tokenization(pending, network_config)


def test_finalize_requires_configured_tokenizer(network_config) -> None:
    pending = PendingTokenization(EXISTING_TOKEN, VAULTS[FeePreference.BOTH], pending_id=1)

    with pytest.raises(ConfigurationError):
        build_finalize_tokenization(pending, network_config.with_overrides(tokenizer_v4=None))


@pytest.mark.asyncio
async def test_coordinator_walks_the_full_flow(network_config, fake_reader) -> None:
    coordinator = TokenizationCoordinator(network_config, fake_reader)
    assert coordinator.state is TokenizationState.UNINITIALIZED

    result = await coordinator.initialize(_request())
    assert coordinator.state is TokenizationState.PENDING_HANDOVER
    assert coordinator.pending == result.pending

    coordinator.record_pending_id(3)
    coordinator.confirm_handover()
    assert coordinator.state is TokenizationState.READY_TO_FINALIZE

    call = coordinator.finalize()
    assert coordinator.state is TokenizationState.FINALIZED
    assert call.function_name == "finalizeTokenization"
    assert call.args == (3, EXISTING_TOKEN)


@pytest.mark.asyncio
async def test_coordinator_refuses_finalize_before_handover(network_config, fake_reader) -> None:
    coordinator = TokenizationCoordinator(network_config, fake_reader)
    await coordinator.initialize(_request())
    coordinator.record_pending_id(3)

    with pytest.raises(TokenizationStateError, match="ready_to_finalize"):
        coordinator.finalize()

    assert coordinator.state is TokenizationState.PENDING_HANDOVER


@pytest.mark.asyncio
async def test_coordinator_refuses_second_initialize(network_config, fake_reader) -> None:
    coordinator = TokenizationCoordinator(network_config, fake_reader)
    await coordinator.initialize(_request())

    with pytest.raises(TokenizationStateError):
        await coordinator.initialize(_request())

    assert len(fake_reader.calls) == 1


@pytest.mark.asyncio
async def test_failed_initialize_keeps_state(network_config) -> None:
    coordinator = TokenizationCoordinator(network_config, FakeReader(error=ConnectionError("rpc down")))

    with pytest.raises(ConnectionError):
        await coordinator.initialize(_request())

    assert coordinator.state is TokenizationState.UNINITIALIZED
    assert coordinator.pending is None


def test_handover_cannot_be_confirmed_before_initialize(network_config, fake_reader) -> None:
    coordinator = TokenizationCoordinator(network_config, fake_reader)

    with pytest.raises(TokenizationStateError):
        coordinator.confirm_handover()
    with pytest.raises(TokenizationStateError):
        coordinator.record_pending_id(1)


def test_finalized_coordinator_rejects_further_steps(network_config, fake_reader) -> None:
    pending = PendingTokenization(EXISTING_TOKEN, VAULTS[FeePreference.BOTH], pending_id=2)
    coordinator = TokenizationCoordinator.resume(pending, network_config, fake_reader, handover_confirmed=True)
    coordinator.finalize()

    with pytest.raises(TokenizationStateError):
        coordinator.finalize()
    with pytest.raises(TokenizationStateError):
        coordinator.record_pending_id(5)


def test_finalize_without_pending_id_keeps_ready_state(network_config, fake_reader) -> None:
    pending = PendingTokenization(EXISTING_TOKEN, VAULTS[FeePreference.BOTH])
    coordinator = TokenizationCoordinator.resume(pending, network_config, fake_reader, handover_confirmed=True)

    with pytest.raises(TokenizationStateError):
        coordinator.finalize()

    assert coordinator.state is TokenizationState.READY_TO_FINALIZE


def test_resume_restores_pending_handover(network_config, fake_reader) -> None:
    pending = PendingTokenization(EXISTING_TOKEN, VAULTS[FeePreference.BOTH], version=DeploymentVersion.V3_1)

    coordinator = TokenizationCoordinator.resume(pending, network_config, fake_reader)

    assert coordinator.state is TokenizationState.PENDING_HANDOVER
    assert coordinator.record_pending_id(9).pending_id == 9
    coordinator.confirm_handover()
    assert coordinator.finalize().to == network_config.tokenizer_v3_1


def test_non_initial_state_requires_pending_handle(network_config, fake_reader) -> None:
    with pytest.raises(TokenizationStateError):
        TokenizationCoordinator(network_config, fake_reader, state=TokenizationState.PENDING_HANDOVER)

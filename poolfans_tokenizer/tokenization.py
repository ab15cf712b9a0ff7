"""Initialize / handover / finalize flow for tokenizing an existing token.

1. ``initialize`` builds ``initTokenization`` and predicts the vault address.
2. The token's fee admin is transferred to that vault outside this package.
3. ``finalize`` builds ``finalizeTokenization`` for the pending handle.

Only call records are produced. Whether the handover really happened is
checked by the receiving contract, which rejects a premature finalize.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .addresses import ContractReader, VaultAddressResolver
from .config import NetworkConfig
from .errors import TokenizationStateError
from .models import DeploymentVersion, PendingTokenization, TokenizationRequest
from .schemas import FINALIZE_TOKENIZATION_PARAMS, INIT_TOKENIZATION_PARAMS, reward_entries
from .transactions import PreparedCall
from .validation import validate_recipients

_LOGGER = logging.getLogger(__name__)

_TOKENIZER_FIELDS = {
    DeploymentVersion.V4: "tokenizer_v4",
    DeploymentVersion.V3_1: "tokenizer_v3_1",
}


def tokenizer_address(config: NetworkConfig, version: DeploymentVersion) -> str:
    return config.require(_TOKENIZER_FIELDS[DeploymentVersion(version)])


class TokenizationState(Enum):
    UNINITIALIZED = "uninitialized"
    PENDING_HANDOVER = "pending_handover"
    READY_TO_FINALIZE = "ready_to_finalize"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class InitializeTokenization:
    call: PreparedCall
    pending: PendingTokenization

    @property
    def predicted_vault_address(self) -> str:
        return self.pending.predicted_vault_address


async def build_initialize_tokenization(
    request: TokenizationRequest,
    config: NetworkConfig,
    reader: ContractReader,
) -> InitializeTokenization:
    """Validate ``request`` and build its ``initTokenization`` call."""

    error = validate_recipients(request.recipients)
    if error is not None:
        raise error

    tokenizer = tokenizer_address(config, request.version)
    resolver = VaultAddressResolver(reader, tokenizer)
    vault = await resolver.resolve_one(
        request.token,
        request.paired_asset or config.weth,
        request.vault_preference,
    )
    call = PreparedCall(
        to=tokenizer,
        function_name="initTokenization",
        params=INIT_TOKENIZATION_PARAMS,
        args=(request.token, {"recipients": reward_entries(request.recipients)}),
    )
    pending = PendingTokenization(
        source_token=request.token,
        predicted_vault_address=vault,
        version=request.version,
    )
    return InitializeTokenization(call=call, pending=pending)


def build_finalize_tokenization(pending: PendingTokenization, config: NetworkConfig) -> PreparedCall:
    if pending.pending_id is None:
        raise TokenizationStateError("Pending tokenization id is unresolved; read it from the initialize receipt first")
    return PreparedCall(
        to=tokenizer_address(config, pending.version),
        function_name="finalizeTokenization",
        params=FINALIZE_TOKENIZATION_PARAMS,
        args=(pending.pending_id, pending.source_token),
    )


class TokenizationCoordinator:
    """Explicit state machine around one tokenization.

    Each instance drives a single token through the protocol once; every
    transition is checked against the current state.
    """

    def __init__(
        self,
        config: NetworkConfig,
        reader: ContractReader,
        *,
        state: TokenizationState = TokenizationState.UNINITIALIZED,
        pending: Optional[PendingTokenization] = None,
    ) -> None:
        if state is not TokenizationState.UNINITIALIZED and pending is None:
            raise TokenizationStateError(f"State {state.value} requires a pending tokenization handle")
        self._config = config
        self._reader = reader
        self._state = state
        self._pending = pending

    @classmethod
    def resume(
        cls,
        pending: PendingTokenization,
        config: NetworkConfig,
        reader: ContractReader,
        *,
        handover_confirmed: bool = False,
    ) -> "TokenizationCoordinator":
        """Rebuild a coordinator from a persisted handle."""

        state = TokenizationState.READY_TO_FINALIZE if handover_confirmed else TokenizationState.PENDING_HANDOVER
        return cls(config, reader, state=state, pending=pending)

    @property
    def state(self) -> TokenizationState:
        return self._state

    @property
    def pending(self) -> Optional[PendingTokenization]:
        return self._pending

    def _expect(self, *states: TokenizationState) -> None:
        if self._state not in states:
            expected = " or ".join(state.value for state in states)
            raise TokenizationStateError(f"Expected state {expected}, currently {self._state.value}")

    def _move(self, state: TokenizationState) -> None:
        token = self._pending.source_token if self._pending else None
        _LOGGER.info("Tokenization of %s: %s -> %s", token, self._state.value, state.value)
        self._state = state

    async def initialize(self, request: TokenizationRequest) -> InitializeTokenization:
        self._expect(TokenizationState.UNINITIALIZED)
        result = await build_initialize_tokenization(request, self._config, self._reader)
        self._pending = result.pending
        self._move(TokenizationState.PENDING_HANDOVER)
        return result

    def record_pending_id(self, pending_id: int) -> PendingTokenization:
        """Attach the pending id read from the initialize receipt."""

        self._expect(TokenizationState.PENDING_HANDOVER, TokenizationState.READY_TO_FINALIZE)
        self._pending = self._pending.with_pending_id(pending_id)
        return self._pending

    def confirm_handover(self) -> None:
        """Record the caller's assertion that fee admin now belongs to the vault."""

        self._expect(TokenizationState.PENDING_HANDOVER)
        self._move(TokenizationState.READY_TO_FINALIZE)

    def finalize(self) -> PreparedCall:
        self._expect(TokenizationState.READY_TO_FINALIZE)
        call = build_finalize_tokenization(self._pending, self._config)
        self._move(TokenizationState.FINALIZED)
        return call


__all__ = [
    "InitializeTokenization",
    "TokenizationCoordinator",
    "TokenizationState",
    "build_finalize_tokenization",
    "build_initialize_tokenization",
    "tokenizer_address",
]

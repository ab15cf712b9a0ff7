"""Turn a :class:`DeploymentIntent` into a submit-ready deploy call."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from eth_utils import to_bytes

from .addresses import ContractReader, VaultAddressResolver, generate_nonce
from .config import NetworkConfig
from .errors import EncodingError
from .models import DeploymentIntent, PredictedAddresses
from .presets import DEFAULT_FEE_POLICY, DEFAULT_POSITIONS, DEFAULT_STARTING_TICK
from .schemas import BuildContext, DeploymentSchema, get_layout
from .transactions import PreparedCall
from .validation import validate_intent

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuiltDeployment:
    """Result of :meth:`DeploymentBuilder.build`.

    ``nonce`` must be kept by callers who want to rebuild the same predicted
    address later, e.g. when resubmitting.
    """

    call: PreparedCall
    record: Mapping[str, Any]
    native_value: int
    predicted: PredictedAddresses
    nonce: bytes
    schema: DeploymentSchema

    @property
    def predicted_token_address(self) -> Optional[str]:
        return self.predicted.token

    def as_dict(self) -> dict[str, Any]:
        return {
            "schema": self.schema.value,
            "to": self.call.to,
            "function": self.call.signature,
            "value": self.native_value,
            "data": self.call.calldata,
            "nonce": "0x" + self.nonce.hex(),
            "predicted_token_address": self.predicted.token,
            "predicted_vaults": {preference.name: vault for preference, vault in self.predicted.vaults.items()},
        }


def _coerce_nonce(nonce: Union[bytes, str, None]) -> bytes:
    if nonce is None:
        return generate_nonce()
    raw = to_bytes(hexstr=nonce) if isinstance(nonce, str) else bytes(nonce)
    if len(raw) != 32:
        raise EncodingError(f"nonce must be 32 bytes, got {len(raw)}")
    return raw


class DeploymentBuilder:
    """Validate, predict and assemble deploy calls for one network.

    The record layout is chosen by ``schema``; see
    :mod:`poolfans_tokenizer.schemas`.
    """

    def __init__(
        self,
        config: NetworkConfig,
        reader: ContractReader,
        schema: DeploymentSchema = DeploymentSchema.FACTORY_V4,
    ) -> None:
        self._config = config
        self._reader = reader
        self._layout = get_layout(schema)

    @property
    def schema(self) -> DeploymentSchema:
        return self._layout.schema

    async def build(self, intent: DeploymentIntent, nonce: Union[bytes, str, None] = None) -> BuiltDeployment:
        """Build the deploy call for ``intent``.

        Raises the :class:`~poolfans_tokenizer.errors.ValidationError` returned
        by :func:`validate_intent` before touching the network. Errors from the
        vault-address reads propagate unchanged. The call data is encoded before
        returning, so a record that does not fit its schema fails here. Nothing
        is submitted.
        """

        error = validate_intent(intent, tick_spacing=self._config.tick_spacing)
        if error is not None:
            raise error

        config = self._config
        layout = self._layout
        raw_nonce = _coerce_nonce(nonce)
        paired_asset = intent.paired_asset or config.weth

        token_address = layout.predict_token_address(config, intent, raw_nonce)
        vaults: Mapping = {}
        if layout.uses_vaults:
            resolver = VaultAddressResolver(self._reader, config.require("tokenizer_v4"))
            vaults = await resolver.resolve(
                token_address,
                paired_asset,
                (recipient.fee_preference for recipient in intent.recipients),
            )

        context = BuildContext(
            intent=intent,
            config=config,
            nonce=raw_nonce,
            paired_asset=paired_asset,
            starting_tick=intent.starting_tick if intent.starting_tick is not None else DEFAULT_STARTING_TICK,
            fee_policy=intent.fee_policy or DEFAULT_FEE_POLICY,
            positions=intent.positions if intent.positions is not None else DEFAULT_POSITIONS,
            vaults=vaults,
        )
        record = layout.assemble(context)
        native_value = intent.launch_buy.native_asset_amount if intent.launch_buy else 0
        call = PreparedCall(
            to=layout.target(config),
            function_name=layout.function_name,
            params=layout.params,
            args=(record,),
            value=native_value,
        )
        calldata = call.calldata
        _LOGGER.debug(
            "Built %s deployment for %s (%s): token=%s value=%d calldata=%d bytes",
            layout.schema.value,
            intent.name,
            intent.symbol,
            token_address,
            native_value,
            (len(calldata) - 2) // 2,
        )
        return BuiltDeployment(
            call=call,
            record=record,
            native_value=native_value,
            predicted=PredictedAddresses(token=token_address, vaults=dict(vaults)),
            nonce=raw_nonce,
            schema=layout.schema,
        )


async def build_deployment(
    intent: DeploymentIntent,
    config: NetworkConfig,
    reader: ContractReader,
    *,
    schema: DeploymentSchema = DeploymentSchema.FACTORY_V4,
    nonce: Union[bytes, str, None] = None,
) -> BuiltDeployment:
    return await DeploymentBuilder(config, reader, schema).build(intent, nonce=nonce)


__all__ = ["BuiltDeployment", "DeploymentBuilder", "build_deployment"]

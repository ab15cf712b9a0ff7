"""Schema-driven ABI encoding and hashing helpers.

Records are plain mappings keyed by field name. A :class:`RecordSchema`
describes how such a mapping flattens into the positional tuple the contract
ABI expects; :func:`encode_record` produces the same bytes as Solidity's
``abi.encode(struct)``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from eth_abi import decode, encode
from eth_abi.exceptions import ABITypeError, DecodingError, ParseError
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_utils import function_signature_to_4byte_selector, keccak, to_checksum_address

from .errors import EncodingError

Param = Union[str, "RecordSchema"]


@dataclass(frozen=True)
class Field:
    """A named slot of a record: an ABI elementary type or a nested record."""

    name: str
    type: Param
    array: bool = False

    @property
    def abi_type(self) -> str:
        base = self.type.abi_type if isinstance(self.type, RecordSchema) else self.type
        return f"{base}[]" if self.array else base

    def to_abi(self, value: Any) -> Any:
        if self.array:
            if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Sequence):
                raise EncodingError(f"Field {self.name!r} expects a list, got {type(value).__name__}")
            return tuple(self._element_to_abi(item) for item in value)
        return self._element_to_abi(value)

    def from_abi(self, value: Any) -> Any:
        if self.array:
            return [self._element_from_abi(item) for item in value]
        return self._element_from_abi(value)

    def _element_to_abi(self, value: Any) -> Any:
        if isinstance(self.type, RecordSchema):
            return self.type.to_abi(value)
        if isinstance(value, int) and not isinstance(value, bool):
            # Collapse IntEnum members to their wire value.
            return int(value)
        return value

    def _element_from_abi(self, value: Any) -> Any:
        if isinstance(self.type, RecordSchema):
            return self.type.from_abi(value)
        return normalize_decoded(self.type, value)


@dataclass(frozen=True)
class RecordSchema:
    """Ordered, typed field list of a structured record."""

    name: str
    fields: Tuple[Field, ...]

    @property
    def abi_type(self) -> str:
        return "(" + ",".join(field.abi_type for field in self.fields) + ")"

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(field.name for field in self.fields)

    def to_abi(self, value: Any) -> Tuple[Any, ...]:
        """Flatten ``value`` into a positional tuple in declaration order."""

        if not isinstance(value, Mapping):
            raise EncodingError(f"{self.name} expects a mapping, got {type(value).__name__}")
        missing = [name for name in self.field_names if name not in value]
        if missing:
            raise EncodingError(f"{self.name} is missing fields: {', '.join(missing)}")
        unexpected = sorted(set(value) - set(self.field_names))
        if unexpected:
            raise EncodingError(f"{self.name} got unexpected fields: {', '.join(unexpected)}")
        return tuple(field.to_abi(value[field.name]) for field in self.fields)

    def from_abi(self, values: Sequence[Any]) -> Dict[str, Any]:
        return {field.name: field.from_abi(item) for field, item in zip(self.fields, values)}


def normalize_decoded(abi_type: str, value: Any) -> Any:
    """Decoded addresses come back checksummed whatever the eth_abi release."""

    if abi_type == "address":
        return to_checksum_address(value)
    return value


def abi_type_of(param: Param) -> str:
    return param.abi_type if isinstance(param, RecordSchema) else param


def params_to_abi(params: Sequence[Param], args: Sequence[Any]) -> Tuple[List[str], List[Any]]:
    """Resolve a call's parameter list into ABI type strings and positional values."""

    if len(params) != len(args):
        raise EncodingError(f"Expected {len(params)} arguments, got {len(args)}")
    types = [abi_type_of(param) for param in params]
    values = [
        param.to_abi(arg) if isinstance(param, RecordSchema) else Field("arg", param).to_abi(arg)
        for param, arg in zip(params, args)
    ]
    return types, values


def encode_params(types: Sequence[str], values: Sequence[Any]) -> bytes:
    try:
        return encode(list(types), list(values))
    except (AbiEncodingError, ABITypeError, ParseError) as exc:
        raise EncodingError(f"Cannot encode {list(values)!r} as {list(types)!r}: {exc}") from exc


def encode_record(schema: RecordSchema, value: Mapping[str, Any]) -> bytes:
    """ABI-encode ``value`` as a single tuple of ``schema``."""

    return encode_params([schema.abi_type], [schema.to_abi(value)])


def decode_record(schema: RecordSchema, data: bytes) -> Dict[str, Any]:
    """Decode bytes produced by :func:`encode_record` back into a mapping."""

    try:
        (values,) = decode([schema.abi_type], data)
    except (DecodingError, ABITypeError, ParseError) as exc:
        raise EncodingError(f"Cannot decode {schema.name}: {exc}") from exc
    return schema.from_abi(values)


def keccak256(data: bytes) -> bytes:
    return keccak(primitive=data)


def function_signature(function_name: str, params: Sequence[Param]) -> str:
    return f"{function_name}({','.join(abi_type_of(param) for param in params)})"


def function_selector(signature: str) -> bytes:
    return function_signature_to_4byte_selector(signature)


def encode_call(function_name: str, params: Sequence[Param], args: Sequence[Any]) -> bytes:
    """Return selector ++ encoded arguments for ``function_name(params)``."""

    types, values = params_to_abi(params, args)
    signature = function_signature(function_name, params)
    return function_selector(signature) + encode_params(types, values)


__all__ = [
    "Field",
    "Param",
    "RecordSchema",
    "abi_type_of",
    "decode_record",
    "encode_call",
    "encode_params",
    "encode_record",
    "function_selector",
    "function_signature",
    "keccak256",
    "normalize_decoded",
    "params_to_abi",
]

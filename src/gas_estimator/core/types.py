# /src/gas_estimator/core/types.py
# Request and result records. Both are frozen once parsed.
from enum import Enum
from typing import Any, Dict, List, Optional

from eth_utils import decode_hex, is_0x_prefixed, is_hex, to_int
from pydantic import AliasChoices, BaseModel, Field, field_serializer, field_validator
from web3 import Web3
from web3.types import TxParams

UINT8_BITS = 8
UINT64_BITS = 64
UINT256_BITS = 256

def parse_quantity(value: Any, bits: int = UINT256_BITS) -> Optional[int]:
    """
    Parses a JSON-RPC quantity. Accepts a ``0x`` hex string, a decimal
    string or a JSON integer, and checks it fits in ``bits`` unsigned bits.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("quantity must be a hex or decimal string, not a boolean")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        if is_0x_prefixed(value) and len(value) > 2 and is_hex(value):
            number = to_int(hexstr=value)
        elif value.isascii() and value.isdigit():
            number = int(value)
        else:
            raise ValueError(f"invalid quantity {value!r}")
    else:
        raise ValueError(f"quantity must be a hex or decimal string, got {type(value).__name__}")
    if number < 0 or number >= 1 << bits:
        raise ValueError(f"quantity {value!r} does not fit in uint{bits}")
    return number

def parse_address(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str) or not Web3.is_address(value):
        raise ValueError(f"invalid address {value!r}")
    return Web3.to_checksum_address(value)

def parse_hex_bytes(value: Any) -> Optional[bytes]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value
    if not isinstance(value, str) or not is_0x_prefixed(value):
        raise ValueError("data must be a 0x-prefixed hex string")
    try:
        return decode_hex(value)
    except ValueError:
        raise ValueError(f"data is not valid hex: {value!r}") from None


class AccessListEntry(BaseModel):
    address: str
    storage_keys: List[str] = Field(default_factory=list, alias="storageKeys")

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("address", mode="before")
    @classmethod
    def _address(cls, value):
        return parse_address(value)

    @field_validator("storage_keys", mode="before")
    @classmethod
    def _storage_keys(cls, value):
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("storageKeys must be a list")
        keys = []
        for key in value:
            raw = parse_hex_bytes(key)
            if len(raw) != 32:
                raise ValueError(f"storage key must be 32 bytes: {key!r}")
            keys.append(Web3.to_hex(raw))
        return keys


class TransactionCallDescriptor(BaseModel):
    """
    One candidate transaction, in ``eth_estimateGas`` call shape.

    Field names follow the JSON-RPC spelling on the wire (``from``, ``to``,
    ``type``...). A missing or null ``to`` means contract creation.
    """
    sender: Optional[str] = Field(None, alias="from")
    recipient: Optional[str] = Field(None, alias="to")
    value: Optional[int] = None
    data: Optional[bytes] = Field(None, validation_alias=AliasChoices("data", "input"))
    transaction_type: Optional[int] = Field(None, alias="type")

    # Forwarded to the node untouched; the static formula ignores them.
    gas: Optional[int] = None
    gas_price: Optional[int] = Field(None, alias="gasPrice")
    max_fee_per_gas: Optional[int] = Field(None, alias="maxFeePerGas")
    max_priority_fee_per_gas: Optional[int] = Field(None, alias="maxPriorityFeePerGas")
    access_list: Optional[List[AccessListEntry]] = Field(None, alias="accessList")

    class Config:
        frozen = True
        populate_by_name = True
        extra = "ignore"

    @field_validator("sender", "recipient", mode="before")
    @classmethod
    def _address(cls, value):
        return parse_address(value)

    @field_validator("value", "gas_price", "max_fee_per_gas", "max_priority_fee_per_gas", mode="before")
    @classmethod
    def _uint256(cls, value):
        return parse_quantity(value, UINT256_BITS)

    @field_validator("gas", mode="before")
    @classmethod
    def _uint64(cls, value):
        return parse_quantity(value, UINT64_BITS)

    @field_validator("transaction_type", mode="before")
    @classmethod
    def _uint8(cls, value):
        return parse_quantity(value, UINT8_BITS)

    @field_validator("data", mode="before")
    @classmethod
    def _data(cls, value):
        return parse_hex_bytes(value)

    @property
    def is_contract_creation(self) -> bool:
        return self.recipient is None

    def to_rpc_params(self) -> TxParams:
        """Renders the descriptor as web3 ``TxParams``, present fields only."""
        params: Dict[str, Any] = {}
        if self.sender is not None:
            params["from"] = self.sender
        if self.recipient is not None:
            params["to"] = self.recipient
        if self.value is not None:
            params["value"] = self.value
        if self.data is not None:
            params["data"] = Web3.to_hex(self.data)
        if self.transaction_type is not None:
            params["type"] = Web3.to_hex(self.transaction_type)
        if self.gas is not None:
            params["gas"] = self.gas
        if self.gas_price is not None:
            params["gasPrice"] = self.gas_price
        if self.max_fee_per_gas is not None:
            params["maxFeePerGas"] = self.max_fee_per_gas
        if self.max_priority_fee_per_gas is not None:
            params["maxPriorityFeePerGas"] = self.max_priority_fee_per_gas
        if self.access_list is not None:
            params["accessList"] = [
                {"address": entry.address, "storageKeys": list(entry.storage_keys)}
                for entry in self.access_list
            ]
        return params  # type: ignore[return-value]


class EstimationMethod(str, Enum):
    STATIC = "static"
    RPC = "rpc"


class EstimationResult(BaseModel):
    """Estimated gas limit and the path that produced it."""
    gas_limit: int = Field(..., alias="gasLimit", ge=0, lt=1 << UINT256_BITS)
    method: EstimationMethod

    class Config:
        frozen = True
        populate_by_name = True

    @field_serializer("gas_limit", when_used="json")
    def _hex_quantity(self, gas_limit: int) -> str:
        return hex(gas_limit)

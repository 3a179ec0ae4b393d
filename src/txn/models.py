"""
txnctl Data Models

This module defines the Pydantic models for a conditional transaction:
the comparison list, the success/failure request lists, and the store's reply.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


# ========== Comparison Models ==========

class CompareTarget(str, Enum):
    """Which attribute of a key is compared. Values are the store's wire names."""
    VERSION = "VERSION"
    CREATE_REVISION = "CREATE"
    MOD_REVISION = "MOD"
    VALUE = "VALUE"


class CompareOperator(str, Enum):
    """Comparison operator enumeration."""
    GREATER = "GREATER"
    EQUAL = "EQUAL"
    LESS = "LESS"


class _CompareBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: bytes = Field(..., description="Key to compare")
    operator: CompareOperator = Field(..., description="Comparison operator")


class VersionCompare(_CompareBase):
    """Compare the number of writes to the key."""
    target: Literal[CompareTarget.VERSION] = CompareTarget.VERSION
    version: int = Field(..., ge=INT64_MIN, le=INT64_MAX)

    @property
    def payload(self) -> int:
        return self.version


class CreateRevisionCompare(_CompareBase):
    """Compare the store revision at which the key was created."""
    target: Literal[CompareTarget.CREATE_REVISION] = CompareTarget.CREATE_REVISION
    create_revision: int = Field(..., ge=INT64_MIN, le=INT64_MAX)

    @property
    def payload(self) -> int:
        return self.create_revision


class ModRevisionCompare(_CompareBase):
    """Compare the store revision of the key's last modification."""
    target: Literal[CompareTarget.MOD_REVISION] = CompareTarget.MOD_REVISION
    mod_revision: int = Field(..., ge=INT64_MIN, le=INT64_MAX)

    @property
    def payload(self) -> int:
        return self.mod_revision


class ValueCompare(_CompareBase):
    """Compare the key's value byte-wise."""
    target: Literal[CompareTarget.VALUE] = CompareTarget.VALUE
    value: bytes

    @property
    def payload(self) -> bytes:
        return self.value


Comparison = Annotated[
    Union[VersionCompare, CreateRevisionCompare, ModRevisionCompare, ValueCompare],
    Field(discriminator="target"),
]


# ========== Sub-request Models ==========

class RangeRequest(BaseModel):
    """Read a key, or the keys in [key, range_end)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["range"] = "range"
    key: bytes
    range_end: Optional[bytes] = Field(None, description="Exclusive upper bound")


class PutRequest(BaseModel):
    """Write a key."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["put"] = "put"
    key: bytes
    value: bytes


class DeleteRangeRequest(BaseModel):
    """Delete a key, or the keys in [key, range_end)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["delete_range"] = "delete_range"
    key: bytes
    range_end: Optional[bytes] = Field(None, description="Exclusive upper bound")


SubRequest = Annotated[
    Union[RangeRequest, PutRequest, DeleteRangeRequest],
    Field(discriminator="kind"),
]


# ========== Transaction Models ==========

class TxnRequest(BaseModel):
    """A complete conditional transaction, immutable once built."""
    model_config = ConfigDict(frozen=True)

    comparisons: Tuple[Comparison, ...] = ()
    on_success: Tuple[SubRequest, ...] = ()
    on_failure: Tuple[SubRequest, ...] = ()


class TxnResponse(BaseModel):
    """Store reply to a transaction. An omitted ``succeeded`` means false."""
    succeeded: bool = False
    header: Dict[str, Any] = Field(default_factory=dict)
    responses: List[Dict[str, Any]] = Field(default_factory=list)

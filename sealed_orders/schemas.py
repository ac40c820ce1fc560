"""Request/response schemas for the web API."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class OrderCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    amount: int = Field(ge=0)  # encrypted before it reaches the ledger
    price: int = Field(ge=0)
    creator: Optional[str] = None
    order_id: Optional[str] = None
    asset_type: Optional[str] = None
    encrypt_price: bool = False


class OrderResponse(BaseModel):
    order_id: str
    name: str
    asset_type: str
    encrypted_amount: str
    encrypted_price: Optional[str] = None
    public_price: int
    public_value2: int
    creator: str
    created_at: datetime
    status: str
    is_verified: bool
    decrypted_amount: Optional[int] = None
    decrypted_price: Optional[int] = None
    verified_at: Optional[datetime] = None


class OrderListResponse(BaseModel):
    order_ids: List[str]
    orders: List[OrderResponse]


class VerificationResponse(BaseModel):
    order_id: str
    amount: int
    price: int
    already_verified: bool


class StatsResponse(BaseModel):
    total_orders: int
    verified_orders: int
    total_volume: int
    avg_price: float


class EventResponse(BaseModel):
    type: str
    order_id: str
    timestamp: datetime
    creator: Optional[str] = None
    amount: Optional[int] = None
    price: Optional[int] = None


class StatusResponse(BaseModel):
    available: bool
    ledger_address: str
    orders: int


class ErrorResponse(BaseModel):
    detail: str
    step: str
    order_id: Optional[str] = None

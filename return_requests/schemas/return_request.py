"""Return request schemas for requests and responses"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from return_requests.models.common import Money
from return_requests.models.order import InventoryUnitState
from return_requests.models.return_authorization import ReturnAuthorizationState


class OrderSearchRequest(BaseModel):
    """Schema for looking up an order to return"""
    order_number: Optional[str] = None
    email_address: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "order_number": "R123456789",
                "email_address": "customer@example.com"
            }
        }


class ReturnRequestCreate(BaseModel):
    """Schema for submitting a return request"""
    reason: Optional[str] = None
    reason_other: Optional[str] = None
    return_quantity: Dict[str, int] = {}

    class Config:
        json_schema_extra = {
            "example": {
                "reason": "Other",
                "reason_other": "Caused a rift in the Space/Time continuum.",
                "return_quantity": {"var-10": 1, "var-30": 2}
            }
        }


class SearchResponse(BaseModel):
    """Response schema for the search form"""
    success: bool
    view: str = "search"
    message: Optional[str] = None
    errors: List[str] = []


class InventoryUnitResponse(BaseModel):
    id: str
    variant_id: str
    state: InventoryUnitState


class LineItemUnitsResponse(BaseModel):
    """Units of one line item that can still be requested"""
    line_item_id: str
    variant_id: str
    name: str
    price: Money
    units: List[InventoryUnitResponse]


class ReturnAuthorizationResponse(BaseModel):
    """Response schema for return authorization"""
    number: str
    order_number: str
    reason: str
    amount: Money
    state: ReturnAuthorizationState
    inventory_unit_ids: List[str]
    created_at: datetime


class AuthorizedUnitsResponse(BaseModel):
    """Units covered by an earlier return authorization"""
    return_authorization_number: str
    state: ReturnAuthorizationState
    units: List[InventoryUnitResponse]
    return_label_link: str


class NewReturnRequestResponse(BaseModel):
    """Response schema for the return request form"""
    success: bool = True
    view: str = "new"
    order_number: str
    message: Optional[str] = None
    reasons: List[str]
    units_available_for_return: List[LineItemUnitsResponse]
    units_authorized_for_return: List[AuthorizedUnitsResponse]
    errors: Dict[str, str] = {}
    form: Optional[ReturnRequestCreate] = None


class ReturnRequestErrorResponse(BaseModel):
    """Response schema for an order that cannot take a return request"""
    success: bool = False
    view: str = "error"
    kind: str
    error: str


class ReturnRequestSuccessResponse(BaseModel):
    success: bool = True
    view: str = "success"
    message: str
    return_authorization: ReturnAuthorizationResponse


class ReturnLabelsResponse(BaseModel):
    success: bool = True
    view: str = "labels"
    return_authorization: ReturnAuthorizationResponse
    units: List[InventoryUnitResponse]


class UpdateReturnRequestsConfigRequest(BaseModel):
    """Schema for overriding return request configuration"""
    return_request_intro_text: Optional[str] = None
    return_request_max_order_age_in_days: Optional[int] = Field(None, ge=0)
    return_request_max_authorized_age_in_days: Optional[int] = Field(None, ge=0)
    return_request_past_return_window_text: Optional[str] = None
    return_request_reasons: Optional[List[str]] = None
    return_request_success_text: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "return_request_max_order_age_in_days": 60,
                "return_request_reasons": ["Defective Item", "Wrong Item", "Other"]
            }
        }

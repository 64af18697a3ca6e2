"""Pydantic schemas for request/response validation"""

from return_requests.schemas.common import SuccessResponse, ErrorResponse
from return_requests.schemas.return_request import (
    OrderSearchRequest,
    ReturnRequestCreate,
    SearchResponse,
    NewReturnRequestResponse,
    ReturnRequestErrorResponse,
    ReturnRequestSuccessResponse,
    ReturnLabelsResponse,
    ReturnAuthorizationResponse,
    UpdateReturnRequestsConfigRequest,
)

__all__ = [
    "SuccessResponse",
    "ErrorResponse",
    "OrderSearchRequest",
    "ReturnRequestCreate",
    "SearchResponse",
    "NewReturnRequestResponse",
    "ReturnRequestErrorResponse",
    "ReturnRequestSuccessResponse",
    "ReturnLabelsResponse",
    "ReturnAuthorizationResponse",
    "UpdateReturnRequestsConfigRequest",
]

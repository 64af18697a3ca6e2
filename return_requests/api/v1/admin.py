"""Admin endpoints for return authorizations and return request configuration"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import Optional
import logging

from return_requests.api.deps import get_store, get_workflow, require_admin
from return_requests.config import ReturnRequestsConfig, get_return_requests_config, set_return_requests_config
from return_requests.core.workflow import ReturnRequestWorkflow
from return_requests.models.return_authorization import (
    InvalidTransitionError,
    ReturnAuthorization,
    ReturnAuthorizationState,
)
from return_requests.schemas.common import SuccessResponse
from return_requests.schemas.return_request import UpdateReturnRequestsConfigRequest
from return_requests.store import ReturnRequestStore
from return_requests.utils.pagination import page_to_skip

logger = logging.getLogger(__name__)

router = APIRouter()


def to_admin_dict(return_authorization: ReturnAuthorization) -> dict:
    return return_authorization.model_dump(mode="json", exclude={"id"})


async def _get_return_authorization_or_404(number: str, store: ReturnRequestStore) -> ReturnAuthorization:
    return_authorization = await store.find_return_authorization(number)

    if not return_authorization:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Return authorization not found"
        )

    return return_authorization


async def _change_state(
    number: str,
    target: ReturnAuthorizationState,
    store: ReturnRequestStore,
    workflow: ReturnRequestWorkflow,
) -> ReturnAuthorization:
    return_authorization = await _get_return_authorization_or_404(number, store)

    try:
        return await workflow.change_state(return_authorization, target)
    except InvalidTransitionError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@router.get("/return-authorizations", response_model=SuccessResponse)
async def list_return_authorizations(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    state: Optional[ReturnAuthorizationState] = None,
    expired: bool = False,
    current_user: dict = Depends(require_admin),
    store: ReturnRequestStore = Depends(get_store),
    workflow: ReturnRequestWorkflow = Depends(get_workflow)
):
    """
    List return authorizations (Admin only).

    With ``expired=true`` only authorizations that have stayed authorized
    past the configured maximum age are returned.
    """
    if expired:
        return_authorizations = await workflow.authorized_and_expired()
    else:
        return_authorizations = await store.list_return_authorizations(
            state=state,
            skip=page_to_skip(page, limit),
            limit=limit,
        )

    return SuccessResponse(data=[to_admin_dict(ra) for ra in return_authorizations])


@router.patch("/return-authorizations/{number}/receive", response_model=SuccessResponse)
async def receive_return_authorization(
    number: str,
    current_user: dict = Depends(require_admin),
    store: ReturnRequestStore = Depends(get_store),
    workflow: ReturnRequestWorkflow = Depends(get_workflow)
):
    """
    Mark the returned units as received (Admin only).
    """
    return_authorization = await _change_state(number, ReturnAuthorizationState.RECEIVED, store, workflow)
    return SuccessResponse(message="Return authorization received", data=to_admin_dict(return_authorization))


@router.patch("/return-authorizations/{number}/cancel", response_model=SuccessResponse)
async def cancel_return_authorization(
    number: str,
    current_user: dict = Depends(require_admin),
    store: ReturnRequestStore = Depends(get_store),
    workflow: ReturnRequestWorkflow = Depends(get_workflow)
):
    """
    Cancel a return authorization (Admin only).
    """
    return_authorization = await _change_state(number, ReturnAuthorizationState.CANCELED, store, workflow)
    return SuccessResponse(message="Return authorization canceled", data=to_admin_dict(return_authorization))


@router.get("/return-requests/config", response_model=SuccessResponse)
async def get_return_requests_settings(
    current_user: dict = Depends(require_admin),
    config: ReturnRequestsConfig = Depends(get_return_requests_config)
):
    """
    Get return request configuration (Admin only).
    """
    return SuccessResponse(data=config.model_dump())


@router.put("/return-requests/config", response_model=SuccessResponse)
async def update_return_requests_settings(
    config_data: UpdateReturnRequestsConfigRequest,
    current_user: dict = Depends(require_admin),
    store: ReturnRequestStore = Depends(get_store),
    config: ReturnRequestsConfig = Depends(get_return_requests_config)
):
    """
    Override return request configuration (Admin only).
    """
    update_dict = config_data.model_dump(exclude_unset=True, exclude_none=True)
    updated = ReturnRequestsConfig.model_validate({**config.model_dump(), **update_dict})

    await store.save_config(updated)
    set_return_requests_config(updated)
    logger.info(f"Return request configuration changed by {current_user['_id']}: {sorted(update_dict)}")

    return SuccessResponse(
        message="Return request configuration updated successfully",
        data=updated.model_dump()
    )

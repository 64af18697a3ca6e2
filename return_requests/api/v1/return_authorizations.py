"""Shopper-facing return request endpoints"""

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from typing import List, Optional

from return_requests.api.deps import get_caller, get_workflow
from return_requests.config import ReturnRequestsConfig, get_return_requests_config
from return_requests.core.workflow import Caller, Outcome, ReturnRequestWorkflow, WorkflowResult
from return_requests.models.order import InventoryUnit, Order
from return_requests.models.return_authorization import ReturnAuthorization
from return_requests.schemas.return_request import (
    AuthorizedUnitsResponse,
    InventoryUnitResponse,
    LineItemUnitsResponse,
    NewReturnRequestResponse,
    OrderSearchRequest,
    ReturnAuthorizationResponse,
    ReturnLabelsResponse,
    ReturnRequestCreate,
    ReturnRequestErrorResponse,
    ReturnRequestSuccessResponse,
    SearchResponse,
)

router = APIRouter()


# Helper functions

def to_unit_responses(units: List[InventoryUnit]) -> List[InventoryUnitResponse]:
    return [
        InventoryUnitResponse(id=unit.id, variant_id=unit.variant_id, state=unit.state)
        for unit in units
    ]


def to_return_authorization_response(
    return_authorization: ReturnAuthorization,
    order: Order,
) -> ReturnAuthorizationResponse:
    return ReturnAuthorizationResponse(
        number=return_authorization.number,
        order_number=order.number,
        reason=return_authorization.reason,
        amount=return_authorization.amount,
        state=return_authorization.state,
        inventory_unit_ids=return_authorization.inventory_unit_ids,
        created_at=return_authorization.created_at,
    )


def redirect_to_search(request: Request, result: WorkflowResult) -> RedirectResponse:
    """Access failures never say more than that access was denied"""
    url = request.url_for("return_request_search_form").include_query_params(error=result.error.message)
    return RedirectResponse(url=str(url), status_code=status.HTTP_303_SEE_OTHER)


def render_error(result: WorkflowResult) -> JSONResponse:
    body = ReturnRequestErrorResponse(kind=result.error.kind.value, error=result.error.message)
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=body.model_dump(mode="json"))


def render_new(result: WorkflowResult) -> JSONResponse:
    body = NewReturnRequestResponse(
        success=result.error is None,
        order_number=result.order.number,
        message=result.message,
        reasons=result.reasons,
        units_available_for_return=[
            LineItemUnitsResponse(
                line_item_id=group.line_item.id,
                variant_id=group.line_item.variant_id,
                name=group.line_item.name,
                price=group.line_item.price,
                units=to_unit_responses(group.units),
            )
            for group in result.available
        ],
        units_authorized_for_return=[
            AuthorizedUnitsResponse(
                return_authorization_number=entry.return_authorization.number,
                state=entry.return_authorization.state,
                units=to_unit_responses(entry.units),
                return_label_link=entry.labels_url,
            )
            for entry in result.authorized_for_return
        ],
        errors=result.error.field_errors if result.error else {},
        form=result.form,
    )
    status_code = status.HTTP_200_OK if result.error is None else status.HTTP_422_UNPROCESSABLE_ENTITY
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


# Endpoints

@router.get("/orders/return-authorizations/search", response_model=SearchResponse)
async def return_request_search_form(
    error: Optional[str] = Query(None),
    config: ReturnRequestsConfig = Depends(get_return_requests_config)
):
    """
    Entry point for shoppers without an account: look an order up by number and email.
    """
    return SearchResponse(
        success=error is None,
        message=config.return_request_intro_text,
        errors=[error] if error else [],
    )


@router.post("/orders/return-authorizations/search", response_model=SearchResponse)
async def search_order(
    request: Request,
    search: OrderSearchRequest,
    workflow: ReturnRequestWorkflow = Depends(get_workflow)
):
    """
    Find an order and redirect to its return request form with the order token.
    """
    result = await workflow.search(search.order_number, search.email_address)

    if result.outcome == Outcome.REDIRECT_TO_NEW:
        url = request.url_for(
            "new_return_authorization", order_number=result.order.number
        ).include_query_params(token=result.order.token)
        return RedirectResponse(url=str(url), status_code=status.HTTP_303_SEE_OTHER)

    body = SearchResponse(success=False, message=result.message, errors=result.errors)
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=body.model_dump(mode="json"))


@router.get("/orders/{order_number}/return-authorizations/new", response_model=NewReturnRequestResponse)
async def new_return_authorization(
    request: Request,
    order_number: str,
    caller: Caller = Depends(get_caller),
    workflow: ReturnRequestWorkflow = Depends(get_workflow)
):
    """
    Return request form: units still available plus units already authorized.
    """
    result = await workflow.new(order_number, caller)

    if result.outcome == Outcome.REDIRECT_TO_SEARCH:
        return redirect_to_search(request, result)
    if result.outcome == Outcome.ERROR:
        return render_error(result)
    return render_new(result)


@router.post(
    "/orders/{order_number}/return-authorizations",
    response_model=ReturnRequestSuccessResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_return_authorization(
    request: Request,
    order_number: str,
    return_request: ReturnRequestCreate,
    caller: Caller = Depends(get_caller),
    workflow: ReturnRequestWorkflow = Depends(get_workflow)
):
    """
    Submit a return request for the selected units.
    """
    result = await workflow.create(order_number, caller, return_request)

    if result.outcome == Outcome.REDIRECT_TO_SEARCH:
        return redirect_to_search(request, result)
    if result.outcome == Outcome.ERROR:
        return render_error(result)
    if result.outcome == Outcome.NEW:
        return render_new(result)

    return ReturnRequestSuccessResponse(
        message=result.message,
        return_authorization=to_return_authorization_response(result.return_authorization, result.order),
    )


@router.get("/return-authorizations/{number}/labels", response_model=ReturnLabelsResponse)
async def return_authorization_labels(
    request: Request,
    number: str,
    token: Optional[str] = Query(None),
    workflow: ReturnRequestWorkflow = Depends(get_workflow)
):
    """
    Return label page for an authorization; opened with the order token.
    """
    result = await workflow.labels(number, token)

    if result.outcome == Outcome.REDIRECT_TO_SEARCH:
        return redirect_to_search(request, result)

    unit_ids = set(result.return_authorization.inventory_unit_ids)
    return ReturnLabelsResponse(
        return_authorization=to_return_authorization_response(result.return_authorization, result.order),
        units=to_unit_responses([unit for unit in result.order.inventory_units if unit.id in unit_ids]),
    )

"""
Return request workflow.

Drives one request through search, new, create and labels. Every expected
failure (no access, not shipped, past the window, bad input, no match) comes
back as a ``WorkflowResult`` naming the view to show; only persistence and
mail failures raise.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple
import logging
import secrets

from return_requests.config import ReturnRequestsConfig
from return_requests.core.eligibility import (
    EligibilityDecision,
    EligibilityFailure,
    authorized_expiration_cutoff,
    can_request_return,
)
from return_requests.core.email import ReturnAuthorizationMailer, return_label_url
from return_requests.core.proration import compute_returned_amount
from return_requests.core.security import authorize_order_access
from return_requests.models.order import InventoryUnit, LineItem, Order
from return_requests.models.return_authorization import (
    ReturnAuthorization,
    ReturnAuthorizationState,
    SideEffect,
    Transition,
    transition,
)
from return_requests.schemas.return_request import ReturnRequestCreate
from return_requests.store import ReturnRequestStore
from return_requests.utils.validators import is_blank

logger = logging.getLogger(__name__)

OTHER_REASON = "Other"
ACCESS_DENIED_TEXT = "You do not have access to this order."
ORDER_NOT_FOUND_TEXT = "We could not find an order with that order number and email address."


class ReturnRequestErrorKind(str, Enum):
    ACCESS_DENIED = "access_denied"
    NOT_YET_SHIPPED = "not_yet_shipped"
    PAST_RETURN_WINDOW = "past_return_window"
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"


_ELIGIBILITY_ERRORS = {
    EligibilityFailure.NOT_YET_SHIPPED: ReturnRequestErrorKind.NOT_YET_SHIPPED,
    EligibilityFailure.PAST_RETURN_WINDOW: ReturnRequestErrorKind.PAST_RETURN_WINDOW,
}


@dataclass(frozen=True)
class ReturnRequestError:
    kind: ReturnRequestErrorKind
    message: str
    field_errors: Dict[str, str] = field(default_factory=dict)


class Outcome(str, Enum):
    """View the routing layer should produce"""
    SEARCH = "search"
    REDIRECT_TO_SEARCH = "redirect_to_search"
    REDIRECT_TO_NEW = "redirect_to_new"
    NEW = "new"
    ERROR = "error"
    SUCCESS = "success"
    LABELS = "labels"


@dataclass(frozen=True)
class Caller:
    """Identity presented with a request"""
    user_id: Optional[str] = None
    token: Optional[str] = None


@dataclass
class UnitGroup:
    line_item: LineItem
    units: List[InventoryUnit]


@dataclass
class AuthorizedUnits:
    """Units already covered by an earlier authorization on the same order"""
    return_authorization: ReturnAuthorization
    units: List[InventoryUnit]
    labels_url: str


@dataclass
class WorkflowResult:
    outcome: Outcome
    message: Optional[str] = None
    error: Optional[ReturnRequestError] = None
    errors: List[str] = field(default_factory=list)
    order: Optional[Order] = None
    return_authorization: Optional[ReturnAuthorization] = None
    available: List[UnitGroup] = field(default_factory=list)
    authorized_for_return: List[AuthorizedUnits] = field(default_factory=list)
    form: Optional[ReturnRequestCreate] = None
    reasons: List[str] = field(default_factory=list)


def generate_return_authorization_number() -> str:
    """Generate unique return authorization number"""
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d")
    random_suffix = secrets.token_hex(4).upper()
    return f"RA-{timestamp}-{random_suffix}"


def resolve_reason(reason: str, reason_other: Optional[str]) -> str:
    """Fold the free-text explanation into the reason; only "Other" keeps it"""
    if reason == OTHER_REASON and not is_blank(reason_other):
        return f"{OTHER_REASON}: {reason_other}"
    return reason


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReturnRequestWorkflow:
    """Search, new, create and labels steps for shopper return requests"""

    def __init__(
        self,
        store: ReturnRequestStore,
        notifier: ReturnAuthorizationMailer,
        config: ReturnRequestsConfig,
        initial_state: ReturnAuthorizationState = ReturnAuthorizationState.AUTHORIZED,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.notifier = notifier
        self.config = config
        self.initial_state = initial_state
        self.clock = clock

    # Search

    async def search(self, order_number: Optional[str], email_address: Optional[str]) -> WorkflowResult:
        """
        Find an order by number and email and hand back its token.

        Whether the number or the email was wrong is never revealed.
        """
        errors = []
        if is_blank(order_number):
            errors.append("Order number can't be blank")
        if is_blank(email_address):
            errors.append("Email address can't be blank")
        if errors:
            return WorkflowResult(
                outcome=Outcome.SEARCH,
                errors=errors,
                error=ReturnRequestError(ReturnRequestErrorKind.VALIDATION_FAILED, errors[0]),
                message=self.config.return_request_intro_text,
            )

        order = await self.store.find_order_by_number(order_number)
        if order is None or order.email != email_address:
            logger.info("Return request search found no matching order")
            return WorkflowResult(
                outcome=Outcome.SEARCH,
                errors=[ORDER_NOT_FOUND_TEXT],
                error=ReturnRequestError(ReturnRequestErrorKind.NOT_FOUND, ORDER_NOT_FOUND_TEXT),
                message=self.config.return_request_intro_text,
            )

        return WorkflowResult(outcome=Outcome.REDIRECT_TO_NEW, order=order)

    # New

    async def new(self, order_number: str, caller: Caller) -> WorkflowResult:
        order = await self._authorized_order(order_number, caller)
        if order is None:
            return self._access_denied()

        decision = can_request_return(order, self.clock(), self.config)
        if not decision.eligible:
            return self._ineligible(order, decision)

        return await self._new_view(order)

    # Create

    async def create(self, order_number: str, caller: Caller, form: ReturnRequestCreate) -> WorkflowResult:
        order = await self._authorized_order(order_number, caller)
        if order is None:
            return self._access_denied()

        now = self.clock()
        decision = can_request_return(order, now, self.config)
        if not decision.eligible:
            return self._ineligible(order, decision)

        field_errors: Dict[str, str] = {}
        reason = (form.reason or "").strip()
        if not reason:
            field_errors["reason"] = "Reason can't be blank"

        covered = await self._covered_units(order)
        selected, selection_errors = self._select_units(order, form.return_quantity, covered)
        field_errors.update(selection_errors)

        if field_errors:
            error = ReturnRequestError(
                ReturnRequestErrorKind.VALIDATION_FAILED,
                "Please correct the errors below.",
                field_errors,
            )
            return await self._new_view(order, form=form, error=error)

        change = transition(None, self.initial_state)
        return_authorization = ReturnAuthorization(
            number=generate_return_authorization_number(),
            order_id=order.id,
            reason=resolve_reason(reason, form.reason_other),
            amount=compute_returned_amount(order, selected),
            state=change.state,
            inventory_unit_ids=[unit.id for unit in selected],
            created_at=now,
            updated_at=now,
        )
        return_authorization = await self.store.insert_return_authorization(return_authorization)
        logger.info(
            f"Created return authorization {return_authorization.number} for order {order.number} "
            f"({len(selected)} units, {return_authorization.amount})"
        )

        await self._apply(change, return_authorization, order)

        return WorkflowResult(
            outcome=Outcome.SUCCESS,
            message=self.config.return_request_success_text,
            order=order,
            return_authorization=return_authorization,
        )

    # Labels

    async def labels(self, return_authorization_number: str, token: Optional[str]) -> WorkflowResult:
        """Label page access is granted by the order's token alone"""
        return_authorization = await self.store.find_return_authorization(return_authorization_number)
        if return_authorization is None:
            return self._access_denied()

        order = await self.store.find_order(return_authorization.order_id)
        if order is None or not authorize_order_access(order.user_id, order.token, token=token):
            return self._access_denied()

        return WorkflowResult(
            outcome=Outcome.LABELS,
            order=order,
            return_authorization=return_authorization,
        )

    # Lifecycle

    async def change_state(
        self,
        return_authorization: ReturnAuthorization,
        target: ReturnAuthorizationState,
    ) -> ReturnAuthorization:
        """
        Move an existing authorization to ``target`` and run what the move owes.

        Raises:
            InvalidTransitionError: If the move is not allowed
        """
        change = transition(return_authorization.state, target)
        if change.state == return_authorization.state:
            return return_authorization

        updated = return_authorization.model_copy(update={"state": change.state, "updated_at": self.clock()})
        await self.store.update_return_authorization_state(updated)
        logger.info(f"Return authorization {updated.number} moved to {change.state.value}")

        if change.effects:
            order = await self.store.find_order(updated.order_id)
            await self._apply(change, updated, order)
        return updated

    async def authorized_and_expired(self) -> List[ReturnAuthorization]:
        cutoff = authorized_expiration_cutoff(self.clock(), self.config)
        return await self.store.find_authorized_and_expired(cutoff)

    # Helpers

    async def _apply(self, change: Transition, return_authorization: ReturnAuthorization, order: Order) -> None:
        for effect in change.effects:
            if effect == SideEffect.NOTIFY_AUTHORIZED:
                await self.notifier.notify_authorized(return_authorization, order)
                logger.info(f"Sent authorized notice for {return_authorization.number}")

    async def _authorized_order(self, order_number: str, caller: Caller) -> Optional[Order]:
        order = await self.store.find_order_by_number(order_number)
        if order is None:
            logger.info(f"Return request for unknown order {order_number}")
            return None
        if not authorize_order_access(order.user_id, order.token, caller.user_id, caller.token):
            logger.info(f"Return request access denied for order {order_number}")
            return None
        return order

    async def _covered_units(self, order: Order) -> Dict[str, ReturnAuthorization]:
        """Map of inventory unit id to the live authorization covering it"""
        covered: Dict[str, ReturnAuthorization] = {}
        for return_authorization in await self.store.list_return_authorizations_for_order(order.id):
            if return_authorization.state == ReturnAuthorizationState.CANCELED:
                continue
            for unit_id in return_authorization.inventory_unit_ids:
                covered[unit_id] = return_authorization
        return covered

    def _select_units(
        self,
        order: Order,
        return_quantity: Dict[str, int],
        covered: Dict[str, ReturnAuthorization],
    ) -> Tuple[List[InventoryUnit], Dict[str, str]]:
        selected: List[InventoryUnit] = []
        errors: Dict[str, str] = {}

        for variant_id, quantity in return_quantity.items():
            if quantity <= 0:
                continue
            line_item = order.find_line_item_by_variant(variant_id)
            if line_item is None:
                errors[f"return_quantity.{variant_id}"] = "This item is not part of the order"
                continue
            available = [
                unit for unit in order.units_for(line_item.id)
                if unit.shipped and unit.id not in covered
            ]
            if quantity > len(available):
                errors[f"return_quantity.{variant_id}"] = (
                    f"Only {len(available)} of {line_item.name} can be returned"
                )
                continue
            selected.extend(available[:quantity])

        if not selected and not errors:
            errors["return_quantity"] = "Select at least one item to return"

        return selected, errors

    async def _new_view(
        self,
        order: Order,
        form: Optional[ReturnRequestCreate] = None,
        error: Optional[ReturnRequestError] = None,
    ) -> WorkflowResult:
        covered = await self._covered_units(order)

        available = []
        for line_item in order.line_items:
            units = [unit for unit in order.units_for(line_item.id) if unit.shipped and unit.id not in covered]
            if units:
                available.append(UnitGroup(line_item=line_item, units=units))

        authorized: List[AuthorizedUnits] = []
        seen: Set[str] = set()
        for return_authorization in covered.values():
            if return_authorization.number in seen:
                continue
            seen.add(return_authorization.number)
            unit_ids = set(return_authorization.inventory_unit_ids)
            authorized.append(AuthorizedUnits(
                return_authorization=return_authorization,
                units=[unit for unit in order.inventory_units if unit.id in unit_ids],
                labels_url=return_label_url(return_authorization.number, order.token),
            ))

        return WorkflowResult(
            outcome=Outcome.NEW,
            message=self.config.return_request_intro_text,
            error=error,
            order=order,
            available=available,
            authorized_for_return=authorized,
            form=form,
            reasons=list(self.config.return_request_reasons),
        )

    def _access_denied(self) -> WorkflowResult:
        return WorkflowResult(
            outcome=Outcome.REDIRECT_TO_SEARCH,
            error=ReturnRequestError(ReturnRequestErrorKind.ACCESS_DENIED, ACCESS_DENIED_TEXT),
        )

    def _ineligible(self, order: Order, decision: EligibilityDecision) -> WorkflowResult:
        logger.info(f"Order {order.number} is not eligible for a return request: {decision.failure.value}")
        return WorkflowResult(
            outcome=Outcome.ERROR,
            message=decision.message,
            error=ReturnRequestError(_ELIGIBILITY_ERRORS[decision.failure], decision.message),
            order=order,
        )

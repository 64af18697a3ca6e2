"""MongoDB persistence for orders and return authorizations"""

from bson import ObjectId
from bson.decimal128 import Decimal128
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Optional
import logging

from return_requests.config import ReturnRequestsConfig
from return_requests.models.order import Order
from return_requests.models.return_authorization import ReturnAuthorization, ReturnAuthorizationState
from return_requests.utils.validators import validate_object_id

logger = logging.getLogger(__name__)

CONFIG_KEY = "main"


def return_authorization_to_document(return_authorization: ReturnAuthorization) -> dict:
    """Convert a return authorization to its MongoDB document"""
    return {
        "number": return_authorization.number,
        "order_id": return_authorization.order_id,
        "reason": return_authorization.reason,
        "amount": Decimal128(return_authorization.amount),
        "state": return_authorization.state.value,
        "inventory_unit_ids": list(return_authorization.inventory_unit_ids),
        "created_at": return_authorization.created_at,
        "updated_at": return_authorization.updated_at,
    }


class ReturnRequestStore:
    """Reads and writes the collections the return request flow depends on"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def find_order_by_number(self, number: str) -> Optional[Order]:
        doc = await self.db.orders.find_one({"number": number})
        return Order.model_validate(doc) if doc else None

    async def find_order(self, order_id: str) -> Optional[Order]:
        if not validate_object_id(order_id):
            return None
        doc = await self.db.orders.find_one({"_id": ObjectId(order_id)})
        return Order.model_validate(doc) if doc else None

    async def find_return_authorization(self, number: str) -> Optional[ReturnAuthorization]:
        doc = await self.db.return_authorizations.find_one({"number": number})
        return ReturnAuthorization.model_validate(doc) if doc else None

    async def list_return_authorizations_for_order(self, order_id: str) -> List[ReturnAuthorization]:
        cursor = self.db.return_authorizations.find({"order_id": order_id}).sort("created_at", 1)
        return [ReturnAuthorization.model_validate(doc) async for doc in cursor]

    async def list_return_authorizations(
        self,
        state: Optional[ReturnAuthorizationState] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> List[ReturnAuthorization]:
        query = {"state": state.value} if state else {}
        cursor = self.db.return_authorizations.find(query).sort("created_at", -1).skip(skip).limit(limit)
        return [ReturnAuthorization.model_validate(doc) async for doc in cursor]

    async def find_authorized_and_expired(self, cutoff: datetime) -> List[ReturnAuthorization]:
        """Authorizations still in the authorized state and created before ``cutoff``"""
        cursor = self.db.return_authorizations.find({
            "state": ReturnAuthorizationState.AUTHORIZED.value,
            "created_at": {"$lt": cutoff},
        }).sort("created_at", 1)
        return [ReturnAuthorization.model_validate(doc) async for doc in cursor]

    async def insert_return_authorization(self, return_authorization: ReturnAuthorization) -> ReturnAuthorization:
        result = await self.db.return_authorizations.insert_one(
            return_authorization_to_document(return_authorization)
        )
        logger.debug(f"Inserted return authorization {return_authorization.number}")
        return return_authorization.model_copy(update={"id": str(result.inserted_id)})

    async def update_return_authorization_state(self, return_authorization: ReturnAuthorization) -> None:
        await self.db.return_authorizations.update_one(
            {"number": return_authorization.number},
            {
                "$set": {
                    "state": return_authorization.state.value,
                    "updated_at": return_authorization.updated_at,
                }
            }
        )

    async def load_config(self) -> Optional[ReturnRequestsConfig]:
        doc = await self.db.return_request_config.find_one({"key": CONFIG_KEY})
        if not doc:
            return None
        doc.pop("_id", None)
        doc.pop("key", None)
        doc.pop("updatedAt", None)
        return ReturnRequestsConfig.model_validate(doc)

    async def save_config(self, config: ReturnRequestsConfig) -> None:
        await self.db.return_request_config.update_one(
            {"key": CONFIG_KEY},
            {
                "$set": {**config.model_dump(), "updatedAt": datetime.now(timezone.utc)},
                "$setOnInsert": {"key": CONFIG_KEY},
            },
            upsert=True
        )

"""FastAPI dependencies for authentication, database access and the return workflow"""

from fastapi import Depends, HTTPException, status, Header, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from typing import Optional

from return_requests.config import ReturnRequestsConfig, get_return_requests_config
from return_requests.core.email import ReturnAuthorizationMailer
from return_requests.core.security import verify_token
from return_requests.core.workflow import Caller, ReturnRequestWorkflow
from return_requests.database import get_database
from return_requests.store import ReturnRequestStore
from return_requests.utils.validators import validate_object_id


async def _load_user(authorization: Optional[str], db: AsyncIOMotorDatabase) -> Optional[dict]:
    if not authorization or not authorization.startswith("Bearer "):
        return None

    payload = verify_token(authorization.replace("Bearer ", ""))
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id or not validate_object_id(user_id):
        return None

    user = await db.users.find_one({"_id": ObjectId(user_id)})
    if not user or not user.get("active", True):
        return None

    # Convert ObjectId to string for JSON serialization
    user["_id"] = str(user["_id"])
    return user


async def get_current_user(
    authorization: str = Header(None),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> dict:
    """
    Dependency to get current authenticated user from JWT token

    Raises:
        HTTPException: If authentication fails
    """
    user = await _load_user(authorization, db)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def require_admin(
    current_user: dict = Depends(get_current_user)
) -> dict:
    """
    Dependency to require admin or support role

    Raises:
        HTTPException: If user doesn't have required permissions
    """
    allowed_roles = ["admin", "support"]

    if current_user.get("role") not in allowed_roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions. Admin role required.",
        )

    return current_user


async def get_optional_user(
    authorization: Optional[str] = Header(None),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> Optional[dict]:
    """
    Dependency to optionally get current user (doesn't require authentication)

    Returns:
        User dictionary if authenticated, None otherwise
    """
    return await _load_user(authorization, db)


async def get_caller(
    token: Optional[str] = Query(None),
    current_user: Optional[dict] = Depends(get_optional_user)
) -> Caller:
    """Dependency combining the logged-in user and the order token parameter"""
    return Caller(
        user_id=current_user["_id"] if current_user else None,
        token=token,
    )


def get_store(db: AsyncIOMotorDatabase = Depends(get_database)) -> ReturnRequestStore:
    """Dependency to get the return request store"""
    return ReturnRequestStore(db)


def get_notifier() -> ReturnAuthorizationMailer:
    """Dependency to get the notification dispatcher"""
    return ReturnAuthorizationMailer()


def get_workflow(
    store: ReturnRequestStore = Depends(get_store),
    notifier: ReturnAuthorizationMailer = Depends(get_notifier),
    config: ReturnRequestsConfig = Depends(get_return_requests_config),
) -> ReturnRequestWorkflow:
    """Dependency to get a workflow bound to the current configuration"""
    return ReturnRequestWorkflow(store=store, notifier=notifier, config=config)

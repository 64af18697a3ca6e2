"""Common models and base types"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Annotated, Any

from bson import ObjectId
from bson.decimal128 import Decimal128
from pydantic import BeforeValidator, PlainSerializer

CENTS = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Coerce a number (or BSON Decimal128) to a Decimal rounded to cents"""
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    elif isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError):
        raise ValueError(f"Invalid monetary amount: {value!r}")


def _object_id_to_str(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


# MongoDB ObjectId, exposed as a string
PyObjectId = Annotated[str, BeforeValidator(_object_id_to_str)]

# Monetary amount in cents precision; serialized as a string to avoid float drift
Money = Annotated[Decimal, BeforeValidator(to_money), PlainSerializer(str, return_type=str, when_used="json")]

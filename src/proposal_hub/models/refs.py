"""Identity helpers shared by all models."""

import uuid
from typing import Annotated, Any, Optional

from pydantic import BeforeValidator


def canonical_id(value: Any) -> Optional[str]:
    """
    Reduce a user/vendor reference to its string id.
    The API returns references either as plain ids or as populated objects
    ({"_id": ..., "firstName": ...}); both collapse to the same string.
    """
    if isinstance(value, dict):
        value = value.get("_id") or value.get("id")
    if value is None:
        return None
    return str(value).strip()


RefId = Annotated[str, BeforeValidator(canonical_id)]


def new_id() -> str:
    return uuid.uuid4().hex

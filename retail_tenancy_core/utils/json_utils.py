import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Union

from pydantic_core import to_jsonable_python


def _default(obj: Any) -> Any:
    # Money columns are Numeric; keep the exact digits instead of a float
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    return to_jsonable_python(obj, fallback=repr)


def dumps(obj: Any, **kwargs) -> str:
    """JSON dumps with Decimal, Enum and datetime support."""
    return json.dumps(obj, default=_default, **kwargs)


def loads(s: Union[str, bytes, bytearray], **kwargs) -> Any:
    """Standard JSON loads function."""
    return json.loads(s, **kwargs)

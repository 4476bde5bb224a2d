import json
import dataclasses
import enum
import re
from typing import Any, Dict

from .model import Constant


class ConstantJSONEncoder(json.JSONEncoder):
    """JSON encoder for dataclasses, enums and constants."""

    def default(self, obj: Any) -> Any:
        if dataclasses.is_dataclass(obj):
            return to_serializable(obj)
        if isinstance(obj, Constant):
            return obj.to_dict()
        if isinstance(obj, enum.Enum):
            return obj.value
        if isinstance(obj, re.Pattern):
            return obj.pattern
        if callable(obj):
            return getattr(obj, "__name__", repr(obj))
        return super().default(obj)


def to_serializable(obj: Any) -> Any:
    """Convert dataclasses (and what they hold) into plain JSON-friendly values."""
    if dataclasses.is_dataclass(obj):
        result: Dict[str, Any] = {}
        for field in dataclasses.fields(obj):
            value = getattr(obj, field.name)
            if value is not None:
                result[field.name] = to_serializable(value)
        return result
    elif isinstance(obj, Constant):
        return obj.to_dict()
    elif isinstance(obj, enum.Enum):
        return obj.value
    elif isinstance(obj, re.Pattern):
        return obj.pattern
    elif isinstance(obj, list):
        return [to_serializable(item) for item in obj]
    elif isinstance(obj, dict):
        return {key: to_serializable(value) for key, value in obj.items()}
    elif callable(obj):
        return getattr(obj, "__name__", repr(obj))
    else:
        return obj

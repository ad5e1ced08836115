# Copyright (c) 2024-2026 nickdsmith. All Rights Reserved.
# SPDX-License-Identifier: PROPRIETARY
#
# This file is proprietary and confidential. Unauthorized copying of this file,
# via any medium is strictly prohibited.

"""JSON serialization for log records and configuration dumps."""

import dataclasses
from datetime import date, datetime, timedelta
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any


def _serialize_known_type(obj: Any) -> tuple[bool, Any]:
    """Try to serialize by known type. Returns (handled, result)."""
    if isinstance(obj, (datetime, date)):
        return True, obj.isoformat()
    if isinstance(obj, timedelta):
        return True, obj.total_seconds()
    if isinstance(obj, Path):
        return True, str(obj)
    if isinstance(obj, Enum):
        return True, obj.value
    if isinstance(obj, MappingProxyType):
        return True, dict(obj)
    if isinstance(obj, type):
        return True, f"{obj.__module__}.{obj.__qualname__}"
    return False, None


def json_serializer(obj: Any) -> Any:
    """
    Fallback serializer for json.dumps(default=...).

    - datetime/date → ISO 8601 string
    - timedelta → seconds
    - Path → string
    - Enum → value
    - read-only mappings → dict
    - classes (message types) → dotted name
    - dataclasses (Publication, Subscription, ...) → dict of fields
    - everything else → string
    """
    handled, result = _serialize_known_type(obj)
    if handled:
        return result
    if dataclasses.is_dataclass(obj):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    return str(obj)


__all__ = ["json_serializer"]

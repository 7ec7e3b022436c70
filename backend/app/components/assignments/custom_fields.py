"""Placeholder substitution for assignment custom fields.

Custom fields arrive as parallel arrays, e.g.
``{"type": ["name", "role"], "value": ["Jane Doe", "Manager"]}``, and fill
``[name]`` / ``[role]`` placeholders in question text. A ``self`` role turns
``[name]`` into ``yourself``.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional


def replace_custom_fields(content: Optional[str], custom_fields: Optional[Dict[str, List[str]]]) -> Optional[str]:
    if not content or not custom_fields:
        return content
    types = custom_fields.get("type") or []
    values = custom_fields.get("value") or []
    if not types or not values:
        return content

    result = content
    if "role" in types and "name" in types:
        role_value = values[types.index("role")] if types.index("role") < len(values) else ""
        if (role_value or "").lower() == "self":
            result = re.sub(r"\[name\]", "yourself", result, flags=re.IGNORECASE)

    for index, field_type in enumerate(types):
        value = values[index] if index < len(values) else ""
        result = re.sub(rf"\[{re.escape(field_type)}\]", lambda _m, v=value: v or "", result, flags=re.IGNORECASE)
    return result

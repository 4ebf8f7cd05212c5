"""JSONB helpers for raw text() SQL.

asyncpg hands JSONB back as a str when no column type is attached to the
statement, so readers accept both decoded and encoded values.
"""

import json
from typing import Any


def dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def loads(value: Any) -> Any:
    if isinstance(value, (str, bytes, bytearray)):
        return json.loads(value)
    return value

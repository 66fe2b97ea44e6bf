import math
from typing import Any, Dict, Optional

import httpx


def safe_json(resp: httpx.Response) -> Optional[Dict[str, Any]]:
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def safe_text(resp: httpx.Response, limit: int = 500) -> str:
    """Best-effort body text for error reporting."""
    try:
        text = resp.text
    except Exception:
        return ""
    return (text or "")[:limit]


def normalize_cursor(value: Any) -> Optional[str]:
    """
    Pagination continuation -> canonical cursor.
    Absent / None / "" (any falsy value) means no further pages.
    """
    if not value:
        return None
    return str(value)


def parse_target_price(value: Any) -> Optional[float]:
    """
    Price targets arrive as numbers or strings like "$1,234.50".
    Returns a float, or None when the value is blank or not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        s = value.strip().replace("$", "").replace(",", "").strip()
        if not s:
            return None
        try:
            num = float(s)
        except ValueError:
            return None
    else:
        return None
    return num if math.isfinite(num) else None

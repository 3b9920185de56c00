import json
import math
import os
import re
import shutil
from typing import Any, Optional

_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def safe_name(name: str, fallback: str = "item") -> str:
    sanitized = "".join(ch if ch.isalnum() or ch in "-_ " else "_" for ch in (name or ""))
    sanitized = sanitized.strip()
    return sanitized or fallback


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def clear_dir(path: str) -> None:
    """Remove everything inside path, creating it if it does not exist."""
    if not os.path.exists(path):
        ensure_dir(path)
        return
    for entry in os.listdir(path):
        entry_path = os.path.join(path, entry)
        if os.path.isdir(entry_path) and not os.path.islink(entry_path):
            shutil.rmtree(entry_path)
        else:
            os.remove(entry_path)


def write_json_file(path: str, data: Any, indent: int = 4) -> None:
    ensure_dir(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=indent, ensure_ascii=False)


def escape_string(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def quote_string(text: str) -> str:
    return f'"{escape_string(text)}"'


def format_number(value: float) -> str:
    """Render a number the way the target language prints it (no trailing .0)."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def parse_number(text: str) -> Optional[float]:
    """Return the numeric value of a decimal-looking string, else None."""
    trimmed = text.strip()
    if not trimmed or not _NUMBER_RE.match(trimmed):
        return None
    return float(trimmed)


def format_literal(value: Any) -> str:
    """Render a stored (non-expression) value as a literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return quote_string(value)
    return quote_string(str(value))

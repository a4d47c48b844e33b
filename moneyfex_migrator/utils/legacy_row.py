"""
Typed access to loosely-typed legacy rows.

Legacy tables disagree on which columns exist and on numeric widths
(tinyint/smallint/int/bigint ids, money vs float amounts). Every value is
normalised here, at the read boundary, so the rest of the pipeline only sees
Python int, Decimal, bool, str and datetime.
"""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class _Missing:
    """Marker for a column that the source table does not have"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "MISSING"


MISSING = _Missing()


class LegacyValueError(ValueError):
    """A legacy value could not be normalised to its canonical type"""


def normalize_int(value: Any) -> Optional[int]:
    """Normalise a legacy integer of any width to a checked 32-bit int"""
    if value is None or value is MISSING:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        result = value
    elif isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise LegacyValueError(f"Not an integer: {value!r}")
        result = int(value)
    elif isinstance(value, float):
        if not value.is_integer():
            raise LegacyValueError(f"Not an integer: {value!r}")
        result = int(value)
    elif isinstance(value, (str, bytes)):
        text = value.decode() if isinstance(value, bytes) else value
        text = text.strip()
        if not text:
            return None
        try:
            result = int(text)
        except ValueError as e:
            raise LegacyValueError(f"Not an integer: {value!r}") from e
    else:
        try:
            result = int(value)
        except (TypeError, ValueError) as e:
            raise LegacyValueError(f"Not an integer: {value!r}") from e

    if result < INT32_MIN or result > INT32_MAX:
        raise LegacyValueError(f"Integer out of 32-bit range: {result}")
    return result


def normalize_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value is MISSING:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, (int, float)):
        # str() first so 0.1 stays 0.1 rather than its binary expansion
        return Decimal(str(value))
    text = str(value).strip()
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise LegacyValueError(f"Not a decimal: {value!r}") from e


def normalize_bool(value: Any, default: bool = False) -> bool:
    if value is None or value is MISSING:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    text = str(value).strip().lower()
    if text in ("1", "true", "t", "yes", "y"):
        return True
    if text in ("0", "false", "f", "no", "n", ""):
        return False
    return default


def normalize_datetime(value: Any) -> Optional[datetime]:
    if value is None or value is MISSING:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError:
        return None


def normalize_text(value: Any) -> Optional[str]:
    if value is None or value is MISSING:
        return None
    if isinstance(value, bytes):
        return value.decode(errors="replace")
    return str(value)


def none_if_blank(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def full_name(*parts: Optional[str]) -> str:
    """Join name parts with single spaces, skipping blanks"""
    return " ".join(p.strip() for p in parts if p and p.strip())


class LegacyRow:
    """
    Read-only view over one source row.

    `get()` returns MISSING for columns the table does not have, which is
    different from a NULL value (None). Typed accessors take one or more
    candidate column names and use the first one present.
    """

    def __init__(self, mapping: Mapping[str, Any], table: str = ""):
        # Column lookups are case-insensitive; SQL Server and SQLite disagree on casing
        self._values = {str(k).lower(): v for k, v in mapping.items()}
        self.table = table

    def __contains__(self, column: str) -> bool:
        return column.lower() in self._values

    def get(self, *columns: str) -> Any:
        for column in columns:
            key = column.lower()
            if key in self._values:
                return self._values[key]
        return MISSING

    def has_any(self, *columns: str) -> bool:
        return any(c.lower() in self._values for c in columns)

    def as_int(self, *columns: str) -> Optional[int]:
        return normalize_int(self.get(*columns))

    def required_int(self, *columns: str) -> int:
        value = self.as_int(*columns)
        if value is None:
            raise LegacyValueError(f"{self.table}: {'/'.join(columns)} is required")
        return value

    def as_decimal(self, *columns: str) -> Optional[Decimal]:
        return normalize_decimal(self.get(*columns))

    def as_bool(self, *columns: str, default: bool = False) -> bool:
        return normalize_bool(self.get(*columns), default=default)

    def as_text(self, *columns: str, default: Optional[str] = None) -> Optional[str]:
        value = normalize_text(self.get(*columns))
        return default if value is None else value

    def as_datetime(self, *columns: str) -> Optional[datetime]:
        return normalize_datetime(self.get(*columns))

    def columns(self) -> Iterable[str]:
        return self._values.keys()

    def __repr__(self):
        return f"LegacyRow({self.table}, {self._values!r})"

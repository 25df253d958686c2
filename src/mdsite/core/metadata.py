"""Typed front-matter values and the immutable Metadata mapping

Each front-matter value is stored as a tagged variant (``kind`` + ``value``)
so that well-known fields can be type-checked when a document is parsed
instead of failing later inside a template.
"""

from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from typing import Annotated, Any, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Value(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    def native(self) -> Any:
        return self.value


class StringValue(_Value):
    kind: Literal['string'] = 'string'
    value: str


class IntegerValue(_Value):
    kind: Literal['integer'] = 'integer'
    value: int


class FloatValue(_Value):
    kind: Literal['float'] = 'float'
    value: float


class BooleanValue(_Value):
    kind: Literal['boolean'] = 'boolean'
    value: bool


class DateValue(_Value):
    kind: Literal['date'] = 'date'
    value: date


class DateTimeValue(_Value):
    kind: Literal['datetime'] = 'datetime'
    value: datetime


class TimeValue(_Value):
    kind: Literal['time'] = 'time'
    value: time


class ArrayValue(_Value):
    kind: Literal['array'] = 'array'
    value: tuple['MetaValue', ...]

    def native(self) -> list:
        return [item.native() for item in self.value]


class TableValue(_Value):
    """Nested mapping; kept opaque, only converted back for templates."""
    kind: Literal['table'] = 'table'
    value: dict[str, 'MetaValue']

    def native(self) -> dict:
        return {k: v.native() for k, v in self.value.items()}


MetaValue = Annotated[
    Union[StringValue, IntegerValue, FloatValue, BooleanValue,
          DateValue, DateTimeValue, TimeValue, ArrayValue, TableValue],
    Field(discriminator='kind'),
]

ArrayValue.model_rebuild()
TableValue.model_rebuild()


def to_meta_value(value: Any) -> MetaValue:
    """Wrap a native value (as produced by tomllib or yaml.safe_load) in its variant."""
    # bool before int, datetime before date: both are subclasses
    if isinstance(value, bool):
        return BooleanValue(value=value)
    if isinstance(value, int):
        return IntegerValue(value=value)
    if isinstance(value, float):
        return FloatValue(value=value)
    if isinstance(value, datetime):
        return DateTimeValue(value=value)
    if isinstance(value, date):
        return DateValue(value=value)
    if isinstance(value, time):
        return TimeValue(value=value)
    if isinstance(value, str):
        return StringValue(value=value)
    if isinstance(value, (list, tuple)):
        return ArrayValue(value=tuple(to_meta_value(v) for v in value))
    if isinstance(value, dict):
        return TableValue(value={str(k): to_meta_value(v) for k, v in value.items() if v is not None})
    raise TypeError(f"unsupported value type {type(value).__name__}")


# Well-known fields and the variant kinds each one accepts.
KNOWN_FIELDS: dict[str, tuple[str, ...]] = {
    'title':    ('string',),
    'subtitle': ('string',),
    'layout':   ('string',),
    'slug':     ('string',),
    'summary':  ('string',),
    'date':     ('date', 'datetime'),
    'draft':    ('boolean',),
    'tags':     ('array',),
    'weight':   ('integer',),
}


def _coerce_date(value: MetaValue) -> MetaValue:
    """Accept ISO date strings for `date`, the way most generators do."""
    if isinstance(value, StringValue):
        text = value.value.strip()
        try:
            if len(text) == 10:
                return DateValue(value=date.fromisoformat(text))
            return DateTimeValue(value=datetime.fromisoformat(text))
        except ValueError:
            raise ValueError(f"field 'date' is not an ISO date: {text!r}") from None
    return value


def check_field(key: str, value: MetaValue) -> MetaValue:
    """Validate a well-known field's variant; raises ValueError on mismatch."""
    if key == 'date':
        value = _coerce_date(value)
    allowed = KNOWN_FIELDS.get(key)
    if allowed is None:
        return value
    if value.kind not in allowed:
        raise ValueError(f"field '{key}' must be {' or '.join(allowed)}, got {value.kind}")
    if key == 'tags':
        bad = [item.kind for item in value.value if item.kind != 'string']
        if bad:
            raise ValueError(f"field 'tags' must contain only strings, got {bad[0]}")
    return value


class Metadata(Mapping):
    """Immutable mapping of field name to MetaValue with typed accessors."""

    __slots__ = ('_fields',)

    def __init__(self, fields: Optional[Mapping[str, MetaValue]] = None):
        self._fields = {k: check_field(k, v) for k, v in (fields or {}).items()}

    @classmethod
    def from_native(cls, data: Mapping[str, Any]) -> 'Metadata':
        """Build from a plain dict; null values are dropped."""
        return cls({str(k): to_meta_value(v) for k, v in data.items() if v is not None})

    def __getitem__(self, key: str) -> MetaValue:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Metadata):
            return self._fields == other._fields
        return NotImplemented

    def __repr__(self) -> str:
        return f"Metadata({self.native()!r})"

    def native(self) -> dict[str, Any]:
        """Plain-Python view, for templates and serializers."""
        return {k: v.native() for k, v in self._fields.items()}

    def _get(self, key: str, default: Any = None) -> Any:
        value = self._fields.get(key)
        return default if value is None else value.native()

    @property
    def title(self) -> Optional[str]:
        return self._get('title')

    @property
    def subtitle(self) -> Optional[str]:
        return self._get('subtitle')

    @property
    def layout(self) -> Optional[str]:
        return self._get('layout')

    @property
    def slug(self) -> Optional[str]:
        return self._get('slug')

    @property
    def summary(self) -> Optional[str]:
        return self._get('summary')

    @property
    def date(self) -> Optional[date]:
        return self._get('date')

    @property
    def tags(self) -> list[str]:
        return self._get('tags', [])

    @property
    def draft(self) -> bool:
        return self._get('draft', False)

    @property
    def weight(self) -> int:
        return self._get('weight', 0)


def date_sort_key(value: Optional[date]) -> Optional[datetime]:
    """Normalize date/datetime (naive or aware) to a comparable naive UTC datetime."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

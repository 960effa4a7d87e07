import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from .errors import SchemaValidationError

_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]{0,62}$')


class ColumnType(Enum):
  INTEGER = 'integer'
  TEXT = 'text'
  REAL = 'real'
  BOOLEAN = 'boolean'
  DATETIME = 'datetime'
  BLOB = 'blob'


@dataclass(frozen=True)
class ColumnDefinition:
  name: str
  type: ColumnType
  is_primary_key: bool = False
  auto_increment: bool = False
  nullable: bool = True
  unique: bool = False
  default_value: Any = None

  @property
  def has_default(self) -> bool:
    return self.default_value is not None

  @property
  def is_required(self) -> bool:
    return not self.nullable and not self.has_default


@dataclass(frozen=True)
class TableSchema:
  name: str
  columns: Tuple[ColumnDefinition, ...] = field(default_factory=tuple)

  def __post_init__(self):
    # accept any sequence from callers but store an immutable one
    if not isinstance(self.columns, tuple):
      object.__setattr__(self, 'columns', tuple(self.columns))

  @property
  def column_names(self) -> List[str]:
    return [c.name for c in self.columns]

  @property
  def primary_key(self) -> Optional[ColumnDefinition]:
    for c in self.columns:
      if c.is_primary_key:
        return c
    return None

  def column(self, name: str) -> Optional[ColumnDefinition]:
    for c in self.columns:
      if c.name.lower() == name.lower():
        return c
    return None

  def validate(self):
    validate_schema(self)
    return self


@dataclass(frozen=True)
class ExistingColumnInfo:
  name: str
  declared_type: str
  nullable: bool
  is_primary_key: bool


def _is_compatible_default(column_type: ColumnType, value) -> bool:
  if column_type == ColumnType.BOOLEAN:
    return isinstance(value, bool)
  if isinstance(value, bool):
    return False
  if column_type == ColumnType.INTEGER:
    return isinstance(value, int)
  if column_type == ColumnType.REAL:
    return isinstance(value, int) or (isinstance(value, float) and math.isfinite(value))
  if column_type == ColumnType.TEXT:
    return isinstance(value, str)
  if column_type == ColumnType.DATETIME:
    return isinstance(value, datetime)
  if column_type == ColumnType.BLOB:
    return isinstance(value, (bytes, bytearray))
  return False


def validate_schema(schema: TableSchema):
  if not isinstance(schema.name, str) or not _IDENTIFIER.match(schema.name):
    raise SchemaValidationError(
        schema.name, 'table name is not a valid SQL identifier')

  if len(schema.columns) == 0:
    raise SchemaValidationError(schema.name, 'no columns declared')

  seen = set()
  primary_keys = []
  for c in schema.columns:
    if not isinstance(c.name, str) or not _IDENTIFIER.match(c.name):
      raise SchemaValidationError(
          schema.name, 'column name `%s` is not a valid SQL identifier' % c.name)
    if not isinstance(c.type, ColumnType):
      raise SchemaValidationError(
          schema.name, 'column `%s` has unknown type `%s`' % (c.name, c.type))

    key = c.name.lower()
    if key in seen:
      raise SchemaValidationError(
          schema.name, 'duplicate column name `%s`' % c.name)
    seen.add(key)

    if c.is_primary_key:
      primary_keys.append(c.name)

    if c.auto_increment:
      if not c.is_primary_key:
        raise SchemaValidationError(
            schema.name,
            '`auto_increment` on column `%s` requires `is_primary_key`' % c.name)
      if c.type != ColumnType.INTEGER:
        raise SchemaValidationError(
            schema.name,
            '`auto_increment` can only be used on columns of type `integer` (column `%s`)' % c.name)
      if c.has_default:
        raise SchemaValidationError(
            schema.name,
            'auto-increment column `%s` cannot declare a default value' % c.name)

    if c.has_default and not _is_compatible_default(c.type, c.default_value):
      raise SchemaValidationError(
          schema.name,
          'default value %r of column `%s` is not compatible with type `%s`'
          % (c.default_value, c.name, c.type.value))

  if len(primary_keys) > 1:
    raise SchemaValidationError(
        schema.name,
        'more than one primary key column (%s)' % ', '.join(primary_keys))


class SchemaRegistry(object):
  """Ordered set of declared table schemas, keyed by table name.

  The registry is an explicit value: build one, hand it to a
  :class:`~automigrate.runner.MigrationRunner`, and the runner processes the
  schemas in registration order.
  """

  def __init__(self, schemas: Iterable[TableSchema] = ()):
    self._schemas = {}
    self.extend(schemas)

  def register(self, schema: TableSchema) -> TableSchema:
    if schema.name in self._schemas:
      raise SchemaValidationError(schema.name, 'table is already registered')
    self._schemas[schema.name] = schema
    return schema

  def extend(self, schemas: Iterable[TableSchema]):
    for s in schemas:
      self.register(s)

  def get(self, name: str) -> Optional[TableSchema]:
    return self._schemas.get(name)

  def schemas(self) -> List[TableSchema]:
    return list(self._schemas.values())

  def __contains__(self, name):
    return name in self._schemas

  def __iter__(self) -> Iterator[TableSchema]:
    return iter(list(self._schemas.values()))

  def __len__(self):
    return len(self._schemas)

import unittest
from datetime import datetime

from automigrate.errors import SchemaValidationError
from automigrate.schema import (ColumnDefinition, ColumnType, SchemaRegistry,
                                TableSchema, validate_schema)


def _users():
  return TableSchema('users', [
      ColumnDefinition('id', ColumnType.INTEGER, is_primary_key=True, auto_increment=True),
      ColumnDefinition('name', ColumnType.TEXT, nullable=False),
  ])


class TableSchemaTestCase(unittest.TestCase):
  def test_columnsAreStoredAsTuple(self):
    schema = _users()

    assert isinstance(schema.columns, tuple)
    assert schema.column_names == ['id', 'name']

  def test_schemaIsImmutable(self):
    schema = _users()

    with self.assertRaises(AttributeError):
      schema.name = 'accounts'
    with self.assertRaises(AttributeError):
      schema.columns[0].nullable = False

  def test_columnDefaults(self):
    c = ColumnDefinition('name', ColumnType.TEXT)

    assert c.nullable == True
    assert c.unique == False
    assert c.is_primary_key == False
    assert c.auto_increment == False
    assert c.default_value is None
    assert not c.is_required

  def test_columnLookupIsCaseInsensitive(self):
    schema = _users()

    assert schema.column('NAME') is schema.columns[1]
    assert schema.column('missing') is None

  def test_primaryKey(self):
    assert _users().primary_key.name == 'id'
    assert TableSchema('t', [ColumnDefinition('a', ColumnType.TEXT)]).primary_key is None

  def test_validSchemaPasses(self):
    schema = _users()

    assert schema.validate() is schema


class SchemaValidationTestCase(unittest.TestCase):
  def _assert_invalid(self, schema, fragment):
    with self.assertRaises(SchemaValidationError) as ctx:
      validate_schema(schema)
    assert ctx.exception.table == schema.name
    assert fragment in ctx.exception.violation, ctx.exception.violation

  def test_emptyColumnList(self):
    self._assert_invalid(TableSchema('empty', []), 'no columns')

  def test_duplicateColumnName(self):
    self._assert_invalid(TableSchema('t', [
        ColumnDefinition('name', ColumnType.TEXT),
        ColumnDefinition('Name', ColumnType.TEXT),
    ]), 'duplicate column')

  def test_multiplePrimaryKeys(self):
    self._assert_invalid(TableSchema('t', [
        ColumnDefinition('a', ColumnType.INTEGER, is_primary_key=True),
        ColumnDefinition('b', ColumnType.INTEGER, is_primary_key=True),
    ]), 'more than one primary key')

  def test_autoIncrementRequiresPrimaryKey(self):
    self._assert_invalid(TableSchema('t', [
        ColumnDefinition('a', ColumnType.INTEGER, auto_increment=True),
    ]), 'requires `is_primary_key`')

  def test_autoIncrementRequiresInteger(self):
    self._assert_invalid(TableSchema('t', [
        ColumnDefinition('a', ColumnType.TEXT, is_primary_key=True, auto_increment=True),
    ]), 'type `integer`')

  def test_autoIncrementWithDefault(self):
    self._assert_invalid(TableSchema('t', [
        ColumnDefinition('a', ColumnType.INTEGER, is_primary_key=True,
                         auto_increment=True, default_value=1),
    ]), 'cannot declare a default')

  def test_incompatibleDefaults(self):
    cases = [
        (ColumnType.INTEGER, 'one'),
        (ColumnType.INTEGER, True),
        (ColumnType.REAL, '1.5'),
        (ColumnType.TEXT, 1),
        (ColumnType.BOOLEAN, 1),
        (ColumnType.DATETIME, '2020-01-01'),
        (ColumnType.BLOB, 'abc'),
    ]
    for column_type, value in cases:
      self._assert_invalid(TableSchema('t', [
          ColumnDefinition('a', column_type, default_value=value),
      ]), 'not compatible')

  def test_nonFiniteRealDefaults(self):
    for value in [float('inf'), float('-inf'), float('nan')]:
      self._assert_invalid(TableSchema('t', [
          ColumnDefinition('a', ColumnType.REAL, default_value=value),
      ]), 'not compatible')

    validate_schema(TableSchema('t', [
        ColumnDefinition('a', ColumnType.REAL, default_value=10 ** 400),
    ]))

  def test_compatibleDefaults(self):
    validate_schema(TableSchema('t', [
        ColumnDefinition('a', ColumnType.INTEGER, default_value=0),
        ColumnDefinition('b', ColumnType.REAL, default_value=1),
        ColumnDefinition('c', ColumnType.TEXT, default_value=''),
        ColumnDefinition('d', ColumnType.BOOLEAN, default_value=False),
        ColumnDefinition('e', ColumnType.DATETIME, default_value=datetime(2020, 1, 1)),
        ColumnDefinition('f', ColumnType.BLOB, default_value=b'\x00'),
    ]))

  def test_invalidIdentifiers(self):
    self._assert_invalid(TableSchema('users; DROP TABLE x', [
        ColumnDefinition('a', ColumnType.TEXT),
    ]), 'table name')
    self._assert_invalid(TableSchema('t', [
        ColumnDefinition('a b', ColumnType.TEXT),
    ]), 'column name')

  def test_unknownColumnType(self):
    self._assert_invalid(TableSchema('t', [
        ColumnDefinition('a', 'varchar'),
    ]), 'unknown type')


class SchemaRegistryTestCase(unittest.TestCase):
  def test_registrationOrderIsPreserved(self):
    registry = SchemaRegistry()
    for name in ['users', 'posts', 'comments']:
      registry.register(TableSchema(name, [ColumnDefinition('id', ColumnType.INTEGER)]))

    assert [s.name for s in registry] == ['users', 'posts', 'comments']
    assert len(registry) == 3
    assert 'posts' in registry
    assert registry.get('posts').name == 'posts'
    assert registry.get('missing') is None

  def test_duplicateRegistration(self):
    registry = SchemaRegistry([_users()])

    with self.assertRaises(SchemaValidationError):
      registry.register(_users())

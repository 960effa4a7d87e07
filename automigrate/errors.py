class MigrationError(Exception):
  def __init__(self, message, table=None, column=None, sql=None):
    super().__init__(message)
    self.table = table
    self.column = column
    self.sql = sql


class SchemaValidationError(MigrationError):
  def __init__(self, table, violation):
    super().__init__(
        'Invalid schema for table `%s`: %s' % (table, violation), table=table)
    self.violation = violation


class InspectionError(MigrationError):
  def __init__(self, table, reason, sql=None):
    super().__init__(
        'Catalog inspection failed for table `%s`: %s' % (table, reason),
        table=table, sql=sql)
    self.reason = reason


class UnsupportedMigrationError(MigrationError):
  def __init__(self, table, column, reason):
    super().__init__(
        'Cannot add column `%s` to table `%s`: %s' % (column, table, reason),
        table=table, column=column)
    self.reason = reason


class ExecutionError(MigrationError):
  def __init__(self, table, sql, cause, column=None):
    super().__init__(
        'Statement rejected for table `%s`: %s\nsql: %s' % (table, cause, sql),
        table=table, column=column, sql=sql)
    self.cause = cause

import re
from datetime import datetime, timedelta
from typing import List, Optional

_WHITESPACE = re.compile(r'\s+')


class QueryLogEntry(object):
  def __init__(self, sql: str, params=None, timestamp: datetime = None,
               duration: timedelta = None, row_count: int = None):
    self.sql = sql
    self.params = params
    self.timestamp = timestamp or datetime.now()
    self.duration = duration
    self.row_count = row_count

  @property
  def duration_ms(self) -> float:
    if self.duration is None:
      return 0.0
    return self.duration.total_seconds() * 1000

  def __str__(self):
    result = self.sql
    if self.params:
      result += ' [%s]' % ', '.join(str(p) for p in self.params)
    if self.duration is not None:
      result += ' (%.2fms)' % self.duration_ms
    return result


class QueryLog(object):
  """Bounded in-memory record of the statements a connector executed."""

  def __init__(self, max_entries: int = 100, enabled: bool = False):
    self._entries: List[QueryLogEntry] = []
    self._max_entries = max_entries
    self._enabled = enabled

  @property
  def is_enabled(self) -> bool:
    return self._enabled

  @property
  def entries(self) -> List[QueryLogEntry]:
    return list(self._entries)

  @property
  def max_entries(self) -> int:
    return self._max_entries

  @max_entries.setter
  def max_entries(self, value: int):
    if value < 1:
      raise ValueError('`max_entries` must be greater than 0')
    self._max_entries = value
    self._trim()

  @property
  def count(self) -> int:
    return len(self._entries)

  @property
  def total_duration(self) -> timedelta:
    total = timedelta()
    for e in self._entries:
      if e.duration is not None:
        total += e.duration
    return total

  def enable(self):
    self._enabled = True

  def disable(self):
    self._enabled = False

  def toggle(self) -> bool:
    self._enabled = not self._enabled
    return self._enabled

  def log(self, sql: str, params=None, duration: timedelta = None,
          row_count: int = None) -> Optional[QueryLogEntry]:
    if not self._enabled:
      return None

    entry = QueryLogEntry(
        _WHITESPACE.sub(' ', sql.strip()),
        params=list(params) if params else None,
        duration=duration,
        row_count=row_count
    )
    self._entries.append(entry)
    self._trim()
    return entry

  def clear(self):
    self._entries.clear()

  def last(self, count: int = 10) -> List[QueryLogEntry]:
    if count <= 0:
      return []
    return self._entries[-count:]

  def format(self) -> str:
    lines = ['Query Log (%d queries, %s)' % (
        len(self._entries), 'enabled' if self._enabled else 'disabled')]
    lines.append('-' * 60)
    if len(self._entries) == 0:
      lines.append('  No queries logged.')
      return '\n'.join(lines)

    for i, e in enumerate(self._entries):
      lines.append('  %d. %s' % (i + 1, e.sql))
      if e.params:
        lines.append('     Parameters: %s' % e.params)
      meta = []
      if e.duration is not None:
        meta.append('%.2fms' % e.duration_ms)
      if e.row_count is not None:
        meta.append('%d rows' % e.row_count)
      meta.append(e.timestamp.strftime('%H:%M:%S'))
      lines.append('     %s' % ' - '.join(meta))

    lines.append('-' * 60)
    lines.append('  Total: %d queries in %dms' % (
        len(self._entries), int(self.total_duration.total_seconds() * 1000)))
    return '\n'.join(lines)

  def _trim(self):
    overflow = len(self._entries) - self._max_entries
    if overflow > 0:
      del self._entries[:overflow]

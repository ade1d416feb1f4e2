"""Chart version resolution, including SNAPSHOT timestamp substitution."""

from datetime import datetime
from typing import Callable, Optional, Union

from .errors import ConfigurationError

SNAPSHOT_SUFFIX = "-SNAPSHOT"
DEFAULT_TIMESTAMP_FORMAT = "yyyyMMddHHmmss"

# Characters reserved by date patterns; other letters must be quoted.
_RESERVED_CHARS = "#{}"
# Optional section markers; every field is available when formatting.
_OPTIONAL_CHARS = "[]"

# strftime directives accepted in a %-style pattern
_STRFTIME_DIRECTIVES = "YymdHMSfjaAbBpIe%"


def _padded(getter: Callable[[datetime], int], width: int) -> Callable[[datetime], str]:
    return lambda moment: str(getter(moment)).zfill(width)


def _year(count: int) -> Callable[[datetime], str]:
    if count == 2:
        return lambda moment: f"{moment.year % 100:02d}"
    return _padded(lambda moment: moment.year, count)


def _month(count: int) -> Callable[[datetime], str]:
    if count == 3:
        return lambda moment: moment.strftime("%b")
    if count >= 4:
        return lambda moment: moment.strftime("%B")
    return _padded(lambda moment: moment.month, count)


def _weekday(count: int) -> Callable[[datetime], str]:
    if count >= 4:
        return lambda moment: moment.strftime("%A")
    return lambda moment: moment.strftime("%a")


def _fraction(count: int) -> Callable[[datetime], str]:
    return lambda moment: f"{moment.microsecond:06d}".ljust(count, "0")[:count]


def _hour12(moment: datetime) -> int:
    return moment.hour % 12 or 12


_FIELDS = {
    "y": (4, _year),
    "u": (4, _year),
    "M": (4, _month),
    "L": (4, _month),
    "d": (2, lambda count: _padded(lambda moment: moment.day, count)),
    "D": (3, lambda count: _padded(lambda moment: moment.timetuple().tm_yday, count)),
    "H": (2, lambda count: _padded(lambda moment: moment.hour, count)),
    "h": (2, lambda count: _padded(_hour12, count)),
    "m": (2, lambda count: _padded(lambda moment: moment.minute, count)),
    "s": (2, lambda count: _padded(lambda moment: moment.second, count)),
    "S": (9, _fraction),
    "a": (1, lambda count: lambda moment: "AM" if moment.hour < 12 else "PM"),
    "E": (4, _weekday),
}


class TimestampFormat:
    """
    Compiled timestamp pattern.

    Accepts the date pattern letters build tools use for version timestamps
    (e.g. ``yyyyMMddHHmmss``). A pattern containing ``%`` is a ``strftime``
    format; its directives are checked up front and bare letters are not
    allowed next to them.

    Raises:
        ConfigurationError: If the pattern is empty or malformed
    """

    def __init__(self, pattern: str):
        if not pattern:
            raise ConfigurationError("Timestamp format must not be empty")
        self.pattern = pattern
        self._strftime = "%" in pattern
        if self._strftime:
            self._check_strftime(pattern)
            self._parts = []
        else:
            self._parts = self._compile(pattern)

    @staticmethod
    def _check_strftime(pattern: str):
        i = 0
        while i < len(pattern):
            char = pattern[i]
            if char == "%":
                if i + 1 >= len(pattern):
                    raise ConfigurationError(
                        f"Invalid timestamp format '{pattern}': trailing '%'"
                    )
                directive = pattern[i + 1]
                if directive not in _STRFTIME_DIRECTIVES:
                    raise ConfigurationError(
                        f"Invalid timestamp format '{pattern}': unknown directive '%{directive}'"
                    )
                i += 2
                continue
            if char.isalpha():
                raise ConfigurationError(
                    f"Invalid timestamp format '{pattern}': pattern letter '{char}' mixed with % directives"
                )
            i += 1

    @staticmethod
    def _quoted(pattern: str, start: int) -> tuple:
        """Read a quoted literal starting at `start`; '' inside it is a single quote."""
        literal = []
        i = start + 1
        while i < len(pattern):
            if pattern[i] == "'":
                if i + 1 < len(pattern) and pattern[i + 1] == "'":
                    literal.append("'")
                    i += 2
                    continue
                return "".join(literal), i + 1
            literal.append(pattern[i])
            i += 1
        raise ConfigurationError(
            f"Invalid timestamp format '{pattern}': unterminated quote at position {start}"
        )

    @classmethod
    def _compile(cls, pattern: str) -> list:
        parts = []
        depth = 0
        i = 0
        while i < len(pattern):
            char = pattern[i]

            if char == "'":
                # '' outside a literal is an escaped single quote
                if i + 1 < len(pattern) and pattern[i + 1] == "'":
                    literal, i = "'", i + 2
                else:
                    literal, i = cls._quoted(pattern, i)
                parts.append(lambda moment, text=literal: text)
                continue

            if char.isalpha():
                count = 1
                while i + count < len(pattern) and pattern[i + count] == char:
                    count += 1
                if char not in _FIELDS:
                    raise ConfigurationError(
                        f"Invalid timestamp format '{pattern}': unknown pattern letter '{char}'"
                    )
                max_count, factory = _FIELDS[char]
                if count > max_count:
                    raise ConfigurationError(
                        f"Invalid timestamp format '{pattern}': too many pattern letters '{char * count}'"
                    )
                parts.append(factory(count))
                i += count
                continue

            if char in _OPTIONAL_CHARS:
                depth += 1 if char == "[" else -1
                if depth < 0:
                    raise ConfigurationError(
                        f"Invalid timestamp format '{pattern}': unbalanced ']' at position {i}"
                    )
                i += 1
                continue

            if char in _RESERVED_CHARS:
                raise ConfigurationError(
                    f"Invalid timestamp format '{pattern}': reserved character '{char}'"
                )

            parts.append(lambda moment, text=char: text)
            i += 1

        if depth:
            raise ConfigurationError(f"Invalid timestamp format '{pattern}': unclosed '['")
        return parts

    def format(self, moment: datetime) -> str:
        """Format a datetime with this pattern."""
        if self._strftime:
            return moment.strftime(self.pattern)
        return "".join(part(moment) for part in self._parts)

    def __repr__(self) -> str:
        return f"TimestampFormat({self.pattern!r})"


def is_snapshot(version: Optional[str]) -> bool:
    """Check if a version string carries the case-sensitive -SNAPSHOT suffix."""
    return bool(version) and version.endswith(SNAPSHOT_SUFFIX)


def resolve_chart_version(
    explicit_version: Optional[str],
    chart_metadata_version: Optional[str] = None,
    timestamp_on_snapshot: bool = False,
    timestamp_format: Union[str, TimestampFormat] = DEFAULT_TIMESTAMP_FORMAT,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """
    Compute the effective chart version.

    The explicit version wins over the chart metadata version. When neither is
    set, None is returned and helm falls back to Chart.yaml.

    With timestamp_on_snapshot, a version ending in "-SNAPSHOT" has the word
    SNAPSHOT replaced by `now` formatted with timestamp_format, e.g.
    "1.2.0-SNAPSHOT" -> "1.2.0-20240102030405".

    Args:
        explicit_version: Configured chart version
        chart_metadata_version: Version read from Chart.yaml
        timestamp_on_snapshot: Enable SNAPSHOT timestamp substitution
        timestamp_format: Pattern string or compiled TimestampFormat
        now: Invocation time (default: local wall-clock time)

    Returns:
        Resolved version string, or None if no version is configured

    Raises:
        ConfigurationError: If timestamp_format is malformed
    """
    version = explicit_version or chart_metadata_version
    if not version:
        return None

    if timestamp_on_snapshot and is_snapshot(version):
        if not isinstance(timestamp_format, TimestampFormat):
            timestamp_format = TimestampFormat(timestamp_format)
        moment = now if now is not None else datetime.now()
        # only the trailing SNAPSHOT is replaced, the "-" separator stays
        version = version[:-len("SNAPSHOT")] + timestamp_format.format(moment)

    return version

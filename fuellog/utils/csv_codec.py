"""
CSV codec for refuel records.

One record per line, no header. The column layout depends on the schema
version the file was written with:

    v5:   datetime,odometer,volume,full_tank,hide_from_calc,cost,notes[,efficiency]
    v<5:  datetime,odometer,volume,full_tank,hide_from_calc[,efficiency]

The trailing efficiency column is informational only; it is ignored on
input and recalculated by the mileage engine. Splitting is literal on ","
so notes cannot contain commas; on output they are replaced by spaces.
"""

import io
import logging
import math
from datetime import datetime
from typing import IO, Iterable, Iterator, Tuple, Union

from ..calculations.constants import MAX_COST, MAX_ODOMETER, MAX_VOLUME
from ..entities import RefuelRecord, check_range
from ..exceptions import MalformedLineError

logger = logging.getLogger(__name__)

DATETIME_FORMAT = "%m/%d/%Y %H:%M"
DATE_FORMAT = "%m/%d/%Y"

V5_FIELD_COUNTS = (7, 8)
LEGACY_FIELD_COUNTS = (5, 6)


def parse_datetime(value: str, line_number: int = None) -> datetime:
    """Parse MM/dd/yyyy HH:mm, falling back to MM/dd/yyyy (midnight)."""
    text = value.strip()
    for fmt in (DATETIME_FORMAT, DATE_FORMAT):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise MalformedLineError(line_number, f"Invalid date/time {value!r}", field="datetime")


def parse_bool(value: str, field_name: str, line_number: int = None) -> bool:
    text = value.strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise MalformedLineError(line_number, f"Invalid boolean {value!r}", field=field_name)


def parse_decimal(value: str, field_name: str, line_number: int = None) -> float:
    """Parse a decimal that may use either "." or "," as separator."""
    try:
        number = float(value.strip().replace(",", "."))
    except ValueError:
        raise MalformedLineError(line_number, f"Invalid number {value!r}", field=field_name)
    if not math.isfinite(number):
        raise MalformedLineError(line_number, f"Invalid number {value!r}", field=field_name)
    return number


def parse_odometer(value: str, line_number: int = None) -> int:
    try:
        odometer = int(value.strip())
    except ValueError:
        raise MalformedLineError(line_number, f"Invalid odometer {value!r}", field="odometer")
    return check_range("odometer", odometer, 0, MAX_ODOMETER, line_number)


def parse_line(line: str, line_number: int = None) -> RefuelRecord:
    """
    Parse one CSV line into a RefuelRecord.

    Args:
        line: The line, with or without its terminator
        line_number: 1-based position in the source, reported in errors

    Raises:
        MalformedLineError: wrong field count or unparseable field
        OutOfRangeError: a numeric field exceeds its cap

    Examples:
        >>> r = parse_line("06/15/2014 08:30,1500,10.5,true,false")
        >>> r.odometer, r.volume, r.cost, r.notes
        (1500, 10.5, 0.0, '')
    """
    values = line.rstrip("\r\n").split(",")
    count = len(values)

    if count not in V5_FIELD_COUNTS and count not in LEGACY_FIELD_COUNTS:
        raise MalformedLineError(line_number, f"Invalid CSV field count {count}")

    timestamp = parse_datetime(values[0], line_number)
    odometer = parse_odometer(values[1], line_number)
    volume = check_range(
        "volume", parse_decimal(values[2], "volume", line_number), 0.0, MAX_VOLUME,
        line_number, include_minimum=False,
    )
    full_tank = parse_bool(values[3], "full_tank", line_number)
    hide_from_calc = parse_bool(values[4], "hide_from_calc", line_number)

    cost = 0.0
    notes = ""
    if count in V5_FIELD_COUNTS:
        cost = check_range(
            "cost", parse_decimal(values[5], "cost", line_number), 0.0, MAX_COST, line_number
        )
        notes = values[6]

    record = RefuelRecord(
        timestamp=timestamp,
        odometer=odometer,
        volume=volume,
        cost=cost,
        full_tank=full_tank,
        hide_from_calc=hide_from_calc,
        notes=notes,
    )
    record.validate(line_number)
    return record


def format_line(record: RefuelRecord, include_efficiency: bool = True) -> str:
    """
    Format a record as a v5 CSV line (no terminator).

    Examples:
        >>> format_line(RefuelRecord(timestamp=datetime(2014, 6, 15, 8, 30), odometer=1500, volume=10.5))
        '06/15/2014 08:30,1500,10.500,false,false,0.00,'
    """
    notes = (record.notes or "").replace(",", " ").replace("\r", " ").replace("\n", " ")
    fields = [
        record.timestamp.strftime(DATETIME_FORMAT),
        str(record.odometer),
        f"{record.volume:.3f}",
        "true" if record.full_tank else "false",
        "true" if record.hide_from_calc else "false",
        f"{record.cost:.2f}",
        notes,
    ]
    if include_efficiency and record.segment is not None:
        fields.append(record.segment.efficiency_string)
    return ",".join(fields)


def _text_stream(source: Union[IO, str, bytes]) -> IO:
    if isinstance(source, bytes):
        return io.StringIO(source.decode("utf-8"))
    if isinstance(source, str):
        return io.StringIO(source)
    if isinstance(source, io.TextIOBase):
        return source
    if hasattr(source, "mode") and "b" not in getattr(source, "mode", ""):
        return source
    return io.TextIOWrapper(source, encoding="utf-8", newline="")


def read_records(source: Union[IO, str, bytes]) -> Iterator[Tuple[int, RefuelRecord]]:
    """
    Yield (line_number, record) for every non-blank line of a CSV source.

    Accepts text, bytes, or a text/binary stream. Parsing stops at the
    first bad line by raising its error.
    """
    stream = _text_stream(source)
    for line_number, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        yield line_number, parse_line(line, line_number)


def write_records(records: Iterable[RefuelRecord], sink: IO, include_efficiency: bool = True) -> int:
    """
    Write records to a text or binary sink, one line each.

    Returns:
        Number of lines written
    """
    binary = not isinstance(sink, io.TextIOBase) and "b" in getattr(sink, "mode", "b")
    count = 0
    for record in records:
        line = format_line(record, include_efficiency) + "\n"
        sink.write(line.encode("utf-8") if binary else line)
        count += 1
    logger.debug(f"Wrote {count} CSV lines")
    return count

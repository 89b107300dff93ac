"""
Assembly of invoice timestamps from partial date/time captures.
"""

from datetime import datetime
from typing import Mapping, Optional

from .config import DATE_OPTIONAL_GROUPS, DATE_REQUIRED_GROUPS
from .errors import DateFieldMissing, InvalidCalendarDate
from .numbers import parse_integer


def assemble_date(groups: Mapping[str, Optional[str]]) -> datetime:
    """
    Build a timestamp from the named groups of a date match.

    ``year``, ``month`` and ``day`` are required; ``hour``, ``minute`` and
    ``second`` default to 0 each when absent.

    Args:
        groups: Named groups of the match, e.g. ``match.groupdict()``

    Returns:
        The assembled timestamp

    Raises:
        DateFieldMissing: If a required component is absent
        NumberFormatError: If a component is not an integer
        InvalidCalendarDate: If the components do not denote a real timestamp
    """
    components: dict[str, int] = {}

    for name in DATE_REQUIRED_GROUPS:
        raw = groups.get(name)
        if raw is None:
            raise DateFieldMissing(name)
        components[name] = parse_integer(raw, name)

    for name in DATE_OPTIONAL_GROUPS:
        raw = groups.get(name)
        components[name] = parse_integer(raw, name) if raw is not None else 0

    try:
        return datetime(**components)
    except (ValueError, OverflowError) as e:
        raise InvalidCalendarDate(components, str(e)) from e

"""
DiffEngine - field level differences between staging and working copy.

Differences are reported per field as Comparison records and rendered as a
plain text table whose columns grow with their content.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..definitions import REMINDER_KEY, VERSION_SECTION, parse_ini_file
from ..errors import DefinitionError
from .models import Comparison, ComparisonMap, MISSING_VALUE, TuningObjectStatus


logger = logging.getLogger(__name__)

# minimum column widths: parameter, working area, staging area
MIN_WIDTHS = (12, 26, 26)
REMINDER_HINT = "diff need to be done"


def normalize_value(value: Optional[str]) -> str:
    """
    Canonical form of a parameter value for comparison.

    Surrounding quotes are dropped, tabs count as blanks and runs of
    whitespace collapse into one blank.
    """
    if value is None:
        return ""
    value = value.strip()
    while len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        value = value[1:-1].strip()
    return " ".join(value.split())


def values_match(staging_value: Optional[str], working_value: Optional[str]) -> bool:
    return normalize_value(staging_value) == normalize_value(working_value)


def compare_fields(
    status: TuningObjectStatus,
    staging: Dict[str, str],
    working: Dict[str, str],
) -> Tuple[bool, ComparisonMap]:
    """
    Compare the staging copy of an object with its working copy.

    Returns:
        (all_match, {field: Comparison}) - only differing fields are listed
    """
    comparisons: ComparisonMap = {}

    if status.is_deleted:
        for key, working_value in working.items():
            comparisons[key] = Comparison(key, working_value, MISSING_VALUE)
        return False, comparisons

    if status.is_new:
        for key, staging_value in staging.items():
            comparisons[key] = Comparison(key, MISSING_VALUE, staging_value)
        return False, comparisons

    for key, working_value in working.items():
        if key in staging:
            continue
        comparisons[key] = Comparison(key, working_value, MISSING_VALUE)

    for key, staging_value in staging.items():
        if key not in working:
            comparisons[key] = Comparison(key, MISSING_VALUE, normalize_value(staging_value))
            continue
        if values_match(staging_value, working[key]):
            continue
        comparisons[key] = Comparison(
            key,
            normalize_value(working[key]) or MISSING_VALUE,
            normalize_value(staging_value),
        )

    return not comparisons, comparisons


def load_compare_set(status: TuningObjectStatus, path, selector: str) -> Dict[str, str]:
    """
    Parameters of one copy of an object.

    The version section is left out; the solution definition is reduced to
    the architecture section of this host.

    Raises:
        DefinitionError: the file cannot be read
    """
    params = parse_ini_file(path).parameters
    if status.is_solutions:
        return params.flatten(only=selector)
    return params.flatten(exclude=(VERSION_SECTION,))


def sorted_fields(comparisons: ComparisonMap) -> List[str]:
    """Field names sorted, the reminder always last."""
    keys = sorted(k for k in comparisons if k != REMINDER_KEY)
    if REMINDER_KEY in comparisons:
        keys.append(REMINDER_KEY)
    return keys


@dataclass
class DiffTable:
    """Rendered comparison table of one object."""
    widths: Tuple[int, int, int]
    header: List[Tuple[str, str, str]]
    rows: List[Tuple[str, str, str]]

    def format_row(self, cells: Tuple[str, str, str]) -> str:
        w1, w2, w3 = self.widths
        return f" {cells[0]:<{w1}} | {cells[1]:<{w2}} | {cells[2]:<{w3}} "

    def dash_line(self) -> str:
        return "-" * (sum(self.widths) + 8)

    def plus_line(self) -> str:
        w1, w2, _ = self.widths
        line = list(self.dash_line())
        for pos in (w1 + 2, w1 + w2 + 5):
            line[pos] = "+"
        return "".join(line)

    def lines(self) -> List[str]:
        out = [self.dash_line()]
        out.extend(self.format_row(cells) for cells in self.header)
        out.append(self.plus_line())
        out.extend(self.format_row(cells) for cells in self.rows)
        out.append(self.dash_line())
        return out


def build_table(
    name: str,
    working_head: str,
    staging_head: str,
    comparisons: ComparisonMap,
) -> DiffTable:
    """
    Lay out the comparison table.

    Every column is as wide as its longest cell, but never narrower than
    MIN_WIDTHS.
    """
    header = [
        (name, working_head, staging_head),
        ("", "(working area)", "(staging area)"),
    ]
    rows = []
    for key in sorted_fields(comparisons):
        comparison = comparisons[key]
        if key == REMINDER_KEY:
            rows.append((key, REMINDER_HINT, ""))
        else:
            rows.append((
                key,
                comparison.working_value.replace("\t", " "),
                comparison.staging_value.replace("\t", " "),
            ))

    widths = list(MIN_WIDTHS)
    for cells in header + rows:
        for col, cell in enumerate(cells):
            widths[col] = max(widths[col], len(cell))

    return DiffTable(widths=tuple(widths), header=header, rows=rows)


def version_head(version: str, date: str) -> str:
    return f"Version {version} ({date}) "


def diff_object(status: TuningObjectStatus, selector: str) -> Optional[DiffTable]:
    """
    Diff one staged object against its working copy.

    Returns:
        The table, or None if there is nothing to show or a file could not
        be parsed (logged).
    """
    try:
        staging = load_compare_set(status, status.files.staging, selector)
    except DefinitionError as e:
        logger.error("Problems while parsing the staging definition file of '%s': %s", status.identifier, e)
        return None

    working: Dict[str, str] = {}
    working_head = version_head("-", "-")
    if not status.is_new:
        try:
            working = load_compare_set(status, status.files.working, selector)
            ini = parse_ini_file(status.files.working)
        except DefinitionError as e:
            logger.error("Problems while parsing the working definition file of '%s': %s", status.identifier, e)
            return None
        working_head = version_head(ini.version_entry("version"), ini.version_entry("date"))

    all_match, comparisons = compare_fields(status, staging, working)
    if all_match:
        logger.info("no differences for '%s' between staging and working area", status.identifier)
        return None

    return build_table(
        status.identifier,
        working_head,
        version_head(status.version, status.date),
        comparisons,
    )

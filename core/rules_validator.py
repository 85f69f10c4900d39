"""
Utility functions to validate rule tables for duplications and inconsistencies.
"""

import re
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from core.families import get_browser_short_name, get_os_short_name
from models.records import DeviceType
from models.rule import RuleTable
from rules.rules_loader import RuleTableError, list_rule_tables, load_rule_table

# Tables whose names must resolve to a short code
CATALOGUE_LOOKUPS = {
    "oss.yml": get_os_short_name,
    "client/browsers.yml": get_browser_short_name,
}


def load_all_tables(rules_dir: Optional[str] = None) -> Dict[str, RuleTable]:
    """Load every rule table below rules_dir, keyed by fixture path."""
    return {fixture: load_rule_table(fixture, rules_dir) for fixture in list_rule_tables(rules_dir)}


def _walk(table: RuleTable):
    for rule in table:
        yield rule
        yield from _walk(rule.models)


def detect_duplicate_regexes(table: RuleTable) -> Dict[str, int]:
    """
    Detect top-level rules sharing the same regex. The later copy can never match.

    Returns:
        Dictionary with duplicated regexes as keys and their number of occurrences
    """
    counts = defaultdict(int)
    for rule in table:
        counts[rule.regex] += 1
    return {regex: count for regex, count in counts.items() if count > 1}


def detect_invalid_regexes(table: RuleTable) -> List[Tuple[str, str]]:
    """Return (regex, error) for every rule or sub-rule whose regex does not compile."""
    invalid = []
    for rule in _walk(table):
        try:
            re.compile(rule.regex, re.IGNORECASE)
        except re.error as e:
            invalid.append((rule.regex, str(e)))
    return invalid


def detect_uncatalogued_names(fixture: str, table: RuleTable) -> List[str]:
    """Return literal names of a table that are missing from its catalogue."""
    lookup = CATALOGUE_LOOKUPS.get(fixture)
    if lookup is None:
        return []
    return sorted({
        rule.name for rule in table
        if rule.name and '$' not in rule.name and lookup(rule.name) is None
    })


def detect_unknown_device_types(table: RuleTable) -> List[str]:
    """Return device labels that do not map to a DeviceType."""
    return sorted({
        rule.device for rule in _walk(table)
        if rule.device and DeviceType.from_label(rule.device) is None
    })


def validate_tables(tables: Dict[str, RuleTable]) -> Dict[str, Dict[str, object]]:
    """
    Run every check over every table.

    Returns:
        Dictionary keyed by fixture with the non-empty findings of each check
    """
    report: Dict[str, Dict[str, object]] = {}
    for fixture, table in tables.items():
        findings = {
            'duplicate_regexes': detect_duplicate_regexes(table),
            'invalid_regexes': detect_invalid_regexes(table),
            'uncatalogued_names': detect_uncatalogued_names(fixture, table),
            'unknown_device_types': detect_unknown_device_types(table),
        }
        findings = {check: found for check, found in findings.items() if found}
        if findings:
            report[fixture] = findings
    return report


def print_validation_report(tables: Dict[str, RuleTable], verbose: bool = True) -> bool:
    """
    Print a validation report of the rule tables.

    Returns:
        True when no problems were found
    """
    print("\n" + "="*70)
    print("RULE TABLES VALIDATION REPORT")
    print("="*70)

    total_rules = sum(len(table) for table in tables.values())
    print(f"\nTotal Tables: {len(tables)}")
    print(f"Total Rules: {total_rules}")

    report = validate_tables(tables)
    for fixture in sorted(tables):
        findings = report.get(fixture)
        if not findings:
            print(f"\n✓ {fixture} ({len(tables[fixture])} rules)")
            continue

        print(f"\n⚠ {fixture} ({len(tables[fixture])} rules)")
        for check, found in findings.items():
            print(f"  {check}: {len(found)}")
            if verbose:
                items = found.items() if isinstance(found, dict) else found
                for item in items:
                    print(f"    - {item}")

    print("\n" + "="*70)
    return not report


if __name__ == "__main__":
    import sys
    import argparse

    parser = argparse.ArgumentParser(
        description="Validate rule tables for duplications and inconsistencies",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check the bundled rule tables
  python -m core.rules_validator

  # Check a custom rules directory without listing every finding
  python -m core.rules_validator --rules-dir /path/to/rules --no-verbose
        """
    )

    parser.add_argument(
        '--rules-dir',
        default=None,
        help='Directory with the rule tables (default: bundled rules)'
    )

    parser.add_argument(
        '--no-verbose',
        action='store_false',
        dest='verbose',
        default=True,
        help='Do not show verbose details'
    )

    args = parser.parse_args()

    try:
        tables = load_all_tables(args.rules_dir)
    except RuleTableError as e:
        print(f"Error: {e}")
        sys.exit(1)

    sys.exit(0 if print_validation_report(tables, verbose=args.verbose) else 1)

import os
import logging
import yaml
from typing import Any, Dict, List, Optional
from models.rule import Rule, RuleTable

logger = logging.getLogger(__name__)

# Bundled rule tables live next to this module
RULES_DIR = os.path.dirname(os.path.abspath(__file__))

# Keys with a dedicated Rule field; everything else goes to Rule.metadata
_RULE_FIELDS = ("regex", "name", "version", "device", "model", "engine", "models", "brand")


class RuleTableError(Exception):
    """Raised when a rule table is missing or malformed."""


def rule_from_dict(data: Any, source: str, brand: Optional[str] = None) -> Rule:
    """Build a Rule (and its nested model rules) from one YAML entry."""
    if not isinstance(data, dict):
        raise RuleTableError(f"{source}: expected a mapping per rule, got {type(data).__name__}")

    regex = data.get("regex")
    if not isinstance(regex, str) or not regex:
        raise RuleTableError(f"{source}: rule without a regex: {data}")

    raw_models = data.get("models") or []
    if not isinstance(raw_models, list):
        raise RuleTableError(f"{source}: 'models' must be a list in rule {regex!r}")

    engine = data.get("engine")
    if engine is not None and not isinstance(engine, dict):
        raise RuleTableError(f"{source}: 'engine' must be a mapping in rule {regex!r}")

    return Rule(
        regex=regex,
        name=_as_template(data.get("name")),
        version=_as_template(data.get("version")),
        brand=brand if brand is not None else _as_template(data.get("brand")),
        device=_as_template(data.get("device")),
        model=_as_template(data.get("model")),
        engine=engine,
        metadata={k: v for k, v in data.items() if k not in _RULE_FIELDS},
        models=tuple(rule_from_dict(m, source) for m in raw_models),
    )


def build_rule_table(data: Any, source: str) -> RuleTable:
    """
    Turn parsed YAML into an ordered rule table.

    Lists are used as-is. Mappings (device tables) are keyed by brand and
    keep their document order.
    """
    if isinstance(data, list):
        return tuple(rule_from_dict(item, source) for item in data)
    if isinstance(data, dict):
        return tuple(rule_from_dict(item, source, brand=str(brand)) for brand, item in data.items())
    raise RuleTableError(f"{source}: expected a list or mapping of rules, got {type(data).__name__}")


def load_rule_table(fixture: str, rules_dir: Optional[str] = None) -> RuleTable:
    """
    Loads one rule table, e.g. 'client/browsers.yml'.
    """
    filepath = os.path.join(rules_dir or RULES_DIR, fixture)
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise RuleTableError(f"Rule table not found: {filepath}") from e
    except yaml.YAMLError as e:
        raise RuleTableError(f"Invalid YAML in {filepath}: {e}") from e

    table = build_rule_table(data, fixture)
    logger.debug(f"Loaded {len(table)} rules from {fixture}")
    return table


def list_rule_tables(rules_dir: Optional[str] = None) -> List[str]:
    """Return every .yml/.yaml table below rules_dir, relative to it."""
    base = rules_dir or RULES_DIR
    fixtures: List[str] = []
    for root, _dirs, files in os.walk(base):
        for filename in files:
            if filename.endswith(".yml") or filename.endswith(".yaml"):
                fixtures.append(os.path.relpath(os.path.join(root, filename), base).replace(os.sep, "/"))
    return sorted(fixtures)


def _as_template(value: Any) -> Optional[str]:
    # YAML turns bare versions like 10 or 8.1 into numbers
    if value is None:
        return None
    return str(value)

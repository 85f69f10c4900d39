from typing import Any, Dict, Optional
import logging
from core.cache import CacheInterface
from core.families import get_browser_short_name
from core.parser_registry import ParserRegistry
from core.version_utils import parse_version, version_compare
from models.records import ClientRecord, UNKNOWN
from models.rule import RuleTable
from parsers.base import RuleTableMatcher

logger = logging.getLogger(__name__)


def build_engine(engine: Optional[Dict[str, Any]], version: str) -> str:
    """
    Pick the rendering engine for a browser version.

    Example rule:
        engine:
          default: 'WebKit'
          versions:
            28: 'Blink'

    Chrome 27 -> WebKit, Chrome 28+ -> Blink. Unparsable versions get the default.
    """
    if not engine:
        return UNKNOWN

    result = engine.get("default") or UNKNOWN
    versions = engine.get("versions") or {}
    for min_version in sorted(versions, key=lambda v: parse_version(str(v)) or ()):
        comparison = version_compare(version, str(min_version))
        if comparison is not None and comparison >= 0:
            result = versions[min_version]
    return result


@ParserRegistry.register("browser", kind="client")
class BrowserParser:
    fixture = "client/browsers.yml"

    def __init__(self, cache: Optional[CacheInterface] = None, rules_dir: Optional[str] = None, rules: Optional[RuleTable] = None):
        self.matcher = RuleTableMatcher(self.fixture, rules=rules, cache=cache, rules_dir=rules_dir)

    def parse(self, user_agent: str) -> Optional[ClientRecord]:
        found = self.matcher.match(user_agent)
        if found is None:
            return None

        name = found.name
        short_name = get_browser_short_name(name)
        if short_name is None:
            logger.warning(f"Browser '{name}' is not in the browser catalogue")
            short_name = UNKNOWN

        version = found.version
        logger.debug(f"BrowserParser matched {name} {version}")
        return ClientRecord(
            type=self.name,
            name=name or UNKNOWN,
            short_name=short_name,
            version=version,
            engine=build_engine(found.rule.engine, version),
        )

"""Device parsers: HbbTV televisions, game consoles and mobile devices.

Device tables are keyed by brand; each brand rule may refine the model and
device type through its nested 'models' rules.
"""
from dataclasses import replace
from typing import Optional
import logging
from core.cache import CacheInterface
from core.parser_registry import ParserRegistry
from models.records import DeviceRecord, DeviceType, UNKNOWN
from models.rule import RuleTable
from parsers.base import RuleMatch, RuleTableMatcher, compile_pattern

logger = logging.getLogger(__name__)

HBBTV_PATTERN = compile_pattern(r'HbbTV/([1-9]{1}(?:\.[0-9]{1}){1,2})')


def parse_device(found: RuleMatch) -> DeviceRecord:
    device_type = DeviceType.from_label(found.device)
    if found.device and device_type is None:
        logger.warning(f"Unknown device type '{found.device}' for brand {found.rule.brand}")

    return DeviceRecord(
        type=device_type,
        brand=found.rule.brand or UNKNOWN,
        model=found.model or UNKNOWN,
    )


@ParserRegistry.register("hbbtv", kind="device")
class HbbTvParser:
    fixture = "device/televisions.yml"

    def __init__(self, cache: Optional[CacheInterface] = None, rules_dir: Optional[str] = None, rules: Optional[RuleTable] = None):
        self.matcher = RuleTableMatcher(self.fixture, rules=rules, cache=cache, rules_dir=rules_dir)

    @staticmethod
    def hbbtv_version(user_agent: str) -> Optional[str]:
        match = HBBTV_PATTERN.search(user_agent or '')
        return match.group(1) if match else None

    def parse(self, user_agent: str) -> Optional[DeviceRecord]:
        """Every HbbTV user agent is a TV, even when no brand rule matches."""
        if self.hbbtv_version(user_agent) is None:
            return None

        found = self.matcher.match(user_agent)
        if found is None:
            return DeviceRecord(type=DeviceType.TV)
        return replace(parse_device(found), type=DeviceType.TV)


@ParserRegistry.register("console", kind="device")
class ConsoleParser:
    fixture = "device/consoles.yml"

    def __init__(self, cache: Optional[CacheInterface] = None, rules_dir: Optional[str] = None, rules: Optional[RuleTable] = None):
        self.matcher = RuleTableMatcher(self.fixture, rules=rules, cache=cache, rules_dir=rules_dir)

    def parse(self, user_agent: str) -> Optional[DeviceRecord]:
        if not self.matcher.pre_match_overall(user_agent):
            return None

        found = self.matcher.match(user_agent)
        return parse_device(found) if found else None


@ParserRegistry.register("mobile", kind="device")
class MobileParser:
    fixture = "device/mobiles.yml"

    def __init__(self, cache: Optional[CacheInterface] = None, rules_dir: Optional[str] = None, rules: Optional[RuleTable] = None):
        self.matcher = RuleTableMatcher(self.fixture, rules=rules, cache=cache, rules_dir=rules_dir)

    def parse(self, user_agent: str) -> Optional[DeviceRecord]:
        if not self.matcher.pre_match_overall(user_agent):
            return None

        found = self.matcher.match(user_agent)
        return parse_device(found) if found else None

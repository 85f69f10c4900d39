from typing import Optional
import logging
from core.cache import CacheInterface
from core.families import get_os_short_name
from models.records import OsRecord, UNKNOWN
from models.rule import RuleTable
from parsers.base import RuleTableMatcher

logger = logging.getLogger(__name__)


class OperatingSystemParser:
    fixture = "oss.yml"

    def __init__(
        self,
        cache: Optional[CacheInterface] = None,
        rules_dir: Optional[str] = None,
        rules: Optional[RuleTable] = None,
    ):
        self.matcher = RuleTableMatcher(self.fixture, rules=rules, cache=cache, rules_dir=rules_dir)

    def parse(self, user_agent: str) -> OsRecord:
        found = self.matcher.match(user_agent)
        if found is None:
            return OsRecord()

        name = found.name
        short_name = get_os_short_name(name)
        if short_name is None:
            logger.warning(f"Operating system '{name}' is not in the OS catalogue")
            short_name = UNKNOWN

        # A matched OS without a version keeps an empty version, not UNKNOWN
        return OsRecord(name=name or UNKNOWN, short_name=short_name, version=found.version)

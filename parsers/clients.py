"""Generic client parsers: feed readers, mobile apps, media players and PIMs.

They differ only in their rule table and the client type they report.
"""
from typing import Optional
import logging
from core.cache import CacheInterface
from core.parser_registry import ParserRegistry
from models.records import ClientRecord, UNKNOWN
from models.rule import RuleTable
from parsers.base import RuleTableMatcher

logger = logging.getLogger(__name__)


def parse_client(matcher: RuleTableMatcher, client_type: str, user_agent: str) -> Optional[ClientRecord]:
    found = matcher.match(user_agent)
    if found is None:
        return None

    logger.debug(f"{client_type} parser matched {found.name}")
    return ClientRecord(
        type=client_type,
        name=found.name or UNKNOWN,
        version=found.version,
    )


@ParserRegistry.register("feed reader", kind="client")
class FeedReaderParser:
    fixture = "client/feed_readers.yml"

    def __init__(self, cache: Optional[CacheInterface] = None, rules_dir: Optional[str] = None, rules: Optional[RuleTable] = None):
        self.matcher = RuleTableMatcher(self.fixture, rules=rules, cache=cache, rules_dir=rules_dir)

    def parse(self, user_agent: str) -> Optional[ClientRecord]:
        return parse_client(self.matcher, self.name, user_agent)


@ParserRegistry.register("mobile app", kind="client")
class MobileAppParser:
    fixture = "client/mobile_apps.yml"

    def __init__(self, cache: Optional[CacheInterface] = None, rules_dir: Optional[str] = None, rules: Optional[RuleTable] = None):
        self.matcher = RuleTableMatcher(self.fixture, rules=rules, cache=cache, rules_dir=rules_dir)

    def parse(self, user_agent: str) -> Optional[ClientRecord]:
        return parse_client(self.matcher, self.name, user_agent)


@ParserRegistry.register("mediaplayer", kind="client")
class MediaPlayerParser:
    fixture = "client/mediaplayers.yml"

    def __init__(self, cache: Optional[CacheInterface] = None, rules_dir: Optional[str] = None, rules: Optional[RuleTable] = None):
        self.matcher = RuleTableMatcher(self.fixture, rules=rules, cache=cache, rules_dir=rules_dir)

    def parse(self, user_agent: str) -> Optional[ClientRecord]:
        return parse_client(self.matcher, self.name, user_agent)


@ParserRegistry.register("pim", kind="client")
class PimParser:
    fixture = "client/pim.yml"

    def __init__(self, cache: Optional[CacheInterface] = None, rules_dir: Optional[str] = None, rules: Optional[RuleTable] = None):
        self.matcher = RuleTableMatcher(self.fixture, rules=rules, cache=cache, rules_dir=rules_dir)

    def parse(self, user_agent: str) -> Optional[ClientRecord]:
        return parse_client(self.matcher, self.name, user_agent)

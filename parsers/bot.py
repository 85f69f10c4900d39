from typing import Optional
import logging
from core.cache import CacheInterface
from models.records import BotRecord, UNKNOWN
from models.rule import RuleTable
from parsers.base import RuleTableMatcher

logger = logging.getLogger(__name__)


class BotParser:
    fixture = "bots.yml"

    def __init__(
        self,
        cache: Optional[CacheInterface] = None,
        rules_dir: Optional[str] = None,
        rules: Optional[RuleTable] = None,
        discard_details: bool = False,
    ):
        self.matcher = RuleTableMatcher(self.fixture, rules=rules, cache=cache, rules_dir=rules_dir)
        self.discard_details = discard_details

    def parse(self, user_agent: str) -> Optional[BotRecord]:
        """Return the bot that sent user_agent, or None for regular traffic.

        With discard_details the record only marks that a bot was found.
        """
        # Most traffic is not automated; skip the per-rule scan for it
        if not self.matcher.pre_match_overall(user_agent):
            return None

        found = self.matcher.match(user_agent)
        if found is None:
            return None

        if self.discard_details:
            return BotRecord()

        metadata = found.metadata
        producer = metadata.get("producer") or {}
        bot = BotRecord(
            name=found.name or UNKNOWN,
            category=metadata.get("category") or UNKNOWN,
            url=metadata.get("url") or UNKNOWN,
            producer_name=producer.get("name") or UNKNOWN,
            producer_url=producer.get("url") or UNKNOWN,
        )
        logger.debug(f"BotParser matched {bot.name}")
        return bot

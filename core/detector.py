import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core.cache import CacheInterface
from core.config_loader import DetectorOptions
from core.families import (
    ANDROID_OS,
    WINDOWS_TOUCH_OS,
    get_browser_family,
    get_os_family,
    has_touch_token,
    is_desktop_os,
)
from core.parser_registry import ParserRegistry
from core.version_utils import version_in_range
from models.records import (
    ClassificationResult,
    ClientRecord,
    DeviceRecord,
    DeviceType,
    OsRecord,
)

# Import all chain parsers to trigger @ParserRegistry.register decorators
import parsers.clients
import parsers.browser
import parsers.devices

from parsers.bot import BotParser
from parsers.operating_system import OperatingSystemParser


def resolve_device_type(os_record: OsRecord, user_agent: str) -> Optional[DeviceType]:
    """Infer a device type when no device parser recognized the device.

    - Desktop-only OS families run on desktops.
    - Android < 2.0 shipped on smartphones only and 3.x on tablets only; 2.x
      and 4.0+ ran on both, so they stay unresolved.
    - IE10+ on Windows 8 / RT sends a "Touch" token on touch hardware, which
      is mostly tablets. This overrides the desktop guess.
    """
    device_type: Optional[DeviceType] = None

    if is_desktop_os(os_record.short_name):
        device_type = DeviceType.DESKTOP

    if device_type is None and os_record.short_name == ANDROID_OS:
        if version_in_range(os_record.version, upper="2.0"):
            device_type = DeviceType.SMARTPHONE
        elif version_in_range(os_record.version, lower="3.0", upper="4.0"):
            device_type = DeviceType.TABLET

    if device_type in (None, DeviceType.DESKTOP) and os_record.short_name in WINDOWS_TOUCH_OS and has_touch_token(user_agent):
        device_type = DeviceType.TABLET

    return device_type


class DeviceDetector:
    def __init__(
        self,
        discard_bot_details: bool = False,
        skip_bot_detection: bool = False,
        cache: Optional[CacheInterface] = None,
        client_parsers: Optional[Sequence[Any]] = None,
        device_parsers: Optional[Sequence[Any]] = None,
        rules_dir: Optional[str] = None,
    ):
        """Initialize the detector and its parser chains.

        Args:
            discard_bot_details: Only report that a bot was found, not which one
            skip_bot_detection: Do not run the bot parser at all
            cache: Pattern cache shared by all parsers (default: process-wide MemoryCache)
            client_parsers: Client chain as parser names or instances (default: built-in order)
            device_parsers: Device chain as parser names or instances (default: built-in order)
            rules_dir: Directory with the rule tables (default: bundled tables)
        """
        self.logger = logging.getLogger(__name__)
        self.discard_bot_details = discard_bot_details
        self.skip_bot_detection = skip_bot_detection
        self.cache = cache

        self.bot_parser = BotParser(cache=cache, rules_dir=rules_dir, discard_details=discard_bot_details)
        self.os_parser = OperatingSystemParser(cache=cache, rules_dir=rules_dir)
        self.client_parsers: List[Any] = ParserRegistry.instantiate("client", client_parsers, cache=cache, rules_dir=rules_dir)
        self.device_parsers: List[Any] = ParserRegistry.instantiate("device", device_parsers, cache=cache, rules_dir=rules_dir)
        self.logger.debug(
            f"Initialized detector with client chain {list(self.client_types)} "
            f"and {len(self.device_parsers)} device parsers"
        )

    @classmethod
    def from_options(cls, options: DetectorOptions) -> "DeviceDetector":
        return cls(
            discard_bot_details=options.discard_bot_details,
            skip_bot_detection=options.skip_bot_detection,
            cache=options.cache,
            client_parsers=options.client_parsers,
            device_parsers=options.device_parsers,
            rules_dir=options.rules_dir,
        )

    @property
    def client_types(self) -> Tuple[str, ...]:
        """Client types this detector can report, in chain order."""
        return tuple(getattr(p, "name", type(p).__name__) for p in self.client_parsers)

    def parse(self, user_agent: str) -> ClassificationResult:
        """Classify one user agent.

        A detected bot ends the classification: OS, client and device stay
        unset for bots.
        """
        user_agent = user_agent or ""

        if not self.skip_bot_detection:
            bot = self.bot_parser.parse(user_agent)
            if bot is not None:
                self.logger.debug(f"Bot detected, skipping further parsing: {bot.name}")
                return ClassificationResult(user_agent=user_agent, bot=bot)

        os_record = self.os_parser.parse(user_agent)
        client = self._parse_client(user_agent)
        device = self._parse_device(user_agent)

        if device.type is None:
            device = replace(device, type=resolve_device_type(os_record, user_agent))

        return ClassificationResult(
            user_agent=user_agent,
            os=os_record,
            client=client,
            device=device,
            os_family=get_os_family(os_record.short_name),
            browser_family=get_browser_family(client.short_name),
        )

    def _parse_client(self, user_agent: str) -> ClientRecord:
        """Clients might be browsers, feed readers, mobile apps, media players or PIMs."""
        for parser in self.client_parsers:
            client = parser.parse(user_agent)
            if client:
                return client
        return ClientRecord()

    def _parse_device(self, user_agent: str) -> DeviceRecord:
        for parser in self.device_parsers:
            device = parser.parse(user_agent)
            if device:
                return device
        return DeviceRecord()


def classify(user_agent: str, **options) -> ClassificationResult:
    """Classify user_agent with a throwaway detector built from options."""
    return DeviceDetector(**options).parse(user_agent)


def get_info_from_user_agent(user_agent: str, **options) -> Dict[str, Any]:
    """Classify user_agent and return the result as a plain dictionary."""
    return classify(user_agent, **options).to_dict()

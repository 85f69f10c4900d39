from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Optional

from core.families import UNKNOWN_FAMILY, has_touch_token, is_desktop_os

# Value used for every unknown / unset string field
UNKNOWN = "UNK"


class DeviceType(IntEnum):
    """Detectable device types.

    The integer values are persisted by consumers; never reorder them.
    """
    DESKTOP = 0
    SMARTPHONE = 1
    TABLET = 2
    FEATURE_PHONE = 3
    CONSOLE = 4
    TV = 5
    CAR_BROWSER = 6
    SMART_DISPLAY = 7
    CAMERA = 8

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", " ")

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["DeviceType"]:
        """Map a rule-table label such as 'feature phone' to its member."""
        if not label:
            return None
        try:
            return cls[label.strip().upper().replace(" ", "_")]
        except KeyError:
            return None


@dataclass(frozen=True)
class OsRecord:
    name: str = UNKNOWN
    short_name: str = UNKNOWN
    version: str = UNKNOWN


@dataclass(frozen=True)
class ClientRecord:
    type: str = UNKNOWN # Name of the chain parser that matched, e.g. 'browser'
    name: str = UNKNOWN
    short_name: str = UNKNOWN
    version: str = UNKNOWN
    engine: str = UNKNOWN


@dataclass(frozen=True)
class DeviceRecord:
    type: Optional[DeviceType] = None
    brand: str = UNKNOWN
    model: str = UNKNOWN

    @property
    def type_name(self) -> str:
        return self.type.label if self.type is not None else UNKNOWN


@dataclass(frozen=True)
class BotRecord:
    """Represents a detected bot.

    When bot details are discarded every field stays UNKNOWN and the record
    only marks presence.
    """
    name: str = UNKNOWN
    category: str = UNKNOWN
    url: str = UNKNOWN
    producer_name: str = UNKNOWN
    producer_url: str = UNKNOWN


@dataclass(frozen=True)
class ClassificationResult:
    """Everything known about one user agent after a single parse."""
    user_agent: str
    os: OsRecord = field(default_factory=OsRecord)
    client: ClientRecord = field(default_factory=ClientRecord)
    device: DeviceRecord = field(default_factory=DeviceRecord)
    bot: Optional[BotRecord] = None
    os_family: str = UNKNOWN_FAMILY
    browser_family: str = UNKNOWN_FAMILY

    def is_bot(self) -> bool:
        return self.bot is not None

    def is_desktop(self) -> bool:
        return is_desktop_os(self.os.short_name)

    def is_mobile(self) -> bool:
        return not self.is_desktop()

    def is_touch_enabled(self) -> bool:
        return has_touch_token(self.user_agent)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "user_agent": self.user_agent,
            "os": {
                "name": self.os.name,
                "short_name": self.os.short_name,
                "version": self.os.version,
            },
            "client": {
                "type": self.client.type,
                "name": self.client.name,
                "short_name": self.client.short_name,
                "version": self.client.version,
                "engine": self.client.engine,
            },
            "device": {
                "type": self.device.type_name,
                "brand": self.device.brand,
                "model": self.device.model,
            },
            "os_family": self.os_family,
            "browser_family": self.browser_family,
        }
        if self.bot is not None:
            data["bot"] = {
                "name": self.bot.name,
                "category": self.bot.category,
                "url": self.bot.url,
                "producer": {"name": self.bot.producer_name, "url": self.bot.producer_url},
            }
        return data

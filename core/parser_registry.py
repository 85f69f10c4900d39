"""Dynamic parser registration system."""
import logging
from typing import Dict, Type, List, Optional, Sequence, Union, Any

from core.cache import CacheInterface

logger = logging.getLogger(__name__)

PARSER_KINDS = ("client", "device")

# Chain order is load-bearing: earlier parsers win when several would match
DEFAULT_CLIENT_PARSERS = ("feed reader", "mobile app", "mediaplayer", "pim", "browser")
DEFAULT_DEVICE_PARSERS = ("hbbtv", "console", "mobile")


class ParserRegistry:
    """Registry of chain parser classes, filled at import time by decorators.

    The registry only knows which parser classes exist. Which of them run, and
    in which order, is decided per DeviceDetector.
    """

    _parsers: Dict[str, Type] = {}
    _order: List[str] = []  # Preserve registration order
    _parser_kinds: Dict[str, str] = {}  # Maps parser name to "client" or "device"

    @classmethod
    def register(cls, name: str, kind: str = "client"):
        """Decorator to register a parser class.

        Args:
            name: Unique identifier, also reported as the client type (e.g. "browser")
            kind: Either "client" (default) or "device"

        Example:
            @ParserRegistry.register("console", kind="device")
            class ConsoleParser:
                def __init__(self, cache=None, rules_dir=None, rules=None):
                    ...

                def parse(self, user_agent: str) -> Optional[DeviceRecord]:
                    ...
        """
        if kind not in PARSER_KINDS:
            raise ValueError(f"kind must be 'client' or 'device', got {kind}")

        def decorator(parser_class: Type):
            if name in cls._parsers:
                logger.warning(f"Parser '{name}' already registered, overwriting")
            else:
                cls._order.append(name)

            cls._parsers[name] = parser_class
            cls._parser_kinds[name] = kind
            parser_class.name = name

            logger.debug(f"Registered parser: {name} ({kind}) -> {parser_class.__name__}")
            return parser_class
        return decorator

    @classmethod
    def get_parser_kind(cls, name: str) -> Optional[str]:
        return cls._parser_kinds.get(name)

    @classmethod
    def get_parsers_by_kind(cls, kind: str) -> List[str]:
        """Get all parser names of a specific kind."""
        return [name for name in cls._order if cls._parser_kinds.get(name) == kind]

    @classmethod
    def get_parser_class(cls, name: str) -> Optional[Type]:
        """Get parser class by name."""
        return cls._parsers.get(name)

    @classmethod
    def instantiate(
        cls,
        kind: str,
        parsers: Optional[Sequence[Union[str, Any]]] = None,
        cache: Optional[CacheInterface] = None,
        rules_dir: Optional[str] = None,
    ) -> List[Any]:
        """Build an ordered parser chain.

        Args:
            kind: "client" or "device"
            parsers: Parser names or ready parser instances, in chain order
                (default: the built-in order for the kind)
            cache: Pattern cache handed to every parser built from a name
            rules_dir: Rule table directory handed to every parser built from a name

        Returns:
            List of parser instances in chain order
        """
        if parsers is None:
            parsers = DEFAULT_CLIENT_PARSERS if kind == "client" else DEFAULT_DEVICE_PARSERS

        chain: List[Any] = []
        for item in parsers:
            if not isinstance(item, str):
                if not callable(getattr(item, "parse", None)):
                    raise ValueError(f"{item!r} is not a parser: it has no parse() method")
                chain.append(item)
                continue

            parser_class = cls._parsers.get(item)
            if parser_class is None:
                raise ValueError(f"Unknown {kind} parser: {item}")
            if cls._parser_kinds[item] != kind:
                raise ValueError(f"Parser '{item}' is a {cls._parser_kinds[item]} parser, not a {kind} parser")

            chain.append(parser_class(cache=cache, rules_dir=rules_dir))
            logger.debug(f"Instantiated {kind} parser: {item}")

        return chain

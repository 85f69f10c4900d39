"""
Tests for DeviceDetector: chain orchestration, bot short-circuit and the
device type heuristics.
"""
import shutil
import threading

import pytest

from core.cache import MemoryCache
from core.config_loader import DetectorOptions
from core.detector import DeviceDetector, classify, get_info_from_user_agent, resolve_device_type
from core.families import OPERATING_SYSTEMS, is_desktop_os
from models.records import (
    BotRecord,
    ClassificationResult,
    ClientRecord,
    DeviceRecord,
    DeviceType,
    OsRecord,
)
from rules.rules_loader import RULES_DIR, RuleTableError

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/90.0.4430.93 Safari/537.36"
)
GOOGLEBOT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"
XBOX_ONE = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; Xbox; Xbox One) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/70.0.3538.102 Safari/537.36 Edge/18.19041"
)
FACEBOOK_IOS = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Mobile/18D52 [FBAN/FBIOS;FBAV/310.0.0.52.119;FBBV/277047486]"
)
ANDROID_TEMPLATE = (
    "Mozilla/5.0 (Linux; U; Android {version}; en-us) AppleWebKit/533.1 "
    "(KHTML, like Gecko) Version/4.0 Mobile Safari/533.1"
)


@pytest.fixture
def detector(cache):
    return DeviceDetector(cache=cache)


def test_desktop_chrome_end_to_end(cache):
    detector = DeviceDetector(cache=cache, skip_bot_detection=True, device_parsers=[])
    result = detector.parse(CHROME_WINDOWS)

    assert result.os == OsRecord(name="Windows 10", short_name="W10", version="")
    assert result.client.type == "browser"
    assert result.client.name == "Chrome"
    assert result.client.short_name == "CH"
    assert result.client.version == "90.0.4430.93"
    assert result.client.engine == "Blink"
    assert result.device.type == DeviceType.DESKTOP
    assert result.os_family == "Windows"
    assert result.browser_family == "Chrome"
    assert result.is_desktop()
    assert not result.is_mobile()
    assert not result.is_bot()


def test_default_chains_on_desktop_chrome(detector):
    result = detector.parse(CHROME_WINDOWS)
    assert result.device == DeviceRecord(type=DeviceType.DESKTOP)
    assert result.client.name == "Chrome"


def test_bot_short_circuits_everything(detector):
    result = detector.parse(GOOGLEBOT)

    assert result.is_bot()
    assert result.bot.name == "Googlebot"
    assert result.os == OsRecord()
    assert result.client == ClientRecord()
    assert result.device == DeviceRecord()
    assert result.os_family == "Unknown"
    assert result.browser_family == "Unknown"


def test_discard_bot_details(cache):
    result = DeviceDetector(cache=cache, discard_bot_details=True).parse(GOOGLEBOT)
    assert result.is_bot()
    assert result.bot == BotRecord()
    assert result.os == OsRecord()


def test_skip_bot_detection(cache):
    result = DeviceDetector(cache=cache, skip_bot_detection=True).parse(GOOGLEBOT)
    assert not result.is_bot()
    assert result.bot is None


def test_empty_user_agent(detector):
    result = detector.parse("")
    assert not result.is_bot()
    assert result.os == OsRecord()
    assert result.client == ClientRecord()
    assert result.device.type is None
    assert not result.is_desktop()


def test_parse_is_idempotent(detector):
    assert detector.parse(XBOX_ONE) == detector.parse(XBOX_ONE)


def test_warm_and_cold_cache_agree():
    warm_cache = MemoryCache()
    DeviceDetector(cache=warm_cache).parse(CHROME_WINDOWS)
    assert warm_cache.size() > 0

    warm = DeviceDetector(cache=warm_cache).parse(XBOX_ONE)
    cold = DeviceDetector(cache=MemoryCache()).parse(XBOX_ONE)
    assert warm == cold


def test_concurrent_parses_share_a_cold_cache():
    shared_cache = MemoryCache()
    user_agent = ANDROID_TEMPLATE.format(version="3.2")
    workers = 16
    barrier = threading.Barrier(workers)
    results = [None] * workers
    errors = []

    def classify_in_thread(index):
        try:
            detector = DeviceDetector(cache=shared_cache)
            barrier.wait()
            results[index] = detector.parse(user_agent)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=classify_in_thread, args=(i,)) for i in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    assert all(result == results[0] for result in results)
    assert results[0].device == DeviceRecord(type=DeviceType.TABLET)
    assert results[0].client.name == "Android Browser"

    for key in (
        "regexes-bots.yml",
        "regexes-bots.yml-overall",
        "regexes-oss.yml",
        "regexes-client/feed_readers.yml",
        "regexes-client/browsers.yml",
        "regexes-device/consoles.yml-overall",
        "regexes-device/mobiles.yml-overall",
    ):
        assert shared_cache.get(key) is not None, key
    assert results[0] == DeviceDetector(cache=shared_cache).parse(user_agent)


# --- device type heuristics ---

@pytest.mark.parametrize("version, expected", [
    ("1.6", DeviceType.SMARTPHONE),
    ("1.9", DeviceType.SMARTPHONE),
    ("2.0", None),
    ("2.3.7", None),
    ("2.9", None),
    ("3.0", DeviceType.TABLET),
    ("3.2.1", DeviceType.TABLET),
    ("3.9", DeviceType.TABLET),
    ("4.0", None),
    ("4.4.2", None),
])
def test_android_version_heuristic(cache, version, expected):
    detector = DeviceDetector(cache=cache, device_parsers=[])
    result = detector.parse(ANDROID_TEMPLATE.format(version=version))

    assert result.os.short_name == "AND"
    assert result.os.version == version
    assert result.device.type == expected


def test_android_without_version_stays_unresolved(cache):
    result = DeviceDetector(cache=cache, device_parsers=[]).parse("Mozilla/5.0 (Linux; Android; en-us)")
    assert result.os.short_name == "AND"
    assert result.os.version == ""
    assert result.device.type is None


@pytest.mark.parametrize("user_agent, expected", [
    ("Mozilla/5.0 (compatible; MSIE 10.0; Windows NT 6.2; Trident/6.0; Touch)", DeviceType.TABLET),
    ("Mozilla/5.0 (compatible; MSIE 10.0; Windows NT 6.2; ARM; Trident/6.0; Touch)", DeviceType.TABLET),
    ("Mozilla/5.0 (compatible; MSIE 10.0; Windows NT 6.2; Trident/6.0)", DeviceType.DESKTOP),
    ("Mozilla/5.0 (Windows NT 6.1; Trident/7.0; Touch; rv:11.0) like Gecko", DeviceType.DESKTOP),
])
def test_windows_touch_heuristic(detector, user_agent, expected):
    assert detector.parse(user_agent).device.type == expected


def test_touch_token_on_windows_phone_is_not_a_tablet(cache):
    user_agent = (
        "Mozilla/5.0 (compatible; MSIE 10.0; Windows Phone 8.0; Trident/6.0; IEMobile/10.0; "
        "ARM; Touch; NOKIA; Lumia 920)"
    )
    result = DeviceDetector(cache=cache).parse(user_agent)
    assert result.os.short_name == "WPH"
    assert result.device.type == DeviceType.SMARTPHONE
    assert result.is_touch_enabled()

    bare = DeviceDetector(cache=cache, device_parsers=[]).parse(user_agent)
    assert bare.device.type is None


def test_resolve_device_type_agrees_with_is_desktop():
    for short_name, name in OPERATING_SYSTEMS.items():
        os_record = OsRecord(name=name, short_name=short_name, version="")
        resolved = resolve_device_type(os_record, "Mozilla/5.0")
        assert (resolved == DeviceType.DESKTOP) == is_desktop_os(short_name), short_name

        result = ClassificationResult(user_agent="Mozilla/5.0", os=os_record)
        assert result.is_desktop() == is_desktop_os(short_name), short_name


def test_resolve_device_type_for_unknown_os():
    assert resolve_device_type(OsRecord(), "Mozilla/5.0 Touch") is None


# --- chain precedence ---

def test_console_parser_beats_desktop_heuristic(detector):
    result = detector.parse(XBOX_ONE)

    assert result.os.short_name == "W10"
    assert result.is_desktop()
    assert result.device == DeviceRecord(type=DeviceType.CONSOLE, brand="Microsoft", model="Xbox One")


def test_mobile_app_beats_browser(detector):
    result = detector.parse(FACEBOOK_IOS)
    assert result.client.type == "mobile app"
    assert result.client.name == "Facebook"
    assert result.device.brand == "Apple"
    assert result.device.type == DeviceType.SMARTPHONE


def test_client_chain_is_configurable(cache):
    result = DeviceDetector(cache=cache, client_parsers=["browser"]).parse(FACEBOOK_IOS)
    assert result.client == ClientRecord()


def test_media_player_chain(detector):
    result = detector.parse("VLC/3.0.16 LibVLC/3.0.16")
    assert result.client.type == "mediaplayer"
    assert result.browser_family == "Unknown"


def test_client_types(cache):
    assert DeviceDetector(cache=cache).client_types == ("feed reader", "mobile app", "mediaplayer", "pim", "browser")
    assert DeviceDetector(cache=cache, client_parsers=["browser", "pim"]).client_types == ("browser", "pim")


def test_client_types_are_per_detector(cache):
    narrow = DeviceDetector(cache=cache, client_parsers=["browser"])
    full = DeviceDetector(cache=cache)
    assert narrow.client_types == ("browser",)
    assert len(full.client_types) == 5


def test_parser_instances_in_chain(cache):
    class StaticClient:
        name = "static"

        def parse(self, user_agent):
            return ClientRecord(type=self.name, name="Static")

    detector = DeviceDetector(cache=cache, client_parsers=[StaticClient(), "browser"])
    assert detector.client_types == ("static", "browser")
    assert detector.parse(CHROME_WINDOWS).client.name == "Static"


@pytest.mark.parametrize("options", [
    {"client_parsers": ["nope"]},
    {"device_parsers": ["nope"]},
    {"client_parsers": ["console"]},
    {"device_parsers": ["browser"]},
    {"client_parsers": [object()]},
])
def test_invalid_chains(cache, options):
    with pytest.raises(ValueError):
        DeviceDetector(cache=cache, **options)


def test_from_options(cache):
    options = DetectorOptions(cache=cache, client_parsers=["browser"], device_parsers=[], skip_bot_detection=True)
    detector = DeviceDetector.from_options(options)

    assert detector.client_types == ("browser",)
    assert detector.device_parsers == []
    assert detector.parse(GOOGLEBOT).bot is None


# --- rule directories ---

def test_custom_rules_dir(tmp_path, cache):
    rules_dir = tmp_path / "rules"
    shutil.copytree(RULES_DIR, rules_dir, ignore=shutil.ignore_patterns("*.py", "__pycache__"))
    (rules_dir / "client" / "browsers.yml").write_text(
        "- regex: 'Chrome/(\\d+)'\n"
        "  name: 'Chromium'\n"
        "  version: '$1'\n",
        encoding="utf-8",
    )

    result = DeviceDetector(cache=cache, rules_dir=str(rules_dir)).parse(CHROME_WINDOWS)
    assert result.client.name == "Chromium"
    assert result.client.version == "90"

    bundled = DeviceDetector(cache=cache).parse(CHROME_WINDOWS)
    assert bundled.client.name == "Chrome"


def test_missing_rules_dir_fails_on_parse(tmp_path, cache):
    detector = DeviceDetector(cache=cache, rules_dir=str(tmp_path))
    with pytest.raises(RuleTableError):
        detector.parse(CHROME_WINDOWS)


# --- module level helpers ---

def test_classify(cache):
    result = classify(CHROME_WINDOWS, cache=cache)
    assert result.client.name == "Chrome"


def test_get_info_from_user_agent(cache):
    info = get_info_from_user_agent(CHROME_WINDOWS, cache=cache)
    assert info["user_agent"] == CHROME_WINDOWS
    assert info["os"] == {"name": "Windows 10", "short_name": "W10", "version": ""}
    assert info["client"]["name"] == "Chrome"
    assert info["device"]["type"] == "desktop"
    assert info["os_family"] == "Windows"
    assert info["browser_family"] == "Chrome"
    assert "bot" not in info


def test_get_info_for_bot(cache):
    info = get_info_from_user_agent(GOOGLEBOT, cache=cache)
    assert info["bot"]["name"] == "Googlebot"
    assert info["bot"]["producer"] == {"name": "Google Inc.", "url": "http://www.google.com"}
    assert info["device"]["type"] == "UNK"

"""Static lookup tables for operating systems and browsers.

Short codes are the stable identifiers stored in records; names are what the
rule tables emit. Families group many short codes under one coarse name
(WI8, W10, WXP... -> "Windows").
"""
import re
from typing import Dict, List, Optional

# Value used for unresolved families
UNKNOWN_FAMILY = "Unknown"

OPERATING_SYSTEMS: Dict[str, str] = {
    'AIX': 'AIX',
    'AND': 'Android',
    'AMG': 'AmigaOS',
    'ATV': 'Apple TV',
    'ARL': 'Arch Linux',
    'BTR': 'BackTrack',
    'SBA': 'Bada',
    'BEO': 'BeOS',
    'BLB': 'BlackBerry OS',
    'QNX': 'BlackBerry Tablet OS',
    'BMP': 'Brew',
    'CES': 'CentOS',
    'COS': 'Chrome OS',
    'DEB': 'Debian',
    'DFB': 'DragonFly',
    'FED': 'Fedora',
    'FOS': 'Firefox OS',
    'BSD': 'FreeBSD',
    'GNT': 'Gentoo',
    'GTV': 'Google TV',
    'HPX': 'HP-UX',
    'HAI': 'Haiku OS',
    'IRI': 'IRIX',
    'INF': 'Inferno',
    'KOS': 'KaiOS',
    'KNO': 'Knoppix',
    'KBT': 'Kubuntu',
    'LIN': 'GNU/Linux',
    'LBT': 'Lubuntu',
    'VLN': 'VectorLinux',
    'MAC': 'Mac',
    'MDR': 'Mandriva',
    'SMG': 'MeeGo',
    'MIN': 'Mint',
    'MOR': 'MorphOS',
    'NBS': 'NetBSD',
    'WII': 'Nintendo',
    'NDS': 'Nintendo Mobile',
    'OS2': 'OS/2',
    'T64': 'OSF1',
    'OBS': 'OpenBSD',
    'PSP': 'PlayStation Portable',
    'PS3': 'PlayStation',
    'PRS': 'Presto',
    'PPY': 'Puppy',
    'RHT': 'Red Hat',
    'ROS': 'RISC OS',
    'SAB': 'Sabayon',
    'SSE': 'SUSE',
    'SAF': 'Sailfish OS',
    'SLW': 'Slackware',
    'SOS': 'Solaris',
    'SYL': 'Syllable',
    'SYM': 'Symbian',
    'SYS': 'Symbian OS',
    'S40': 'Symbian OS Series 40',
    'S60': 'Symbian OS Series 60',
    'SY3': 'Symbian^3',
    'TIZ': 'Tizen',
    'UBT': 'Ubuntu',
    'WTV': 'WebTV',
    'WIN': 'Windows',
    'W10': 'Windows 10',
    'WI8': 'Windows 8',
    'WI7': 'Windows 7',
    'WVI': 'Windows Vista',
    'WS3': 'Windows Server 2003',
    'WXP': 'Windows XP',
    'W2K': 'Windows 2000',
    'WNT': 'Windows NT',
    'WME': 'Windows ME',
    'W98': 'Windows 98',
    'W95': 'Windows 95',
    'W31': 'Windows 3.1',
    'WCE': 'Windows CE',
    'WRT': 'Windows RT',
    'WMO': 'Windows Mobile',
    'WPH': 'Windows Phone',
    'WIO': 'Windows IoT',
    'XBX': 'Xbox',
    'XBT': 'Xubuntu',
    'YNS': 'YunOs',
    'IOS': 'iOS',
    'POS': 'palmOS',
    'WOS': 'webOS',
}

OS_FAMILIES: Dict[str, List[str]] = {
    'AmigaOS': ['AMG', 'MOR'],
    'Android': ['AND'],
    'Apple TV': ['ATV'],
    'BlackBerry': ['BLB', 'QNX'],
    'Brew': ['BMP'],
    'BeOS': ['BEO', 'HAI'],
    'Chrome OS': ['COS'],
    'Firefox OS': ['FOS', 'KOS'],
    'Gaming Console': ['WII', 'PS3'],
    'Google TV': ['GTV'],
    'IBM': ['OS2'],
    'iOS': ['IOS'],
    'RISC OS': ['ROS'],
    'Linux': ['LIN', 'ARL', 'DEB', 'KNO', 'MIN', 'UBT', 'KBT', 'XBT', 'LBT', 'FED',
              'RHT', 'VLN', 'MDR', 'GNT', 'SAB', 'SLW', 'SSE', 'PPY', 'CES', 'BTR',
              'YNS', 'PRS', 'SAF'],
    'Mac': ['MAC'],
    'Mobile Gaming Console': ['PSP', 'NDS', 'XBX'],
    'Other Mobile': ['WOS', 'POS', 'SBA', 'TIZ', 'SMG'],
    'Symbian': ['SYM', 'SYS', 'SY3', 'S60', 'S40'],
    'Unix': ['SOS', 'AIX', 'HPX', 'BSD', 'NBS', 'OBS', 'DFB', 'SYL', 'IRI', 'T64', 'INF'],
    'WebTV': ['WTV'],
    'Windows': ['WIN', 'W10', 'WI8', 'WI7', 'WVI', 'WS3', 'WXP', 'W2K', 'WNT', 'WME',
                'W98', 'W95', 'WRT', 'W31', 'WCE'],
    'Windows Mobile': ['WPH', 'WMO', 'WIO'],
}

# Families known to run on desktop hardware only
DESKTOP_OS_FAMILIES = frozenset(['AmigaOS', 'IBM', 'Linux', 'Mac', 'Unix', 'Windows', 'BeOS'])

# Short codes that may carry the IE10+ "Touch" token on tablets
WINDOWS_TOUCH_OS = frozenset(['WI8', 'WRT'])

# Standalone token only, so "Touchpad" and "3Touch" do not count
TOUCH_PATTERN = re.compile(r'(?<![A-Z0-9_-])Touch(?![A-Z0-9_])', re.IGNORECASE)

ANDROID_OS = 'AND'

BROWSERS: Dict[str, str] = {
    'AN': 'Android Browser',
    'BB': 'BlackBerry Browser',
    'CH': 'Chrome',
    'CM': 'Chrome Mobile',
    'CI': 'Chrome Mobile iOS',
    'CR': 'Chromium',
    'PS': 'Microsoft Edge',
    'FF': 'Firefox',
    'FM': 'Firefox Mobile',
    'IE': 'Internet Explorer',
    'IM': 'IE Mobile',
    'KO': 'Konqueror',
    'MF': 'Mobile Safari',
    'NF': 'NetFront',
    'NB': 'Nokia Browser',
    'OP': 'Opera',
    'OM': 'Opera Mini',
    'OI': 'Opera Mobile',
    'SF': 'Safari',
    'SB': 'Samsung Browser',
    'UC': 'UC Browser',
    'YA': 'Yandex Browser',
}

BROWSER_FAMILIES: Dict[str, List[str]] = {
    'Android Browser': ['AN'],
    'BlackBerry Browser': ['BB'],
    'Chrome': ['CH', 'CM', 'CI', 'CR', 'SB', 'YA'],
    'Firefox': ['FF', 'FM'],
    'Internet Explorer': ['IE', 'IM', 'PS'],
    'Konqueror': ['KO'],
    'NetFront': ['NF'],
    'Nokia Browser': ['NB'],
    'Opera': ['OP', 'OM', 'OI'],
    'Safari': ['SF', 'MF'],
    'UC Browser': ['UC'],
}

_OS_SHORT_BY_NAME = {name.lower(): short for short, name in OPERATING_SYSTEMS.items()}
_BROWSER_SHORT_BY_NAME = {name.lower(): short for short, name in BROWSERS.items()}
_OS_FAMILY_BY_SHORT = {short: family for family, shorts in OS_FAMILIES.items() for short in shorts}
_BROWSER_FAMILY_BY_SHORT = {short: family for family, shorts in BROWSER_FAMILIES.items() for short in shorts}


def get_os_short_name(name: Optional[str]) -> Optional[str]:
    """Look up the short code for an OS name emitted by a rule table."""
    if not name:
        return None
    return _OS_SHORT_BY_NAME.get(name.lower())


def get_browser_short_name(name: Optional[str]) -> Optional[str]:
    """Look up the short code for a browser name emitted by a rule table."""
    if not name:
        return None
    return _BROWSER_SHORT_BY_NAME.get(name.lower())


def get_os_family(short_name: Optional[str]) -> str:
    """Return the OS family for a short code, or "Unknown"."""
    return _OS_FAMILY_BY_SHORT.get(short_name or '', UNKNOWN_FAMILY)


def get_browser_family(short_name: Optional[str]) -> str:
    """Return the browser family for a short code, or "Unknown"."""
    return _BROWSER_FAMILY_BY_SHORT.get(short_name or '', UNKNOWN_FAMILY)


def is_desktop_os(short_name: Optional[str]) -> bool:
    return get_os_family(short_name) in DESKTOP_OS_FAMILIES


def has_touch_token(user_agent: Optional[str]) -> bool:
    """True if the standalone "Touch" token (IE10+ on touch hardware) is present."""
    return TOUCH_PATTERN.search(user_agent or '') is not None

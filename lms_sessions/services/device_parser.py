"""
User-Agent → device fingerprint.

Covers the browser and OS families the admin dashboard charts.
Anything unrecognised is reported as None, including `is_mobile`
when neither the browser nor the OS can be told apart.
"""

import re
from dataclasses import dataclass

_MOBILE_RE = re.compile(r"mobile|android|iphone|ipad|ipod|blackberry|iemobile|opera mini", re.I)

_WINDOWS_VERSIONS = {
    "10.0": "10",
    "6.3": "8.1",
    "6.2": "8",
    "6.1": "7",
    "6.0": "Vista",
    "5.1": "XP",
}


@dataclass
class DeviceInfo:
    device_info: str | None = None
    is_mobile: bool | None = None
    browser_name: str | None = None
    browser_version: str | None = None
    os_name: str | None = None
    os_version: str | None = None


def _search(pattern: str, text: str) -> str | None:
    match = re.search(pattern, text)
    return match.group(1) if match else None


def _browser(ua: str) -> tuple[str | None, str | None]:
    # Order matters: Edge and Chrome both advertise "Chrome/", Chrome advertises "Safari/"
    if "Edg/" in ua or "Edge/" in ua:
        return "Edge", _search(r"Edge?/([0-9.]+)", ua)
    if "Firefox/" in ua:
        return "Firefox", _search(r"Firefox/([0-9.]+)", ua)
    if "Chrome/" in ua:
        return "Chrome", _search(r"Chrome/([0-9.]+)", ua)
    if "Safari/" in ua:
        return "Safari", _search(r"Version/([0-9.]+)", ua)
    if "MSIE " in ua or "Trident/" in ua:
        return "Internet Explorer", _search(r"MSIE ([0-9.]+)", ua) or _search(r"rv:([0-9.]+)", ua)
    return None, None


def _os(ua: str) -> tuple[str | None, str | None]:
    if "Windows" in ua:
        nt = _search(r"Windows NT ([0-9.]+)", ua)
        return "Windows", _WINDOWS_VERSIONS.get(nt) if nt else None
    if "iPhone OS" in ua or "iPad" in ua or " iOS" in ua:
        version = _search(r"OS ([0-9_]+)", ua)
        return "iOS", version.replace("_", ".") if version else None
    if "Mac OS X" in ua:
        version = _search(r"Mac OS X ([0-9_.]+)", ua)
        return "macOS", version.replace("_", ".") if version else None
    if "Android" in ua:
        return "Android", _search(r"Android ([0-9.]+)", ua)
    if "Linux" in ua:
        return "Linux", None
    return None, None


def parse_user_agent(user_agent: str | None) -> DeviceInfo:
    ua = user_agent or ""
    if not ua:
        return DeviceInfo()

    browser_name, browser_version = _browser(ua)
    os_name, os_version = _os(ua)
    is_mobile: bool | None = bool(_MOBILE_RE.search(ua))
    if not is_mobile and browser_name is None and os_name is None:
        is_mobile = None
    return DeviceInfo(
        device_info=ua,
        is_mobile=is_mobile,
        browser_name=browser_name,
        browser_version=browser_version,
        os_name=os_name,
        os_version=os_version,
    )

"""Client metadata captured at login, shown on the sessions page"""
from dataclasses import dataclass
from typing import Optional
import re

from fastapi import Request

_MOBILE_RE = re.compile(r"Mobile|Android|iPhone|iPad")
_TABLET_RE = re.compile(r"iPad|Tablet")

# First match wins; Edge and Chrome both advertise "Chrome", Chrome also says "Safari"
_BROWSERS = [("Edg", "Edge"), ("Firefox", "Firefox"), ("Chrome", "Chrome"), ("Safari", "Safari")]
_SYSTEMS = [
    ("Windows", "Windows"),
    ("Android", "Android"),
    ("iPhone", "iOS"),
    ("iPad", "iOS"),
    ("Mac", "macOS"),
    ("Linux", "Linux"),
]


@dataclass(frozen=True)
class ClientInfo:
    ip_address: str
    user_agent: str
    device: str
    browser: str
    os: str


def _first_match(user_agent: str, table) -> str:
    for needle, label in table:
        if needle in user_agent:
            return label
    return "Unknown"


def parse_user_agent(user_agent: str) -> tuple:
    """Return (device, browser, os) for a User-Agent header"""
    if _MOBILE_RE.search(user_agent):
        device = "tablet" if _TABLET_RE.search(user_agent) else "mobile"
    elif _TABLET_RE.search(user_agent):
        device = "tablet"
    else:
        device = "desktop"
    return device, _first_match(user_agent, _BROWSERS), _first_match(user_agent, _SYSTEMS)


def client_ip(request: Request) -> str:
    forwarded: Optional[str] = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def client_info_from_request(request: Request) -> ClientInfo:
    user_agent = request.headers.get("user-agent", "")
    device, browser, os_name = parse_user_agent(user_agent)
    return ClientInfo(
        ip_address=client_ip(request),
        user_agent=user_agent,
        device=device,
        browser=browser,
        os=os_name,
    )

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .constants import DEFAULT_ORIGIN, DEFAULT_USER_AGENT, DEFAULT_WS_URL


@dataclass(frozen=True, slots=True)
class DeviceFingerprint:
    """
    Browser identity announced in the HELLO handshake.

    All fields are fixed literals matching the web client; the device id is the
    only generated value and is supplied per connection.
    """

    device_type: str = "WEB"
    locale: str = "ru_RU"
    os_version: str = "Linux"
    device_name: str = "Firefox"
    header_user_agent: str = DEFAULT_USER_AGENT
    device_locale: str = "ru-RU"
    app_version: str = "4.8.42"
    screen: str = "1080x1920 1.0x"
    timezone: str = "Europe/Moscow"

    def to_user_agent(self) -> dict[str, str]:
        return {
            "deviceType": self.device_type,
            "locale": self.locale,
            "osVersion": self.os_version,
            "deviceName": self.device_name,
            "headerUserAgent": self.header_user_agent,
            "deviceLocale": self.device_locale,
            "appVersion": self.app_version,
            "screen": self.screen,
            "timezone": self.timezone,
        }

    def hello_payload(self, device_id: str) -> dict[str, Any]:
        return {"userAgent": self.to_user_agent(), "deviceId": device_id}


@dataclass(slots=True)
class SocketConfig:
    ws_url: str = DEFAULT_WS_URL
    origin: str = DEFAULT_ORIGIN
    fingerprint: DeviceFingerprint = field(default_factory=DeviceFingerprint)
    # None => a fresh UUID4 for every connect().
    device_id: str | None = None

    connect_timeout_s: float = 20.0
    # The protocol has no reply timeout; None blocks until the server answers.
    reply_timeout_s: float | None = None

    headers: dict[str, str] = field(default_factory=dict)

"""Report categories accepted by AbuseIPDB.

The numeric codes are fixed by the remote service
(https://www.abuseipdb.com/categories); names are ours.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class ReportCategory(int, Enum):
    """Closed set of abuse types a report can be tagged with."""

    DNS_COMPROMISE = 1
    DNS_POISONING = 2
    FRAUD_ORDERS = 3
    DDOS_ATTACK = 4
    FTP_BRUTE_FORCE = 5
    PING_OF_DEATH = 6
    PHISHING = 7
    FRAUD_VOIP = 8
    OPEN_PROXY = 9
    WEB_SPAM = 10
    EMAIL_SPAM = 11
    BLOG_SPAM = 12
    VPN_IP = 13
    PORT_SCAN = 14
    HACKING = 15
    SQL_INJECTION = 16
    SPOOFING = 17
    BRUTE_FORCE = 18
    BAD_WEB_BOT = 19
    EXPLOITED_HOST = 20
    WEB_APP_ATTACK = 21
    SSH = 22
    IOT_TARGETED = 23

    @classmethod
    def parse(cls, value: str | int) -> "ReportCategory":
        """Accept a numeric code (`"18"`, `18`) or a member name (`"brute-force"`)."""

        if isinstance(value, int):
            return cls(value)
        text = value.strip()
        if text.isdigit():
            return cls(int(text))
        key = text.upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown report category: {value!r}") from None

    @staticmethod
    def join(categories: Iterable["ReportCategory"]) -> str:
        """Comma separated codes, the wire format used by `report`."""

        return ",".join(str(int(c)) for c in categories)

    def label(self) -> str:
        return self.name.replace("_", " ").title()

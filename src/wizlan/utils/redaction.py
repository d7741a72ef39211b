from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Redactor:
    enabled: bool = True
    _mac_map: dict[str, int] = field(default_factory=dict)
    _mac_counter: int = 0

    def redact_ip(self, ip: str) -> str:
        if not self.enabled:
            return ip
        parts = ip.split(".")
        if len(parts) == 4 and all(part.isdigit() for part in parts):
            return f"x.x.x.{parts[3]}"
        return ip

    def redact_mac(self, mac: str) -> str:
        """Keep the vendor prefix, replace the rest with a stable counter.

        Bulbs report MACs as 12 bare hex digits (``a8bb50f1e2d3``).
        """
        if not self.enabled:
            return mac
        cleaned = mac.replace(":", "").lower()
        if len(cleaned) != 12:
            return mac
        counter = self._mac_map.get(cleaned)
        if counter is None:
            self._mac_counter += 1
            counter = self._mac_counter
            self._mac_map[cleaned] = counter
        return f"{cleaned[:6]}xxxx{counter:02d}"

"""Profile model binding a name to one provider configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class Profile:
    """Named credentials and settings for one provider instance.

    Attributes:
        name: Profile name, unique within a configuration
        provider: Registered provider name (e.g. "fs", "s3")
        config: Provider settings (endpoint, keys, path...)
    """

    name: str
    provider: str
    config: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "provider": self.provider,
            "config": dict(self.config),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        return cls(
            name=data["name"],
            provider=data["provider"],
            config={str(k): str(v) for k, v in (data.get("config") or {}).items()},
        )

    def __str__(self) -> str:
        lines = [f"profile: {self.name}", f"provider: {self.provider}", "configuration:"]
        for key in sorted(self.config):
            lines.append(f"  - {key}: {self.config[key]}")
        return "\n".join(lines) + "\n"

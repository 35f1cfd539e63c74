"""
Favorite desk positions, persisted as JSON.

File format::

    {
        "name": "Desk 1234",
        "positions": {"sit": 72.5, "stand": 110.0}
    }
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

from bledesk.errors import SettingsError

DEFAULT_SETTINGS_PATH = Path.home() / ".bledesk.json"


@dataclass
class DeskSettings:
    """The remembered desk and its named heights."""

    name: str = ""
    positions: dict[str, float] = field(default_factory=dict)
    path: Path = DEFAULT_SETTINGS_PATH

    @classmethod
    def load(cls, path: Path = DEFAULT_SETTINGS_PATH) -> "DeskSettings":
        """Load settings, or return empty ones if the file doesn't exist yet."""
        path = Path(path)
        if not path.exists():
            return cls(path=path)

        try:
            data = json.loads(path.read_text())
            positions = {str(k): float(v) for k, v in (data.get("positions") or {}).items()}
            return cls(name=data.get("name") or "", positions=positions, path=path)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            raise SettingsError(f"Could not load settings from {path}: {e}") from e

    def save(self):
        data = {"name": self.name, "positions": self.positions}
        try:
            self.path.write_text(json.dumps(data, indent=4) + "\n")
        except OSError as e:
            raise SettingsError(f"Could not write settings to {self.path}: {e}") from e

    def set_name(self, name: str):
        self.name = name
        self.save()

    def add_fav(self, name: str, height: float):
        self.positions[name] = round(height, 2)
        self.save()

    def del_fav(self, name: str) -> bool:
        """Remove a favorite. Returns False if there was no such favorite."""
        if name not in self.positions:
            return False
        del self.positions[name]
        self.save()
        return True

    def get_fav(self, name: str) -> float | None:
        return self.positions.get(name)

    def list_positions(self) -> str:
        if not self.positions:
            return "No favorite positions saved."
        return "\n".join(f"\t{name}: {height:.2f}" for name, height in sorted(self.positions.items()))

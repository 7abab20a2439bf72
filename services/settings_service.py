"""
Client-local configuration: group names and acupoint names.

Both are stored as whole documents in a ``SettingsStore``. Pages receive
the store explicitly (see ``core.session_manager.get_settings_store``) so
this module never touches ambient storage and can be tested with a file in a
temporary directory.
"""

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field

from core.errors import TransientStoreError, ValidationError

logger = logging.getLogger(__name__)

GROUPS_KEY = "acupuncture_groups"
ACUPOINTS_KEY = "acupuncture_acupoints"

MIN_ACUPOINTS = 1
MAX_ACUPOINTS = 200
DEFAULT_ACUPOINT_COUNT = 40

DEFAULT_GROUPS = [f"Group {n}" for n in range(1, 11)]

# Serialises read-modify-write of settings files across Streamlit sessions
_WRITE_LOCK = threading.Lock()


class SettingsStore:
    """Key/value document store; every put replaces the whole document."""

    def get(self, key: str, default=None):
        raise NotImplementedError

    def put(self, key: str, value):
        folder = os.path.dirname(os.path.abspath(self.path))
        with _WRITE_LOCK:
            data = self._read_all()
            data[key] = value
            tmp_path = None
            try:
                os.makedirs(folder, exist_ok=True)
                with tempfile.NamedTemporaryFile(
                    "w",
                    dir=folder,
                    prefix=f".{os.path.basename(self.path)}.",
                    suffix=".tmp",
                    delete=False,
                    encoding="utf-8",
                ) as f:
                    tmp_path = f.name
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except OSError as exc:
                if tmp_path and os.path.exists(tmp_path):
                    os.remove(tmp_path)
                logger.exception("Could not write settings file %s", self.path)
                raise TransientStoreError("Could not save the settings. Please try again.") from exc


# -----------------------------
# Groups
# -----------------------------
def _clean_groups(groups) -> list[str]:
    cleaned = []
    for name in groups:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Group name cannot be empty.")
        if name in cleaned:
            raise ValidationError(f"Group '{name}' already exists.")
        cleaned.append(name)
    return cleaned


def load_groups(store: SettingsStore) -> list[str]:
    groups = store.get(GROUPS_KEY)
    if not isinstance(groups, list) or not groups:
        return list(DEFAULT_GROUPS)
    return [str(name) for name in groups]


def save_groups(store: SettingsStore, groups) -> list[str]:
    cleaned = _clean_groups(groups)
    store.put(GROUPS_KEY, cleaned)
    logger.info("Saved %d group name(s)", len(cleaned))
    return cleaned


def add_group(store: SettingsStore, name: str) -> list[str]:
    return save_groups(store, load_groups(store) + [name])


def rename_group(store: SettingsStore, index: int, new_name: str) -> list[str]:
    groups = load_groups(store)
    if not 0 <= index < len(groups):
        raise ValidationError("Group does not exist.")
    groups[index] = new_name
    return save_groups(store, groups)


def delete_group(store: SettingsStore, index: int) -> list[str]:
    groups = load_groups(store)
    if not 0 <= index < len(groups):
        raise ValidationError("Group does not exist.")
    if len(groups) == 1:
        raise ValidationError("At least one group is required.")
    del groups[index]
    return save_groups(store, groups)


# -----------------------------
# Acupoints
# -----------------------------
@dataclass
class AcupointSettings:
    count: int = DEFAULT_ACUPOINT_COUNT
    names: list = field(default_factory=lambda: default_acupoint_names(DEFAULT_ACUPOINT_COUNT))


def default_acupoint_names(count: int) -> list[str]:
    return [str(n) for n in range(1, count + 1)]


def clamp_acupoint_count(count) -> int:
    try:
        value = int(count)
    except (TypeError, ValueError):
        value = MIN_ACUPOINTS
    return max(MIN_ACUPOINTS, min(value, MAX_ACUPOINTS))


def resize_acupoint_names(names, count) -> list[str]:
    """Pad with 1-based numbers or truncate so there are exactly ``count`` names."""
    count = clamp_acupoint_count(count)
    resized = list(names)[:count]
    for n in range(len(resized), count):
        resized.append(str(n + 1))
    return resized


def load_acupoint_settings(store: SettingsStore) -> AcupointSettings:
    data = store.get(ACUPOINTS_KEY)
    if not isinstance(data, dict) or not data.get("names"):
        return AcupointSettings()
    names = [str(name) for name in data["names"]]
    count = clamp_acupoint_count(data.get("count", len(names)))
    return AcupointSettings(count=count, names=resize_acupoint_names(names, count))


def save_acupoint_settings(store: SettingsStore, names) -> AcupointSettings:
    cleaned = [(name or "").strip() for name in names]
    if not cleaned:
        raise ValidationError("At least one acupoint is required.")
    if any(not name for name in cleaned):
        raise ValidationError("Acupoint names cannot be empty.")
    cleaned = resize_acupoint_names(cleaned, len(cleaned))
    settings = AcupointSettings(count=len(cleaned), names=cleaned)
    store.put(ACUPOINTS_KEY, {"count": settings.count, "names": settings.names})
    logger.info("Saved %d acupoint name(s)", settings.count)
    return settings


def _acupoint_sort_key(name: str):
    try:
        return (0, int(name), "")
    except ValueError:
        return (1, 0, name)


def sort_acupoints(selected) -> list[str]:
    """Numeric names first in numeric order, then the rest alphabetically."""
    return sorted(selected, key=_acupoint_sort_key)


def format_acupoints(selected) -> str:
    return ", ".join(sort_acupoints(selected))

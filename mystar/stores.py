import copy
import json
import logging
import os
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .supabase_client import change_record, change_type

logger = logging.getLogger(__name__)

ADMIN_DEFAULTS = {
    "platformFee": 10,
    "minRequestPrice": 5,
    "maxRequestPrice": 1000,
    "defaultDeliveryTime": 24,
    "maxDeliveryTime": 72,
    "allowedFileTypes": ["mp4", "mov", "avi"],
    "maxFileSize": 100,
    "autoApproveCreators": False,
    "requireEmailVerification": True,
    "enableDisputes": True,
    "disputeWindow": 48,
    "payoutThreshold": 50,
    "payoutSchedule": "weekly",
}

FAN_SETTINGS_DEFAULTS = {
    "notifications": {"email": True, "push": True},
    "privacy": {"showActivity": True, "allowMessages": True},
}


class JsonStore:
    """A JSON document on disk guarded by a process-local lock"""

    def __init__(self, data_dir: str, name: str, default: Any):
        self.path = os.path.join(data_dir, f"{name}.json")
        self.default = default
        self._lock = threading.Lock()
        os.makedirs(data_dir, exist_ok=True)

    def _load(self) -> Any:
        if not os.path.exists(self.path):
            return copy.deepcopy(self.default)
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _save(self, data: Any) -> None:
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)


class AdminStore(JsonStore):
    def __init__(self, data_dir: str):
        super().__init__(data_dir, "admin-storage", {"settings": ADMIN_DEFAULTS})

    def get_settings(self) -> Dict[str, Any]:
        with self._lock:
            stored = self._load().get("settings", {})
        return {**copy.deepcopy(ADMIN_DEFAULTS), **stored}

    def update_settings(self, new_settings: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge known settings keys"""
        unknown = set(new_settings) - set(ADMIN_DEFAULTS)
        if unknown:
            raise KeyError(f"Unknown admin settings: {', '.join(sorted(unknown))}")

        with self._lock:
            data = self._load()
            data["settings"] = {**ADMIN_DEFAULTS, **data.get("settings", {}), **new_settings}
            self._save(data)
            return copy.deepcopy(data["settings"])


class FanStore(JsonStore):
    """Favorites and settings per fan, keyed by user id"""

    def __init__(self, data_dir: str):
        super().__init__(data_dir, "fan-storage", {})

    def _profile(self, data: Dict, user_id: str) -> Dict:
        profile = data.setdefault(user_id, {})
        profile.setdefault("favorites", [])
        profile.setdefault("settings", copy.deepcopy(FAN_SETTINGS_DEFAULTS))
        return profile

    def get_favorites(self, user_id: str) -> List[str]:
        with self._lock:
            return list(self._profile(self._load(), user_id)["favorites"])

    def add_favorite(self, user_id: str, creator_id: str) -> List[str]:
        with self._lock:
            data = self._load()
            favorites = self._profile(data, user_id)["favorites"]
            if creator_id not in favorites:
                favorites.append(creator_id)
                self._save(data)
            return list(favorites)

    def remove_favorite(self, user_id: str, creator_id: str) -> List[str]:
        with self._lock:
            data = self._load()
            profile = self._profile(data, user_id)
            profile["favorites"] = [fav for fav in profile["favorites"] if fav != creator_id]
            self._save(data)
            return list(profile["favorites"])

    def get_settings(self, user_id: str) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._profile(self._load(), user_id)["settings"])

    def update_settings(self, user_id: str, new_settings: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            data = self._load()
            profile = self._profile(data, user_id)
            profile["settings"] = {**profile["settings"], **new_settings}
            self._save(data)
            return copy.deepcopy(profile["settings"])


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class CreatorEarnings:
    """Earnings rows of one creator, kept current by realtime change payloads"""

    def __init__(self, creator_id: str, rows: Optional[List[Dict]] = None):
        self.creator_id = creator_id
        self._rows: Dict[str, Dict] = {}
        self._lock = threading.Lock()
        for row in rows or []:
            self._rows[str(row["id"])] = row

    @property
    def rows(self) -> List[Dict]:
        with self._lock:
            return list(self._rows.values())

    def apply_change(self, payload: Dict[str, Any]) -> None:
        """Apply an INSERT/UPDATE/DELETE payload from the earnings channel"""
        event = change_type(payload)
        if event == "DELETE":
            old = change_record(payload, "old")
            if old and "id" in old:
                with self._lock:
                    self._rows.pop(str(old["id"]), None)
            return

        new = change_record(payload, "new")
        if not new or "id" not in new:
            return
        if str(new.get("creator_id", self.creator_id)) != str(self.creator_id):
            return
        with self._lock:
            self._rows[str(new["id"])] = new

    def summary(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Completed total, pending total and completed this calendar month"""
        now = now or datetime.now(timezone.utc)
        total = pending = this_month = 0.0
        rows = self.rows
        for row in rows:
            amount = round(float(row.get("amount") or 0), 2)
            status = row.get("status")
            if status == "completed":
                total += amount
                created = _parse_timestamp(row.get("created_at"))
                if created and created.year == now.year and created.month == now.month:
                    this_month += amount
            elif status == "pending":
                pending += amount

        return {
            "total": round(total, 2),
            "pending": round(pending, 2),
            "this_month": round(this_month, 2),
            "count": len(rows),
        }


class EarningsRegistry:
    """Live CreatorEarnings per creator, fed by one realtime subscription"""

    def __init__(self):
        self._creators: Dict[str, CreatorEarnings] = {}
        self._lock = threading.Lock()

    def get(self, creator_id: str) -> Optional[CreatorEarnings]:
        with self._lock:
            return self._creators.get(creator_id)

    def track(self, creator_id: str, rows: List[Dict]) -> CreatorEarnings:
        earnings = CreatorEarnings(creator_id, rows)
        with self._lock:
            self._creators[creator_id] = earnings
        return earnings

    def handle_change(self, payload: Dict[str, Any]) -> None:
        record = change_record(payload, "new") or change_record(payload, "old") or {}
        creator_id = record.get("creator_id")
        if creator_id is None:
            with self._lock:
                tracked = list(self._creators.values())
            for earnings in tracked:
                earnings.apply_change(payload)
            return
        earnings = self.get(str(creator_id))
        if earnings:
            earnings.apply_change(payload)

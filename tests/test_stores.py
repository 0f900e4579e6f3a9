from datetime import datetime, timezone

import pytest

from mystar.stores import ADMIN_DEFAULTS, AdminStore, CreatorEarnings, EarningsRegistry, FanStore

from .conftest import ADMIN_TOKEN, CREATOR_TOKEN, auth_header


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / "stores")


class TestAdminStore:
    def test_defaults(self, data_dir):
        assert AdminStore(data_dir).get_settings() == ADMIN_DEFAULTS

    def test_update_merges_and_persists(self, data_dir):
        AdminStore(data_dir).update_settings({"platformFee": 15, "payoutSchedule": "monthly"})

        settings = AdminStore(data_dir).get_settings()
        assert settings["platformFee"] == 15
        assert settings["payoutSchedule"] == "monthly"
        assert settings["maxRequestPrice"] == 1000

    def test_unknown_key(self, data_dir):
        with pytest.raises(KeyError):
            AdminStore(data_dir).update_settings({"theme": "dark"})


class TestFanStore:
    def test_favorites_without_duplicates(self, data_dir):
        store = FanStore(data_dir)
        store.add_favorite("fan-1", "creator-1")
        store.add_favorite("fan-1", "creator-1")
        store.add_favorite("fan-1", "creator-2")

        assert store.get_favorites("fan-1") == ["creator-1", "creator-2"]
        assert store.remove_favorite("fan-1", "creator-1") == ["creator-2"]
        assert store.get_favorites("fan-2") == []

    def test_settings_shallow_merge(self, data_dir):
        store = FanStore(data_dir)
        updated = store.update_settings("fan-1", {"notifications": {"email": False, "push": True}})

        assert updated["notifications"] == {"email": False, "push": True}
        assert updated["privacy"] == {"showActivity": True, "allowMessages": True}
        assert FanStore(data_dir).get_settings("fan-1") == updated


NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


def earnings_rows():
    return [
        {"id": 1, "creator_id": "creator-1", "amount": 100, "status": "completed", "created_at": "2026-10-02T10:00:00Z"},
        {"id": 2, "creator_id": "creator-1", "amount": 40.5, "status": "completed", "created_at": "2026-09-12T10:00:00Z"},
        {"id": 3, "creator_id": "creator-1", "amount": 30, "status": "pending", "created_at": "2026-10-10T10:00:00Z"},
    ]


class TestCreatorEarnings:
    def test_summary(self):
        summary = CreatorEarnings("creator-1", earnings_rows()).summary(now=NOW)

        assert summary == {"total": 140.5, "pending": 30.0, "this_month": 100.0, "count": 3}

    def test_realtime_changes(self):
        earnings = CreatorEarnings("creator-1", earnings_rows())

        earnings.apply_change({"data": {"type": "UPDATE", "record": {
            "id": 3, "creator_id": "creator-1", "amount": 30, "status": "completed",
            "created_at": "2026-10-10T10:00:00Z",
        }}})
        earnings.apply_change({"data": {"type": "DELETE", "old_record": {"id": 2}}})
        earnings.apply_change({"data": {"type": "INSERT", "record": {
            "id": 9, "creator_id": "creator-2", "amount": 500, "status": "completed",
        }}})

        assert earnings.summary(now=NOW) == {"total": 130.0, "pending": 0.0, "this_month": 130.0, "count": 2}

    def test_registry_routes_by_creator(self):
        registry = EarningsRegistry()
        registry.track("creator-1", [])
        registry.track("creator-2", [])

        registry.handle_change({"data": {"type": "INSERT", "record": {
            "id": 5, "creator_id": "creator-2", "amount": 10, "status": "pending",
        }}})

        assert registry.get("creator-1").summary()["count"] == 0
        assert registry.get("creator-2").summary()["pending"] == 10.0


class TestStoreRoutes:
    def test_admin_settings(self, client):
        response = client.patch("/admin/settings", json={"platformFee": 12}, headers=auth_header(ADMIN_TOKEN))

        assert response.status_code == 200
        assert response.json()["platformFee"] == 12
        assert client.get("/admin/settings", headers=auth_header(ADMIN_TOKEN)).json()["platformFee"] == 12

    def test_admin_settings_forbidden_for_fans(self, client):
        response = client.get("/admin/settings", headers=auth_header())

        assert response.status_code == 403
        assert response.json()["error"] == "Admin access required"

    def test_fan_favorites(self, client):
        client.put("/fans/me/favorites/creator-1", headers=auth_header())
        client.put("/fans/me/favorites/creator-7", headers=auth_header())
        response = client.delete("/fans/me/favorites/creator-1", headers=auth_header())

        assert response.json() == {"favorites": ["creator-7"]}
        assert client.get("/fans/me/favorites", headers=auth_header()).json() == {"favorites": ["creator-7"]}

    def test_fan_settings(self, client):
        response = client.patch(
            "/fans/me/settings",
            json={"privacy": {"showActivity": False, "allowMessages": False}},
            headers=auth_header(),
        )

        assert response.status_code == 200
        assert response.json()["privacy"] == {"showActivity": False, "allowMessages": False}
        assert response.json()["notifications"] == {"email": True, "push": True}

    def test_creator_earnings(self, client, supabase):
        supabase.tables["earnings"] = earnings_rows() + [
            {"id": 4, "creator_id": "creator-2", "amount": 999, "status": "completed", "created_at": "2026-10-01"},
        ]

        response = client.get("/creators/me/earnings", headers=auth_header(CREATOR_TOKEN))

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 140.5
        assert body["pending"] == 30.0
        assert body["count"] == 3

    def test_earnings_only_for_creators(self, client):
        response = client.get("/creators/me/earnings", headers=auth_header())

        assert response.status_code == 403

    def test_earnings_reload_without_realtime(self, client, supabase):
        supabase.tables["earnings"] = [
            {"id": 1, "creator_id": "creator-1", "amount": 10, "status": "completed", "created_at": "2026-10-02"},
        ]
        first = client.get("/creators/me/earnings", headers=auth_header(CREATOR_TOKEN)).json()

        supabase.tables["earnings"].append(
            {"id": 2, "creator_id": "creator-1", "amount": 25, "status": "completed", "created_at": "2026-10-03"},
        )
        second = client.get("/creators/me/earnings", headers=auth_header(CREATOR_TOKEN)).json()

        assert first["total"] == 10.0
        assert second["total"] == 35.0
        assert second["count"] == 2

    def test_earnings_cached_while_realtime_live(self, app, client, supabase):
        app.state.realtime = object()
        supabase.tables["earnings"] = [
            {"id": 1, "creator_id": "creator-1", "amount": 10, "status": "completed", "created_at": "2026-10-02"},
        ]
        client.get("/creators/me/earnings", headers=auth_header(CREATOR_TOKEN))
        supabase.tables["earnings"].clear()

        app.state.earnings.handle_change({"data": {"type": "INSERT", "record": {
            "id": 2, "creator_id": "creator-1", "amount": 5, "status": "pending",
        }}})
        body = client.get("/creators/me/earnings", headers=auth_header(CREATOR_TOKEN)).json()

        assert body["total"] == 10.0
        assert body["pending"] == 5.0

    def test_admin_settings_reject_unknown_keys(self, client):
        response = client.patch("/admin/settings", json={"bogusKey": 1}, headers=auth_header(ADMIN_TOKEN))

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

    def test_admin_settings_reject_null(self, client):
        response = client.patch("/admin/settings", json={"platformFee": None}, headers=auth_header(ADMIN_TOKEN))

        assert response.status_code == 400
        assert client.get("/admin/settings", headers=auth_header(ADMIN_TOKEN)).json()["platformFee"] == 10

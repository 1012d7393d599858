"""
End-to-end route tests against the seeded local store.
"""

from unittest.mock import patch

import pytest

from wsp.services.view_state_service import KEY_PREFIX


class TestHealth:
    def test_healthz(self, client):
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "wsp-planner"}

    def test_readyz_local_backend(self, client):
        with patch("wsp.services.redis_client.settings.REDIS_URL", None):
            response = client.get("/readyz")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["database"]["backend"] == "local"
        assert data["checks"]["redis"] == {"ok": True, "enabled": False}

    def test_request_id_echoed(self, client):
        response = client.get("/healthz", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"


class TestProfileAndWorkspace:
    def test_me(self, client, login):
        login("user-001")

        response = client.get("/me")

        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["name"] == "Bob Builder"
        assert data["auth"]["user_id"] == "user-001"

    def test_me_without_profile(self, client, login):
        login("ghost")

        assert client.get("/me").status_code == 404

    def test_superadmin_workspace_on_other_company(self, client, login):
        login("superadmin-001")

        response = client.get("/workspace", params={"viewing_user_id": "user-003"})

        assert response.status_code == 200
        data = response.json()
        assert data["viewing_user"]["id"] == "user-003"
        assert data["calendar"]["start_month"] == "January"
        assert data["permissions"]["can_add_task"] is True
        assert data["permissions"]["can_edit_tasks"] is False
        assert data["permissions"]["can_manage_users"] is True

    def test_admin_cannot_open_other_company(self, client, login):
        login("admin-001")

        response = client.get("/workspace", params={"viewing_user_id": "user-003"})

        assert response.status_code == 403


class TestCalendar:
    def test_fiscal_year(self, client, login):
        login("user-001")

        response = client.get("/calendar/fiscal-year", params={"start_month": "April", "on": "2024-04-08"})

        assert response.status_code == 200
        assert response.json() == {
            "week_number": 2,
            "fiscal_year_start": "2024-04-01",
            "fiscal_year_label": "April 2024 - March 2025",
            "start_month": "April",
        }

    def test_weeks_grid(self, client, login):
        login("user-003")

        response = client.get("/calendar/weeks", params={"on": "2024-06-01"})

        data = response.json()
        assert data["start_month"] == "January"
        assert len(data["weeks"]) == 52
        assert data["weeks"][0] == {"week": 1, "start": "2024-01-01", "end": "2024-01-07"}


class TestTasks:
    def test_crud(self, client, login):
        login("user-001")

        created = client.post(
            "/users/user-001/tasks", json={"week_number": 12, "day": "Monday", "text": "API task"}
        )
        assert created.status_code == 201
        task_id = created.json()["id"]

        patched = client.patch(f"/tasks/{task_id}", json={"status": "Complete", "time_taken": 30})
        assert patched.status_code == 200
        assert patched.json()["status"] == "Complete"

        listed = client.get("/users/user-001/tasks", params={"week": 12})
        assert [t["id"] for t in listed.json()] == [task_id]

        assert client.delete(f"/tasks/{task_id}").status_code == 204
        assert client.delete(f"/tasks/{task_id}").status_code == 404

    def test_status_filter(self, client, login):
        login("user-004")

        response = client.get("/users/user-004/tasks", params={"status": "Complete"})

        assert sorted(t["id"] for t in response.json()) == ["task-006", "task-008"]

    def test_user_cannot_touch_colleague_board(self, client, login):
        login("user-001")

        assert client.get("/users/user-002/tasks").status_code == 403
        response = client.post("/users/user-002/tasks", json={"week_number": 1, "day": "Monday", "text": "x"})
        assert response.status_code == 403

    def test_admin_adds_but_cannot_edit(self, client, login):
        login("admin-001")

        created = client.post("/users/user-002/tasks", json={"week_number": 3, "day": "Friday", "text": "Review"})
        assert created.status_code == 201
        assert created.json()["user_id"] == "user-002"

        response = client.patch(f"/tasks/{created.json()['id']}", json={"is_priority": True})
        assert response.status_code == 403

    def test_week_out_of_range_rejected(self, client, login):
        login("user-001")

        response = client.post("/users/user-001/tasks", json={"week_number": 53, "day": "Monday", "text": "x"})

        assert response.status_code == 422


class TestUnplanned:
    def test_plan_moves_item_to_board(self, client, login):
        login("user-001")

        response = client.post("/unplanned-tasks/unplanned-001/plan", json={"week_number": 5, "day": "Tuesday"})

        assert response.status_code == 201
        assert response.json()["text"] == "Clean up the shared drive."
        assert client.get("/unplanned-tasks").json() == []

    def test_add_update_delete(self, client, login):
        login("user-003")

        created = client.post("/unplanned-tasks", json={"text": "Order supplies"})
        assert created.status_code == 201
        item_id = created.json()["id"]

        assert client.patch(f"/unplanned-tasks/{item_id}", json={"is_priority": True}).json()["is_priority"]
        assert client.delete(f"/unplanned-tasks/{item_id}").status_code == 204

    def test_backlog_of_others_is_invisible(self, client, login):
        login("user-001")

        assert client.delete("/unplanned-tasks/unplanned-002").status_code == 404


class TestFocusNote:
    def test_save_and_read(self, client, login):
        login("user-001")

        saved = client.put(
            "/focus-note",
            json={"items": [{"id": "a", "text": "Ship v2", "status": "green"}], "pointers_text": "talk to ops"},
        )
        assert saved.status_code == 200

        data = client.get("/focus-note").json()
        assert data["items"] == [{"id": "a", "text": "Ship v2", "status": "green"}]
        assert data["pointers_text"] == "talk to ops"

    def test_empty_note(self, client, login):
        login("user-002")

        assert client.get("/focus-note").json()["items"] == []

    @pytest.mark.parametrize("reader", ["admin-001", "superadmin-001"])
    def test_private_to_owner(self, client, login, reader):
        login(reader)

        response = client.get("/focus-note", params={"user_id": "user-001"})

        assert response.status_code == 403


class TestDashboardAndExport:
    def test_dashboard_stats(self, client, login):
        login("admin-002")

        response = client.get("/users/user-003/dashboard", params={"start_week": 10, "end_week": 10})

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Week 10 Analysis for Eve Employee"
        assert data["total_tasks"] == 3
        assert data["total_time_display"] == "3h 15m"
        assert data["by_status"]["Complete"]["count"] == 1
        assert data["by_status"]["InProgress"]["count"] == 0

    def test_export_csv(self, client, login):
        login("user-003")

        response = client.get("/users/user-003/export.csv", params={"start_week": 10, "end_week": 11})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="wsp_table_Eve_Employee_W10-W11.csv"' in response.headers["content-disposition"]
        assert response.text.startswith("User Name:,Eve Employee")

    def test_other_company_dashboard_forbidden(self, client, login):
        login("admin-001")

        assert client.get("/users/user-003/dashboard").status_code == 403


class TestManagement:
    def test_non_superadmin_forbidden(self, client, login):
        login("admin-001")

        assert client.get("/management/users").status_code == 403
        assert client.get("/management/users.csv").status_code == 403

    def test_company_lifecycle(self, client, login, data_client):
        login("superadmin-001")

        created = client.post(
            "/management/companies",
            json={"name": "Northwind", "calendar_start_month": "January"},
            headers={"X-Request-ID": "req-7"},
        )
        assert created.status_code == 201
        company_id = created.json()["id"]

        duplicate = client.post("/management/companies", json={"name": "northwind"})
        assert duplicate.status_code == 409

        assert client.delete("/management/companies/company-a").status_code == 409
        assert client.delete(f"/management/companies/{company_id}").status_code == 204

        audit = data_client.executor.snapshot()["audit_logs"]
        assert audit[0]["action"] == "company_created"
        assert audit[0]["request_id"] == "req-7"

    def test_create_update_delete_user(self, client, login):
        login("superadmin-001")

        created = client.post(
            "/management/users",
            json={"name": "Gina Green", "email": "gina@example.com", "password": "secret123", "company_id": "company-a"},
        )
        assert created.status_code == 201
        new_id = created.json()["id"]

        promoted = client.patch(f"/management/users/{new_id}", json={"role": "admin"})
        assert promoted.json()["role"] == "admin"

        removed = client.delete(f"/management/users/{new_id}", params={"viewing_user_id": new_id})
        assert removed.status_code == 200
        assert removed.json() == {"deleted_user_id": new_id, "next_viewing_user_id": "admin-001"}

    def test_superadmin_cannot_be_modified(self, client, login):
        login("superadmin-001")

        assert client.patch("/management/users/superadmin-001", json={"role": "user"}).status_code == 403

    def test_user_list_csv(self, client, login):
        login("superadmin-001")

        response = client.get("/management/users.csv")

        assert response.status_code == 200
        assert "wsp_user_list_" in response.headers["content-disposition"]
        first_row = response.text.splitlines()[0]
        assert first_row.startswith("Innovate Inc.")
        assert "Unassigned" in first_row


class TestViewState:
    def test_defaults_and_persist(self, client, login, fake_redis):
        login("user-001")

        initial = client.get("/view-state").json()
        assert initial["viewing_user_id"] == "user-001"
        assert initial["current_view"] == "board"

        saved = client.put("/view-state", json={"current_week": 7, "current_view": "calendar"})
        assert saved.status_code == 200
        assert saved.json()["persisted"] is True
        assert f"{KEY_PREFIX}user-001" in fake_redis.store

        assert client.get("/view-state").json()["current_week"] == 7

    def test_management_view_forbidden_for_users(self, client, login):
        login("user-001")

        assert client.put("/view-state", json={"current_view": "management"}).status_code == 403

    def test_unknown_view_rejected(self, client, login):
        login("user-001")

        assert client.put("/view-state", json={"current_view": "kanban"}).status_code == 422

    def test_reset_returns_to_defaults(self, client, login, fake_redis):
        login("user-001")
        client.put("/view-state", json={"current_view": "calendar"})

        response = client.delete("/view-state")

        assert response.status_code == 204
        assert f"{KEY_PREFIX}user-001" not in fake_redis.store
        assert client.get("/view-state").json()["current_view"] == "board"

    def test_deleted_account_loses_saved_state(self, client, login, fake_redis):
        login("user-002")
        client.put("/view-state", json={"current_view": "calendar"})
        assert f"{KEY_PREFIX}user-002" in fake_redis.store

        login("superadmin-001")
        assert client.delete("/management/users/user-002").status_code == 200

        assert f"{KEY_PREFIX}user-002" not in fake_redis.store

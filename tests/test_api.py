from datetime import datetime

from fastapi.testclient import TestClient


def _create_custom_plan(client: TestClient) -> int:
    r = client.post(
        "/plans/templates/custom",
        json={
            "name": "Two Day Split",
            "days": [
                {"name": "Upper", "exercises": [{"exercise_library_id": 1, "target_sets": 3, "target_reps": "8"}]},
                {"name": "Lower", "exercises": []},
            ],
        },
    )
    assert r.status_code == 201, r.text
    return r.json()["plan_template_id"]


def test_health(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_user_header_is_required(client: TestClient):
    r = client.get("/plans/templates", headers={"X-User-Id": ""})
    assert r.status_code == 401


def test_unknown_template_is_404(client: TestClient):
    r = client.get("/plans/templates/4242")
    assert r.status_code == 404
    assert r.json()["detail"] == "Plan template with id=4242 not found"


def test_default_plan_without_catalog_is_409(client: TestClient):
    r = client.post(
        "/plans/user-plans/default",
        json={"goal": "strength", "experience_level": "beginner", "days_per_week": 3},
    )
    assert r.status_code == 409
    assert r.json()["detail"] == "No matching template found for selected settings"


def test_nothing_active_returns_null(client: TestClient):
    assert client.get("/plans/user-plans/active").json() is None
    assert client.get("/plans/schedule/current-week").json() is None
    assert client.get("/plans/user-plans/adherence").json()["adherence_rate"] == 0


def test_plan_lifecycle(client: TestClient):
    template_id = _create_custom_plan(client)

    r = client.get(f"/plans/templates/{template_id}")
    assert r.status_code == 200, r.text
    structure = r.json()
    week_id = structure["weeks"][0]["id"]

    r = client.post("/plans/user-plans/assign", json={"plan_template_id": template_id, "start_date": "2026-01-04T10:00:00"})
    assert r.status_code == 200, r.text
    instance_id = r.json()["instance_id"]

    r = client.get("/plans/schedule/current-week")
    assert r.status_code == 200, r.text
    schedule = r.json()
    assert schedule["plan_instance_id"] == instance_id
    assert [d["exists"] for d in schedule["days"]] == [True, True, False, False, False, False, False]
    assert schedule["days"][6]["day_type"] == "rest"

    r = client.put(
        f"/plans/schedule/weeks/{week_id}/days",
        json={"plan_template_id": template_id, "day_of_week": 3, "focus": "Push"},
    )
    assert r.status_code == 200, r.text
    upsert = r.json()
    assert upsert["created"] is True
    day_id = upsert["plan_day_id"]

    r = client.put(
        f"/plans/schedule/weeks/{week_id}/days",
        json={"plan_template_id": template_id, "day_of_week": 3, "focus": "Pull"},
    )
    assert r.json() == {"plan_day_id": day_id, "created": False, "resolved_existing": False}

    added = []
    for library_id in (11, 12):
        r = client.post(f"/plans/schedule/days/{day_id}/prescriptions", json={"exercise_library_id": library_id})
        assert r.status_code == 201, r.text
        added.append(r.json())
    assert [a["order"] for a in added] == [1, 2]

    r = client.put(
        f"/plans/schedule/days/{day_id}/prescriptions/order",
        json={"prescription_orders": [{"prescription_id": added[1]["prescription_id"], "new_order": 0}]},
    )
    assert r.status_code == 200, r.text
    assert r.json() == [added[1]["prescription_id"], added[0]["prescription_id"]]

    first_delete = client.delete(f"/plans/schedule/prescriptions/{added[0]['prescription_id']}")
    second_delete = client.delete(f"/plans/schedule/prescriptions/{added[0]['prescription_id']}")
    assert first_delete.json() == {"success": True, "already_deleted": False}
    assert second_delete.json() == {"success": True, "already_deleted": True}

    schedule = client.get("/plans/schedule/current-week").json()
    wednesday = schedule["days"][3]
    assert wednesday["id"] == day_id
    assert wednesday["focus"] == "Pull"
    assert [p["exercise_name"] for p in wednesday["prescriptions"]] == ["Exercise"]

    progress_id = schedule["days"][0]["progress_id"]
    r = client.post(
        f"/plans/user-plans/progress/{progress_id}/complete",
        json={"workout_id": 501, "progression_decision": "increase", "decision_reason": "easy"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "completed"

    r = client.post(f"/plans/user-plans/progress/{progress_id}/complete", headers={"X-User-Id": "user-2"},
                    json={"workout_id": 1, "progression_decision": "hold", "decision_reason": "x"})
    assert r.status_code == 404

    adherence = client.get("/plans/user-plans/adherence").json()
    assert adherence == {"planned_count": 3, "completed_count": 1, "skipped_count": 0, "adherence_rate": 33}

    active = client.get("/plans/user-plans/active").json()
    assert active["id"] == instance_id
    assert len(active["progress"]) == 3

    editing = client.get("/plans/user-plans/editing").json()
    assert editing["instance"]["id"] == instance_id
    assert len(editing["template"]["weeks"][0]["days"]) == 3

    today = client.get("/plans/user-plans/today", params={"date": datetime(2026, 1, 5).isoformat()}).json()
    assert today["has_session"] is True
    assert today["day_name"] == "Lower"


def test_skip_without_body(client: TestClient):
    template_id = _create_custom_plan(client)
    client.post("/plans/user-plans/assign", json={"plan_template_id": template_id})
    progress_id = client.get("/plans/user-plans/active").json()["progress"][0]["id"]

    r = client.post(f"/plans/user-plans/progress/{progress_id}/skip")
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "skipped"


def test_add_exercise_requires_reference(client: TestClient):
    template_id = _create_custom_plan(client)
    day_id = client.get(f"/plans/templates/{template_id}").json()["weeks"][0]["days"][0]["id"]

    r = client.post(f"/plans/schedule/days/{day_id}/prescriptions", json={"target_sets": 3})
    assert r.status_code == 422


def test_cleanup_endpoint_defaults_to_dry_run(client: TestClient):
    r = client.post("/plans/maintenance/duplicate-days/cleanup")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["dry_run"] is True
    assert body["duplicate_groups"] == 0

"""Tests for the HTTP shell."""

import json

from fastapi.testclient import TestClient

from calorie_flow.api.app import create_app
from tests.conftest import TODAY


def test_health_reports_readiness(container) -> None:
    app = create_app(container)

    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_mutation_before_load_is_unavailable(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/foods", json={"name": "Rice", "calories": 300})

    assert response.status_code == 503


def test_add_and_delete_food(container) -> None:
    with TestClient(create_app(container)) as client:
        first = client.post("/foods", json={"name": "Rice", "calories": 300})
        client.post("/foods", json={"name": "Chicken", "calories": 450})
        food_id = first.json()["log"]["foods"][0]["id"]
        deleted = client.delete(f"/foods/{food_id}")
        today = client.get("/today")

    assert first.status_code == 201
    assert deleted.json()["log"]["totalCalories"] == 450
    body = today.json()
    assert body["date"] == TODAY
    assert body["log"]["totalCalories"] == 450
    assert body["progress"]["target"] == 971
    assert body["progress"]["remaining"] == 521
    assert body["progress"]["overTarget"] is False


def test_blank_food_name_is_rejected(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/foods", json={"name": "  ", "calories": 100})

    assert response.status_code == 422


def test_weight_update_sets_profile_and_log(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/weight", json={"weight": 66.2})
        invalid = client.post("/weight", json={"weight": 0})

    assert response.status_code == 200
    assert response.json()["profile"]["currentWeight"] == 66.2
    assert response.json()["log"]["weightRecorded"] == 66.2
    assert invalid.status_code == 422


def test_profile_patch_and_clear_manual_tdee(container) -> None:
    with TestClient(create_app(container)) as client:
        updated = client.patch(
            "/profile",
            json={"name": "Nok", "gender": "female", "manualTDEE": 1800},
        )
        cleared = client.patch("/profile", json={"manualTDEE": None})

    assert updated.json()["target"] == 1800
    assert updated.json()["profile"]["gender"] == "female"
    assert cleared.json()["profile"]["manualTDEE"] is None
    assert cleared.json()["profile"]["name"] == "Nok"


def test_water_history_and_weekly(container) -> None:
    with TestClient(create_app(container)) as client:
        client.post("/water", json={"amountMl": 300})
        history = client.get("/history", params={"year": 2026, "month": 10})
        weekly = client.get("/stats/weekly")
        log = client.get(f"/logs/{TODAY}")
        missing = client.get("/logs/2020-01-01")

    assert history.json()["dates"] == [TODAY]
    assert len(weekly.json()["days"]) == 7
    assert log.json()["log"]["waterIntake"] == 300
    assert missing.status_code == 404


def test_export_is_a_backup_attachment(container) -> None:
    with TestClient(create_app(container)) as client:
        client.post("/foods", json={"name": "Rice", "calories": 300})
        response = client.get("/export")

    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert f"calorieflow_backup_{TODAY}.wgd" in disposition
    payload = response.json()
    assert payload["version"] == "1.0"
    assert payload["logs"][TODAY]["totalCalories"] == 300


def test_import_rejections(container) -> None:
    with TestClient(create_app(container)) as client:
        parse = client.post("/import", content=b"{nope")
        format_error = client.post(
            "/import", content=json.dumps({"user": {"name": "A"}})
        )
        binary = client.post("/import", content=b"\xff\xfe")
        profile = client.get("/profile")

    assert parse.status_code == 400
    assert parse.json()["error"] == "parse"
    assert format_error.status_code == 400
    assert format_error.json()["error"] == "format"
    assert binary.json()["error"] == "parse"
    assert profile.json()["profile"]["name"] == "Guest"


def test_import_preview_then_confirm(container) -> None:
    document = {
        "user": {"name": "Pim", "currentWeight": 61, "gender": "FEMALE"},
        "logs": {TODAY: {"date": TODAY, "foods": [], "totalCalories": 0}},
        "version": "1.0",
    }
    with TestClient(create_app(container)) as client:
        staged = client.post("/import", content=json.dumps(document))
        before = client.get("/profile")
        confirmed = client.post("/import/confirm")
        again = client.post("/import/confirm")

    assert staged.json() == {
        "ok": True,
        "preview": {"name": "Pim", "currentWeight": 61, "days": 1},
    }
    assert before.json()["profile"]["name"] == "Guest"
    assert confirmed.json()["profile"]["name"] == "Pim"
    assert confirmed.json()["profile"]["gender"] == "female"
    assert again.status_code == 409


def test_cancel_import(container) -> None:
    document = {"user": {"name": "Pim"}, "logs": {}}
    with TestClient(create_app(container)) as client:
        client.post("/import", content=json.dumps(document))
        cancelled = client.delete("/import")
        confirm = client.post("/import/confirm")

    assert cancelled.json() == {"status": "ok"}
    assert confirm.status_code == 409

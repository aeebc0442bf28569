import pytest

from penguin_nurse.models.symptoms import INTENSITY_FIELDS

COLOUR = {"hue": 55.0, "saturation": 0.6, "value": 0.9}


def wee(user_id, **overrides):
    payload = {
        "user_id": user_id,
        "time": "2025-02-03T08:30:00+11:00",
        "duration": 45,
        "urgency": 3,
        "mls": 250,
        "leakage": 0,
        "colour": COLOUR,
        "comments": "after breakfast",
    }
    payload.update(overrides)
    return payload


def test_entries_require_login(client):
    assert client.post("/api/wees", json=wee(1)).status_code == 401
    params = {"start": "2025-02-03T00:00:00Z", "end": "2025-02-04T00:00:00Z"}
    assert client.get("/api/wees", params=params).status_code == 401


def test_create_and_get_wee(user_client, normal_user):
    response = user_client.post("/api/wees", json=wee(normal_user.id))
    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == normal_user.id
    assert body["time"] == "2025-02-03T08:30:00+11:00"
    assert body["mls"] == 250
    assert body["colour"] == COLOUR
    assert body["comments"] == "after breakfast"

    fetched = user_client.get(f"/api/wees/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == body


def test_create_for_other_user_is_forbidden(user_client, other_user):
    response = user_client.post("/api/wees", json=wee(other_user.id))
    assert response.status_code == 403
    assert response.json()["detail"] == "User ID does not match the logged in user"


@pytest.mark.parametrize(
    "overrides",
    [
        {"urgency": 6},
        {"mls": -1},
        {"mls": 5001},
        {"leakage": 11},
        {"duration": -5},
        {"colour": {"hue": 400, "saturation": 0.5, "value": 0.5}},
        {"colour": {"hue": 10, "saturation": 1.5, "value": 0.5}},
        {"time": "2025-02-03T08:30:00"},
    ],
)
def test_wee_validation(user_client, normal_user, overrides):
    response = user_client.post("/api/wees", json=wee(normal_user.id, **overrides))
    assert response.status_code == 422


def test_list_range_is_half_open(user_client, normal_user):
    for when in ("2025-02-03T00:00:00Z", "2025-02-03T12:00:00Z", "2025-02-04T00:00:00Z"):
        assert user_client.post("/api/wees", json=wee(normal_user.id, time=when)).status_code == 201

    response = user_client.get(
        "/api/wees", params={"start": "2025-02-03T00:00:00Z", "end": "2025-02-04T00:00:00Z"}
    )
    assert response.status_code == 200
    times = [row["time"] for row in response.json()]
    assert times == ["2025-02-03T00:00:00Z", "2025-02-03T12:00:00Z"]


def test_list_rejects_bad_ranges(user_client, normal_user, other_user):
    params = {"start": "2025-02-04T00:00:00Z", "end": "2025-02-03T00:00:00Z"}
    assert user_client.get("/api/wees", params=params).status_code == 400

    params = {"start": "2025-02-03T00:00:00Z", "end": "2025-02-04T00:00:00Z", "user_id": other_user.id}
    assert user_client.get("/api/wees", params=params).status_code == 403


def test_entries_are_private(user_client, other_client, normal_user, other_user):
    created = user_client.post("/api/wees", json=wee(normal_user.id)).json()

    assert other_client.get(f"/api/wees/{created['id']}").status_code == 404
    assert other_client.patch(f"/api/wees/{created['id']}", json={"mls": 1}).status_code == 404
    assert other_client.delete(f"/api/wees/{created['id']}").status_code == 404
    params = {"start": "2025-02-01T00:00:00Z", "end": "2025-02-05T00:00:00Z"}
    assert other_client.get("/api/wees", params=params).json() == []

    assert user_client.get(f"/api/wees/{created['id']}").json()["mls"] == 250


def test_partial_update(user_client, normal_user):
    created = user_client.post("/api/wees", json=wee(normal_user.id)).json()

    response = user_client.patch(f"/api/wees/{created['id']}", json={"mls": 300})
    assert response.status_code == 200
    body = response.json()
    assert body["mls"] == 300
    assert body["urgency"] == 3
    assert body["comments"] == "after breakfast"
    assert body["time"] == created["time"]

    cleared = user_client.patch(f"/api/wees/{created['id']}", json={"comments": None}).json()
    assert cleared["comments"] is None
    assert cleared["mls"] == 300


def test_update_time_keeps_new_offset(user_client, normal_user):
    created = user_client.post("/api/wees", json=wee(normal_user.id)).json()
    response = user_client.patch(f"/api/wees/{created['id']}", json={"time": "2025-02-03T09:00:00+10:00"})
    assert response.status_code == 200
    assert response.json()["time"] == "2025-02-03T09:00:00+10:00"


def test_update_validation(user_client, normal_user, other_user):
    created = user_client.post("/api/wees", json=wee(normal_user.id)).json()
    url = f"/api/wees/{created['id']}"

    assert user_client.patch(url, json={"urgency": 9}).status_code == 422
    assert user_client.patch(url, json={"urgency": None}).status_code == 422
    assert user_client.patch(url, json={"user_id": other_user.id}).status_code == 403
    assert user_client.get(url).json()["urgency"] == 3


def test_delete(user_client, normal_user):
    created = user_client.post("/api/wees", json=wee(normal_user.id)).json()
    url = f"/api/wees/{created['id']}"

    assert user_client.delete(url).status_code == 204
    assert user_client.get(url).status_code == 404
    assert user_client.delete(url).status_code == 404


def test_delete_refreshes_session_cookie(user_client, normal_user):
    note = user_client.post(
        "/api/notes",
        json={"user_id": normal_user.id, "time": "2025-02-03T09:00:00+11:00", "comments": "checkup"},
    ).json()

    response = user_client.delete(f"/api/notes/{note['id']}")
    assert response.status_code == 204
    assert response.content == b""
    cookie = response.headers["set-cookie"]
    assert cookie.startswith("penguin_nurse_session=")
    assert "Max-Age=604800" in cookie


def test_wee_urge(user_client, normal_user):
    payload = {"user_id": normal_user.id, "time": "2025-02-03T10:00:00+11:00", "urgency": 4}
    response = user_client.post("/api/wee_urges", json=payload)
    assert response.status_code == 201
    assert response.json()["urgency"] == 4
    assert user_client.post("/api/wee_urges", json={**payload, "urgency": 6}).status_code == 422


def test_poo(user_client, normal_user):
    payload = {
        "user_id": normal_user.id,
        "time": "2025-02-03T07:15:00+11:00",
        "duration": 300,
        "urgency": 2,
        "quantity": 3,
        "bristol": 4,
        "colour": {"hue": 30.0, "saturation": 0.8, "value": 0.4},
    }
    response = user_client.post("/api/poos", json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["bristol"] == 4
    assert body["colour"]["hue"] == 30.0

    assert user_client.post("/api/poos", json={**payload, "bristol": 8}).status_code == 422
    assert user_client.post("/api/poos", json={**payload, "quantity": 6}).status_code == 422


def test_exercise(user_client, normal_user):
    payload = {
        "user_id": normal_user.id,
        "time": "2025-02-03T17:00:00+11:00",
        "duration": 1800,
        "location": "  beach  ",
        "distance": "5.25",
        "calories": 300,
        "rpe": 5,
        "exercise_type": "walking",
    }
    response = user_client.post("/api/exercises", json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["location"] == "beach"
    assert body["distance"] == "5.25"
    assert body["rpe_title"] == "Hard"
    assert body["exercise_type"] == "walking"

    assert user_client.post("/api/exercises", json={**payload, "rpe": 11}).status_code == 422
    assert user_client.post("/api/exercises", json={**payload, "exercise_type": "swimming"}).status_code == 422

    cleared = user_client.patch(f"/api/exercises/{body['id']}", json={"rpe": None}).json()
    assert cleared["rpe"] is None
    assert cleared["rpe_title"] is None


def test_health_metric_blood_pressure_pair(user_client, normal_user):
    base = {"user_id": normal_user.id, "time": "2025-02-03T08:00:00+11:00"}

    assert user_client.post("/api/health_metrics", json={**base, "systolic_bp": 120}).status_code == 422
    response = user_client.post(
        "/api/health_metrics", json={**base, "systolic_bp": 80, "diastolic_bp": 120}
    )
    assert response.status_code == 422

    response = user_client.post(
        "/api/health_metrics",
        json={**base, "systolic_bp": 120, "diastolic_bp": 80, "pulse": 64, "blood_glucose": "5.6"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["blood_glucose"] == "5.6"
    assert body["weight"] is None

    url = f"/api/health_metrics/{body['id']}"
    assert user_client.patch(url, json={"diastolic_bp": None}).status_code == 422
    cleared = user_client.patch(url, json={"systolic_bp": None, "diastolic_bp": None})
    assert cleared.status_code == 200
    assert cleared.json()["systolic_bp"] is None
    assert cleared.json()["pulse"] == 64


def test_symptom_descriptions_follow_intensity(user_client, normal_user):
    base = {"user_id": normal_user.id, "time": "2025-02-03T08:00:00+11:00"}

    assert user_client.post("/api/symptoms", json={**base, "nasal_symptom": 3}).status_code == 422
    assert (
        user_client.post("/api/symptoms", json={**base, "nasal_symptom_description": "runny"}).status_code
        == 422
    )

    response = user_client.post(
        "/api/symptoms",
        json={**base, "nasal_symptom": 3, "nasal_symptom_description": "runny", "headache": 2},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["headache"] == 2
    assert body["cough"] == 0
    assert set(INTENSITY_FIELDS) <= set(body)

    url = f"/api/symptoms/{body['id']}"
    assert user_client.patch(url, json={"nasal_symptom": 0}).status_code == 422
    cleared = user_client.patch(url, json={"nasal_symptom": 0, "nasal_symptom_description": None})
    assert cleared.status_code == 200
    assert cleared.json()["nasal_symptom_description"] is None


def test_symptom_intensity_range(user_client, normal_user):
    payload = {"user_id": normal_user.id, "time": "2025-02-03T08:00:00+11:00", "fever": 11}
    assert user_client.post("/api/symptoms", json=payload).status_code == 422


def test_reflux(user_client, normal_user):
    payload = {
        "user_id": normal_user.id,
        "time": "2025-02-03T22:00:00+11:00",
        "duration": 600,
        "location": "throat",
        "severity": 4,
    }
    response = user_client.post("/api/refluxs", json=payload)
    assert response.status_code == 201
    assert response.json()["severity"] == 4
    assert user_client.post("/api/refluxs", json={**payload, "severity": 11}).status_code == 422


def test_note_blank_comments(user_client, normal_user):
    payload = {"user_id": normal_user.id, "time": "2025-02-03T08:00:00+11:00", "comments": "   "}
    response = user_client.post("/api/notes", json=payload)
    assert response.status_code == 201
    assert response.json()["comments"] is None

import pytest

from carver.routes import generator_api


def create(client, **body):
    r = client.post("/api/generators", json=body)
    assert r.status_code == 201, r.get_json()
    return r.get_json()


def test_create_generator_defaults(client):
    data = create(client, seed=7)
    assert data["phase"] == "room"
    assert data["grid_size"] == 15
    assert data["seed"] == 7
    assert data["done"] is False
    assert data["rooms"] == [] and data["maze"] == [] and data["main_region"] == []
    assert len(data["rows"]) == 15
    assert data["metrics"]["steps"] == 0


def test_step_and_fetch_state(client):
    gid = create(client, seed=7, grid_size=11)["id"]
    r = client.post(f"/api/generators/{gid}/step", json={"count": 5})
    assert r.status_code == 200
    stepped = r.get_json()
    assert stepped["metrics"]["steps"] == 5
    r = client.get(f"/api/generators/{gid}")
    assert r.status_code == 200
    assert r.get_json() == stepped


def test_run_reset_and_replay(client):
    gid = create(client, seed=31, grid_size=13)["id"]
    done = client.post(f"/api/generators/{gid}/run").get_json()
    assert done["done"] is True
    assert done["phase"] == "done"
    assert done["connectors"] == 0 or done["metrics"]["connectors_stranded"] > 0
    reset = client.post(f"/api/generators/{gid}/reset").get_json()
    assert reset["phase"] == "room"
    assert reset["seed"] == 31
    again = client.post(f"/api/generators/{gid}/run").get_json()
    assert again["rows"] == done["rows"]


def test_step_on_finished_generator_is_no_op(client):
    gid = create(client, seed=2, grid_size=9)["id"]
    done = client.post(f"/api/generators/{gid}/run").get_json()
    after = client.post(f"/api/generators/{gid}/step", json={"count": 10}).get_json()
    assert after["metrics"]["steps"] == done["metrics"]["steps"]
    assert after["maze"] == done["maze"]


def test_run_stall_returns_conflict(client):
    gid = create(client, seed=5)["id"]
    r = client.post(f"/api/generators/{gid}/run", json={"max_steps": 2})
    assert r.status_code == 409
    data = r.get_json()
    assert "did not finish" in data["error"]
    assert data["metrics"]["steps"] == 2


def test_delete_generator(client):
    gid = create(client, seed=1)["id"]
    r = client.delete(f"/api/generators/{gid}")
    assert r.status_code == 200
    assert r.get_json() == {"deleted": gid}
    assert client.get(f"/api/generators/{gid}").status_code == 404
    assert client.delete(f"/api/generators/{gid}").status_code == 404


def test_unknown_generator_404(client):
    r = client.post("/api/generators/nope/step", json={})
    assert r.status_code == 404
    assert "unknown generator" in r.get_json()["error"]


@pytest.mark.parametrize(
    "body",
    [
        {"grid_size": 10},
        {"grid_size": 7},
        {"grid_size": "27"},
        {"room_attempts": 0},
        {"extra_connector_chance": 2},
    ],
)
def test_invalid_settings_rejected(client, body):
    r = client.post("/api/generators", json=body)
    assert r.status_code == 400
    assert "error" in r.get_json()


@pytest.mark.parametrize("count", [0, -3, "5", True])
def test_invalid_step_count(client, count):
    gid = create(client, seed=1)["id"]
    r = client.post(f"/api/generators/{gid}/step", json={"count": count})
    assert r.status_code == 400


def test_bool_seed_rejected(client):
    r = client.post("/api/generators", json={"seed": True})
    assert r.status_code == 400


def test_string_seed_is_stable(client):
    a = create(client, seed="crypt")
    b = create(client, seed="crypt")
    assert a["seed"] == b["seed"]
    assert create(client, seed="123")["seed"] == 123


def test_oldest_generator_evicted(client):
    ids = [create(client, seed=i)["id"] for i in range(5)]
    assert client.get(f"/api/generators/{ids[0]}").status_code == 404
    for gid in ids[1:]:
        assert client.get(f"/api/generators/{gid}").status_code == 200
    assert len(generator_api._generators) == 4


def test_finished_dungeon_endpoint_caches(client):
    r1 = client.get("/api/dungeon?seed=77&grid_size=11&room_attempts=40")
    assert r1.status_code == 200
    d1 = r1.get_json()
    assert d1["done"] is True
    assert d1["grid_size"] == 11
    chance = client.application.config["CARVER_EXTRA_CONNECTOR_CHANCE"]
    assert (77, 11, 40, chance) in generator_api._dungeon_cache
    r2 = client.get("/api/dungeon?seed=77&grid_size=11&room_attempts=40")
    assert r2.get_json() == d1


def test_finished_dungeon_cache_can_be_disabled(client, monkeypatch):
    monkeypatch.setenv("CARVER_DISABLE_CACHE", "1")
    r = client.get("/api/dungeon?seed=9&grid_size=9")
    assert r.status_code == 200
    assert generator_api._dungeon_cache == {}


def test_finished_dungeon_bad_size(client):
    r = client.get("/api/dungeon?seed=1&grid_size=12")
    assert r.status_code == 400
    assert "odd" in r.get_json()["error"]


@pytest.mark.parametrize("body", [{"grid_size": 401}, {"grid_size": 103}, {"room_attempts": 2_000_000}])
def test_oversized_settings_rejected(client, body):
    r = client.post("/api/generators", json=body)
    assert r.status_code == 400
    assert "must be an integer in" in r.get_json()["error"]
    assert generator_api._generators == {}


@pytest.mark.parametrize(
    "query",
    ["grid_size=401", "room_attempts=999999", "grid_size=big", "room_attempts=0"],
)
def test_finished_dungeon_oversized_rejected(client, query):
    r = client.get(f"/api/dungeon?seed=1&{query}")
    assert r.status_code == 400
    assert "must be an integer in" in r.get_json()["error"]
    assert generator_api._dungeon_cache == {}


def test_size_caps_follow_app_config():
    from carver import create_app

    app = create_app({"TESTING": True, "CARVER_MAX_GRID_SIZE": 11, "CARVER_MAX_ROOM_ATTEMPTS": 30})
    client = app.test_client()
    assert client.post("/api/generators", json={"grid_size": 13}).status_code == 400
    assert client.post("/api/generators", json={"grid_size": 11, "room_attempts": 31}).status_code == 400
    assert client.post("/api/generators", json={"grid_size": 11, "room_attempts": 30}).status_code == 201
    assert client.get("/api/dungeon?seed=1&grid_size=13").status_code == 400
    assert client.get("/api/dungeon?seed=1&grid_size=11&room_attempts=30").status_code == 200


def test_finished_dungeon_uses_configured_extra_connector_chance():
    from carver import create_app

    app = create_app({"TESTING": True, "CARVER_EXTRA_CONNECTOR_CHANCE": 1.0})
    client = app.test_client()
    cached = client.get("/api/dungeon?seed=125&grid_size=27&room_attempts=200").get_json()
    assert (125, 27, 200, 1.0) in generator_api._dungeon_cache

    gid = create(client, seed=125, grid_size=27, room_attempts=200)["id"]
    stepped = client.post(f"/api/generators/{gid}/run").get_json()
    assert cached["rows"] == stepped["rows"]
    assert cached["metrics"]["extra_connectors_opened"] == stepped["metrics"]["extra_connectors_opened"]

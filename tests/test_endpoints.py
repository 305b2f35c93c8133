import json
from datetime import date, timedelta

from fastapi.testclient import TestClient

from taskcal.calendar.store import JsonEventStore
from taskcal.calendar.types import Event
from taskcal.main import app


client = TestClient(app)

SOON = (date.today() + timedelta(days=2)).isoformat()


def _create_task(**overrides):
    payload = {
        "title": "Write report",
        "description": "Quarterly numbers",
        "dueDate": SOON,
        "priority": "high",
        "category": "work",
        "startTime": "14:00",
        "endTime": "15:00",
    }
    payload.update(overrides)
    r = client.post("/tasks", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def _seed_events(*events):
    store = JsonEventStore()
    for event in events:
        store.add(event)


def test_root_ok():
    r = client.get("/")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


# --- tasks -----------------------------------------------------------------

def test_create_task_returns_camel_case():
    task = _create_task()
    assert len(task["id"]) == 9
    assert task["dueDate"] == SOON
    assert task["status"] == "pending"
    assert task["createdAt"]


def test_create_task_projects_calendar_event():
    task = _create_task()
    r = client.get(f"/events/{task['id']}")
    assert r.status_code == 200
    event = r.json()
    assert event["date"] == SOON
    assert (event["startTime"], event["endTime"]) == ("14:00", "15:00")


def test_create_task_validation_errors():
    r = client.post("/tasks", json={"title": "", "dueDate": "2000-01-01", "startTime": "10:00", "endTime": "09:00"})
    assert r.status_code == 422
    detail = r.json()["detail"]
    assert detail["title"] == "Title is required"
    assert detail["dueDate"] == "Due date cannot be in the past"
    assert detail["endTime"] == "End time must be after start time"
    assert client.get("/tasks").json() == []


def test_create_task_rejects_unknown_priority():
    r = client.post("/tasks", json={"title": "x", "dueDate": SOON, "priority": "urgent"})
    assert r.status_code == 422


def test_list_tasks_filter_and_search():
    _create_task(title="Buy milk")
    done = _create_task(title="Ship release")
    client.post(f"/tasks/{done['id']}/toggle")

    titles = [t["title"] for t in client.get("/tasks").json()]
    assert titles == ["Ship release", "Buy milk"]
    assert [t["title"] for t in client.get("/tasks", params={"filter": "completed"}).json()] == ["Ship release"]
    assert [t["title"] for t in client.get("/tasks", params={"search": "MILK"}).json()] == ["Buy milk"]
    assert client.get("/tasks", params={"filter": "overdue"}).json() == []
    assert client.get("/tasks", params={"filter": "archived"}).status_code == 422


def test_task_stats():
    _create_task()
    _create_task()
    r = client.get("/tasks/stats")
    assert r.status_code == 200
    data = r.json()
    assert data["stats"] == {"total": 2, "completed": 0, "pending": 2, "overdue": 0}
    assert data["chart"]["data"] == [0, 2, 0]
    assert data["chart"]["percentages"] == [0.0, 100.0, 0.0]


def test_update_task_merges_and_resyncs_event():
    task = _create_task()
    r = client.put(f"/tasks/{task['id']}", json={"title": "Renamed", "startTime": "16:00", "endTime": "17:00"})
    assert r.status_code == 200
    assert r.json()["title"] == "Renamed"
    assert r.json()["priority"] == "high"

    event = client.get(f"/events/{task['id']}").json()
    assert event["title"] == "Renamed"
    assert event["startTime"] == "16:00"


def test_update_task_validates_merged_form():
    task = _create_task()
    r = client.put(f"/tasks/{task['id']}", json={"endTime": "13:00"})
    assert r.status_code == 422
    assert r.json()["detail"] == {"endTime": "End time must be after start time"}


def test_update_unknown_task():
    assert client.put("/tasks/missing", json={"title": "x"}).status_code == 404


def test_toggle_task():
    task = _create_task()
    assert client.post(f"/tasks/{task['id']}/toggle").json()["status"] == "completed"
    assert client.post(f"/tasks/{task['id']}/toggle").json()["status"] == "pending"
    assert client.post("/tasks/missing/toggle").status_code == 404


def test_delete_task_removes_projected_event():
    task = _create_task()
    r = client.delete(f"/tasks/{task['id']}")
    assert r.status_code == 204
    assert client.get("/tasks").json() == []
    assert client.get(f"/events/{task['id']}").status_code == 404
    assert client.delete(f"/tasks/{task['id']}").status_code == 404


def test_reorder_tasks():
    a = _create_task(title="A")
    b = _create_task(title="B")
    c = _create_task(title="C")

    r = client.post("/tasks/reorder", json={"activeId": c["id"], "overId": a["id"]})
    assert r.status_code == 200
    assert [t["title"] for t in r.json()] == ["B", "A", "C"]

    r = client.post("/tasks/reorder", json={"activeId": b["id"], "overId": None})
    assert [t["title"] for t in r.json()] == ["B", "A", "C"]


# --- events ----------------------------------------------------------------

def test_create_and_delete_event():
    r = client.post("/events", json={
        "title": "Standup",
        "date": SOON,
        "startTime": "09:00",
        "endTime": "09:15",
        "category": "meetings",
        "attendees": ["Ada"],
    })
    assert r.status_code == 201
    event = r.json()
    assert event["description"] is None
    assert event["attendees"] == ["Ada"]

    assert [e["id"] for e in client.get("/events").json()] == [event["id"]]
    assert client.delete(f"/events/{event['id']}").status_code == 204
    assert client.delete(f"/events/{event['id']}").status_code == 404
    assert client.get(f"/events/{event['id']}").status_code == 404


def test_create_event_validation_errors():
    r = client.post("/events", json={"title": "Party", "date": SOON, "startTime": "18:00", "endTime": "20:00", "category": "fun"})
    assert r.status_code == 422
    assert r.json()["detail"] == {"category": "Invalid category"}


def test_replace_event_keeps_id_and_position():
    form = {"date": SOON, "startTime": "09:00", "endTime": "10:00", "category": "work"}
    first = client.post("/events", json={**form, "title": "First"}).json()
    second = client.post("/events", json={**form, "title": "Second"}).json()

    r = client.put(f"/events/{first['id']}", json={
        **form,
        "title": "Moved",
        "startTime": "15:00",
        "endTime": "16:00",
        "category": "breaks",
    })
    assert r.status_code == 200
    assert r.json()["id"] == first["id"]
    assert r.json()["category"] == "breaks"

    events = client.get("/events").json()
    assert [e["id"] for e in events] == [first["id"], second["id"]]
    assert events[0]["title"] == "Moved"
    assert events[0]["startTime"] == "15:00"


def test_replace_event_validates_and_rejects_unknown_id():
    form = {"title": "Standup", "date": SOON, "startTime": "09:00", "endTime": "09:15", "category": "meetings"}
    event = client.post("/events", json=form).json()

    r = client.put(f"/events/{event['id']}", json={**form, "endTime": "08:00"})
    assert r.status_code == 422
    assert r.json()["detail"] == {"endTime": "End time must be after start time"}
    assert client.get(f"/events/{event['id']}").json()["endTime"] == "09:15"

    assert client.put("/events/missing", json=form).status_code == 404


def test_calendar_only_event_survives_task_changes():
    r = client.post("/events", json={"title": "Gym", "date": SOON, "startTime": "07:00", "endTime": "08:00", "category": "personal"})
    gym = r.json()

    task = _create_task()
    client.delete(f"/tasks/{task['id']}")

    assert [e["id"] for e in client.get("/events").json()] == [gym["id"]]


# --- calendar --------------------------------------------------------------

def _write_tasks(data_dir, *tasks):
    (data_dir / "tasks.json").write_text(json.dumps(list(tasks)), encoding="utf-8")


def test_calendar_view_shows_stored_tasks(isolated_storage):
    """Tasks already on disk appear on the calendar without being edited first."""
    _write_tasks(isolated_storage, {
        "id": "t1",
        "title": "Dentist",
        "dueDate": SOON,
        "startTime": "11:00",
        "endTime": "12:00",
        "category": "personal",
    })

    data = client.get("/calendar/view", params={"date": SOON, "view": "day"}).json()
    assert [e["id"] for e in data["days"][0]["events"]] == ["t1"]
    assert data["days"][0]["events"][0]["startTime"] == "11:00"

    r = client.get("/calendar/slot", params={"hour": 11, "date": SOON})
    assert [p["event_id"] for p in r.json()["placements"]] == ["t1"]


def test_memory_event_store_is_rebuilt_from_tasks(isolated_storage, monkeypatch):
    monkeypatch.setenv("EVENT_STORE", "memory")
    _write_tasks(isolated_storage, {"id": "t1", "title": "Dentist", "dueDate": SOON})

    events = client.get("/events").json()
    assert [e["id"] for e in events] == ["t1"]
    assert (events[0]["startTime"], events[0]["endTime"]) == ("09:00", "10:00")
    assert client.get("/events/t1").status_code == 200


def test_unreadable_due_date_is_not_overdue(isolated_storage):
    _write_tasks(isolated_storage, {"id": "t1", "title": "Legacy", "dueDate": "2025-7-2"})

    r = client.get("/tasks", params={"filter": "overdue"})
    assert r.status_code == 200
    assert r.json() == []
    assert client.get("/tasks/stats").json()["stats"]["overdue"] == 0


def test_calendar_day_view():
    _seed_events(
        Event(id="a", title="A", date="2025-07-22", start_time="09:00", end_time="10:00", category="work"),
        Event(id="b", title="B", date="2025-07-22", start_time="09:30", end_time="10:30", category="meetings"),
        Event(id="c", title="C", date="2025-07-23", start_time="09:00", end_time="10:00", category="breaks"),
    )

    r = client.get("/calendar/view", params={"date": "2025-07-22", "view": "day"})
    assert r.status_code == 200
    data = r.json()
    assert data["title"] == "Tue, 22 July 2025"
    assert data["granularity"] == "day"
    assert data["buckets"] == ["2025-07-22"]
    assert len(data["time_slots"]) == 24
    assert data["category_counts"] == {"work": 1, "personal": 0, "breaks": 1, "meetings": 1}

    day = data["days"][0]
    assert [e["id"] for e in day["events"]] == ["a", "b"]
    assert day["events"][0]["startTime"] == "09:00"
    placements = {p["event_id"]: p for p in day["placements"]}
    assert placements["a"]["column"] == 0
    assert placements["b"]["column"] == 1
    assert placements["b"]["width_percent"] == 50.0
    assert placements["a"]["top"] == 540
    assert "duration_ms" in data


def test_calendar_week_view_defaults_from_config(monkeypatch):
    monkeypatch.delenv("DEFAULT_VIEW", raising=False)
    r = client.get("/calendar/view", params={"date": "2025-07-22"})
    data = r.json()
    assert data["granularity"] == "week"
    assert data["buckets"][0] == "2025-07-20"
    assert len(data["days"]) == 7

    monkeypatch.setenv("DEFAULT_VIEW", "month")
    data = client.get("/calendar/view", params={"date": "2025-07-22"}).json()
    assert data["granularity"] == "month"
    assert data["title"] == "July 2025"
    # July 2025 starts on a Tuesday
    assert data["buckets"][:3] == [None, None, "2025-07-01"]
    assert len(data["days"]) == 31


def test_calendar_month_view_overflow():
    _seed_events(*[
        Event(id=f"e{i}", title=f"E{i}", date="2025-07-10", start_time=f"{9 + i:02d}:00", end_time=f"{10 + i:02d}:00")
        for i in range(4)
    ])
    data = client.get("/calendar/view", params={"date": "2025-07-22", "view": "month"}).json()
    cell = next(day for day in data["days"] if day["date"] == "2025-07-10")
    assert [e["id"] for e in cell["events"]] == ["e0", "e1"]
    assert cell["overflow"] == 2
    assert cell["placements"] == []


def test_calendar_view_rejects_bad_date():
    r = client.get("/calendar/view", params={"date": "2025-02-30"})
    assert r.status_code == 422
    assert "Invalid date format" in r.json()["detail"]
    assert client.get("/calendar/view", params={"date": "07/22/2025"}).status_code == 422
    assert client.get("/calendar/view", params={"view": "year"}).status_code == 422


def test_calendar_navigate():
    r = client.get("/calendar/navigate", params={"direction": "next", "date": "2025-07-22", "view": "week"})
    assert r.json() == {"date": "2025-07-29", "view": "week", "title": "Tue, 29 July 2025"}

    r = client.get("/calendar/navigate", params={"direction": "prev", "date": "2025-07-22", "view": "day"})
    assert r.json()["date"] == "2025-07-21"

    # Month steps let the day overflow into the following month
    r = client.get("/calendar/navigate", params={"direction": "next", "date": "2025-01-31", "view": "month"})
    assert r.json()["date"] == "2025-03-03"
    assert r.json()["title"] == "March 2025"

    assert client.get("/calendar/navigate", params={"direction": "up"}).status_code == 422


def test_calendar_slot():
    _seed_events(
        Event(id="a", title="A", date="2025-07-22", start_time="09:00", end_time="11:00"),
        Event(id="b", title="B", date="2025-07-22", start_time="13:00", end_time="14:00"),
    )
    r = client.get("/calendar/slot", params={"hour": 10, "date": "2025-07-22"})
    assert r.status_code == 200
    data = r.json()
    assert data["time"] == "10:00"
    assert [p["event_id"] for p in data["placements"]] == ["a"]

    assert client.get("/calendar/slot", params={"hour": 12, "date": "2025-07-22"}).json()["placements"] == []
    assert client.get("/calendar/slot", params={"hour": 24}).status_code == 422


def test_calendar_interval_strategy_param():
    _seed_events(
        Event(id="a", title="A", date="2025-07-22", start_time="09:00", end_time="10:00"),
        Event(id="b", title="B", date="2025-07-22", start_time="10:30", end_time="11:30"),
        Event(id="c", title="C", date="2025-07-22", start_time="09:30", end_time="11:00"),
    )
    params = {"date": "2025-07-22", "view": "day"}

    local = {p["event_id"]: p for p in client.get("/calendar/view", params=params).json()["days"][0]["placements"]}
    interval = {
        p["event_id"]: p
        for p in client.get("/calendar/view", params={**params, "strategy": "interval"}).json()["days"][0]["placements"]
    }

    assert local["c"]["column_count"] == 3
    assert {p["column_count"] for p in interval.values()} == {2}
    assert (interval["a"]["column"], interval["c"]["column"], interval["b"]["column"]) == (0, 1, 0)


# --- settings --------------------------------------------------------------

def test_theme_routes(monkeypatch):
    monkeypatch.delenv("THEME_DEFAULT_DARK", raising=False)
    assert client.get("/settings/theme").json() == {"isDark": False}
    assert client.post("/settings/theme/toggle").json() == {"isDark": True}
    assert client.put("/settings/theme", json={"isDark": False}).json() == {"isDark": False}
    assert client.get("/settings/theme").json() == {"isDark": False}
    assert client.put("/settings/theme", json={}).status_code == 422

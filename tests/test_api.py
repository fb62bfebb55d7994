from border_core import data as bd

from conftest import HEADER


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_meta_years(client):
    r = client.get("/meta/years")
    assert r.status_code == 200
    assert r.json() == {"years": [2019, 2021]}


def test_scatter(client):
    r = client.post("/scatter", json={})
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert [p["id"] for p in data["points"]] == [0, 1, 3]
    assert data["points"][2]["price"] == 12500.5
    assert "scatter" in data["charts"]


def test_scatter_with_filters(client):
    r = client.post("/scatter", json={"year_min": 2020, "sort_by": "price"})
    assert r.status_code == 200
    assert [p["id"] for p in r.json()["points"]] == [3]


def test_scatter_empty_state(client, write_data):
    write_data(HEADER + "March 2020,100,,\n")
    r = client.post("/scatter", json={})
    assert r.status_code == 200
    assert r.json()["status"] == "empty"
    assert r.json()["message"] == "No data available."


def test_scatter_missing_file(client, data_dir):
    (data_dir / bd.DATA_FILE).unlink()
    r = client.post("/scatter", json={})
    assert r.status_code == 500
    body = r.json()
    assert body["type"] == "load"
    assert body["error"].startswith("Error loading file:")


def test_scatter_parse_error(client, write_data):
    write_data(HEADER + '1/1/2019,100,"unfinished narrative,\n')
    r = client.post("/scatter", json={})
    assert r.status_code == 500
    assert r.json()["type"] == "parse"


def test_point_detail(client):
    r = client.get("/points/0")
    assert r.status_code == 200
    body = r.json()
    assert body["year"] == 2019
    assert body["price_display"] == "$8,000.00"
    assert body["source_href"] == "https://cbp.gov"


def test_point_without_source(client):
    body = client.get("/points/3").json()
    assert body["source"] is None
    assert body["source_href"] is None


def test_dropped_point_is_not_found(client):
    r = client.get("/points/2")
    assert r.status_code == 404


def test_tooltip_position(client):
    cases = [
        ({"click_x": 5, "click_y": 300, "container_width": 1000}, {"left": 10, "top": 40}),
        ({"click_x": 950, "click_y": 300, "container_width": 1000}, {"left": 690, "top": 40}),
        ({"click_x": 500, "click_y": 20, "container_width": 1000}, {"left": 500, "top": 50}),
        ({"click_x": 120, "click_y": 200}, {"left": 120, "top": 50}),
    ]
    for req, expected in cases:
        r = client.post("/tooltip/position", json=req)
        assert r.status_code == 200
        assert r.json() == expected


def test_debug(client):
    r = client.post("/debug", json={})
    assert r.status_code == 200
    assert r.json()["dropped_ids"] == [2, 4]


def test_export(client):
    r = client.post("/export", json={"year_max": 2019})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    lines = r.text.strip().splitlines()
    assert lines[0] == "id,year,price,date,narrative,source"
    assert len(lines) == 3

import io, csv
import re

from main import app
from security import verify_dashboard


def _seed(client, rate, n, name="user", domain="example.com"):
    for i in range(n):
        r = client.post("/api/responses", json={
            "name": f"{name} {i}",
            "email": f"{name}{i}@{domain}",
            "responses": rate("3"),
            "suggestions": "",
        })
        assert r.status_code == 201, r.text


def test_login_gate(client, monkeypatch):
    monkeypatch.delitem(app.dependency_overrides, verify_dashboard)

    assert "Enter Password" in client.get("/responses").text
    assert client.get("/api/responses").status_code == 401

    bad = client.post("/api/dashboard/login", json={"password": "nope"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Incorrect password."

    ok = client.post("/api/dashboard/login", json={"password": "test-pass"})
    assert ok.status_code == 200
    assert client.cookies.get("dashboard_authenticated") == "true"

    page = client.get("/responses")
    assert "Enter Password" not in page.text
    assert "Survey Responses" in page.text
    assert client.get("/api/responses").status_code == 200


def test_newest_first_and_pagination(client, rate):
    _seed(client, rate, 45)
    first = client.get("/api/responses").json()
    assert first["total"] == 45 and first["total_pages"] == 3
    assert len(first["items"]) == 20
    assert first["items"][0]["name"] == "user 44"

    last = client.get("/api/responses", params={"page": 3}).json()
    assert len(last["items"]) == 5
    assert last["items"][-1]["name"] == "user 0"

    clamped = client.get("/api/responses", params={"page": 99}).json()
    assert clamped["page"] == 3

    assert client.get("/api/responses", params={"page_size": 0}).status_code == 400


def test_search_is_case_insensitive(client, rate):
    _seed(client, rate, 3, name="alice", domain="example.com")
    _seed(client, rate, 2, name="bob", domain="corp.io")
    res = client.get("/api/responses", params={"search": "ALICE"}).json()
    assert res["total"] == 3
    assert all(item["name"].startswith("alice") for item in res["items"])
    assert client.get("/api/responses", params={"search": "CORP.IO"}).json()["total"] == 2


def test_detail(client, rate):
    _seed(client, rate, 1)
    rid = client.get("/api/responses").json()["items"][0]["id"]
    assert client.get(f"/api/responses/{rid}").json()["id"] == rid
    assert client.get("/api/responses/999999").status_code == 404


def test_export_csv_uses_filtered_set(client, rate):
    _seed(client, rate, 3, name="alice")
    _seed(client, rate, 2, name="bob")

    r = client.get("/api/responses/export.csv", params={"search": "bob"})
    assert r.status_code == 200
    assert "text/csv" in r.headers.get("content-type", "")
    assert re.search(r"filename=survey_responses_\d{4}-\d{2}-\d{2}_\d{2}-\d{2}\.csv",
                     r.headers["content-disposition"])

    rows = list(csv.reader(io.StringIO(r.content.decode("utf-8"))))
    assert rows[0][:4] == ["name", "email", "domain", "created_at"]
    assert len(rows) == 3
    assert {row[0] for row in rows[1:]} == {"bob 0", "bob 1"}


def test_export_pdf(client, rate):
    _seed(client, rate, 2)
    r = client.get("/api/responses/export.pdf")
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert r.content.startswith(b"%PDF")
    assert re.search(r"filename=survey_responses_.*\.pdf", r.headers["content-disposition"])


def test_dashboard_page_views(client, rate):
    _seed(client, rate, 25)
    client.cookies.set("dashboard_authenticated", "true")
    page = client.get("/responses", params={"view": "table", "page": 2}).text
    assert "<table>" in page
    assert "Page 2 of 2" in page
    assert "user 0" in page and "user 24" not in page

    rid = client.get("/api/responses").json()["items"][0]["id"]
    detail = client.get("/responses", params={"selected": rid}).text
    assert 'id="detail"' in detail


def test_store_read_failure_is_visible(client, fake_store, monkeypatch):
    monkeypatch.setattr("main.ResponseStore", lambda db: fake_store(fail_reads=True))
    r = client.get("/api/responses")
    assert r.status_code == 503
    assert client.get("/api/responses/export.csv").status_code == 503

    client.cookies.set("dashboard_authenticated", "true")
    page = client.get("/responses").text
    assert 'role="alert"' in page

"""Tests for the layout, figure and tree view endpoints."""


class TestLayoutEndpoint:
    def test_empty(self, client):
        resp = client.get("/api/layout")
        assert resp.status_code == 200
        assert resp.json() == {"positions": {}, "generations": {}, "edges": []}

    def test_family(self, client, family_graph):
        data = client.get("/api/layout").json()
        ids = {k: v["id"] for k, v in family_graph.items()}
        assert data["generations"] == {
            ids["grandpa"]: 0,
            ids["mom"]: 0,
            ids["dad"]: 1,
            # reached through mom, a root, before dad is dequeued
            ids["child"]: 1,
        }
        assert set(data["positions"]) == set(ids.values())
        kinds = sorted(e["kind"] for e in data["edges"])
        assert kinds == ["hierarchy", "hierarchy", "hierarchy", "partnership"]

    def test_generation_rows(self, client, family_graph):
        data = client.get("/api/layout").json()
        pos = data["positions"]
        grandpa, mom = pos[family_graph["grandpa"]["id"]], pos[family_graph["mom"]["id"]]
        dad, child = pos[family_graph["dad"]["id"]], pos[family_graph["child"]["id"]]
        assert grandpa["y"] == mom["y"] < dad["y"] == child["y"]
        assert grandpa["x"] == -mom["x"]
        assert dad["x"] == -child["x"]

    def test_stable_between_calls(self, client, family_graph):
        assert client.get("/api/layout").json() == client.get("/api/layout").json()

    def test_follows_mutations(self, auth_client, family_graph):
        before = auth_client.get("/api/layout").json()
        auth_client.delete(f"/api/members/{family_graph['grandpa']['id']}")
        after = auth_client.get("/api/layout").json()
        assert after["generations"][family_graph["dad"]["id"]] == 0
        assert before != after


class TestFigureEndpoint:
    def test_figure(self, client, family_graph):
        resp = client.get("/api/layout/figure")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["data"]) == 3
        assert data["data"][2]["name"] == "members"

    def test_empty_figure(self, client):
        resp = client.get("/api/layout/figure")
        assert resp.status_code == 200
        assert resp.json()["data"] == []


class TestTreeView:
    def test_html(self, client, family_graph):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert "plotly" in resp.text


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"ok": True}

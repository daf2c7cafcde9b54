"""
API tests for repository registration and DevOps analysis endpoints.
Analyses run as background tasks, which TestClient completes before
returning the response.
"""

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}
TOKEN = "ghp_" + "p" * 36


def _start(client, url="https://github.com/acme/shop", headers=ALICE):
    resp = client.post("/api/repositories/analyze", json={"repo_url": url}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["analysis"]


def test_root_and_health(client):
    assert client.get("/").json()["name"] == "Deploy.AI API"
    assert client.get("/health").json()["status"] == "ok"


class TestRegistration:
    def test_register_and_list(self, client):
        resp = client.post("/api/repositories", json={"repo_url": "https://github.com/acme/shop.git"}, headers=ALICE)
        assert resp.status_code == 201
        repo = resp.json()["repository"]
        assert repo["full_name"] == "acme/shop"
        assert repo["name"] == "shop"
        assert repo["clone_url"] == "https://github.com/acme/shop.git"

        listed = client.get("/api/repositories", headers=ALICE).json()["repositories"]
        assert [r["id"] for r in listed] == [repo["id"]]
        assert client.get("/api/repositories", headers=BOB).json()["repositories"] == []

    def test_duplicate_per_user(self, client):
        client.post("/api/repositories", json={"repo_url": "acme/shop"}, headers=ALICE)
        dup = client.post("/api/repositories", json={"repo_url": "acme/shop"}, headers=ALICE)
        assert dup.status_code == 409

        other = client.post("/api/repositories", json={"repo_url": "acme/shop"}, headers=BOB)
        assert other.status_code == 201

    def test_invalid_url(self, client):
        resp = client.post("/api/repositories", json={"repo_url": "no repo here"}, headers=ALICE)
        assert resp.status_code == 400

    def test_unassigned_filter(self, client):
        project = client.post("/api/projects", json={"name": "P", "slug": "p"}, headers=ALICE).json()["project"]
        client.post("/api/repositories", json={"repo_url": "acme/one", "project_id": project["id"]}, headers=ALICE)
        client.post("/api/repositories", json={"repo_url": "acme/two"}, headers=ALICE)

        unassigned = client.get("/api/repositories", params={"unassigned": "true"}, headers=ALICE).json()
        assert [r["full_name"] for r in unassigned["repositories"]] == ["acme/two"]


class TestAnalysis:
    def test_analyze_runs_in_background(self, client):
        started = _start(client)
        assert started["repo_id"] == "acme/shop"
        assert started["status"] == "pending"

        resp = client.get(f"/api/repositories/analysis/{started['analysis_id']}", headers=ALICE)
        assert resp.status_code == 200
        analysis = resp.json()["analysis"]
        assert analysis["status"] == "completed"
        assert analysis["progress"] == 100
        assert analysis["devops_analysis"]["overall_score"] == 74
        assert len(analysis["devops_analysis"]["checklist"]) == 17

    def test_invalid_url(self, client):
        resp = client.post("/api/repositories/analyze", json={"repo_url": "nothing"}, headers=ALICE)
        assert resp.status_code == 400

    def test_failed_analysis_is_reported(self, client):
        started = _start(client, "https://github.com/acme/missing")
        analysis = client.get(f"/api/repositories/analysis/{started['analysis_id']}", headers=ALICE).json()["analysis"]
        assert analysis["status"] == "failed"
        assert "Repository not found" in analysis["error"]

    def test_analysis_is_private_to_its_owner(self, client):
        started = _start(client)
        resp = client.get(f"/api/repositories/analysis/{started['analysis_id']}", headers=BOB)
        assert resp.status_code == 403
        assert client.get("/api/repositories/analysis/unknown", headers=ALICE).status_code == 404

    def test_list_analyses(self, client):
        _start(client)
        _start(client, headers=BOB)
        analyses = client.get("/api/repositories/analyses", headers=ALICE).json()["analyses"]
        assert len(analyses) == 1
        assert analyses[0]["user_id"] == "alice"

    def test_summary(self, client):
        assert client.get("/api/repositories/acme/shop/summary", headers=ALICE).status_code == 404
        _start(client)

        resp = client.get("/api/repositories/acme/shop/summary", headers=ALICE)
        assert resp.status_code == 200
        summary = resp.json()["summary"]
        assert summary["repo_id"] == "acme/shop"
        assert summary["devops_analysis"]["deployment_readiness"] == 80.0

    def test_delete_analysis(self, client):
        started = _start(client)
        aid = started["analysis_id"]

        assert client.delete(f"/api/repositories/analysis/{aid}", headers=BOB).status_code == 403
        assert client.delete(f"/api/repositories/analysis/{aid}", headers=ALICE).status_code == 200
        assert client.get(f"/api/repositories/analysis/{aid}", headers=ALICE).status_code == 404

    def test_registered_repository_is_marked_analyzed(self, client):
        repo = client.post("/api/repositories", json={"repo_url": "acme/shop"}, headers=ALICE).json()["repository"]
        assert repo["last_analyzed"] is None

        _start(client)
        listed = client.get("/api/repositories", headers=ALICE).json()["repositories"]
        assert listed[0]["last_analyzed"] is not None

    def test_project_token_is_used(self, client, fake_github):
        project = client.post("/api/projects", json={"name": "P", "slug": "p"}, headers=ALICE).json()["project"]
        client.post(f"/api/projects/{project['id']}/settings/github-token", json={"token": TOKEN}, headers=ALICE)
        client.post("/api/repositories", json={"repo_url": "acme/shop", "project_id": project["id"]}, headers=ALICE)

        started = _start(client)
        analysis = client.get(f"/api/repositories/analysis/{started['analysis_id']}", headers=ALICE).json()["analysis"]
        assert analysis["project_id"] == project["id"]
        assert fake_github.requests
        assert all(r.headers.get("Authorization") == f"token {TOKEN}" for r in fake_github.requests)

    def test_unregistered_repository_runs_anonymously(self, client, fake_github):
        _start(client)
        assert all("Authorization" not in r.headers for r in fake_github.requests)

"""
API tests for cloud connections. AWS validation goes through a
monkeypatched boto3 client.
"""

import pytest
from botocore.exceptions import ClientError

from cloud_verification import aws_verifier

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}
AWS_CONFIG = {"access_key_id": "AKIAEXAMPLE", "secret_access_key": "secret"}


class FakeEC2:
    valid = True

    def describe_regions(self):
        if not FakeEC2.valid:
            raise ClientError({"Error": {"Code": "AuthFailure", "Message": "bad keys"}}, "DescribeRegions")
        return {"Regions": [{"RegionName": "us-east-1"}]}


@pytest.fixture(autouse=True)
def fake_boto3(monkeypatch):
    FakeEC2.valid = True
    monkeypatch.setattr(aws_verifier.boto3, "client", lambda service, **kwargs: FakeEC2())


@pytest.fixture
def project(client):
    resp = client.post("/api/projects", json={"name": "Cloud", "slug": "cloud"}, headers=ALICE)
    return resp.json()["project"]


def _create(client, project, name="aws-main", config=AWS_CONFIG, provider="aws", headers=ALICE):
    body = {"project_id": project["id"], "provider": provider, "name": name, "config": config, "region": "us-east-1"}
    return client.post("/api/cloud/connections", json=body, headers=headers)


def test_create_connection(client, project, store, cipher):
    resp = _create(client, project)
    assert resp.status_code == 201, resp.text
    connection = resp.json()["connection"]

    assert connection["provider"] == "aws"
    assert connection["status"] == "connected"
    assert connection["last_validated"]
    assert "config" not in connection

    stored = store.get_connection(connection["id"])
    assert "AKIAEXAMPLE" not in stored.config
    assert cipher.decrypt_credentials(stored.config) == AWS_CONFIG


def test_invalid_credentials_are_rejected(client, project, store):
    FakeEC2.valid = False
    resp = _create(client, project)
    assert resp.status_code == 400
    assert "bad keys" in resp.json()["detail"]
    assert store.list_connections(project["id"]) == []


def test_numeric_credential_field_is_rejected(client, project, store):
    resp = _create(client, project, config={"access_key_id": 12345, "secret_access_key": "secret"})
    assert resp.status_code == 400
    assert "Invalid credentials" in resp.json()["detail"]
    assert store.list_connections(project["id"]) == []


def test_unsupported_provider(client, project):
    resp = _create(client, project, provider="oracle")
    assert resp.status_code == 400


def test_duplicate_name(client, project):
    _create(client, project)
    assert _create(client, project).status_code == 409


def test_other_users_project(client, project):
    assert _create(client, project, headers=BOB).status_code == 403
    assert client.get(f"/api/cloud/connections/{project['id']}", headers=BOB).status_code == 403


def test_list_connections(client, project):
    _create(client, project)
    resp = client.get(f"/api/cloud/connections/{project['id']}", headers=ALICE)
    assert [c["name"] for c in resp.json()["connections"]] == ["aws-main"]


def test_connection_test_updates_status(client, project):
    connection = _create(client, project).json()["connection"]

    ok = client.post(f"/api/cloud/connections/{connection['id']}/test", headers=ALICE).json()
    assert ok["valid"] is True
    assert ok["connection"]["status"] == "connected"

    FakeEC2.valid = False
    failed = client.post(f"/api/cloud/connections/{connection['id']}/test", headers=ALICE).json()
    assert failed["valid"] is False
    assert failed["connection"]["status"] == "error"
    assert "bad keys" in failed["connection"]["error_message"]


def test_update_revalidates_new_config(client, project, store, cipher):
    connection = _create(client, project).json()["connection"]
    cid = connection["id"]

    renamed = client.put(f"/api/cloud/connections/{cid}", json={"name": "aws-renamed"}, headers=ALICE)
    assert renamed.status_code == 200
    assert renamed.json()["connection"]["name"] == "aws-renamed"

    FakeEC2.valid = False
    rejected = client.put(
        f"/api/cloud/connections/{cid}",
        json={"config": {"access_key_id": "AKIANEW", "secret_access_key": "x"}},
        headers=ALICE,
    )
    assert rejected.status_code == 400
    assert cipher.decrypt_credentials(store.get_connection(cid).config) == AWS_CONFIG

    FakeEC2.valid = True
    new_config = {"access_key_id": "AKIANEW", "secret_access_key": "y"}
    accepted = client.put(f"/api/cloud/connections/{cid}", json={"config": new_config}, headers=ALICE)
    assert accepted.status_code == 200
    assert cipher.decrypt_credentials(store.get_connection(cid).config) == new_config


def test_delete_connection(client, project):
    connection = _create(client, project).json()["connection"]
    cid = connection["id"]

    assert client.delete(f"/api/cloud/connections/{cid}", headers=BOB).status_code == 403
    assert client.delete(f"/api/cloud/connections/{cid}", headers=ALICE).status_code == 200
    assert client.delete(f"/api/cloud/connections/{cid}", headers=ALICE).status_code == 404


def test_regions(client):
    resp = client.get("/api/cloud/providers/GCP/regions")
    assert resp.status_code == 200
    assert resp.json()["regions"][0] == {"id": "us-central1", "name": "Iowa (us-central1)"}
    assert client.get("/api/cloud/providers/ibm/regions").status_code == 400

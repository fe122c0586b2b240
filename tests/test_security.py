from habitsync.api.deps import bearer_credential
from habitsync.security import CREDENTIAL_PREFIX, credentials_match, hash_credential, issue_credential
from habitsync.settings import settings


def test_issued_credential_is_hashed(monkeypatch):
    monkeypatch.setattr(settings, "API_KEY_SECRET", "test-secret")
    issued = issue_credential()

    assert issued.raw.startswith(CREDENTIAL_PREFIX)
    assert issued.prefix == issued.raw[:8]
    assert issued.digest == hash_credential(issued.raw)
    assert issued.digest != issue_credential().digest


def test_credentials_match():
    assert credentials_match("k1", "k1")
    assert not credentials_match("k1", "k2")
    assert not credentials_match("k1", None)


def test_bearer_credential_parsing():
    assert bearer_credential("Bearer abc") == "abc"
    assert bearer_credential("bearer   abc ") == "abc"
    assert bearer_credential("Bearer ") is None
    assert bearer_credential("Basic abc") is None
    assert bearer_credential(None) is None


def test_deployment_key_gate(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "deploy-key")

    assert client.get("/habits", headers=auth_headers).status_code == 401
    ok = client.get("/habits", headers={**auth_headers, "X-API-Key": "deploy-key"})
    assert ok.status_code == 200

import pytest

from src.models.allowlist import AllowlistEntry


@pytest.mark.integration
def test_list_users(client, db_session, auth_header):
    entry = db_session.query(AllowlistEntry).filter_by(subject_id="alice").one()
    entry.api_key = "secret-key"
    db_session.commit()

    response = client.get("/admin/users", headers=auth_header("admin-uid"))

    assert response.status_code == 200
    users = {user["subjectId"]: user for user in response.json()["allowed"]}
    assert set(users) == {"alice", "bob", "admin-uid"}
    assert users["alice"]["hasApiKey"] is True
    assert "secret-key" not in response.text


@pytest.mark.integration
def test_list_users_requires_admin(client, auth_header):
    response = client.get("/admin/users", headers=auth_header("alice"))

    assert response.status_code == 403
    assert response.json()["code"] == "NOT_ADMIN"


@pytest.mark.integration
def test_add_user(client, notifier, db_session, auth_header):
    response = client.post("/admin/add-user", json={"newUid": "carol"}, headers=auth_header("admin-uid"))

    assert response.status_code == 200
    assert response.json() == {"success": True, "uid": "carol"}
    entry = db_session.query(AllowlistEntry).filter_by(subject_id="carol").one()
    assert entry.added_by == "admin-uid"
    notifier.publish.assert_called_once()


@pytest.mark.integration
def test_add_user_missing_uid(client, notifier, auth_header):
    response = client.post("/admin/add-user", json={}, headers=auth_header("admin-uid"))

    assert response.status_code == 400
    notifier.publish.assert_not_called()


@pytest.mark.integration
def test_add_user_duplicate(client, notifier, auth_header):
    response = client.post("/admin/add-user", json={"newUid": "alice"}, headers=auth_header("admin-uid"))

    assert response.status_code == 400
    notifier.publish.assert_not_called()


@pytest.mark.integration
def test_add_user_requires_admin(client, notifier, auth_header):
    response = client.post("/admin/add-user", json={"newUid": "carol"}, headers=auth_header("bob"))

    assert response.status_code == 403

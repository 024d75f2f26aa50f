from commstyle.models import AuthUser, UserResult

from conftest import ADMIN_CODE, auth_header, complete_questionnaire, guest_token, register_and_login


def test_info_reports_full_mode(full_client):
    assert full_client.get("/info").json()["feature_set"] == "full"


def test_register_validation(full_client):
    base = {"username": "dana", "password": "pw-123456", "display_name": "Dana", "team": "alpha"}
    assert full_client.post("/auth/register", json={**base, "team": " "}).status_code == 400
    assert full_client.post("/auth/register", json={**base, "username": "ab"}).status_code == 400
    assert full_client.post("/auth/register", json={**base, "username": "guest-x1"}).status_code == 400
    assert full_client.post("/auth/register", json=base).status_code == 201
    assert full_client.post("/auth/register", json=base).status_code == 409


def test_login_rejects_bad_password(full_client):
    register_and_login(full_client, "eli")
    r = full_client.post("/auth/token", data={"username": "eli", "password": "nope"})
    assert r.status_code == 401


def test_admin_code_grants_admin_role(full_client, db_session):
    register_and_login(full_client, "boss", admin_code=ADMIN_CODE)
    register_and_login(full_client, "pretender", admin_code="wrong-code")
    roles = {u.username: u.role for u in db_session.query(AuthUser).all()}
    assert roles == {"boss": "admin", "pretender": "user"}


def test_password_gate_still_available(full_client):
    token = guest_token(full_client)
    assert full_client.get("/auth/me", headers=auth_header(token)).json()["role"] == "guest"


def test_completion_is_recorded_for_account_holders(full_client, db_session):
    token = register_and_login(full_client, "fay")
    complete_questionnaire(full_client, token, value=1)
    row = db_session.get(UserResult, "fay")
    assert (row.score_a, row.score_b, row.score_c, row.score_d) == (75, 0, 75, 0)

    # Guests never get a results record
    complete_questionnaire(full_client, guest_token(full_client))
    assert db_session.query(UserResult).count() == 1


def test_admin_endpoints_require_admin(full_client):
    token = register_and_login(full_client, "gus")
    assert full_client.get("/admin/users", headers=auth_header(token)).status_code == 403
    assert full_client.post("/admin/teams", json={"name": "x"}, headers=auth_header(token)).status_code == 403
    assert full_client.get("/admin/teams").status_code == 401


def test_team_management(full_client):
    admin = auth_header(register_and_login(full_client, "root", team="ops", admin_code=ADMIN_CODE))
    r = full_client.post("/admin/teams", json={"name": "alpha"}, headers=admin)
    assert r.status_code == 201
    assert r.json()["member_count"] == 0
    assert full_client.post("/admin/teams", json={"name": "alpha"}, headers=admin).status_code == 409
    assert full_client.post("/admin/teams", json={"name": " "}, headers=admin).status_code == 400

    register_and_login(full_client, "hal", team="alpha")
    teams = full_client.get("/admin/teams", headers=admin).json()
    assert teams == [{"name": "alpha", "created_at": teams[0]["created_at"], "member_count": 1}]


def test_users_and_team_summary(full_client):
    admin = auth_header(register_and_login(full_client, "root", team="ops", admin_code=ADMIN_CODE))
    red = register_and_login(full_client, "rita", team="alpha")
    green = register_and_login(full_client, "gary", team="alpha")
    register_and_login(full_client, "nora", team="alpha")
    complete_questionnaire(full_client, red, value=1)
    complete_questionnaire(full_client, green, value=6)

    users = full_client.get("/admin/users", params={"team": "alpha"}, headers=admin).json()
    by_name = {u["username"]: u for u in users}
    assert set(by_name) == {"rita", "gary", "nora"}
    assert by_name["rita"]["dominant"] == "RED"
    assert by_name["gary"]["dominant"] == "GREEN"
    assert by_name["rita"]["composite_leader"] == "RED"
    assert by_name["gary"]["composite_leader"] == "GREEN"
    assert by_name["nora"]["scores"] is None
    assert by_name["nora"]["dominant"] is None
    assert by_name["nora"]["composite_leader"] is None
    assert len(full_client.get("/admin/users", headers=admin).json()) == 4

    summary = full_client.get("/admin/teams/alpha/summary", headers=admin).json()
    assert summary["member_count"] == 3
    assert summary["completed_count"] == 2
    assert summary["by_dominant"] == {"RED": 1, "BLUE": 0, "YELLOW": 0, "GREEN": 1}
    assert summary["by_composite"]["RED"] == 1
    points = {p["username"]: (p["x"], p["y"]) for p in summary["points"]}
    assert points == {"rita": (100.0, 0.0), "gary": (0.0, 100.0)}

    assert full_client.get("/admin/teams/ghost/summary", headers=admin).status_code == 404


def test_team_coach(full_app, full_client):
    admin = auth_header(register_and_login(full_client, "root", team="ops", admin_code=ADMIN_CODE))
    member = register_and_login(full_client, "ivan", team="alpha")
    complete_questionnaire(full_client, member)

    r = full_client.post("/admin/teams/alpha/coach", json={"challenge": "We argue a lot"}, headers=admin)
    assert r.status_code == 200
    kind, team, roster, challenge = full_app.state.coach.calls[-1]
    assert (kind, team, challenge) == ("team", "alpha", "We argue a lot")
    assert [p.username for p in roster] == ["ivan"]

    assert full_client.post("/admin/teams/alpha/coach", json={"challenge": ""}, headers=admin).status_code == 400
    full_app.state.coach.fail_with = "busy"
    assert full_client.post("/admin/teams/alpha/coach", json={"challenge": "x"}, headers=admin).status_code == 503


def test_request_quota(full_client, db_session):
    token = register_and_login(full_client, "quinn")
    complete_questionnaire(full_client, token)
    row = db_session.get(AuthUser, "quinn")
    row.requests_limit = 1
    db_session.commit()

    headers = auth_header(token)
    assert full_client.post("/coach/advice", json={"question": "one"}, headers=headers).status_code == 200
    assert full_client.post("/coach/advice", json={"question": "two"}, headers=headers).status_code == 429

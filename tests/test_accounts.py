from storefront import config, crud

from tests.helpers import bearer


async def test_signup_creates_confirmed_user_and_records(api, gotrue, kv):
    response = await api.post("/signup", json={"email": "new@sacyskitchen.ng", "password": "secret123", "name": "Nneka"})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Account created successfully. You can now sign in."

    user = gotrue.users[body["userId"]]
    assert user["email_confirmed_at"] is not None
    assert await crud.get_favorites(kv, body["userId"]) == []
    profile = await crud.get_profile(kv, body["userId"])
    assert profile["name"] == "Nneka"
    assert profile["email"] == "new@sacyskitchen.ng"


async def test_signup_duplicate_confirmed_email_is_409(api, customer):
    response = await api.post("/signup", json={"email": "ada@sacyskitchen.ng", "password": "secret123", "name": "Ada"})
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_EMAIL"


async def test_signup_verifies_unconfirmed_user(api, gotrue, kv):
    user_id, _ = gotrue.add_user("late@sacyskitchen.ng", "Late", confirmed=False)
    response = await api.post("/signup", json={"email": "late@sacyskitchen.ng", "password": "newpass1", "name": "Late Comer"})
    assert response.status_code == 200
    assert response.json()["message"].startswith("Account verified")
    assert gotrue.users[user_id]["email_confirmed_at"] is not None
    assert gotrue.passwords[user_id] == "newpass1"
    assert (await crud.get_profile(kv, user_id))["name"] == "Late Comer"


async def test_signup_invalid_email_is_400(api):
    response = await api.post("/signup", json={"email": "not-an-email", "password": "secret123", "name": "X"})
    assert response.status_code == 400


async def test_signup_short_password_is_400(api):
    response = await api.post("/signup", json={"email": "x@sacyskitchen.ng", "password": "abc", "name": "X"})
    assert response.status_code == 400


async def test_signup_provider_outage_is_500(api, gotrue):
    gotrue.fail_with = 503
    response = await api.post("/signup", json={"email": "x@sacyskitchen.ng", "password": "secret123", "name": "X"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to create account"


async def test_fix_account_unknown_email_is_404(api):
    response = await api.post("/fix-account", json={"email": "ghost@sacyskitchen.ng"})
    assert response.status_code == 404


async def test_fix_account_confirms_and_initialises(api, gotrue, kv):
    user_id, _ = gotrue.add_user("stuck@sacyskitchen.ng", "Stuck", confirmed=False)
    response = await api.post("/fix-account", json={"email": "stuck@sacyskitchen.ng"})
    assert response.status_code == 200
    assert response.json()["userId"] == user_id
    assert gotrue.users[user_id]["email_confirmed_at"] is not None
    assert await crud.get_favorites(kv, user_id) == []
    assert (await crud.get_profile(kv, user_id))["name"] == "Stuck"


async def test_profile_includes_admin_flag(api, kv, customer, admin):
    user_id, token = customer
    await crud.ensure_user_records(kv, user_id, "Ada", "ada@sacyskitchen.ng")

    profile = (await api.get("/profile", headers=bearer(token))).json()["profile"]
    assert profile["id"] == user_id
    assert profile["name"] == "Ada"
    assert profile["accessToken"] == token
    assert profile["isAdmin"] is False

    admin_profile = (await api.get("/profile", headers=bearer(admin[1]))).json()["profile"]
    assert admin_profile["isAdmin"] is True


async def test_profile_requires_token(api):
    assert (await api.get("/profile")).status_code == 401


async def test_password_reset_unknown_email_reveals_nothing(api, kv):
    response = await api.post("/request-password-reset", json={"email": "ghost@sacyskitchen.ng"})
    assert response.status_code == 200
    assert response.json() == {"message": "If the email exists, a reset code has been sent."}
    assert await crud.get_reset_code(kv, "ghost@sacyskitchen.ng") is None


async def test_password_reset_round_trip(api, gotrue, kv, customer):
    user_id, _ = customer
    response = await api.post("/request-password-reset", json={"email": "ada@sacyskitchen.ng"})
    code = response.json()["resetCode"]
    assert len(code) == 6 and code.isdigit()

    stored = await crud.get_reset_code(kv, "ada@sacyskitchen.ng")
    assert code not in stored["codeHash"]

    response = await api.post(
        "/reset-password",
        json={"email": "ada@sacyskitchen.ng", "resetCode": code, "newPassword": "brandnew1"},
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Password reset successfully"
    assert gotrue.passwords[user_id] == "brandnew1"
    assert await crud.get_reset_code(kv, "ada@sacyskitchen.ng") is None


async def test_reset_code_hidden_outside_development(api, customer, monkeypatch):
    monkeypatch.setattr(config, "EXPOSE_RESET_CODE", False)
    response = await api.post("/request-password-reset", json={"email": "ada@sacyskitchen.ng"})
    assert "resetCode" not in response.json()


async def test_reset_password_wrong_code(api, customer):
    code = (await api.post("/request-password-reset", json={"email": "ada@sacyskitchen.ng"})).json()["resetCode"]
    wrong = "000000" if code != "000000" else "111111"
    response = await api.post(
        "/reset-password",
        json={"email": "ada@sacyskitchen.ng", "resetCode": wrong, "newPassword": "brandnew1"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid reset code"


async def test_reset_password_without_request(api, customer):
    response = await api.post(
        "/reset-password",
        json={"email": "ada@sacyskitchen.ng", "resetCode": "123456", "newPassword": "brandnew1"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired reset code"


async def test_reset_password_expired_code(api, kv, customer, monkeypatch):
    monkeypatch.setattr(config, "RESET_CODE_TTL_SECONDS", -1)
    code = (await api.post("/request-password-reset", json={"email": "ada@sacyskitchen.ng"})).json()["resetCode"]
    response = await api.post(
        "/reset-password",
        json={"email": "ada@sacyskitchen.ng", "resetCode": code, "newPassword": "brandnew1"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Reset code has expired"
    assert await crud.get_reset_code(kv, "ada@sacyskitchen.ng") is None

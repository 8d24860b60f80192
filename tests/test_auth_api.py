"""HTTP tests for farmer registration, login and token checks."""
import pytest

from soil_health.models.database_models import District, Farmer

REGISTRATION = {
    "username": "sunita",
    "password": "harvest99",
    "postalCode": "122001",
    "fullName": "Sunita Devi",
    "phone": "9876543210",
}


def login(client, username="sunita", password="harvest99"):
    return client.post("/api/auth/login", json={"username": username, "password": password})


class TestRegister:

    def test_register_maps_postal_code_to_district(self, client, db_session):
        response = client.post("/api/auth/register", json=REGISTRATION)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Registration successful"
        assert body["farmer"]["district"] == "Gurugram"
        assert body["farmer"]["state"] == "Haryana"
        assert body["farmer"]["postalCode"] == "122001"

        farmer = db_session.query(Farmer).filter(Farmer.username == "sunita").one()
        gurugram = db_session.query(District).filter(District.name == "Gurugram").one()
        assert farmer.district_id == gurugram.id
        assert farmer.password_hash != "harvest99"

    def test_unknown_postal_code_defaults_to_delhi(self, client):
        body = client.post("/api/auth/register", json={**REGISTRATION, "postalCode": "560001"}).json()
        assert (body["farmer"]["district"], body["farmer"]["state"]) == ("Delhi", "Delhi")

    @pytest.mark.parametrize("override,detail", [
        ({"username": "ab"}, "Username must be at least 3 characters"),
        ({"username": None}, "Username must be at least 3 characters"),
        ({"password": "12345"}, "Password must be at least 6 characters"),
        ({"postalCode": "12345"}, "Valid 6-digit postal code required"),
        ({"postalCode": "12a456"}, "Valid 6-digit postal code required"),
    ])
    def test_validation(self, client, override, detail):
        response = client.post("/api/auth/register", json={**REGISTRATION, **override})
        assert response.status_code == 400
        assert response.json()["detail"] == detail

    def test_duplicate_username_is_409(self, client):
        client.post("/api/auth/register", json=REGISTRATION)
        response = client.post("/api/auth/register", json=REGISTRATION)
        assert response.status_code == 409


class TestLogin:

    def test_login_returns_token(self, client, db_session):
        client.post("/api/auth/register", json=REGISTRATION)
        response = login(client)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["token"]
        assert body["farmer"]["fullName"] == "Sunita Devi"

        farmer = db_session.query(Farmer).filter(Farmer.username == "sunita").one()
        assert farmer.last_login is not None

    @pytest.mark.parametrize("username,password", [("sunita", "wrongpass"), ("nobody", "harvest99")])
    def test_bad_credentials(self, client, username, password):
        client.post("/api/auth/register", json=REGISTRATION)
        response = login(client, username, password)
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    def test_inactive_farmer_cannot_login(self, client, db_session):
        client.post("/api/auth/register", json=REGISTRATION)
        farmer = db_session.query(Farmer).filter(Farmer.username == "sunita").one()
        farmer.is_active = False
        db_session.commit()
        assert login(client).status_code == 401


class TestVerify:

    def test_valid_token(self, client):
        client.post("/api/auth/register", json=REGISTRATION)
        token = login(client).json()["token"]
        response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["valid"] is True
        assert response.json()["farmer"]["username"] == "sunita"

    def test_missing_token(self, client):
        response = client.get("/api/auth/verify")
        assert response.status_code == 401
        assert response.json()["detail"] == "No token provided"

    def test_unknown_token(self, client):
        response = client.get("/api/auth/verify", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    def test_logout_revokes_token(self, client):
        client.post("/api/auth/register", json=REGISTRATION)
        headers = {"Authorization": f"Bearer {login(client).json()['token']}"}
        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert client.get("/api/auth/verify", headers=headers).status_code == 401

"""
Integration tests for OpenAPI documentation.

Verifies OpenAPI schema is correctly generated for all endpoints.
Does not require a database: the app lifespan is not started.
"""

import pytest
from fastapi.testclient import TestClient

from useraccounts.api.main import app


@pytest.fixture
def schema() -> dict:
    """Fetch the generated OpenAPI schema."""
    response = TestClient(app).get("/openapi.json")
    assert response.status_code == 200
    return response.json()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_title_and_version(self, schema: dict) -> None:
        assert schema["info"]["title"] == "useraccounts"
        assert schema["info"]["version"] == "0.1.0"

    def test_user_routes_documented(self, schema: dict) -> None:
        assert set(schema["paths"]["/api/user"]) == {"post"}
        assert set(schema["paths"]["/api/user/{account_id}"]) == {"get", "patch", "delete"}

    def test_register_summary(self, schema: dict) -> None:
        assert schema["paths"]["/api/user"]["post"]["summary"] == "Register a new user"

    def test_self_service_routes_documented(self, schema: dict) -> None:
        assert "post" in schema["paths"]["/api/me/password"]
        assert "post" in schema["paths"]["/api/me/api-token"]

    def test_confirmation_routes_documented(self, schema: dict) -> None:
        assert "get" in schema["paths"]["/verify/email"]
        assert "get" in schema["paths"]["/verify/email/update"]

    def test_bearer_security_scheme(self, schema: dict) -> None:
        schemes = schema["components"]["securitySchemes"]
        assert schemes["HTTPBearer"]["scheme"] == "bearer"

    def test_user_response_uses_camel_case(self, schema: dict) -> None:
        properties = schema["components"]["schemas"]["UserResponse"]["properties"]
        assert set(properties) == {"userId", "userName", "userEmail"}

    def test_register_request_fields(self, schema: dict) -> None:
        register = schema["components"]["schemas"]["RegisterUserRequest"]
        assert set(register["properties"]) == {"email", "name", "password"}
        assert set(register["required"]) == {"email", "name", "password"}

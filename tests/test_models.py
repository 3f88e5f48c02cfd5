"""Tests for ToolResult and exception conversion"""

import pytest

from shopify_mcp.exceptions import (
    AuthenticationError,
    ConfigError,
    ErrorKind,
    GraphQLError,
    UserInputError,
)
from shopify_mcp.models import ToolResult


class TestToolResult:
    """Test the ToolResult model"""

    def test_ok(self):
        result = ToolResult.ok({"products": []}, duration_ms=12)

        assert result.success is True
        assert result.data == {"products": []}
        assert result.error is None
        assert result.metadata["duration_ms"] == 12
        assert "timestamp" in result.metadata

    def test_from_graphql_error(self):
        error = GraphQLError(
            "GraphQL request failed after 4 attempts: boom",
            kind=ErrorKind.TRANSIENT,
            attempts=4,
            errors=["boom"],
            context={"operation": "GetProducts", "access_token": "shpat_abcdef123456"},
        )

        result = ToolResult.from_error(error)

        assert result.success is False
        assert result.error == "GraphQL request failed after 4 attempts: boom"
        assert result.metadata["errorType"] == "GraphQLError"
        assert result.metadata["errorCode"] == "GRAPHQL_ERROR"
        assert result.metadata["errorKind"] == "transient"
        assert result.metadata["attempts"] == 4
        assert result.metadata["errors"] == ["boom"]
        assert result.metadata["errorDetails"]["access_token"] == "shpa**********3456"

    def test_from_unexpected_error(self):
        result = ToolResult.from_error(KeyError("products"))

        assert result.success is False
        assert result.error.startswith("Tool execution failed:")
        assert result.metadata["errorType"] == "KeyError"

    def test_serializes_to_json(self):
        result = ToolResult.ok({"count": 1})
        dumped = result.model_dump(mode="json")

        assert dumped["success"] is True
        assert isinstance(dumped["metadata"]["timestamp"], str)


class TestUserInputError:
    """Test aggregation of remote userErrors"""

    def test_from_user_errors(self):
        error = UserInputError.from_user_errors(
            "Failed to update customer",
            [
                {"field": ["id"], "message": "Customer does not exist"},
                {"field": ["input", "email"], "message": "Email is invalid"},
                {"field": None, "message": "Something else"},
            ],
        )

        assert error.message == (
            "Failed to update customer: id: Customer does not exist, "
            "input.email: Email is invalid, Something else"
        )
        assert error.errors[0] == "id: Customer does not exist"
        assert error.code == "USER_ERROR"


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "error", [ConfigError("x"), AuthenticationError("x", status_code=401)]
    )
    def test_defaults(self, error):
        assert error.errors == []
        assert error.suggestions == []
        assert error.context == {}
        assert str(error) == "x"

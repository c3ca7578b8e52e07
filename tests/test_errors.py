import pytest
from sqlalchemy.exc import OperationalError

from utils.errors import StorageUnavailable, NotFound, AlreadyExists, storage_guard
from utils.response import service_error_response


def test_storage_failures_surface_as_unavailable(app_ctx):
    @storage_guard
    def query_users():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    with pytest.raises(StorageUnavailable) as exc_info:
        query_users()
    assert exc_info.value.status_code == 503


def test_domain_errors_pass_through_guard(app_ctx):
    @storage_guard
    def lookup():
        raise NotFound("User ghost not found")

    with pytest.raises(NotFound):
        lookup()


def test_service_error_envelope():
    body, status = service_error_response(NotFound("Chat room x not found"))

    assert status == 404
    assert body == {
        "success": False,
        "error": {"message": "Chat room x not found", "code": 404, "details": {}},
    }


def test_conflicts_map_to_409():
    body, status = service_error_response(AlreadyExists("Email already registered"))

    assert status == 409
    assert body["error"]["message"] == "Email already registered"

import pytest

from conftest import auth_headers

PROTECTED_ROUTES = [
    ("POST", "/api/leave-requests"),
    ("DELETE", "/api/leave-requests"),
    ("GET", "/api/leave-requests/status"),
    ("GET", "/api/leave-requests/remaining"),
    ("GET", "/api/leave-requests/remaining/1"),
    ("PATCH", "/api/leave-requests/approve"),
    ("PATCH", "/api/leave-requests/reject"),
    ("GET", "/api/leave-requests/pending"),
    ("GET", "/api/leave-requests/managed-users"),
    ("GET", "/api/leave-requests/reports/pending-summary"),
    ("GET", "/api/leave-requests/reports/upcoming-leaves"),
    ("GET", "/api/admin/all-users"),
    ("GET", "/api/admin/roles"),
    ("POST", "/api/admin/add-user"),
    ("POST", "/api/admin/assign-manager"),
    ("GET", "/api/admin/all-leave-requests"),
    ("PATCH", "/api/admin/approve/1"),
    ("PATCH", "/api/admin/reject/1"),
    ("PATCH", "/api/admin/update-role/1"),
    ("PATCH", "/api/admin/update-department/1"),
    ("PATCH", "/api/admin/update-leave-balance/1"),
    ("GET", "/api/admin/reports/department-usage"),
    ("GET", "/api/admin/reports/company-summary"),
]

ADMIN_ROUTES = [route for route in PROTECTED_ROUTES if route[1].startswith("/api/admin")]

MANAGER_ROUTES = [
    ("GET", "/api/leave-requests/pending"),
    ("GET", "/api/leave-requests/managed-users"),
    ("GET", "/api/leave-requests/reports/pending-summary"),
    ("GET", "/api/leave-requests/reports/upcoming-leaves"),
]

EMPLOYEE_ROUTES = [
    ("POST", "/api/leave-requests"),
    ("DELETE", "/api/leave-requests"),
    ("GET", "/api/leave-requests/status"),
]


@pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
def test_unauthenticated_calls_are_rejected(client, method, path):
    response = client.request(method, path, json={"leaveRequestId": 1})

    assert response.status_code == 401
    assert "error" in response.json()


@pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
def test_forged_token_is_rejected(client, method, path):
    response = client.request(
        method, path, json={"leaveRequestId": 1}, headers={"Authorization": "Bearer not-a-real-token"}
    )
    assert response.status_code == 401


def test_non_bearer_scheme_is_rejected(client, employee):
    token = auth_headers(employee)["Authorization"].split(" ", 1)[1]

    response = client.get("/api/leave-requests/status", headers={"Authorization": f"Token {token}"})

    assert response.status_code == 401


@pytest.mark.parametrize("method,path", ADMIN_ROUTES)
def test_manager_cannot_use_admin_routes(client, manager, method, path):
    response = client.request(method, path, json={}, headers=auth_headers(manager))

    assert response.status_code == 403
    assert "error" in response.json()


@pytest.mark.parametrize("method,path", ADMIN_ROUTES)
def test_employee_cannot_use_admin_routes(client, employee, method, path):
    response = client.request(method, path, json={}, headers=auth_headers(employee))
    assert response.status_code == 403


@pytest.mark.parametrize("method,path", MANAGER_ROUTES)
def test_employee_cannot_use_manager_routes(client, employee, method, path):
    response = client.request(method, path, headers=auth_headers(employee))
    assert response.status_code == 403


@pytest.mark.parametrize("method,path", EMPLOYEE_ROUTES)
def test_admin_cannot_use_employee_routes(client, admin, method, path):
    response = client.request(method, path, json={}, headers=auth_headers(admin))
    assert response.status_code == 403


def test_employee_cannot_approve_leave(client, employee):
    response = client.patch(
        "/api/leave-requests/approve", json={"leaveRequestId": 1}, headers=auth_headers(employee)
    )
    assert response.status_code == 403


def test_gate_runs_before_body_validation(client, employee):
    response = client.patch(
        "/api/leave-requests/reject", json={"unexpected": True}, headers=auth_headers(employee)
    )
    assert response.status_code == 403


def test_unknown_route_returns_json_404(client):
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}

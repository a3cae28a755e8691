"""API tests for the Employee Registry: envelope, CRUD and validation."""

import uuid

from fastapi.testclient import TestClient

from employee_registry.main import app
from employee_registry.services import EmployeeService

# ==========================================
# HEALTH CHECK TESTS
# ==========================================


class TestHealthCheck:
    def test_health_returns_200(self, client):
        r = client.get("/health")
        assert r.status_code == 200

    def test_health_response_structure(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["database"] == "ok"
        assert "T" in data["timestamp"]


# ==========================================
# ENVELOPE TESTS
# ==========================================


class TestEnvelope:
    def test_success_envelope_shape(self, client, make_department):
        make_department("Finance")
        body = client.get("/api/v1/departments").json()
        assert set(body) == {"isSuccess", "message", "data", "errors", "statusCode"}
        assert body["isSuccess"] is True
        assert body["statusCode"] == 200
        assert body["errors"] == []

    def test_paginated_data_shape(self, client):
        data = client.get("/api/v1/employees").json()["data"]
        assert set(data) == {
            "items",
            "totalCount",
            "pageNumber",
            "pageSize",
            "totalPages",
            "hasPreviousPage",
            "hasNextPage",
        }

    def test_request_id_is_echoed(self, client):
        r = client.get("/api/v1/employees", headers={"X-Request-ID": "abc-123"})
        assert r.headers["X-Request-ID"] == "abc-123"

    def test_request_id_is_generated(self, client):
        r = client.get("/api/v1/employees")
        assert r.headers["X-Request-ID"]

    def test_unknown_route_uses_envelope(self, client):
        r = client.get("/api/v1/nothing-here")
        assert r.status_code == 404
        body = r.json()
        assert body["isSuccess"] is False
        assert body["message"] == "The requested resource was not found"

    def test_wrong_method_uses_envelope(self, client):
        r = client.patch("/api/v1/employees")
        assert r.status_code == 405
        assert r.json()["statusCode"] == 405

    def test_unexpected_error_hides_internals(self, monkeypatch):
        def explode(self, request):
            raise RuntimeError("password=hunter2 connection refused")

        monkeypatch.setattr(EmployeeService, "list_employees", explode)
        raw_client = TestClient(app, raise_server_exceptions=False)
        r = raw_client.get("/api/v1/employees")
        assert r.status_code == 500
        body = r.json()
        assert body["isSuccess"] is False
        assert body["statusCode"] == 500
        assert body["message"] == "An unexpected error occurred. Please try again later"
        assert "hunter2" not in r.text


# ==========================================
# DEPARTMENT TESTS
# ==========================================


class TestDepartments:
    def test_create_department_returns_201(self, client):
        r = client.post("/api/v1/departments", json={"name": "Engineering", "description": "Builders"})
        assert r.status_code == 201
        body = r.json()
        assert body["statusCode"] == 201
        assert body["message"] == "Department created successfully"
        data = body["data"]
        assert data["name"] == "Engineering"
        assert data["description"] == "Builders"
        assert data["employeeCount"] == 0
        assert data["createdBy"] == "system"
        assert data["version"] == 1
        assert data["isDeleted"] is False
        uuid.UUID(data["id"])

    def test_create_department_uses_actor_header(self, client):
        r = client.post("/api/v1/departments", json={"name": "Legal"}, headers={"X-Actor": "alice"})
        assert r.json()["data"]["createdBy"] == "alice"

    def test_create_duplicate_name_returns_409(self, client, make_department):
        make_department("Sales")
        r = client.post("/api/v1/departments", json={"name": "sales"})
        assert r.status_code == 409
        assert r.json()["message"] == "Department name 'sales' already exists"

    def test_create_name_too_short_returns_400(self, client):
        r = client.post("/api/v1/departments", json={"name": "X"})
        assert r.status_code == 400
        body = r.json()
        assert body["message"] == "Validation failed"
        assert any(err.startswith("name:") for err in body["errors"])

    def test_description_too_long_returns_400(self, client):
        r = client.post("/api/v1/departments", json={"name": "Ops", "description": "d" * 501})
        assert r.status_code == 400

    def test_get_department(self, client, make_department):
        dept = make_department("Marketing")
        r = client.get(f"/api/v1/departments/{dept['id']}")
        assert r.status_code == 200
        assert r.json()["data"]["name"] == "Marketing"

    def test_get_unknown_department_returns_404(self, client):
        missing = uuid.uuid4()
        r = client.get(f"/api/v1/departments/{missing}")
        assert r.status_code == 404
        assert r.json()["message"] == f"Department with ID {missing} not found"

    def test_malformed_id_returns_400(self, client):
        r = client.get("/api/v1/departments/not-a-uuid")
        assert r.status_code == 400
        assert r.json()["errors"]

    def test_update_department(self, client, make_department):
        dept = make_department("Research")
        r = client.put(
            f"/api/v1/departments/{dept['id']}",
            json={"name": "R&D", "description": "Research and development"},
            headers={"X-Actor": "bob"},
        )
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["name"] == "R&D"
        assert data["updatedBy"] == "bob"
        assert data["updatedAt"] is not None
        assert data["version"] == 2

    def test_update_to_own_name_succeeds(self, client, make_department):
        dept = make_department("Support")
        r = client.put(f"/api/v1/departments/{dept['id']}", json={"name": "Support"})
        assert r.status_code == 200

    def test_update_to_other_active_name_returns_409(self, client, make_department):
        make_department("Design")
        other = make_department("Product")
        r = client.put(f"/api/v1/departments/{other['id']}", json={"name": "Design"})
        assert r.status_code == 409

    def test_update_with_stale_version_returns_409(self, client, make_department):
        dept = make_department("Security")
        client.put(f"/api/v1/departments/{dept['id']}", json={"name": "Security Ops", "version": 1})
        r = client.put(f"/api/v1/departments/{dept['id']}", json={"name": "SecOps", "version": 1})
        assert r.status_code == 409
        assert r.json()["message"] == "Department was modified by another user"

    def test_employee_count_only_counts_active(self, client, make_department, make_employee):
        dept = make_department("Logistics")
        make_employee(email="one@company.com", department_id=dept["id"])
        two = make_employee(email="two@company.com", department_id=dept["id"])
        client.delete(f"/api/v1/employees/{two['id']}")
        r = client.get(f"/api/v1/departments/{dept['id']}")
        assert r.json()["data"]["employeeCount"] == 1


# ==========================================
# EMPLOYEE TESTS
# ==========================================


class TestCreateEmployee:
    def test_create_and_list_round_trip(self, client, make_department):
        dept = make_department("Engineering")
        r = client.post(
            "/api/v1/employees",
            json={
                "name": "Ann Lee",
                "email": "ann@x.com",
                "dateOfBirth": "1990-01-01",
                "departmentId": dept["id"],
            },
        )
        assert r.status_code == 201
        assert r.json()["message"] == "Employee created successfully"

        data = client.get("/api/v1/employees", params={"pageNumber": 1, "pageSize": 10}).json()["data"]
        assert data["totalCount"] == 1
        assert len(data["items"]) == 1
        item = data["items"][0]
        assert item["email"] == "ann@x.com"
        assert item["departmentName"] == "Engineering"
        assert item["departmentId"] == dept["id"]
        assert item["dateOfBirth"] == "1990-01-01"

    def test_create_duplicate_email_returns_409(self, client, make_employee):
        emp = make_employee(email="dup@company.com")
        r = client.post(
            "/api/v1/employees",
            json={
                "name": "Dup User",
                "email": "DUP@company.com",
                "dateOfBirth": "1985-05-05",
                "departmentId": emp["departmentId"],
            },
        )
        assert r.status_code == 409
        assert "already exists" in r.json()["message"]

    def test_create_unknown_department_returns_404(self, client):
        missing = str(uuid.uuid4())
        r = client.post(
            "/api/v1/employees",
            json={"name": "Bad Dept", "email": "bad@company.com", "dateOfBirth": "1990-01-01", "departmentId": missing},
        )
        assert r.status_code == 404
        assert r.json()["message"] == f"Department with ID {missing} not found"

    def test_create_in_deleted_department_returns_404(self, client, make_department):
        dept = make_department("Closed")
        client.delete(f"/api/v1/departments/{dept['id']}")
        r = client.post(
            "/api/v1/employees",
            json={"name": "Late Hire", "email": "late@company.com", "dateOfBirth": "1990-01-01", "departmentId": dept["id"]},
        )
        assert r.status_code == 404

    def test_missing_fields_return_400_with_messages(self, client):
        r = client.post("/api/v1/employees", json={"name": "Incomplete"})
        assert r.status_code == 400
        body = r.json()
        assert body["isSuccess"] is False
        assert body["message"] == "Validation failed"
        fields = {err.split(":")[0] for err in body["errors"]}
        assert {"email", "dateOfBirth", "departmentId"} <= fields

    def test_invalid_email_returns_400(self, client, make_department):
        dept = make_department()
        r = client.post(
            "/api/v1/employees",
            json={"name": "Bad Email", "email": "not-an-email", "dateOfBirth": "1990-01-01", "departmentId": dept["id"]},
        )
        assert r.status_code == 400

    def test_future_date_of_birth_returns_400(self, client, make_department):
        dept = make_department()
        r = client.post(
            "/api/v1/employees",
            json={"name": "Time Traveller", "email": "tt@company.com", "dateOfBirth": "2999-01-01", "departmentId": dept["id"]},
        )
        assert r.status_code == 400
        assert "dateOfBirth: Date of birth must be in the past" in r.json()["errors"]

    def test_name_too_short_returns_400(self, client, make_department):
        dept = make_department()
        r = client.post(
            "/api/v1/employees",
            json={"name": "A", "email": "a@company.com", "dateOfBirth": "1990-01-01", "departmentId": dept["id"]},
        )
        assert r.status_code == 400


class TestGetAndUpdateEmployee:
    def test_get_employee(self, client, make_employee):
        emp = make_employee()
        r = client.get(f"/api/v1/employees/{emp['id']}")
        assert r.status_code == 200
        assert r.json()["data"]["name"] == "Ann Lee"

    def test_get_unknown_employee_returns_404(self, client):
        missing = uuid.uuid4()
        r = client.get(f"/api/v1/employees/{missing}")
        assert r.status_code == 404
        assert r.json()["message"] == f"Employee with ID {missing} not found"

    def test_update_employee(self, client, make_employee, make_department):
        emp = make_employee()
        new_dept = make_department("Finance")
        r = client.put(
            f"/api/v1/employees/{emp['id']}",
            json={
                "name": "Ann Lee-Smith",
                "email": "ann.smith@company.com",
                "dateOfBirth": "1990-02-02",
                "departmentId": new_dept["id"],
                "version": emp["version"],
            },
            headers={"X-Actor": "hr-admin"},
        )
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["name"] == "Ann Lee-Smith"
        assert data["departmentName"] == "Finance"
        assert data["updatedBy"] == "hr-admin"
        assert data["version"] == emp["version"] + 1

    def test_update_to_own_email_succeeds(self, client, make_employee):
        emp = make_employee(email="self@company.com")
        r = client.put(
            f"/api/v1/employees/{emp['id']}",
            json={"name": "Renamed", "email": "self@company.com", "dateOfBirth": "1990-01-01", "departmentId": emp["departmentId"]},
        )
        assert r.status_code == 200

    def test_update_to_taken_email_returns_409(self, client, make_employee):
        first = make_employee(email="first@company.com")
        second = make_employee(email="second@company.com", department_id=first["departmentId"])
        r = client.put(
            f"/api/v1/employees/{second['id']}",
            json={"name": "Second", "email": "first@company.com", "dateOfBirth": "1990-01-01", "departmentId": first["departmentId"]},
        )
        assert r.status_code == 409

    def test_update_with_stale_version_returns_409(self, client, make_employee):
        emp = make_employee()
        payload = {
            "name": "Ann Lee",
            "email": "ann@company.com",
            "dateOfBirth": "1990-01-01",
            "departmentId": emp["departmentId"],
            "version": emp["version"],
        }
        assert client.put(f"/api/v1/employees/{emp['id']}", json=payload).status_code == 200
        r = client.put(f"/api/v1/employees/{emp['id']}", json=payload)
        assert r.status_code == 409
        assert r.json()["message"] == "Employee was modified by another user"

    def test_update_unknown_employee_returns_404(self, client, make_department):
        dept = make_department()
        r = client.put(
            f"/api/v1/employees/{uuid.uuid4()}",
            json={"name": "Ghost", "email": "ghost@company.com", "dateOfBirth": "1990-01-01", "departmentId": dept["id"]},
        )
        assert r.status_code == 404

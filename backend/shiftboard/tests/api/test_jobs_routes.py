"""
API tests for the jobs, schedule and machine routes.
"""

from datetime import timedelta
from uuid import uuid4

from fastapi.testclient import TestClient

from shiftboard.core.security import create_access_token

JOBS = "/api/v1/jobs"


def create(client: TestClient, headers: dict[str, str], **overrides):
    payload = {
        "jobId": "JOB-001",
        "name": "Brochure run",
        "machineId": "PR-01",
        "startSlot": 2,
        "durationSlots": 3,
    }
    payload.update(overrides)
    return client.post(JOBS, json=payload, headers=headers)


class TestAuthentication:
    def test_health_needs_no_token(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_missing_token(self, client):
        response = client.get(JOBS)
        assert response.status_code == 401
        assert response.json()["type"] == "unauthenticated"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_bad_signature(self, client, settings):
        other = settings.model_copy(update={"SECRET_KEY": "another-secret"})
        token = create_access_token("u-1", "admin", other)
        response = client.get(JOBS, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_expired_token(self, client, settings):
        token = create_access_token(
            "u-1", "admin", settings, expires_delta=timedelta(minutes=-5)
        )
        response = client.get(JOBS, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_unknown_role_reads_but_cannot_write(self, client, settings):
        token = create_access_token("u-9", "dispatcher", settings)
        headers = {"Authorization": f"Bearer {token}"}

        assert client.get(JOBS, headers=headers).status_code == 200
        assert create(client, headers).status_code == 403


class TestJobsRoutes:
    """Test /jobs endpoints."""

    def test_create_job(self, client, manager_headers):
        response = create(client, manager_headers, assigneeName="Dana Lee")

        assert response.status_code == 201
        body = response.json()
        assert body["jobId"] == "JOB-001"
        assert body["machineId"] == "PR-01"
        assert body["department"] == "Printing"
        assert body["status"] == "pending"
        assert body["startSlot"] == 2
        assert body["durationSlots"] == 3
        assert body["endSlot"] == 4
        assert body["employeeName"] == "Dana Lee"
        assert body["createdBy"] == "manager-1"
        assert "created" in body and "updated" in body

    def test_create_defaults(self, client, manager_headers):
        response = client.post(
            JOBS,
            json={"jobId": "J-2", "name": "Cards", "machineId": "PR-02"},
            headers=manager_headers,
        )
        body = response.json()
        assert response.status_code == 201
        assert (body["status"], body["startSlot"], body["durationSlots"]) == (
            "pending",
            0,
            1,
        )
        assert body["employeeName"] == "Unassigned"

    def test_numeric_strings_are_accepted(self, client, manager_headers):
        response = create(client, manager_headers, startSlot="1", durationSlots="2")
        assert response.status_code == 201
        assert response.json()["startSlot"] == 1

    def test_missing_required_fields(self, client, manager_headers):
        response = client.post(JOBS, json={"jobId": " "}, headers=manager_headers)

        assert response.status_code == 422
        body = response.json()
        assert body["type"] == "validation"
        messages = [e["message"] for e in body["details"]["errors"]]
        assert "Job ID is required" in messages
        assert any("required" in m.lower() for m in messages)

    def test_non_numeric_slot(self, client, manager_headers):
        response = create(client, manager_headers, durationSlots="long")
        assert response.status_code == 422
        assert "Duration must be a number" in response.json()["error"]

    def test_bad_status_value(self, client, manager_headers):
        response = create(client, manager_headers, status="paused")
        assert response.status_code == 422

    def test_assignee_reference_without_id(self, client, manager_headers):
        response = create(client, manager_headers, assignedTo={"name": "Dana Lee"})

        assert response.status_code == 422
        body = response.json()
        assert body["type"] == "validation"
        messages = [e["message"] for e in body["details"]["errors"]]
        assert any("Assignee reference must include an id" in m for m in messages)
        assert client.get(JOBS, headers=manager_headers).json() == []

    def test_edit_with_assignee_reference_without_id(self, client, manager_headers):
        job_id = create(client, manager_headers).json()["id"]

        response = client.put(
            f"{JOBS}/{job_id}",
            json={"assignedTo": {"_id": "", "name": "Dana Lee"}},
            headers=manager_headers,
        )

        assert response.status_code == 422
        stored = client.get(f"{JOBS}/{job_id}", headers=manager_headers).json()
        assert stored["assignedTo"] is None

    def test_assignee_reference_with_id(self, client, manager_headers):
        response = create(
            client, manager_headers, assignedTo={"_id": "emp-7", "name": "Dana Lee"}
        )
        assert response.status_code == 201
        assert response.json()["assignedTo"]["id"] == "emp-7"

    def test_out_of_range(self, client, manager_headers):
        response = create(client, manager_headers, startSlot=6, durationSlots=3)
        assert response.status_code == 422
        assert response.json()["type"] == "out_of_range"

    def test_overlap_conflict(self, client, manager_headers):
        first = create(client, manager_headers)
        response = create(client, manager_headers, jobId="JOB-002", startSlot=4)

        assert response.status_code == 409
        body = response.json()
        assert body["type"] == "conflict"
        assert body["details"]["conflicts"][0]["id"] == first.json()["id"]

    def test_duplicate_job_id(self, client, manager_headers):
        create(client, manager_headers)
        response = create(client, manager_headers, machineId="PR-02")
        assert response.status_code == 409
        assert response.json()["type"] == "duplicate_key"

    def test_unknown_machine(self, client, manager_headers):
        response = create(client, manager_headers, machineId="XX-1")
        assert response.status_code == 404

    def test_employee_cannot_create(self, client, employee_headers):
        response = create(client, employee_headers)
        assert response.status_code == 403
        assert response.json()["details"]["operation"] == "create_job"

    def test_list_is_repeatable(self, client, manager_headers, employee_headers):
        create(client, manager_headers, jobId="B", machineId="PR-02", startSlot=0)
        create(client, manager_headers, jobId="A", startSlot=0, durationSlots=1)

        first = client.get(JOBS, headers=employee_headers)
        second = client.get(JOBS, headers=employee_headers)

        assert first.status_code == 200
        assert first.json() == second.json()
        assert [job["jobId"] for job in first.json()] == ["A", "B"]

    def test_list_filters(self, client, manager_headers):
        create(client, manager_headers, jobId="P", startSlot=0, durationSlots=1)
        create(client, manager_headers, jobId="F", machineId="FN-01")

        by_department = client.get(
            JOBS, params={"department": "Finishing"}, headers=manager_headers
        )
        by_machine = client.get(JOBS, params={"machineId": "PR-01"}, headers=manager_headers)
        bad_status = client.get(JOBS, params={"status": "paused"}, headers=manager_headers)

        assert [job["jobId"] for job in by_department.json()] == ["F"]
        assert [job["jobId"] for job in by_machine.json()] == ["P"]
        assert bad_status.status_code == 422

    def test_get_job(self, client, manager_headers, employee_headers):
        job_id = create(client, manager_headers).json()["id"]

        response = client.get(f"{JOBS}/{job_id}", headers=employee_headers)

        assert response.status_code == 200
        assert response.json()["id"] == job_id
        assert client.get(f"{JOBS}/{uuid4()}", headers=employee_headers).status_code == 404
        assert client.get(f"{JOBS}/not-a-uuid", headers=employee_headers).status_code == 422

    def test_edit_job(self, client, manager_headers):
        job_id = create(client, manager_headers).json()["id"]

        response = client.put(
            f"{JOBS}/{job_id}",
            json={"name": "Flyers", "startSlot": 5},
            headers=manager_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Flyers"
        assert (body["startSlot"], body["endSlot"]) == (5, 7)

    def test_edit_into_conflict(self, client, manager_headers):
        create(client, manager_headers)
        other_id = create(
            client, manager_headers, jobId="JOB-002", startSlot=5, durationSlots=1
        ).json()["id"]

        response = client.put(
            f"{JOBS}/{other_id}", json={"startSlot": 3}, headers=manager_headers
        )

        assert response.status_code == 409

    def test_status_lifecycle(self, client, manager_headers):
        job_id = create(client, manager_headers).json()["id"]
        url = f"{JOBS}/{job_id}/status"

        skipped = client.post(url, json={"status": "completed"}, headers=manager_headers)
        started = client.post(url, json={"status": "in-progress"}, headers=manager_headers)
        done = client.post(url, json={"status": "completed"}, headers=manager_headers)
        reopened = client.post(url, json={"status": "pending"}, headers=manager_headers)

        assert skipped.status_code == 409
        assert skipped.json()["type"] == "invalid_transition"
        assert started.json()["status"] == "in-progress"
        assert done.json()["status"] == "completed"
        assert reopened.status_code == 409

    def test_employee_cannot_change_status(self, client, manager_headers, employee_headers):
        job_id = create(client, manager_headers).json()["id"]
        response = client.post(
            f"{JOBS}/{job_id}/status",
            json={"status": "in-progress"},
            headers=employee_headers,
        )
        assert response.status_code == 403

    def test_delete_job(self, client, manager_headers):
        job_id = create(client, manager_headers).json()["id"]

        response = client.delete(f"{JOBS}/{job_id}", headers=manager_headers)

        assert response.status_code == 200
        assert response.json()["id"] == job_id
        assert client.delete(f"{JOBS}/{job_id}", headers=manager_headers).status_code == 404

    def test_correlation_id_is_echoed(self, client, manager_headers):
        response = client.get(
            JOBS, headers={**manager_headers, "X-Correlation-ID": "req-42"}
        )
        assert response.headers["X-Correlation-ID"] == "req-42"


class TestScheduleRoutes:
    """Test /schedule and /machines endpoints."""

    def test_grid(self, client, manager_headers, employee_headers):
        job_id = create(client, manager_headers).json()["id"]

        response = client.get("/api/v1/schedule/grid", headers=employee_headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["slots"]) == 8
        assert [row["machine"]["id"] for row in body["rows"]] == ["PR-01", "PR-02", "FN-01"]
        cells = body["rows"][0]["cells"]
        assert [cell["occupied"] for cell in cells] == [
            False,
            False,
            True,
            True,
            True,
            False,
            False,
            False,
        ]
        assert cells[2] == {
            "slot": 2,
            "occupied": True,
            "jobId": job_id,
            "isFirstSlotOfRun": True,
        }
        assert body["rows"][0]["freeRuns"] == [
            {"startSlot": 0, "durationSlots": 2, "endSlot": 1},
            {"startSlot": 5, "durationSlots": 3, "endSlot": 7},
        ]
        assert [job["id"] for job in body["jobs"]] == [job_id]

    def test_cancelled_job_leaves_grid_empty(self, client, manager_headers):
        job_id = create(client, manager_headers).json()["id"]
        client.post(
            f"{JOBS}/{job_id}/status", json={"status": "cancelled"}, headers=manager_headers
        )

        body = client.get("/api/v1/schedule/grid", headers=manager_headers).json()

        assert not any(cell["occupied"] for cell in body["rows"][0]["cells"])

    def test_grid_by_department(self, client, manager_headers):
        response = client.get(
            "/api/v1/schedule/grid",
            params={"department": "Finishing"},
            headers=manager_headers,
        )
        assert [row["machine"]["id"] for row in response.json()["rows"]] == ["FN-01"]

    def test_slots(self, client, employee_headers):
        response = client.get("/api/v1/schedule/slots", headers=employee_headers)
        body = response.json()
        assert body["slotCount"] == 8
        assert body["slots"][0] == {"index": 0, "label": "08:00"}
        assert body["slots"][-1] == {"index": 7, "label": "15:00"}

    def test_machines(self, client, employee_headers):
        response = client.get(
            "/api/v1/machines", params={"department": "Printing"}, headers=employee_headers
        )
        assert response.status_code == 200
        assert [m["id"] for m in response.json()] == ["PR-01", "PR-02"]

    def test_metrics(self, client, manager_headers):
        create(client, manager_headers)
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "shiftboard_scheduling_decisions_total" in response.text

# tests/test_api.py
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_reports_collections(async_client: AsyncClient):
    response = await async_client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["collections"]["patients"] == 3


@pytest.mark.asyncio
async def test_labels(async_client: AsyncClient):
    response = await async_client.get("/api/v1/meta/labels")
    assert response.status_code == 200
    assert response.json()["triage_priority"]["semi_urgent"] == "Semi-Urgent"


@pytest.mark.asyncio
async def test_login_and_me(async_client: AsyncClient):
    response = await async_client.post("/api/v1/auth/login", json={"email": "admin@clinic.com", "password": "password123"})
    assert response.status_code == 200
    token = response.json()["token"]
    assert token.startswith("mock-jwt-token-user-1-")

    me = await async_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["role"] == "admin"


@pytest.mark.asyncio
async def test_login_with_wrong_password(async_client: AsyncClient):
    response = await async_client.post("/api/v1/auth/login", json={"email": "admin@clinic.com", "password": "letmein"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_requests_without_token_are_rejected(async_client: AsyncClient):
    assert (await async_client.get("/api/v1/queue")).status_code == 401
    bad = await async_client.get("/api/v1/queue", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


@pytest.mark.asyncio
async def test_role_guards(async_client: AsyncClient, auth_headers):
    assert (await async_client.get("/api/v1/logs", headers=auth_headers("receptionist"))).status_code == 403
    assert (await async_client.get("/api/v1/invoices", headers=auth_headers("triage_nurse"))).status_code == 403
    assert (await async_client.get("/api/v1/queue", headers=auth_headers("patient"))).status_code == 403
    assert (await async_client.post("/api/v1/consultations/appt-2/start", headers=auth_headers("billing_staff"))).status_code == 403


@pytest.mark.asyncio
async def test_queue_endpoints(async_client: AsyncClient, auth_headers):
    response = await async_client.get("/api/v1/queue", headers=auth_headers("receptionist"))
    assert response.status_code == 200
    assert [i["position"] for i in response.json()] == [1, 2]

    bumped = await async_client.patch(
        "/api/v1/queue/appt-3/priority", json={"priority": "critical"}, headers=auth_headers("triage_nurse"),
    )
    assert bumped.status_code == 200
    assert bumped.json()["position"] == 1

    missing = await async_client.patch(
        "/api/v1/queue/appt-404/priority", json={"priority": "urgent"}, headers=auth_headers("triage_nurse"),
    )
    assert missing.status_code == 404

    removed = await async_client.delete("/api/v1/queue/appt-3", headers=auth_headers("receptionist"))
    assert removed.status_code == 204
    again = await async_client.delete("/api/v1/queue/appt-3", headers=auth_headers("receptionist"))
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_check_in_flow(async_client: AsyncClient, auth_headers):
    response = await async_client.post(
        "/api/v1/appointments/appt-1/check-in",
        json={"patient_id": "patient-1", "chief_complaint": "Follow-up"},
        headers=auth_headers("receptionist"),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "checked_in"

    queue = (await async_client.get("/api/v1/queue", headers=auth_headers("receptionist"))).json()
    assert "appt-1" in [i["appointment_id"] for i in queue]


@pytest.mark.asyncio
async def test_invoice_endpoints(async_client: AsyncClient, auth_headers):
    headers = auth_headers("billing_staff")
    created = await async_client.post("/api/v1/invoices", json={
        "patient_id": "patient-2",
        "services": [
            {"service_id": "service-1", "service_name": "Office Visit", "unit_price": 19500},
            {"service_id": "service-3", "service_name": "Metabolic Panel", "unit_price": 9750},
        ],
    }, headers=headers)
    assert created.status_code == 201
    invoice = created.json()
    assert invoice["insurance_coverage"] == pytest.approx(25000)
    assert invoice["patient_responsibility"] == pytest.approx(4250)

    empty = await async_client.post("/api/v1/invoices", json={"patient_id": "patient-2", "services": []}, headers=headers)
    assert empty.status_code == 400

    paid = await async_client.post(
        f"/api/v1/invoices/{invoice['id']}/payments", json={"amount": 4250, "method": "m_pesa"}, headers=headers,
    )
    assert paid.status_code == 200
    assert paid.json()["status"] == "paid"

    zero = await async_client.post(
        f"/api/v1/invoices/{invoice['id']}/payments", json={"amount": 0, "method": "cash"}, headers=headers,
    )
    assert zero.status_code == 400


@pytest.mark.asyncio
async def test_consultation_and_diagnostics(async_client: AsyncClient, auth_headers):
    doctor = auth_headers("practitioner")
    started = await async_client.post("/api/v1/consultations/appt-2/start", headers=doctor)
    assert started.status_code == 200

    incomplete = await async_client.post("/api/v1/consultations/complete", json={
        "patient_id": "patient-2", "appointment_id": "appt-2", "assessment": "Asthma",
    }, headers=doctor)
    assert incomplete.status_code == 400

    completed = await async_client.post("/api/v1/consultations/complete", json={
        "patient_id": "patient-2", "appointment_id": "appt-2",
        "assessment": "Asthma", "plan": "Inhaler", "lab_tests": ["Peak Flow"],
    }, headers=doctor)
    assert completed.status_code == 201

    lab = auth_headers("lab_technician")
    tests = (await async_client.get("/api/v1/diagnostics", params={"type": "lab"}, headers=lab)).json()
    assert [t["name"] for t in tests] == ["Peak Flow"]

    finished = await async_client.post(f"/api/v1/diagnostics/{tests[0]['id']}/complete", json={"result": "Normal"}, headers=lab)
    assert finished.status_code == 200
    assert finished.json()["status"] == "completed"


@pytest.mark.asyncio
async def test_audit_log_is_admin_only_and_filterable(async_client: AsyncClient, auth_headers):
    await async_client.get("/api/v1/patients/patient-1", headers=auth_headers("receptionist"))

    response = await async_client.get("/api/v1/logs", params={"action": "view"}, headers=auth_headers("admin"))
    assert response.status_code == 200
    entries = response.json()
    assert len(entries) == 1
    assert entries[0]["user_id"] == "user-5"
    assert entries[0]["resource_id"] == "patient-1"


@pytest.mark.asyncio
async def test_dashboard_and_catalog(async_client: AsyncClient, auth_headers):
    headers = auth_headers("admin")
    metrics = (await async_client.get("/api/v1/dashboard/metrics", headers=headers)).json()
    assert metrics["patients_in_queue"] == 2

    services = (await async_client.get("/api/v1/catalog/services", headers=headers)).json()
    assert len(services) == 5
    practitioners = (await async_client.get("/api/v1/catalog/practitioners", headers=headers)).json()
    assert {p["id"] for p in practitioners} == {"prac-1", "prac-2"}

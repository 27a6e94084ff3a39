import pytest

from app.models import DepartmentCategory, UserRole
from app.settings import settings
from conftest import auth_headers, roll_for

TICKET_BODY = {
    "title": "Wi-Fi not working in hostel",
    "category": "IT Support",
    "description": "No connectivity since yesterday evening",
    "phone": "0300-1234567",
}


async def create_ticket(client, student, **overrides):
    response = await client.post(
        "/api/v1/tickets", json={**TICKET_BODY, **overrides}, headers=auth_headers(student)
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_requests_without_valid_token_are_rejected(client):
    assert (await client.get("/api/v1/tickets/my")).status_code == 401

    response = await client.get(
        "/api/v1/tickets/my", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401
    assert "detail" in response.json()


@pytest.mark.asyncio
async def test_create_ticket_routes_cpt_student(client, make_department, make_user):
    cpd = await make_department("CPD", DepartmentCategory.CPD)
    student = await make_user(UserRole.STUDENT, roll_number=roll_for("CPT", 2, 3))

    body = await create_ticket(client, student)

    assert body["message"] == "Ticket created and assigned successfully"
    assert body["assigned_to"] == "CPD"
    assert body["student_info"] == {
        "roll_number": student.roll_number,
        "year": 2,
        "department": "CPD",
    }
    ticket = body["ticket"]
    assert ticket["status"] == "Assigned"
    assert ticket["ticket_no"] == 1001
    assert ticket["assigned_department"]["id"] == str(cpd.id)
    assert ticket["student_phone"] == "0300-1234567"
    assert [h["action"] for h in ticket["history"]] == ["created"]


@pytest.mark.asyncio
async def test_graduated_student_gets_400(client, make_user):
    graduate = await make_user(UserRole.STUDENT, roll_number="2K21-CPT-3")

    response = await client.post(
        "/api/v1/tickets", json=TICKET_BODY, headers=auth_headers(graduate)
    )

    assert response.status_code == 400
    assert "graduation" in response.json()["detail"]
    my = await client.get("/api/v1/tickets/my", headers=auth_headers(graduate))
    assert my.json()["count"] == 0


@pytest.mark.asyncio
async def test_create_validates_contact_phone(client, make_user):
    student = await make_user(UserRole.STUDENT, roll_number=roll_for("IT"))

    response = await client.post(
        "/api/v1/tickets",
        json={**TICKET_BODY, "phone": "12345"},
        headers=auth_headers(student),
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_students_cannot_list_all_or_see_stats(client, make_user):
    student = await make_user(UserRole.STUDENT, roll_number=roll_for("IT"))

    assert (await client.get("/api/v1/tickets/all", headers=auth_headers(student))).status_code == 403
    assert (await client.get("/api/v1/tickets/stats", headers=auth_headers(student))).status_code == 403
    assert (
        await client.get("/api/v1/admin/dashboard/stats", headers=auth_headers(student))
    ).status_code == 403


@pytest.mark.asyncio
async def test_internal_comments_are_hidden_from_students(
    client, make_department, make_user
):
    it = await make_department("IT")
    student = await make_user(UserRole.STUDENT, roll_number=roll_for("IT"))
    staff = await make_user(UserRole.DEPARTMENT, department=it)
    ticket_id = (await create_ticket(client, student))["ticket"]["id"]

    for message, internal in [("Escalated to network team", True), ("We are on it", False)]:
        response = await client.post(
            f"/api/v1/tickets/{ticket_id}/comments",
            json={"message": message, "is_internal": internal},
            headers=auth_headers(staff),
        )
        assert response.status_code == 201

    student_view = await client.get(f"/api/v1/tickets/{ticket_id}", headers=auth_headers(student))
    staff_view = await client.get(f"/api/v1/tickets/{ticket_id}", headers=auth_headers(staff))

    assert [c["message"] for c in student_view.json()["comments"]] == ["We are on it"]
    assert len(staff_view.json()["comments"]) == 2
    # most recent history entry first
    assert staff_view.json()["history"][0]["action"] == "comment_added"
    assert staff_view.json()["history"][-1]["action"] == "created"


@pytest.mark.asyncio
async def test_status_update_flow(client, make_department, make_user):
    it = await make_department("IT")
    student = await make_user(UserRole.STUDENT, roll_number=roll_for("IT"))
    staff = await make_user(UserRole.DEPARTMENT, department=it)
    ticket_id = (await create_ticket(client, student))["ticket"]["id"]
    url = f"/api/v1/tickets/{ticket_id}/status"

    bad = await client.put(url, json={"status": "Done"}, headers=auth_headers(staff))
    assert bad.status_code == 400
    assert bad.json()["valid_values"] == ["Open", "Assigned", "In Progress", "Closed"]

    closed = await client.put(url, json={"status": "Closed"}, headers=auth_headers(staff))
    assert closed.status_code == 200
    assert closed.json()["ticket"]["resolved_at"] is not None

    forbidden = await client.put(url, json={"status": "Open"}, headers=auth_headers(student))
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_assign_and_priority(client, make_department, make_user):
    library = await make_department("Library")
    student = await make_user(UserRole.STUDENT, roll_number=roll_for("EE"))
    admin = await make_user(UserRole.ADMIN)
    ticket = (await create_ticket(client, student))["ticket"]
    assert ticket["status"] == "Open"

    assigned = await client.put(
        f"/api/v1/tickets/{ticket['id']}/assign",
        json={"department_id": str(library.id)},
        headers=auth_headers(admin),
    )
    assert assigned.status_code == 200
    assert assigned.json()["ticket"]["assigned_department"]["name"] == "Library"
    assert assigned.json()["ticket"]["history"][0]["old_value"] == "None"

    priority = await client.put(
        f"/api/v1/tickets/{ticket['id']}/priority",
        json={"priority": "Urgent"},
        headers=auth_headers(admin),
    )
    assert priority.json()["ticket"]["priority"] == "Urgent"

    missing = await client.put(
        f"/api/v1/tickets/{ticket['id']}/assign",
        json={"department_id": "00000000-0000-0000-0000-000000000000"},
        headers=auth_headers(admin),
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_upload_and_download_attachment(client, make_user):
    student = await make_user(UserRole.STUDENT, roll_number=roll_for("IT"))
    ticket_id = (await create_ticket(client, student))["ticket"]["id"]

    uploaded = await client.post(
        f"/api/v1/tickets/{ticket_id}/attachments",
        files={"file": ("error log.txt", b"Traceback ...", "text/plain")},
        headers=auth_headers(student),
    )
    assert uploaded.status_code == 201, uploaded.text
    attachment = uploaded.json()["attachment"]
    assert attachment["original_name"] == "error log.txt"
    assert attachment["file_size"] == len(b"Traceback ...")

    downloaded = await client.get(
        f"/api/v1/tickets/{ticket_id}/attachments/{attachment['id']}/download",
        headers=auth_headers(student),
    )
    assert downloaded.status_code == 200
    assert downloaded.content == b"Traceback ..."
    assert "error%20log.txt" in downloaded.headers["content-disposition"]


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected(client, make_user, blob_store, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 8)
    student = await make_user(UserRole.STUDENT, roll_number=roll_for("IT"))
    ticket_id = (await create_ticket(client, student))["ticket"]["id"]

    response = await client.post(
        f"/api/v1/tickets/{ticket_id}/attachments",
        files={"file": ("big.bin", b"0123456789", "application/octet-stream")},
        headers=auth_headers(student),
    )

    assert response.status_code == 413
    assert not blob_store.root.exists() or not any(blob_store.root.rglob("*.bin"))


@pytest.mark.asyncio
async def test_dashboard_and_admin_tickets(client, make_department, make_user):
    dvm = await make_department("DVM", DepartmentCategory.DVM)
    await make_department("IT")
    it_student = await make_user(UserRole.STUDENT, roll_number=roll_for("IT"))
    dvm_student = await make_user(UserRole.STUDENT, roll_number=roll_for("DVM"))
    main_admin = await make_user(UserRole.ADMIN)
    dvm_admin = await make_user(UserRole.ADMIN, department=dvm)
    await create_ticket(client, it_student)
    await create_ticket(client, dvm_student)

    stats = await client.get("/api/v1/admin/dashboard/stats", headers=auth_headers(main_admin))
    assert stats.status_code == 200
    assert stats.json()["total_tickets"] == 2
    assert stats.json()["in_progress_tickets"] == 2
    assert stats.json()["total_students"] == 2

    scoped = await client.get("/api/v1/admin/tickets", headers=auth_headers(dvm_admin))
    assert scoped.json()["count"] == 1
    assert scoped.json()["tickets"][0]["student_department"] == "DVM"


@pytest.mark.asyncio
async def test_dvm_admin_cannot_touch_main_department(client, make_department, make_user):
    dvm = await make_department("DVM", DepartmentCategory.DVM)
    library = await make_department("Library")
    dvm_admin = await make_user(UserRole.ADMIN, department=dvm)
    headers = auth_headers(dvm_admin)

    assert (await client.get(f"/api/v1/departments/{library.id}", headers=headers)).status_code == 403
    assert (
        await client.put(f"/api/v1/departments/{library.id}", json={"name": "X"}, headers=headers)
    ).status_code == 403
    assert (await client.delete(f"/api/v1/departments/{library.id}", headers=headers)).status_code == 403

    created = await client.post(
        "/api/v1/departments", json={"name": "Pathology Lab"}, headers=headers
    )
    assert created.status_code == 201
    assert created.json()["category"] == "DVM"

    listed = await client.get("/api/v1/departments", headers=headers)
    assert sorted(d["name"] for d in listed.json()["departments"]) == ["DVM", "Pathology Lab"]

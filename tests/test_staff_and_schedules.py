import pytest

from kaga_health.modules.users.models import UserRole

from conftest import bearer

MONDAY = "2030-01-07"


async def test_departments_are_public(client):
    res = await client.get("/api/departments")
    assert res.status_code == 200
    departments = res.json()["departments"]
    assert len(departments) == 8
    assert "General Medicine" in departments


async def test_admin_creates_staff_profile(client, admin, create_user):
    doctor_user = await create_user(UserRole.DOCTOR, first_name="Rachel", last_name="Adams")
    payload = {"user_id": str(doctor_user.id), "department": "neurology", "phone_number": "+256700000000"}

    res = await client.post("/api/medical-staff", json=payload, headers=admin.headers)
    assert res.status_code == 201, res.text
    staff = res.json()
    assert staff["department"] == "Neurology"
    assert staff["name"] == "Rachel Adams"
    assert staff["email"] == doctor_user.email

    again = await client.post("/api/medical-staff", json=payload, headers=admin.headers)
    assert again.status_code == 409
    assert again.json()["message"] == "staff_profile_exists"

    listed = await client.get(
        "/api/medical-staff", params={"department": "Neurology"}, headers=admin.headers
    )
    assert listed.status_code == 200
    assert [s["id"] for s in listed.json()["items"]] == [staff["id"]]


async def test_staff_profile_requires_doctor_user(client, admin, create_user):
    patient_user = await create_user(UserRole.PATIENT)
    res = await client.post(
        "/api/medical-staff",
        json={"user_id": str(patient_user.id), "department": "Dental"},
        headers=admin.headers,
    )
    assert res.status_code == 422
    assert res.json()["message"] == "user_is_not_a_doctor"


async def test_patients_cannot_manage_staff(client, create_user):
    patient_user = await create_user(UserRole.PATIENT)
    res = await client.post(
        "/api/medical-staff",
        json={"user_id": str(patient_user.id), "department": "Dental"},
        headers=bearer(patient_user),
    )
    assert res.status_code == 403


async def test_doctor_publishes_own_schedule(client, create_doctor):
    doctor = await create_doctor("Emily", "Rodriguez", "Dental")
    payload = {
        "available_slots": [
            {"day": "monday", "slots": ["10:00", "9:00"]},
            {"day": "Fri", "slots": ["14:00"]},
        ]
    }
    res = await client.post("/api/work-schedules", json=payload, headers=doctor.headers)
    assert res.status_code == 201, res.text
    schedule = res.json()
    assert schedule["doctor_id"] == str(doctor.profile_id)
    assert schedule["available_slots"] == [
        {"day": "Monday", "slots": ["09:00", "10:00"]},
        {"day": "Friday", "slots": ["14:00"]},
    ]

    dup = await client.post("/api/work-schedules", json=payload, headers=doctor.headers)
    assert dup.status_code == 409
    assert dup.json()["message"] == "schedule_already_exists"

    fetched = await client.get(f"/api/doctors/{doctor.profile_id}/work-schedule", headers=doctor.headers)
    assert fetched.status_code == 200
    assert fetched.json()["id"] == schedule["id"]


async def test_schedule_rejects_unknown_day(client, create_doctor):
    doctor = await create_doctor()
    res = await client.post(
        "/api/work-schedules",
        json={"available_slots": [{"day": "Caturday", "slots": ["10:00"]}]},
        headers=doctor.headers,
    )
    assert res.status_code == 422
    assert res.json()["error"] == "validation_error"


async def test_other_doctor_cannot_edit_schedule(client, create_doctor):
    owner = await create_doctor("Kevin", "Brown", "Dermatology", schedule={"Monday": ["09:00"]})
    other = await create_doctor("Amanda", "Davis", "Dermatology")
    schedule = (
        await client.get(f"/api/doctors/{owner.profile_id}/work-schedule", headers=owner.headers)
    ).json()

    res = await client.put(
        f"/api/work-schedules/{schedule['id']}",
        json={"available_slots": [{"day": "Tuesday", "slots": ["10:00"]}]},
        headers=other.headers,
    )
    assert res.status_code == 403
    assert res.json()["message"] == "not_owner"


async def test_update_schedule_replaces_slots(client, create_doctor):
    doctor = await create_doctor(schedule={"Monday": ["09:00", "10:00"]})
    schedule = (
        await client.get(f"/api/doctors/{doctor.profile_id}/work-schedule", headers=doctor.headers)
    ).json()

    res = await client.put(
        f"/api/work-schedules/{schedule['id']}",
        json={"available_slots": [{"day": "Monday", "slots": ["10:00", "11:00"]}, {"day": "Tue", "slots": ["09:00"]}]},
        headers=doctor.headers,
    )
    assert res.status_code == 200, res.text
    assert res.json()["available_slots"] == [
        {"day": "Monday", "slots": ["10:00", "11:00"]},
        {"day": "Tuesday", "slots": ["09:00"]},
    ]


async def test_open_slots_exclude_active_bookings(client, create_doctor, create_patient):
    doctor = await create_doctor(schedule={"Monday": ["09:00", "10:00", "11:00"]})
    patient = await create_patient()
    booked = await client.post(
        "/api/appointments",
        json={
            "department": "Cardiology",
            "doctor_id": str(doctor.profile_id),
            "appointment_date": MONDAY,
            "slot": "10:00",
        },
        headers=patient.headers,
    )
    assert booked.status_code == 201, booked.text

    res = await client.get(
        f"/api/doctors/{doctor.profile_id}/open-slots", params={"date": MONDAY}, headers=patient.headers
    )
    assert res.status_code == 200, res.text
    assert res.json()["day"] == "Monday"
    assert res.json()["slots"] == ["09:00", "11:00"]

    await client.put(f"/api/appointments/{booked.json()['id']}/cancel", headers=patient.headers)
    res = await client.get(
        f"/api/doctors/{doctor.profile_id}/open-slots", params={"date": MONDAY}, headers=patient.headers
    )
    assert res.json()["slots"] == ["09:00", "10:00", "11:00"]


async def test_delete_schedule(client, admin, create_doctor):
    doctor = await create_doctor(schedule={"Monday": ["09:00"]})
    schedule = (
        await client.get(f"/api/doctors/{doctor.profile_id}/work-schedule", headers=admin.headers)
    ).json()
    res = await client.delete(f"/api/work-schedules/{schedule['id']}", headers=admin.headers)
    assert res.status_code == 204
    missing = await client.get(f"/api/work-schedules/{schedule['id']}", headers=admin.headers)
    assert missing.status_code == 404


@pytest.mark.parametrize("field", ["department", "email"])
async def test_staff_update_rejects_null_required_fields(client, admin, create_doctor, field):
    doctor = await create_doctor()
    res = await client.patch(
        f"/api/medical-staff/{doctor.profile_id}", json={field: None}, headers=admin.headers
    )
    assert res.status_code == 422
    assert res.json()["error"] == "validation_error"

    staff = (await client.get(f"/api/medical-staff/{doctor.profile_id}", headers=admin.headers)).json()
    assert staff["department"] == "Cardiology"


async def test_department_is_locked_while_appointments_are_active(client, admin, create_doctor, create_patient):
    doctor = await create_doctor(schedule={"Monday": ["09:00"]})
    patient = await create_patient()
    appt = (
        await client.post(
            "/api/appointments",
            json={
                "department": "Cardiology",
                "doctor_id": str(doctor.profile_id),
                "appointment_date": MONDAY,
                "slot": "09:00",
            },
            headers=patient.headers,
        )
    ).json()
    url = f"/api/medical-staff/{doctor.profile_id}"

    res = await client.patch(url, json={"department": "Neurology"}, headers=admin.headers)
    assert res.status_code == 409
    assert res.json()["message"] == "doctor_has_active_appointments"

    # other fields stay editable
    res = await client.patch(url, json={"bio": "Heart specialist"}, headers=admin.headers)
    assert res.status_code == 200

    await client.put(f"/api/appointments/{appt['id']}/cancel", headers=patient.headers)
    res = await client.patch(url, json={"department": "Neurology"}, headers=admin.headers)
    assert res.status_code == 200, res.text
    assert res.json()["department"] == "Neurology"

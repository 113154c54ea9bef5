from decimal import Decimal

import pytest

MONDAY = "2030-01-07"


@pytest.fixture
async def scheduled(client, create_doctor, create_patient):
    """A patient with a pending Monday 09:00 cardiology appointment."""
    doctor = await create_doctor(schedule={"Monday": ["09:00", "10:00"]})
    patient = await create_patient()
    res = await client.post(
        "/api/appointments",
        json={
            "department": "Cardiology",
            "doctor_id": str(doctor.profile_id),
            "appointment_date": MONDAY,
            "slot": "09:00",
        },
        headers=patient.headers,
    )
    assert res.status_code == 201, res.text
    return patient, doctor, res.json()


async def test_patient_pays_for_appointment(client, scheduled):
    patient, _, appt = scheduled
    res = await client.post(
        "/api/bookings",
        json={"appointment": appt["id"], "amount": "150.00", "method": "card"},
        headers=patient.headers,
    )
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["appointment_id"] == appt["id"]
    assert Decimal(str(body["amount"])) == Decimal("150.00")
    assert body["method"] == "card"
    assert body["status"] == "Pending"

    res = await client.get(f"/api/bookings/{body['id']}", headers=patient.headers)
    assert res.status_code == 200


async def test_one_booking_per_appointment(client, scheduled):
    patient, _, appt = scheduled
    payload = {"appointment_id": appt["id"], "amount": 80}
    assert (await client.post("/api/bookings", json=payload, headers=patient.headers)).status_code == 201

    res = await client.post("/api/bookings", json=payload, headers=patient.headers)
    assert res.status_code == 409
    assert res.json()["message"] == "booking_already_exists"


async def test_cancelled_appointment_cannot_be_paid(client, scheduled):
    patient, _, appt = scheduled
    await client.put(f"/api/appointments/{appt['id']}/cancel", headers=patient.headers)

    res = await client.post(
        "/api/bookings", json={"appointment_id": appt["id"], "amount": 80}, headers=patient.headers
    )
    assert res.status_code == 422
    assert res.json()["message"] == "appointment_cancelled"


@pytest.mark.parametrize("amount", [0, -5, "abc"])
async def test_amount_must_be_positive(client, scheduled, amount):
    patient, _, appt = scheduled
    res = await client.post(
        "/api/bookings", json={"appointment_id": appt["id"], "amount": amount}, headers=patient.headers
    )
    assert res.status_code == 422
    assert res.json()["error"] == "validation_error"


async def test_unknown_appointment(client, create_patient):
    patient = await create_patient()
    res = await client.post(
        "/api/bookings",
        json={"appointment_id": "00000000-0000-4000-8000-000000000000", "amount": 50},
        headers=patient.headers,
    )
    assert res.status_code == 404
    assert res.json()["message"] == "appointment_not_found"


async def test_only_admin_marks_paid(client, admin, scheduled):
    patient, _, appt = scheduled
    booking = (
        await client.post(
            "/api/bookings", json={"appointment_id": appt["id"], "amount": 80}, headers=patient.headers
        )
    ).json()
    url = f"/api/bookings/{booking['id']}"

    assert (await client.patch(url, json={"status": "Paid"}, headers=patient.headers)).status_code == 403

    res = await client.patch(url, json={"status": "Paid"}, headers=admin.headers)
    assert res.status_code == 200
    assert res.json()["status"] == "Paid"

    assert (await client.delete(url, headers=admin.headers)).status_code == 204
    assert (await client.get(url, headers=admin.headers)).status_code == 404


async def test_doctor_cannot_create_booking(client, scheduled):
    _, doctor, appt = scheduled
    res = await client.post(
        "/api/bookings", json={"appointment_id": appt["id"], "amount": 80}, headers=doctor.headers
    )
    assert res.status_code == 403
    assert res.json() == {"detail": "insufficient_role"}


async def test_list_is_scoped(client, admin, scheduled, create_patient):
    patient, doctor, appt = scheduled
    await client.post(
        "/api/bookings", json={"appointment_id": appt["id"], "amount": 80}, headers=patient.headers
    )
    stranger = await create_patient("Sam", "Stranger")

    assert (await client.get("/api/bookings", headers=patient.headers)).json()["total"] == 1
    assert (await client.get("/api/bookings", headers=doctor.headers)).json()["total"] == 1
    assert (await client.get("/api/bookings", headers=admin.headers)).json()["total"] == 1
    assert (await client.get("/api/bookings", headers=stranger.headers)).json()["total"] == 0

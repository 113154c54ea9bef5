import pytest

MONDAY = "2030-01-07"


@pytest.fixture
async def visit(client, create_doctor, create_patient):
    doctor = await create_doctor(schedule={"Monday": ["09:00"]})
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
    return doctor, patient, res.json()


def note_payload(appt, **extra):
    return {
        "appointment": appt["id"],
        "notes": "Mild hypertension, recheck in two weeks.",
        "medicines": [{"name": "Amlodipine", "dose": "5mg", "frequency": "daily", "duration": "14 days"}],
        **extra,
    }


async def test_doctor_writes_note(client, visit):
    doctor, patient, appt = visit
    res = await client.post("/api/doctor-notes", json=note_payload(appt), headers=doctor.headers)
    assert res.status_code == 201, res.text
    note = res.json()
    assert note["doctor_id"] == str(doctor.profile_id)
    assert note["patient_id"] == str(patient.profile_id)
    assert note["medicines"][0]["name"] == "Amlodipine"


async def test_other_doctor_is_rejected(client, visit, create_doctor):
    _, _, appt = visit
    other = await create_doctor("Gregory", "House", "Cardiology")
    res = await client.post("/api/doctor-notes", json=note_payload(appt), headers=other.headers)
    assert res.status_code == 403


async def test_patient_cannot_write_notes(client, visit):
    _, patient, appt = visit
    res = await client.post("/api/doctor-notes", json=note_payload(appt), headers=patient.headers)
    assert res.status_code == 403
    assert res.json() == {"detail": "insufficient_role"}


async def test_ids_must_match_appointment(client, visit, create_patient):
    doctor, _, appt = visit
    other = await create_patient("Sam", "Other")
    res = await client.post(
        "/api/doctor-notes",
        json=note_payload(appt, patient_id=str(other.profile_id)),
        headers=doctor.headers,
    )
    assert res.status_code == 422
    assert res.json()["message"] == "note_patient_mismatch"


async def test_list_update_delete(client, admin, visit, create_doctor):
    doctor, _, appt = visit
    note = (await client.post("/api/doctor-notes", json=note_payload(appt), headers=doctor.headers)).json()
    url = f"/api/doctor-notes/{note['id']}"

    listed = await client.get("/api/doctor-notes", params={"appointment_id": appt["id"]}, headers=doctor.headers)
    assert [n["id"] for n in listed.json()] == [note["id"]]

    other = await create_doctor("Gregory", "House", "Cardiology")
    assert (await client.get("/api/doctor-notes", headers=other.headers)).json() == []
    assert (await client.get(url, headers=other.headers)).status_code == 403

    res = await client.patch(url, json={"medicines": []}, headers=doctor.headers)
    assert res.status_code == 200
    assert res.json()["medicines"] == []
    assert res.json()["notes"] == note["notes"]

    assert (await client.get(url, headers=admin.headers)).status_code == 200
    assert (await client.delete(url, headers=doctor.headers)).status_code == 204
    assert (await client.get(url, headers=doctor.headers)).status_code == 404

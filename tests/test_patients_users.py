MONDAY = "2030-01-07"


async def test_admin_manages_users(client, admin):
    res = await client.post(
        "/api/users",
        json={
            "email": "  Nurse.Joy@KagaMail.com ",
            "password": "Secret123",
            "first_name": "Nurse",
            "last_name": "Joy",
            "role": "doctor",
        },
        headers=admin.headers,
    )
    assert res.status_code == 201, res.text
    user = res.json()
    assert user["email"] == "nurse.joy@kagamail.com"
    assert user["role"] == "doctor"
    url = f"/api/users/{user['id']}"

    listing = await client.get("/api/users", params={"role": "doctor"}, headers=admin.headers)
    assert [u["id"] for u in listing.json()["items"]] == [user["id"]]

    res = await client.patch(url, json={"is_active": False}, headers=admin.headers)
    assert res.status_code == 200
    assert res.json()["is_active"] is False

    assert (await client.delete(url, headers=admin.headers)).status_code == 204
    res = await client.get(url, headers=admin.headers)
    assert res.status_code == 404
    assert res.json()["message"] == "user_not_found"


async def test_users_endpoints_are_admin_only(client, create_patient):
    patient = await create_patient()
    res = await client.get("/api/users", headers=patient.headers)
    assert res.status_code == 403


async def test_inactive_user_is_locked_out(client, admin, create_patient):
    patient = await create_patient()
    await client.patch(f"/api/users/{patient.user.id}", json={"is_active": False}, headers=admin.headers)

    res = await client.get("/api/auth/me", headers=patient.headers)
    assert res.status_code == 403
    assert res.json() == {"detail": "user_inactive"}


async def test_admin_attaches_patient_profile(client, admin, create_user, create_doctor):
    user = await create_user(first_name="Lina", last_name="Okello")
    payload = {"user_id": str(user.id), "gender": "Female", "address": "Kampala"}

    res = await client.post("/api/patients", json=payload, headers=admin.headers)
    assert res.status_code == 201, res.text
    profile = res.json()
    assert profile["first_name"] == "Lina"
    assert profile["email"] == user.email

    res = await client.post("/api/patients", json=payload, headers=admin.headers)
    assert res.status_code == 409
    assert res.json()["message"] == "patient_profile_exists"

    doctor = await create_doctor()
    res = await client.post(
        "/api/patients", json={"user_id": str(doctor.user.id)}, headers=admin.headers
    )
    assert res.status_code == 422
    assert res.json()["message"] == "user_is_not_a_patient"

    listing = await client.get("/api/patients", params={"q": "okello"}, headers=doctor.headers)
    assert [p["id"] for p in listing.json()["items"]] == [profile["id"]]


async def test_patient_sees_only_own_profile(client, create_patient):
    me = await create_patient("Ann", "Me")
    other = await create_patient("Bob", "Other")

    res = await client.get("/api/patients/me", headers=me.headers)
    assert res.json()["id"] == str(me.profile_id)

    res = await client.patch(
        f"/api/patients/{me.profile_id}", json={"address": "Entebbe Road"}, headers=me.headers
    )
    assert res.status_code == 200
    assert res.json()["address"] == "Entebbe Road"

    assert (await client.get(f"/api/patients/{other.profile_id}", headers=me.headers)).status_code == 403
    assert (await client.get("/api/patients", headers=me.headers)).status_code == 403


async def test_patient_with_appointments_cannot_be_deleted(client, admin, create_doctor, create_patient):
    doctor = await create_doctor(schedule={"Monday": ["09:00"]})
    patient = await create_patient()
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

    res = await client.delete(f"/api/patients/{patient.profile_id}", headers=admin.headers)
    assert res.status_code == 409
    assert res.json()["message"] == "patient_has_appointments"

    idle = await create_patient("Idle", "Patient")
    assert (await client.delete(f"/api/patients/{idle.profile_id}", headers=admin.headers)).status_code == 204


async def test_user_update_rejects_null_role(client, admin, create_patient):
    patient = await create_patient()
    url = f"/api/users/{patient.user.id}"

    res = await client.patch(url, json={"role": None}, headers=admin.headers)
    assert res.status_code == 422
    assert res.json()["error"] == "validation_error"

    assert (await client.get(url, headers=admin.headers)).json()["role"] == "patient"

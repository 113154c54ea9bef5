from datetime import date

import pytest
from pydantic import ValidationError

from kaga_health.modules.appointments.schemas import (
    AppointmentCreateRequest,
    AppointmentUpdateRequest,
)
from kaga_health.modules.schedules.schemas import (
    DaySlots,
    WorkScheduleCreate,
    normalize_day,
    normalize_slot,
    weekday_name,
)
from kaga_health.modules.staff.schemas import StaffUpdateRequest, check_department
from kaga_health.modules.users.schemas import UserUpdateRequest


def test_timestamp_is_split_into_date_and_slot():
    req = AppointmentCreateRequest.model_validate(
        {"department": "cardiology", "appointmentDate": "2024-10-20T10:00:00Z"}
    )
    assert req.appointment_date == date(2024, 10, 20)
    assert req.slot == "10:00"
    assert req.department == "Cardiology"
    assert req.status == "Pending"


def test_timestamp_and_matching_slot_are_accepted():
    req = AppointmentCreateRequest.model_validate(
        {"department": "Dental", "appointment_date": "2024-10-20T10:00:00", "slot": "10:00"}
    )
    assert req.slot == "10:00"


def test_timestamp_and_different_slot_are_rejected():
    with pytest.raises(ValidationError):
        AppointmentCreateRequest.model_validate(
            {"department": "Dental", "appointment_date": "2024-10-20T10:00:00", "slot": "11:00"}
        )


def test_plain_date_requires_a_slot():
    with pytest.raises(ValidationError):
        AppointmentCreateRequest.model_validate({"department": "Dental", "appointment_date": "2024-10-20"})

    req = AppointmentCreateRequest.model_validate(
        {"department": "Dental", "appointment_date": "2024-10-20", "slot": "9:00"}
    )
    assert req.slot == "09:00"


def test_client_aliases_for_references():
    req = AppointmentCreateRequest.model_validate(
        {
            "patient": "5f0c6c43-7a3f-4c8e-9a9e-9b1f3f3a1a11",
            "doctor": "1c5f5b0e-2d3b-4f6a-8f5e-0a1b2c3d4e5f",
            "department": "Neurology",
            "appointment_date": "2030-01-07",
            "slot": "09:00",
        }
    )
    assert str(req.patient_id) == "5f0c6c43-7a3f-4c8e-9a9e-9b1f3f3a1a11"
    assert str(req.doctor_id) == "1c5f5b0e-2d3b-4f6a-8f5e-0a1b2c3d4e5f"


@pytest.mark.parametrize(
    "payload",
    [
        {"department": "Astrology", "appointment_date": "2030-01-07", "slot": "09:00"},
        {"department": "Dental", "appointment_date": "2030-01-07", "slot": "25:00"},
        {"department": "Dental", "appointment_date": "2030-01-07", "slot": "09:00", "status": "Done"},
        {"department": "Dental", "appointment_date": "not-a-date", "slot": "09:00"},
    ],
)
def test_create_request_rejects_bad_fields(payload):
    with pytest.raises(ValidationError):
        AppointmentCreateRequest.model_validate(payload)


def test_update_request_only_keeps_sent_fields():
    req = AppointmentUpdateRequest.model_validate({"status": "Confirmed"})
    assert req.model_dump(exclude_unset=True) == {"status": "Confirmed"}

    req = AppointmentUpdateRequest.model_validate({"appointment_date": "2030-01-08T14:00:00"})
    assert req.model_dump(exclude_unset=True) == {
        "appointment_date": date(2030, 1, 8),
        "slot": "14:00",
    }


@pytest.mark.parametrize("field", ["department", "appointment_date", "appointmentDate", "slot"])
def test_update_request_rejects_null_required_fields(field):
    with pytest.raises(ValidationError):
        AppointmentUpdateRequest.model_validate({field: None})


def test_update_request_allows_null_doctor():
    req = AppointmentUpdateRequest.model_validate({"doctor_id": None, "reason": None})
    assert req.model_dump(exclude_unset=True) == {"doctor_id": None, "reason": None}


@pytest.mark.parametrize("stamp", ["2024-10-20T10:00:30", "2024-10-20T10:00:00.250"])
def test_timestamp_off_the_minute_is_rejected(stamp):
    with pytest.raises(ValidationError):
        AppointmentCreateRequest.model_validate({"department": "Dental", "appointment_date": stamp})


@pytest.mark.parametrize(
    "model, payload",
    [
        (StaffUpdateRequest, {"department": None}),
        (StaffUpdateRequest, {"email": None}),
        (UserUpdateRequest, {"role": None}),
        (UserUpdateRequest, {"first_name": None}),
        (UserUpdateRequest, {"is_active": None}),
    ],
)
def test_profile_updates_reject_null_required_fields(model, payload):
    with pytest.raises(ValidationError):
        model.model_validate(payload)


def test_profile_updates_allow_clearing_optional_fields():
    assert StaffUpdateRequest.model_validate({"bio": None, "phone_number": None}).bio is None
    assert UserUpdateRequest.model_validate({"phone": None}).phone is None


def test_day_and_slot_normalisation():
    assert normalize_day("mon") == "Monday"
    assert normalize_day(" SUNDAY ") == "Sunday"
    with pytest.raises(ValueError):
        normalize_day("Funday")

    assert normalize_slot("9:00") == "09:00"
    assert normalize_slot("14:30:00") == "14:30"
    with pytest.raises(ValueError):
        normalize_slot("9am")

    assert weekday_name(date(2024, 10, 20)) == "Sunday"


def test_schedule_payload_merges_and_sorts_days():
    payload = WorkScheduleCreate.model_validate(
        {
            "available_slots": [
                {"day": "wed", "slots": ["14:00", "09:00"]},
                {"day": "Monday", "slots": ["10:00"]},
                {"day": "Wednesday", "slots": ["09:00", "11:00"]},
                {"day": "fri", "slots": []},
            ]
        }
    )
    assert payload.available_slots == [
        DaySlots(day="Monday", slots=["10:00"]),
        DaySlots(day="Wednesday", slots=["09:00", "11:00", "14:00"]),
    ]


def test_department_lookup_is_case_insensitive():
    assert check_department("general medicine") == "General Medicine"
    assert check_department(None) is None
    with pytest.raises(ValueError):
        check_department("Radiology")

"""Tests for POST /api/pass"""

from postgrest.exceptions import APIError

from app.core.config import get_settings
from app.services.messages import get_messages
from app.services.localization import SupportedLocale

FORM = {
    "name": "민지",
    "phone": "010-1234-5678",
    "meetingPlace": "서울역",
    "meetingDate": "2025-06-01",
}


def _back_field(pass_json, key):
    return next(f for f in pass_json["storeCard"]["backFields"] if f["key"] == key)


def test_issue_pass_in_korean(client, fake_db, fake_signer):
    response = client.post("/api/pass", json=FORM, headers={"Accept-Language": "ko-KR,ko;q=0.9"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/vnd.apple.pkpass"
    assert response.headers["content-disposition"] == (
        "attachment; filename=\"BusinessCard.pkpass\"; "
        "filename*=UTF-8''%EB%AA%85%ED%95%A8.pkpass"
    )
    assert response.content == b"PK-fake-pass"

    [row] = fake_db.rows("visitors")
    assert row["phone"] == "+821012345678"
    assert row["meeting_place"] == "서울역"
    assert row["meeting_date"].startswith("2025-06-01")

    pass_json = fake_signer.calls[0]["pass_json"]
    assert pass_json["serialNumber"] == row["serial_number"]
    assert _back_field(pass_json, "meeting_date_back")["value"] == "2025년 6월 1일"


def test_form_encoded_body(client, fake_db):
    response = client.post(
        "/api/pass",
        data={**FORM, "phone": "(201) 555-0123"},
        headers={"Accept-Language": "en-US"},
    )

    assert response.status_code == 200
    assert fake_db.rows("visitors")[0]["phone"] == "+12015550123"


def test_missing_fields(client, fake_db, fake_signer):
    response = client.post(
        "/api/pass",
        json={**FORM, "meetingPlace": "   "},
        headers={"Accept-Language": "ko"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == get_messages(SupportedLocale.KO).api.pass_fields_error
    assert fake_db.writes == []
    assert fake_signer.calls == []


def test_invalid_phone_stores_nothing(client, fake_db):
    response = client.post(
        "/api/pass",
        json={**FORM, "phone": "123"},
        headers={"Accept-Language": "en"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Please enter a valid phone number."
    assert fake_db.writes == []


def test_invalid_meeting_date(client, fake_db):
    response = client.post("/api/pass", json={**FORM, "meetingDate": "someday"})

    assert response.status_code == 400
    assert response.json()["detail"] == get_messages(SupportedLocale.EN).api.date_invalid_error
    assert fake_db.writes == []


def test_malformed_json(client, fake_db):
    response = client.post(
        "/api/pass",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert fake_db.writes == []


def test_missing_credentials_keeps_record(client, settings, fake_db, fake_signer):
    unsigned = settings.model_copy(update={"pass_certificate_pem_base64": ""})
    client.app.dependency_overrides[get_settings] = lambda: unsigned

    response = client.post("/api/pass", json=FORM, headers={"Accept-Language": "ko"})

    assert response.status_code == 500
    assert response.json()["detail"] == get_messages(SupportedLocale.KO).api.pass_generate_error
    assert len(fake_db.rows("visitors")) == 1
    assert fake_signer.calls == []


def test_storage_failure(client, fake_db, fake_signer):
    fake_db.fail_with = APIError({"message": "connection refused", "code": "08006"})

    response = client.post("/api/pass", json=FORM)

    assert response.status_code == 500
    assert response.json()["detail"] == get_messages(SupportedLocale.EN).api.pass_generate_error
    assert fake_signer.calls == []


def test_each_submission_gets_a_new_serial(client, fake_db):
    assert client.post("/api/pass", json=FORM).status_code == 200
    assert client.post("/api/pass", json=FORM).status_code == 200

    serials = {row["serial_number"] for row in fake_db.rows("visitors")}
    assert len(serials) == 2


def test_unexpected_storage_error_is_localized(client, fake_db, fake_signer):
    fake_db.fail_with = RuntimeError("boom")

    response = client.post("/api/pass", json=FORM, headers={"Accept-Language": "ko"})

    assert response.status_code == 500
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"detail": get_messages(SupportedLocale.KO).api.pass_generate_error}
    assert "boom" not in response.text
    assert fake_signer.calls == []


def test_storage_not_configured(client, unconfigured_storage, fake_signer):
    response = client.post("/api/pass", json=FORM)

    assert response.status_code == 500
    assert response.json() == {"detail": get_messages(SupportedLocale.EN).api.pass_generate_error}
    assert "SUPABASE" not in response.text
    assert fake_signer.calls == []

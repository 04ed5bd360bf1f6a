"""Shared test configuration and fixtures"""

import base64
import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat
from cryptography.x509.oid import NameOID
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from app.api.deps import get_pass_signer
from app.core.config import Settings, get_settings
from app.main import app

UNIQUE_COLUMNS = {
    "visitors": ("serial_number",),
    "default_places": ("event_date",),
}


class FakeQuery:
    """Just enough of the PostgREST query builder for the repositories."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.max_rows = None

    def select(self, *columns):
        self.action = "select"
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.action = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def limit(self, count):
        self.max_rows = count
        return self

    def execute(self):
        return self.db.run(self)


class FakeSupabase:
    """In-memory stand-in for the Supabase client with unique constraints."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {name: [] for name in UNIQUE_COLUMNS}
        self.writes: list[tuple[str, str]] = []
        self.fail_with: Exception | None = None

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> list[dict]:
        return copy.deepcopy(self.tables[name])

    def run(self, query: FakeQuery):
        if query.action != "select":
            self.writes.append((query.table, query.action))
        if self.fail_with:
            raise self.fail_with

        rows = self.tables[query.table]
        if query.action == "select":
            matched = [
                row for row in rows
                if all(str(row.get(col)) == str(val) for col, val in query.filters)
            ]
            if query.max_rows is not None:
                matched = matched[:query.max_rows]
            return SimpleNamespace(data=copy.deepcopy(matched))

        if query.action == "upsert":
            key = query.on_conflict
            for row in rows:
                if row[key] == query.payload[key]:
                    row.update(query.payload)
                    return SimpleNamespace(data=[copy.deepcopy(row)])

        for column in UNIQUE_COLUMNS[query.table]:
            if any(row[column] == query.payload[column] for row in rows):
                raise APIError({
                    "message": f'duplicate key value violates unique constraint "{query.table}_{column}_key"',
                    "code": "23505",
                    "hint": None,
                    "details": None,
                })

        now = datetime.now(timezone.utc).replace(tzinfo=None).isoformat()
        row = {"id": str(uuid.uuid4()), "created_at": now}
        if query.table == "default_places":
            row["updated_at"] = now
        row.update(query.payload)
        rows.append(row)
        return SimpleNamespace(data=[copy.deepcopy(row)])


class FakeSigner:
    """Records what it was asked to sign and returns a fixed archive."""

    def __init__(self, content: bytes = b"PK-fake-pass"):
        self.content = content
        self.calls = []

    def sign(self, assets, credentials, pass_json):
        self.calls.append({"assets": assets, "credentials": credentials, "pass_json": pass_json})
        return self.content


@pytest.fixture
def fake_db(monkeypatch):
    """Route every repository to an in-memory Supabase fake."""
    db = FakeSupabase()
    monkeypatch.setattr("app.repositories.visitor.get_db", lambda: db)
    monkeypatch.setattr("app.repositories.default_place.get_db", lambda: db)
    return db


@pytest.fixture(scope="session")
def signing_material():
    """Self-signed signer certificate, its key, and a stand-in WWDR cert."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    now = datetime.now(timezone.utc)

    def self_signed(common_name: str) -> x509.Certificate:
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
        return (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(days=1))
            .not_valid_after(now + timedelta(days=30))
            .sign(key, hashes.SHA256())
        )

    signer_cert = self_signed("Pass Type ID: pass.sh.cho.test")
    wwdr_cert = self_signed("Test WWDR")
    return SimpleNamespace(
        key=key,
        signer_cert=signer_cert,
        wwdr_cert=wwdr_cert,
        cert_pem=signer_cert.public_bytes(Encoding.PEM),
        wwdr_der=wwdr_cert.public_bytes(Encoding.DER),
        key_pem=key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()),
    )


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@pytest.fixture
def assets_dir(tmp_path):
    directory = tmp_path / "pass_assets"
    directory.mkdir()
    for stem in ("photo", "strip"):
        for suffix in ("", "@2x", "@3x"):
            (directory / f"{stem}{suffix}.png").write_bytes(f"{stem}{suffix}".encode())
    return directory


@pytest.fixture
def settings(signing_material, assets_dir):
    return Settings(
        _env_file=None,
        supabase_url="http://supabase.test",
        supabase_secret_key="test-key",
        pass_type_identifier="pass.sh.cho.test",
        team_identifier="ABCDE12345",
        pass_certificate_pem_base64=b64(signing_material.cert_pem),
        pass_key_pem_base64=b64(signing_material.key_pem),
        wwdr_certificate_pem_base64=b64(signing_material.wwdr_der),
        admin_password="correct horse",
        pass_assets_dir=assets_dir,
        default_place_timezone="Asia/Seoul",
        contact_phone="+82 10-0000-0000",
        contact_email="hello@example.com",
    )


@pytest.fixture
def fake_signer():
    return FakeSigner()


@pytest.fixture
def client(settings, fake_db, fake_signer):
    """TestClient with settings and signer overridden (lifespan not run)."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_pass_signer] = lambda: fake_signer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_storage(monkeypatch, settings, fake_db):
    """Real client lookup with SUPABASE_URL unset, in place of the fake."""
    from database.connection import get_db

    unconfigured = settings.model_copy(update={"supabase_url": ""})
    monkeypatch.setattr("database.supabase_client.get_settings", lambda: unconfigured)
    monkeypatch.setattr("app.repositories.visitor.get_db", get_db)
    monkeypatch.setattr("app.repositories.default_place.get_db", get_db)
    return unconfigured

"""In-memory stand-ins for the Firestore client and the Firebase auth client."""

from __future__ import annotations

import io
import itertools
from types import SimpleNamespace

import pytest
from firebase_admin import auth

from kds_provisioning.report import ConsoleReport
from kds_provisioning.users import Role, UserSpec

TENANT_ID = "ghar-jesa-khana"


class FakeSnapshot:
    def __init__(self, data):
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, db: "FakeFirestore", path: str) -> None:
        self._db = db
        self.path = path

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def collection(self, name: str) -> "FakeCollection":
        return FakeCollection(self._db, f"{self.path}/{name}")

    def get(self) -> FakeSnapshot:
        return FakeSnapshot(self._db.documents.get(self.path))

    def set(self, data, merge: bool = False) -> None:
        self._db.writes.append((self.path, dict(data), merge))
        if merge and self.path in self._db.documents:
            self._db.documents[self.path].update(data)
        else:
            self._db.documents[self.path] = dict(data)


class FakeCollection:
    def __init__(self, db: "FakeFirestore", path: str) -> None:
        self._db = db
        self.path = path

    def document(self, doc_id: str) -> FakeDocument:
        return FakeDocument(self._db, f"{self.path}/{doc_id}")


class FakeFirestore:
    def __init__(self) -> None:
        self.documents: dict[str, dict] = {}
        self.writes: list[tuple[str, dict, bool]] = []

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)


class FakeAuth:
    def __init__(self) -> None:
        self.users: dict[str, SimpleNamespace] = {}
        self.create_calls: list[str] = []
        self.fail_emails: dict[str, Exception] = {}
        self._uids = (f"uid-{n}" for n in itertools.count(1))

    def create_user(self, *, email, password, display_name, email_verified):
        self.create_calls.append(email)
        if email in self.fail_emails:
            raise self.fail_emails[email]
        if email in self.users:
            raise auth.EmailAlreadyExistsError("The user with the provided email already exists", None, None)
        record = SimpleNamespace(
            uid=next(self._uids),
            email=email,
            display_name=display_name,
            email_verified=email_verified,
            password=password,
        )
        self.users[email] = record
        return record

    def get_user_by_email(self, email):
        try:
            return self.users[email]
        except KeyError:
            raise auth.UserNotFoundError(f"No user record found for the provided email: {email}") from None


class FakeClients:
    def __init__(self) -> None:
        self.auth = FakeAuth()
        self.db = FakeFirestore()
        self.closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def clients() -> FakeClients:
    fake = FakeClients()
    fake.db.documents[f"tenants/{TENANT_ID}"] = {"name": "Ghar Jesa Khana"}
    return fake


@pytest.fixture()
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture()
def report(output: io.StringIO) -> ConsoleReport:
    return ConsoleReport(output)


@pytest.fixture()
def specs() -> tuple[UserSpec, ...]:
    return (
        UserSpec(
            email=f"kitchen@{TENANT_ID}.com",
            password="Kitchen@2026",
            display_name="Kitchen Staff",
            role=Role.KITCHEN,
            description="Kitchen Display System User",
            station_id="hot_kitchen",
        ),
        UserSpec(
            email=f"captain@{TENANT_ID}.com",
            password="Captain@2026",
            display_name="Floor Captain",
            role=Role.CAPTAIN,
            description="Floor Captain for serving and table management",
        ),
    )

"""Account templates and the Firestore documents written for each account."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from firebase_admin import firestore

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6  # Firebase Auth rejects anything shorter

USERS_COLLECTION = "users"
TENANTS_COLLECTION = "tenants"
STAFF_COLLECTION = "staff"


class Role(str, Enum):
    KITCHEN = "kitchen"
    CAPTAIN = "captain"


@dataclass(frozen=True)
class UserSpec:
    email: str
    password: str
    display_name: str
    role: Role
    description: str
    station_id: Optional[str] = None

    def __post_init__(self):
        if not EMAIL_RE.match(self.email):
            raise ValueError(f"Invalid email address: {self.email!r}")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password for {self.email} must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if not self.display_name.strip():
            raise ValueError(f"Display name for {self.email} must not be empty")
        if self.role is Role.KITCHEN and not self.station_id:
            raise ValueError(f"Kitchen user {self.email} needs a kitchen station id")
        if self.role is not Role.KITCHEN and self.station_id:
            raise ValueError(f"Only kitchen users carry a station id ({self.email} is {self.role.value})")


@dataclass(frozen=True)
class IdentityRecord:
    uid: str
    email: str
    display_name: Optional[str]
    email_verified: bool

    @classmethod
    def from_user_record(cls, record):
        return cls(
            uid=record.uid,
            email=record.email,
            display_name=record.display_name,
            email_verified=bool(record.email_verified),
        )


# ─── Document paths ──────────────────────────────────────────────────────────────
def profile_ref(db, uid):
    return db.collection(USERS_COLLECTION).document(uid)


def tenant_ref(db, tenant_id):
    return db.collection(TENANTS_COLLECTION).document(tenant_id)


def staff_ref(db, tenant_id, uid):
    return tenant_ref(db, tenant_id).collection(STAFF_COLLECTION).document(uid)


# ─── Document bodies ─────────────────────────────────────────────────────────────
def profile_document(spec, uid, tenant_id, created=True):
    """Body of ``users/{uid}``.

    New profiles get ``uid`` and ``createdAt``; a refresh only bumps
    ``updatedAt`` so the merge keeps the original creation time.
    """
    doc = {
        "email": spec.email,
        "displayName": spec.display_name,
        "role": spec.role.value,
        "tenantId": tenant_id,
        "isActive": True,
        "updatedAt": firestore.SERVER_TIMESTAMP,
    }
    if created:
        doc["uid"] = uid
        doc["createdAt"] = firestore.SERVER_TIMESTAMP
    if spec.station_id:
        doc["kitchenStationId"] = spec.station_id
    return doc


def staff_document(spec, uid):
    return {
        "uid": uid,
        "email": spec.email,
        "displayName": spec.display_name,
        "role": spec.role.value,
        "isActive": True,
        "addedAt": firestore.SERVER_TIMESTAMP,
    }

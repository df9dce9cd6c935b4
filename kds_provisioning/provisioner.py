"""Create-or-update of the staff accounts for one tenant.

Each account is an identity in Firebase Auth, a profile in ``users/{uid}``
and a membership in ``tenants/{tenant}/staff/{uid}``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List

from firebase_admin import auth

from .errors import TenantNotFoundError
from .report import ConsoleReport
from .users import IdentityRecord, UserSpec, profile_document, profile_ref, staff_document, staff_ref, tenant_ref

logger = logging.getLogger(__name__)


class ProvisionState(str, Enum):
    PROVISIONED = "provisioned"
    PROFILE_REFRESHED = "profile_refreshed"


@dataclass(frozen=True)
class ProvisionOutcome:
    spec: UserSpec
    record: IdentityRecord
    state: ProvisionState
    staff_restored: bool = False
    profile_restored: bool = False


class Provisioner:
    """Provisions accounts for ``tenant_id`` using the clients of one run."""

    def __init__(self, clients, tenant_id, report=None):
        self.auth = clients.auth
        self.db = clients.db
        self.tenant_id = tenant_id
        self.report = report or ConsoleReport()

    def ensure_tenant(self):
        snapshot = tenant_ref(self.db, self.tenant_id).get()
        if not snapshot.exists:
            self.report.tenant_missing(self.tenant_id)
            raise TenantNotFoundError(self.tenant_id)
        self.report.tenant_found(self.tenant_id)

    def provision_all(self, specs) -> List[ProvisionOutcome]:
        """Provision ``specs`` one after another.

        Raises :class:`TenantNotFoundError` before touching anything if the
        tenant document is missing. Any error other than "email already
        exists" stops the run at the failing account.
        """
        self.ensure_tenant()
        return [self.create_or_update_user(spec) for spec in specs]

    def create_or_update_user(self, spec) -> ProvisionOutcome:
        self.report.creating(spec)
        try:
            user = self.auth.create_user(
                email=spec.email,
                password=spec.password,
                display_name=spec.display_name,
                email_verified=True,
            )
        except auth.EmailAlreadyExistsError:
            return self._refresh_existing(spec)
        except Exception as exc:
            logger.error("Creating auth user %s failed", spec.email, exc_info=True)
            self.report.user_failed(spec, exc)
            raise

        try:
            return self._write_new(spec, IdentityRecord.from_user_record(user))
        except Exception as exc:
            logger.error("Writing documents for %s (uid %s) failed", spec.email, user.uid, exc_info=True)
            self.report.user_failed(spec, exc)
            raise

    def _write_new(self, spec, record):
        self.report.auth_created(record.uid)

        logger.debug("Writing users/%s", record.uid)
        profile_ref(self.db, record.uid).set(profile_document(spec, record.uid, self.tenant_id))
        self.report.profile_created(spec)

        logger.debug("Writing tenants/%s/staff/%s", self.tenant_id, record.uid)
        staff_ref(self.db, self.tenant_id, record.uid).set(staff_document(spec, record.uid))
        self.report.staff_added()

        self.report.created(spec)
        return ProvisionOutcome(spec=spec, record=record, state=ProvisionState.PROVISIONED)

    def _refresh_existing(self, spec):
        self.report.already_exists(spec)
        try:
            record = IdentityRecord.from_user_record(self.auth.get_user_by_email(spec.email))

            profile = profile_ref(self.db, record.uid)
            profile_restored = not profile.get().exists
            if profile_restored:
                logger.info("Profile for %s was missing, writing it in full", spec.email)
                profile.set(profile_document(spec, record.uid, self.tenant_id))
                self.report.profile_restored()
            else:
                logger.debug("Merging users/%s", record.uid)
                profile.set(profile_document(spec, record.uid, self.tenant_id, created=False), merge=True)
                self.report.profile_updated()

            # Membership is left as first written; only a missing one is rewritten.
            membership = staff_ref(self.db, self.tenant_id, record.uid)
            restored = not membership.get().exists
            if restored:
                logger.info("Staff membership for %s was missing, rewriting it", spec.email)
                membership.set(staff_document(spec, record.uid))
                self.report.staff_restored()
        except Exception as exc:
            logger.error("Updating existing user %s failed", spec.email, exc_info=True)
            self.report.user_failed(spec, exc)
            raise

        return ProvisionOutcome(
            spec=spec,
            record=record,
            state=ProvisionState.PROFILE_REFRESHED,
            staff_restored=restored,
            profile_restored=profile_restored,
        )

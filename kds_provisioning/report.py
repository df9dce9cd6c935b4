"""Console output for a provisioning run, meant to be read by the operator."""

import sys
from datetime import datetime

import pytz

RULE_WIDTH = 60


class ConsoleReport:
    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def _print(self, text=""):
        print(text, file=self.stream)

    def banner(self, tenant_id):
        self._print(f"🚀 Creating KDS and Captain users for tenant: {tenant_id}\n")
        self._print("=" * RULE_WIDTH)

    def tenant_found(self, tenant_id):
        self._print(f"✅ Tenant '{tenant_id}' found\n")

    def tenant_missing(self, tenant_id):
        self._print(f"❌ Tenant '{tenant_id}' not found in database!")
        self._print("\nPlease ensure the tenant exists before creating users.")

    # ─── Per user ───────────────────────────────────────────────────────────────
    def creating(self, spec):
        self._print(f"\n📝 Creating user: {spec.email}")

    def auth_created(self, uid):
        self._print(f"✅ Firebase Auth user created: {uid}")

    def profile_created(self, spec):
        self._print(f"✅ Firestore profile created for {spec.role.value}")

    def staff_added(self):
        self._print("✅ Added to tenant staff collection")

    def created(self, spec):
        self._print(f"\n🎉 {spec.description} created successfully!")
        self._print(f"   Email: {spec.email}")
        self._print(f"   Password: {spec.password}")
        self._print(f"   Role: {spec.role.value}")
        if spec.station_id:
            self._print(f"   Station: {spec.station_id}")

    def already_exists(self, spec):
        self._print(f"⚠️  User {spec.email} already exists. Updating profile...")

    def profile_updated(self):
        self._print("✅ Profile updated for existing user")

    def profile_restored(self):
        self._print("✅ Profile restored for existing user")

    def staff_restored(self):
        self._print("✅ Staff membership restored")

    def user_failed(self, spec, exc):
        self._print(f"❌ Error creating user {spec.email}: {exc}")

    # ─── Wrap-up ────────────────────────────────────────────────────────────────
    def credentials_sheet(self, specs, timezone, now=None):
        now = now or datetime.now(pytz.timezone(timezone))
        self._print("\n" + "=" * RULE_WIDTH)
        self._print("✨ All users created successfully!\n")
        self._print("📋 Login Credentials:")
        self._print(f"🗓️  Generated {now.strftime('%A, %d %B %Y %I:%M %p')} ({timezone})")
        self._print("─" * RULE_WIDTH)
        for spec in specs:
            self._print(f"\n{spec.description}:")
            self._print(f"  Email: {spec.email}")
            self._print(f"  Password: {spec.password}")
            self._print(f"  Role: {spec.role.value}")
        self._print("\n" + "=" * RULE_WIDTH)
        self._print("\n⚠️  IMPORTANT: Please save these credentials securely!")
        self._print("You can change passwords after first login.\n")

    def failed(self, exc):
        self._print(f"\n❌ Script failed: {exc}")

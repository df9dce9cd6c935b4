"""Runtime settings: tenant, credentials and the accounts to provision.

Values come from the built-in account templates, an optional YAML parameter
file and the environment, in that order of precedence (later wins).
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

import pytz
import yaml

from .errors import ConfigurationError
from .users import Role, UserSpec

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_SERVICE_ACCOUNT = "service-account-key.json"

ENV_CONFIG_FILE = "KDS_CONFIG_FILE"
ENV_TENANT_ID = "KDS_TENANT_ID"
ENV_SERVICE_ACCOUNT = "KDS_SERVICE_ACCOUNT"
ENV_TIMEZONE = "KDS_TIMEZONE"

# Firestore document ids: no slashes, not "." or "..", not __reserved__
_RESERVED_ID_RE = re.compile(r"^__.*__$")

ACCOUNT_TEMPLATES = (
    {
        "local_part": "kitchen",
        "display_name": "Kitchen Staff",
        "role": Role.KITCHEN,
        "station_id": "hot_kitchen",
        "description": "Kitchen Display System User",
        "password_env": "KDS_KITCHEN_PASSWORD",
    },
    {
        "local_part": "captain",
        "display_name": "Floor Captain",
        "role": Role.CAPTAIN,
        "station_id": None,
        "description": "Floor Captain for serving and table management",
        "password_env": "KDS_CAPTAIN_PASSWORD",
    },
)


@dataclass(frozen=True)
class Settings:
    tenant_id: str
    service_account: Path
    users: Tuple[UserSpec, ...]
    timezone: str = DEFAULT_TIMEZONE


def validate_tenant_id(tenant_id):
    if not tenant_id or not tenant_id.strip():
        raise ConfigurationError(f"Tenant id is not set (use {ENV_TENANT_ID} or tenant_id in the config file)")
    if "/" in tenant_id or tenant_id in (".", "..") or _RESERVED_ID_RE.match(tenant_id):
        raise ConfigurationError(f"Invalid tenant id: {tenant_id!r}")
    if len(tenant_id.encode("utf-8")) > 1500:
        raise ConfigurationError("Tenant id is longer than 1500 bytes")
    return tenant_id


def load_parameter_file(path):
    path = Path(path).expanduser()
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Config file {path} could not be read: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Config file {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping at the top level")
    return data


def _resolve_path(raw, base_path=None):
    path = Path(str(raw)).expanduser()
    if not path.is_absolute() and base_path is not None:
        path = base_path / path
    return path.resolve(strict=False)


def _password(entry, environ, email):
    env_name = entry.get("password_env")
    value = environ.get(env_name) if env_name else None
    if value:
        return value
    if entry.get("password"):
        return str(entry["password"])
    where = f"environment variable {env_name}" if env_name else "'password' or 'password_env'"
    raise ConfigurationError(f"No password supplied for {email} (set {where})")


def _role(value, email):
    try:
        return Role(value.value if isinstance(value, Role) else str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(role.value for role in Role)
        raise ConfigurationError(f"Unknown role {value!r} for {email} (expected one of: {allowed})") from exc


def build_user_spec(entry, environ, tenant_id):
    """Turn one account mapping into a validated :class:`UserSpec`."""
    email = entry.get("email") or f"{entry.get('local_part', '')}@{tenant_id}.com"
    email = str(email).strip().lower()
    role = _role(entry.get("role"), email)
    display_name = str(entry.get("display_name") or "").strip()
    try:
        return UserSpec(
            email=email,
            password=_password(entry, environ, email),
            display_name=display_name,
            role=role,
            description=str(entry.get("description") or display_name),
            station_id=entry.get("station_id") or None,
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def _account_entries(file_users):
    if file_users is None:
        return [dict(template) for template in ACCOUNT_TEMPLATES]
    if not isinstance(file_users, list) or not file_users:
        raise ConfigurationError("'users' must be a non-empty list of account mappings")
    defaults = {template["role"].value: template for template in ACCOUNT_TEMPLATES}
    entries = []
    for raw in file_users:
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Each entry in 'users' must be a mapping, got {raw!r}")
        role = str(raw.get("role", "")).strip().lower()
        entry = dict(defaults.get(role, {}))
        entry.update(raw)
        if "station_id" not in raw and role != Role.KITCHEN.value:
            entry["station_id"] = None
        entries.append(entry)
    return entries


def load_settings(
    config_path: Optional[os.PathLike] = None,
    service_account: Optional[os.PathLike] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build and validate :class:`Settings`; raise :class:`ConfigurationError` on any problem."""
    environ = os.environ if environ is None else environ
    config_path = config_path or environ.get(ENV_CONFIG_FILE)

    data = {}
    base_path = None
    if config_path:
        config_path = Path(config_path).expanduser()
        data = load_parameter_file(config_path)
        base_path = config_path.resolve(strict=False).parent

    tenant_id = environ.get(ENV_TENANT_ID) or data.get("tenant_id")
    tenant_id = validate_tenant_id(str(tenant_id).strip() if tenant_id else "")

    if service_account:
        key_path = _resolve_path(service_account)
    elif environ.get(ENV_SERVICE_ACCOUNT):
        key_path = _resolve_path(environ[ENV_SERVICE_ACCOUNT])
    elif data.get("service_account"):
        key_path = _resolve_path(data["service_account"], base_path)
    elif environ.get("GOOGLE_APPLICATION_CREDENTIALS"):
        key_path = _resolve_path(environ["GOOGLE_APPLICATION_CREDENTIALS"])
    else:
        key_path = _resolve_path(DEFAULT_SERVICE_ACCOUNT)
    if not key_path.is_file():
        raise ConfigurationError(f"Service account key file not found: {key_path}")

    timezone = environ.get(ENV_TIMEZONE) or data.get("timezone") or DEFAULT_TIMEZONE
    try:
        pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError as exc:
        raise ConfigurationError(f"Unknown time zone: {timezone!r}") from exc

    users = tuple(build_user_spec(entry, environ, tenant_id) for entry in _account_entries(data.get("users")))
    seen = set()
    for spec in users:
        if spec.email in seen:
            raise ConfigurationError(f"Duplicate account email: {spec.email}")
        seen.add(spec.email)

    return Settings(tenant_id=tenant_id, service_account=key_path, users=users, timezone=timezone)

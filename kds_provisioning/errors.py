class ProvisioningError(Exception):
    """Base class for errors raised while provisioning staff accounts."""


class ConfigurationError(ProvisioningError):
    """Settings are missing or invalid; nothing has been contacted yet."""


class TenantNotFoundError(ProvisioningError):
    def __init__(self, tenant_id):
        super().__init__(f"Tenant '{tenant_id}' not found in database")
        self.tenant_id = tenant_id

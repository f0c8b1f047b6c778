"""Dependency injection singletons for Device Hub."""

from device_hub.common.config import get_settings
from device_hub.common.database import DatabaseManager
from device_hub.admin.service import AdminService
from device_hub.audit.service import AuditLedger
from device_hub.devices.service import DeviceRegistry
from device_hub.identity.service import IdentityService
from device_hub.identity.tokens import TokenSigner
from device_hub.queries.service import DeviceQueries

_db: DatabaseManager | None = None
_signer: TokenSigner | None = None
_identity: IdentityService | None = None
_ledger: AuditLedger | None = None
_registry: DeviceRegistry | None = None
_queries: DeviceQueries | None = None
_admin: AdminService | None = None


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_token_signer() -> TokenSigner:
    global _signer
    if _signer is None:
        _signer = TokenSigner(get_settings())
    return _signer


def get_identity_service() -> IdentityService:
    global _identity
    if _identity is None:
        _identity = IdentityService(get_settings(), get_token_signer())
    return _identity


def get_audit_ledger() -> AuditLedger:
    global _ledger
    if _ledger is None:
        _ledger = AuditLedger(get_settings())
    return _ledger


def get_device_registry() -> DeviceRegistry:
    global _registry
    if _registry is None:
        _registry = DeviceRegistry(get_audit_ledger())
    return _registry


def get_device_queries() -> DeviceQueries:
    global _queries
    if _queries is None:
        _queries = DeviceQueries(get_device_registry(), get_audit_ledger())
    return _queries


def get_admin_service() -> AdminService:
    global _admin
    if _admin is None:
        _admin = AdminService(get_settings())
    return _admin


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _signer, _identity, _ledger, _registry, _queries, _admin
    _db = None
    _signer = None
    _identity = None
    _ledger = None
    _registry = None
    _queries = None
    _admin = None

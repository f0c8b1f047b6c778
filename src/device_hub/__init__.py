"""Device Hub: IoT device registry with an auditable power-state ledger."""

from device_hub.client import DeviceHubClient

__all__ = [
    "DeviceHubClient",
]
__version__ = "0.1.0"

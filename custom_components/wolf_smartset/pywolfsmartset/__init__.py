"""Client library for the Wolf Smartset heating portal."""

from .client import PortalFailure, WolfPortalClient
from .const import NetworkStatus, PortalStatus
from .datapoints import DataPoint, DataPointCatalog, DataPointType
from .installation import WolfInstallation
from .poller import PollOutcome, ValuePoller
from .registry import ParameterRegistry, RegistryEntry
from .session import SessionState, WolfSessionManager
from .storage import InstallationStorage
from .tree import ParameterTreeSynchronizer, SyncMode
from .writer import ValueWriter

__all__ = [
    "DataPoint",
    "DataPointCatalog",
    "DataPointType",
    "InstallationStorage",
    "NetworkStatus",
    "ParameterRegistry",
    "ParameterTreeSynchronizer",
    "PollOutcome",
    "PortalFailure",
    "PortalStatus",
    "RegistryEntry",
    "SessionState",
    "SyncMode",
    "ValuePoller",
    "ValueWriter",
    "WolfInstallation",
    "WolfPortalClient",
    "WolfSessionManager",
]

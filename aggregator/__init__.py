"""Aerodrome swap routing and quoting engine."""

from aggregator.connector import Connector
from aggregator.lifecycle import ConnectorRegistry, get_default_registry

__version__ = "0.1.0"
__all__ = ["Connector", "ConnectorRegistry", "get_default_registry", "__version__"]

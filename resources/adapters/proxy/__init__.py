"""HTTP audit proxy sink."""

from resources.adapters.proxy.config import (
    COMPONENT_ID,
    ProxySinkSettings,
    resolve_proxy_sink_settings,
)
from resources.adapters.proxy.proxy_sink import ProxySink

__all__ = [
    "COMPONENT_ID",
    "ProxySink",
    "ProxySinkSettings",
    "resolve_proxy_sink_settings",
]

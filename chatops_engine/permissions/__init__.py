"""Capability permission engine.

- ``ProviderRegistry`` answers leaf capability checks through predicates
  keyed by exact or prefix-wildcard names.
- ``PermissionGraph`` stores conditional edges between capability names.
- ``Permissions`` composes two graphs (inherit, depend) with the provider
  registry and implements the ``test`` closure query.
"""

from .graph import Computed, PermissionGraph
from .providers import ProvideCallback, ProviderRegistry
from .resolver import TOPOLOGY_EVENT, Permissions

__all__ = [
    "Computed",
    "PermissionGraph",
    "ProvideCallback",
    "ProviderRegistry",
    "Permissions",
    "TOPOLOGY_EVENT",
]

from poolbench.backends.base import BackendAdapter, CallableBackend, GatedPoolHandle, PoolHandle
from poolbench.backends.factory import BackendFactory

__all__ = [
    "BackendAdapter",
    "BackendFactory",
    "CallableBackend",
    "GatedPoolHandle",
    "PoolHandle",
]

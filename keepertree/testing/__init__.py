from .memory import InMemoryAccessAdapter, InMemoryNamespace
from .fakes import FakeKazooClient, ProxyHandler

__all__ = ['InMemoryAccessAdapter', 'InMemoryNamespace', 'FakeKazooClient', 'ProxyHandler']

"""
ClaimCadence Stores

Implementations of the relational store collaborator.

- ClaimStore: protocol the engine depends on
- InMemoryClaimStore: process-local store for tests and local runs
- PostgrestClaimStore: hosted Postgres through PostgREST
"""
from __future__ import annotations

from .base import ClaimStore
from .memory import InMemoryClaimStore
from .postgrest import PostgrestClaimStore

__all__ = [
    "ClaimStore",
    "InMemoryClaimStore",
    "PostgrestClaimStore",
]

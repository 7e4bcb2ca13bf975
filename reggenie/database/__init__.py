"""Persistence: local cache, remote document store and the fallback helper."""

from .local_store import LocalStorage, get_local_storage
from .client import SupabaseClient, get_supabase_client
from .store import DocumentStore, get_document_store

__all__ = [
    "LocalStorage", "get_local_storage",
    "SupabaseClient", "get_supabase_client",
    "DocumentStore", "get_document_store",
]

"""Supabase client wrapper used as the remote document store."""

import json
import logging
from typing import List, Dict, Any, Optional

from supabase import create_client, Client

from reggenie.config.settings import settings
from reggenie.database.local_store import LocalStorage, get_local_storage

logger = logging.getLogger(__name__)

REMOTE_SETTINGS_KEY = "remote_store_settings"


def parse_remote_config(raw: Optional[str]) -> Optional[Dict[str, str]]:
    """Parse a remote store config string into {"url", "key"}.

    Values passed through environment files are sometimes wrapped in an
    extra pair of quotes; those are stripped before decoding.
    """
    if not raw or not raw.strip():
        return None

    cleaned = raw.strip()
    if len(cleaned) >= 2 and cleaned[0] in "'\"" and cleaned[-1] == cleaned[0]:
        cleaned = cleaned[1:-1]

    config = json.loads(cleaned)
    if not isinstance(config, dict) or not config.get("url") or not config.get("key"):
        raise ValueError("Remote store config must provide 'url' and 'key'")
    return {"url": config["url"], "key": config["key"]}


def resolve_remote_config(storage: LocalStorage) -> Optional[Dict[str, str]]:
    """Environment config first, then the admin's saved settings."""
    raw = settings.remote_store_config or storage.get_item(REMOTE_SETTINGS_KEY)
    try:
        return parse_remote_config(raw)
    except ValueError as e:
        logger.error(f"Failed to initialize remote store from config: {e}")
        return None


class SupabaseClient:
    """Keyed document collections stored as (id, data) rows."""

    def __init__(self, url: str, key: str):
        if not url or not key:
            raise ValueError("Supabase URL and key must be provided")

        self.client: Client = create_client(url, key)

    def get_all(self, collection: str) -> List[Dict[str, Any]]:
        """Get every document in a collection."""
        try:
            response = self.client.table(collection).select("id, data").execute()
            return [row["data"] for row in response.data if row.get("data") is not None]

        except Exception as e:
            logger.error(f"Error fetching documents from {collection}: {e}")
            raise

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get one document by id."""
        try:
            response = self.client.table(collection).select("id, data").eq(
                "id", doc_id
            ).execute()

            return response.data[0]["data"] if response.data else None

        except Exception as e:
            logger.error(f"Error fetching {collection}/{doc_id}: {e}")
            raise

    def upsert(self, collection: str, doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create or replace a document by id."""
        try:
            response = self.client.table(collection).upsert(
                {"id": doc_id, "data": data}
            ).execute()

            if not response.data:
                raise ValueError(f"Failed to upsert {collection}/{doc_id}")

            return response.data[0]["data"]

        except Exception as e:
            logger.error(f"Error upserting {collection}/{doc_id}: {e}")
            raise

    def health(self) -> str:
        result = self.client.table("regulations").select("id").limit(1).execute()
        return f"connected ({len(result.data)} row returned)"


# Global Supabase client instance; False marks "no remote store configured"
supabase_client = None


def get_supabase_client() -> Optional[SupabaseClient]:
    """Get the remote store handle, or None when no config is available."""
    global supabase_client
    if supabase_client is None:
        config = resolve_remote_config(get_local_storage())
        if config:
            try:
                supabase_client = SupabaseClient(config["url"], config["key"])
                logger.info("Remote document store initialized")
            except Exception as e:
                logger.error(f"Failed to initialize remote store: {e}")
                supabase_client = False
        else:
            logger.info("No remote store config found. Using local storage.")
            supabase_client = False
    return supabase_client or None


def reset_supabase_client() -> None:
    """Drop the cached handle so the next call re-reads the config."""
    global supabase_client
    supabase_client = None

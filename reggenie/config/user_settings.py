"""Admin-managed settings kept in the local store.

Environment values always take priority; these fill in when the
environment leaves a setting unset.
"""

import logging
from typing import Dict, Optional

from reggenie.agents.llm.client import USER_KEY_SETTING
from reggenie.config.settings import settings
from reggenie.database.client import REMOTE_SETTINGS_KEY, parse_remote_config, reset_supabase_client
from reggenie.database.local_store import LocalStorage, get_local_storage

logger = logging.getLogger(__name__)


def mask_secret(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


def save_user_settings(
    openai_key: Optional[str],
    remote_config: Optional[str],
    storage: Optional[LocalStorage] = None,
) -> None:
    """Store the user's API key and remote store config; empty values clear them."""
    storage = storage or get_local_storage()

    if remote_config and remote_config.strip():
        # Reject configs that could never connect before they are stored
        parse_remote_config(remote_config)
        storage.set_item(REMOTE_SETTINGS_KEY, remote_config.strip())
    else:
        storage.remove_item(REMOTE_SETTINGS_KEY)

    if openai_key and openai_key.strip():
        storage.set_item(USER_KEY_SETTING, openai_key.strip())
    else:
        storage.remove_item(USER_KEY_SETTING)

    reset_supabase_client()
    logger.info("User settings saved; remote store handle reset")


def get_user_settings(storage: Optional[LocalStorage] = None) -> Dict[str, object]:
    storage = storage or get_local_storage()
    return {
        "openai_api_key": mask_secret(storage.get_item(USER_KEY_SETTING)),
        "remote_store_config": bool(storage.get_item(REMOTE_SETTINGS_KEY)),
        "env_openai_api_key": bool(settings.openai_api_key),
        "env_remote_store_config": bool(settings.remote_store_config),
    }

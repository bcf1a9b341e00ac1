from functools import lru_cache

from tagsmith_api.config import load_settings
from tagsmith_api.updater import TagUpdater
from tagsmith_api.vault import FileVault


@lru_cache()
def get_settings():
    return load_settings()


@lru_cache()
def get_vault():
    settings = get_settings()
    return FileVault(settings.vault_dir)


@lru_cache()
def get_updater():
    return TagUpdater(store=get_vault(), settings=get_settings())


def clear_caches() -> None:
    get_settings.cache_clear()
    get_vault.cache_clear()
    get_updater.cache_clear()

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .util import env_flag


@dataclass(frozen=True)
class Settings:
    vault_dir: Path
    require_scope: bool
    allow_root_changes: bool
    dry_run_by_default: bool
    debug: bool
    api_auth_mode: str
    api_auth_token: str | None


def load_settings() -> Settings:
    vault_dir = Path(os.environ.get("VAULT_DIR", "./vault")).resolve()
    require_scope = env_flag(os.environ.get("TAGS_REQUIRE_SCOPE"), True)
    allow_root_changes = env_flag(os.environ.get("TAGS_ALLOW_ROOT_CHANGES"), False)
    dry_run_by_default = env_flag(os.environ.get("TAGS_DRY_RUN_BY_DEFAULT"), True)
    debug = env_flag(os.environ.get("TAGS_DEBUG"), False)
    api_auth_mode = os.environ.get("API_AUTH_MODE", "none").strip().lower()
    api_auth_token = os.environ.get("API_AUTH_TOKEN")
    return Settings(
        vault_dir=vault_dir,
        require_scope=require_scope,
        allow_root_changes=allow_root_changes,
        dry_run_by_default=dry_run_by_default,
        debug=debug,
        api_auth_mode=api_auth_mode,
        api_auth_token=api_auth_token,
    )

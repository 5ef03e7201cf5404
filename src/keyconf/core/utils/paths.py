import os
from pathlib import Path
from typing import Optional

# Override the store location, e.g. KEYCONF_CONFIG_DIR=/etc/myapp
_config_dir_env = os.getenv("KEYCONF_CONFIG_DIR")
CONFIG_DIR = (
    Path(_config_dir_env).expanduser().resolve()
    if _config_dir_env
    else Path.home() / ".keyconf"
)
DEFAULT_STORE_PATH = CONFIG_DIR / "config.json"


def get_store_path(override: Optional[str] = None) -> Path:
    """Return the store file to use: explicit path, KEYCONF_STORE, or the default."""
    if override:
        return Path(override).expanduser()
    env_store = os.getenv("KEYCONF_STORE")
    if env_store:
        return Path(env_store).expanduser()
    return DEFAULT_STORE_PATH

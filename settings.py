from pathlib import Path
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Logging
LOG_LEVEL = config.get("LOG_LEVEL", "info")
DEBUG_LOG_FILE = config.get("DEBUG_LOG_FILE", "vvcode_debug.log")

# Timeouts (seconds)
# Provider calls: token exchange, profile and group fetches, logout
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 30.0)
# Remote config fetch is kept short so startup never stalls on it
CONFIG_FETCH_TIMEOUT = config.get("CONFIG_FETCH_TIMEOUT", 5.0)

# Remote configuration endpoint (dev server when IS_DEV is set)
IS_DEV = config.get("IS_DEV", False)
DEV_BASE_URL = config.get("DEV_BASE_URL", "http://127.0.0.1:3000")
CONFIG_BASE_URL = DEV_BASE_URL if IS_DEV else "https://vvcode.top"
CONFIG_ENDPOINT = f"{CONFIG_BASE_URL}/api"

# Durable state (secrets.json + state.json)
STATE_DIR = config.get("VV_STATE_DIR", str(Path.home() / ".vvcode"))

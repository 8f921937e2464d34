"""
VVCode auth constants
"""

# Extension identity (publisher.name), used to scope the callback URI
PUBLISHER = "PiuQiuPiaQia"
EXTENSION_ID = "vvcode"
CALLBACK_PATH = "/vv-callback"
CALLBACK_URI = f"vscode://{PUBLISHER}.{EXTENSION_ID}{CALLBACK_PATH}"

# Secret storage keys
ACCESS_TOKEN_KEY = "vv:accessToken"
REFRESH_TOKEN_KEY = "vv:refreshToken"
USER_ID_KEY = "vv:userId"
API_KEY_KEY = "apiKey"

# Transient PKCE session (general state, survives extension reloads)
AUTH_STATE_KEY = "vv:authState"
CODE_VERIFIER_KEY = "vv:codeVerifier"

# Profile state
USER_INFO_KEY = "vvUserInfo"
USER_CONFIG_KEY = "vvUserConfig"
GROUP_CONFIG_KEY = "vvGroupConfig"

# Host API settings written when a group is applied
PLAN_MODE_MODEL_KEY = "planModeApiModelId"
ACT_MODE_MODEL_KEY = "actModeApiModelId"
ANTHROPIC_BASE_URL_KEY = "anthropicBaseUrl"

# Backend API paths (relative to the API base URL)
TOKEN_PATH = "/oauth/vscode/token"
LOGOUT_PATH = "/oauth/vscode/logout"
USER_INFO_PATH = "/user/self"
USER_CONFIG_PATH = "/user/config"
GROUP_TOKENS_PATH = "/user/group-tokens"
USER_ID_HEADER = "New-Api-User"

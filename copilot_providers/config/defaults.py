"""copilot_providers.config.defaults
================================

Central place for small, stable default values used across the package.
These defaults can be overridden via environment variables or external
configuration, but provide sensible fallbacks for local development and tests.

This module intentionally avoids importing from other package modules to
prevent circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Provider identity ----
PROVIDER_NAME = "github-copilot"
COPILOT_DEFAULT_MODEL = "gpt-4"

# ---- Endpoints (public github.com) ----
GITHUB_DEFAULT_DOMAIN = "github.com"
COPILOT_DEFAULT_BASE_URL = "https://api.githubcopilot.com"
COPILOT_DEFAULT_EXCHANGE_URL = "https://api.github.com/copilot_internal/v2/token"
GITHUB_DEFAULT_DEVICE_CODE_URL = "https://github.com/login/device/code"
GITHUB_DEFAULT_ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
COPILOT_CHAT_COMPLETIONS_PATH = "/chat/completions"

# ---- OAuth device flow ----
# Public client id used by Copilot integrations for the device grant.
COPILOT_CLIENT_ID = "Iv1.b507a08c87ecfe98"
DEVICE_FLOW_SCOPE = "read:user"
DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"
# RFC 8628 section 3.5: each slow_down adds five seconds to the poll interval.
SLOW_DOWN_INCREMENT_SECONDS = 5.0
DEFAULT_POLL_INTERVAL_SECONDS = 5.0

# ---- Credential classification ----
# Fine-grained personal access tokens are accepted by the completion API as-is.
DIRECT_TOKEN_PREFIXES = ("github_pat_",)

# ---- Request headers ----
AUTH_USER_AGENT = "GitHubCopilotChat/0.35.0"
API_USER_AGENT = "GitHubCopilotChat/0.32.4"
EDITOR_VERSION = "vscode/1.105.1"
EDITOR_PLUGIN_VERSION = "copilot-chat/0.32.4"
COPILOT_INTEGRATION_ID = "vscode-chat"
OPENAI_INTENT = "conversation-panel"

# ---- Streaming bridge ----
EVENT_QUEUE_CAPACITY = 64


__all__ = [
    "PROVIDER_NAME",
    "COPILOT_DEFAULT_MODEL",
    "GITHUB_DEFAULT_DOMAIN",
    "COPILOT_DEFAULT_BASE_URL",
    "COPILOT_DEFAULT_EXCHANGE_URL",
    "GITHUB_DEFAULT_DEVICE_CODE_URL",
    "GITHUB_DEFAULT_ACCESS_TOKEN_URL",
    "COPILOT_CHAT_COMPLETIONS_PATH",
    "COPILOT_CLIENT_ID",
    "DEVICE_FLOW_SCOPE",
    "DEVICE_GRANT_TYPE",
    "SLOW_DOWN_INCREMENT_SECONDS",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "DIRECT_TOKEN_PREFIXES",
    "AUTH_USER_AGENT",
    "API_USER_AGENT",
    "EDITOR_VERSION",
    "EDITOR_PLUGIN_VERSION",
    "COPILOT_INTEGRATION_ID",
    "OPENAI_INTENT",
    "EVENT_QUEUE_CAPACITY",
]

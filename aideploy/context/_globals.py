from pathlib import Path

# ─── Deployment Defaults ─────────────────────────────────────────
PROJECT = "aiagent"
ENVIRONMENT = "dev"
LOCATION = "eastus"

VAULT_SKU = "standard"
VAULT_RBAC_AUTHORIZATION = False

# Primary tier first, then the single cheaper fallback.
AI_SERVICE_TIERS = (
    ("OpenAI", "S0"),
    ("TextAnalytics", "F0"),
)

SECRET_KEY_NAME = "AiServiceKey"
SECRET_ENDPOINT_NAME = "AiServiceEndpoint"

PROVIDER_NAMESPACES = (
    "Microsoft.KeyVault",
    "Microsoft.CognitiveServices",
    "Microsoft.Resources",
)
REGISTER_PROVIDERS = True
REGISTERED = "Registered"

# ─── Registration Poll ───────────────────────────────────────────
POLL_MAX_ATTEMPTS = 50
POLL_INTERVAL_SECONDS = 6.0
POLL_BACKOFF = 1.0

# ─── Suffix ──────────────────────────────────────────────────────
SUFFIX_RANDOM_BYTES = 3
SUFFIX_MAX_LENGTH = 6

# ─── Backends ────────────────────────────────────────────────────
BACKENDS = ("sdk", "cli")
DEFAULT_BACKEND = "sdk"

# ─── Log Paths ───────────────────────────────────────────────────
GLOBAL_LOG_DIR = Path("logs")
CONFIG_SECTION = "deploy"

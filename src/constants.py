"""Constants used in business logic."""

# Name of the default configuration file
DEFAULT_CONFIGURATION_FILE = "jin-generation.yaml"

# Prefix of automatic prompt cache keys sent to key-based providers
AUTOMATIC_CACHE_KEY_PREFIX = "jin-prefix-"

# Prefix of display names of automatically created explicit cache resources
AUTOMATIC_CACHE_DISPLAY_NAME_PREFIX = "jin-auto-"

# Prefix of conversation-level cache identifiers
AUTOMATIC_CONVERSATION_CACHE_PREFIX = "jin-conv-"

# Number of fingerprint hex digits used in generated cache keys and names
CACHE_FINGERPRINT_HEX_LENGTH = 24

# Explicit (out-of-band) cache resources
EXPLICIT_CACHE_MIN_TOKEN_ESTIMATE = 2048
EXPLICIT_CACHE_TTL_SECONDS = 3600
# local registry entries expire before the remote resource does
EXPLICIT_CACHE_CLIENT_TTL_RATIO = 0.9
EXPLICIT_CACHE_MIN_CLIENT_TTL_SECONDS = 60

# Rough characters-per-token ratio used for token estimates
CHARACTERS_PER_TOKEN_ESTIMATE = 4

# Maximum number of entries kept by the cache key registry
DEFAULT_CACHE_REGISTRY_MAX_ENTRIES = 256

# Maximum length of the model part of conversation cache identifiers
CONVERSATION_CACHE_MODEL_PART_MAX_LENGTH = 32

# Provider family used when computing key-based cache fingerprints
KEY_BASED_CACHE_FINGERPRINT_PROVIDER = "openai"

# Provider prefixes used in explicit cache fingerprints
GEMINI_CACHE_PROVIDER_PREFIX = "gemini"
VERTEX_CACHE_PROVIDER_PREFIX = "vertex"

# Generation outcomes handed over to persistence
GENERATION_OUTCOME_COMPLETED = "completed"
GENERATION_OUTCOME_CANCELLED = "cancelled"
GENERATION_OUTCOME_FAILED = "failed"

DEFAULT_LOG_LEVEL = "INFO"

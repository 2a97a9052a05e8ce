"""
Application configuration - loads from YAML param files.

CONFIGURATION POLICY:
====================
Non-secret parameters are loaded from config/param.yaml.
Secrets (API keys) live ONLY in .env and are loaded via os.getenv().
A handful of deployment overrides (model names, embedding dimension,
vector namespace prefix, seeding switch) may also come from the
environment and win over the YAML value.

All LLM and embedding traffic goes through the OpenRouter unified API
unless ``provider.default`` says otherwise.
"""

from pathlib import Path
from typing import Any, Dict, Optional
import os
import yaml
from dotenv import find_dotenv, load_dotenv
from loguru import logger

# Must run before any constant below reads os.environ.
load_dotenv(find_dotenv(usecwd=True))

# ========================================
# Project Paths
# ========================================

# Get project root (parent of src/infrastructure/)
_PROJECT_ROOT = Path(__file__).parent.parent.parent
_CONFIG_DIR = _PROJECT_ROOT / "config"

# ========================================
# YAML Config Loading
# ========================================

def _load_yaml(filename: str) -> Dict[str, Any]:
    """Load a YAML config file."""
    filepath = _CONFIG_DIR / filename
    if not filepath.exists():
        return {}
    with open(filepath, "r") as f:
        return yaml.safe_load(f) or {}


def _get_nested(d: Dict, *keys, default=None):
    """Get nested dictionary value safely."""
    for key in keys:
        if isinstance(d, dict):
            d = d.get(key, default)
        else:
            return default
    return d if d is not None else default


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean switch from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def parse_embedding_dim(raw: Any) -> int:
    """
    Parse the embedding dimension.

    Raises:
        ValueError: If *raw* is not a positive integer.
    """
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValueError(
            f"OPENROUTER_EMBEDDING_DIM must be a valid number (got {raw!r})."
        )
    if value <= 0:
        raise ValueError(
            f"OPENROUTER_EMBEDDING_DIM must be positive (got {value})."
        )
    return value


# Load configs
_PARAMS = _load_yaml("param.yaml")

# ========================================
# Provider Configuration
# ========================================

PROVIDER = _get_nested(_PARAMS, "provider", "default", default="openrouter")
OPENROUTER_BASE_URL = os.getenv(
    "OPENROUTER_BASE_URL",
    _get_nested(_PARAMS, "provider", "openrouter_base_url",
                default="https://openrouter.ai/api/v1"),
)

# ========================================
# Model Names
# ========================================
# Two roles share one chat model by default:
#   Classifier: orders the departments to engage (JSON output)
#   Agents:     answer grounded in department documents (JSON output)
# The evaluator grades answers with its own, usually stronger, model.

CHAT_MODEL = os.getenv(
    "OPENROUTER_MODEL",
    _get_nested(_PARAMS, "models", "chat", default="gpt-4o-mini"),
)
ROUTER_MODEL = os.getenv(
    "OPENROUTER_MODEL",
    _get_nested(_PARAMS, "models", "router", default=CHAT_MODEL),
)
EVALUATOR_MODEL = (
    os.getenv("EVALUATOR_OPENROUTER_MODEL")
    or os.getenv("OPENROUTER_EVALUATOR_MODEL")
    or _get_nested(_PARAMS, "models", "evaluator", default="openai/gpt-5-mini")
)

EMBEDDING_MODEL = os.getenv(
    "OPENROUTER_EMBEDDING_MODEL",
    _get_nested(_PARAMS, "embedding", "model", default="text-embedding-3-large"),
)
EMBEDDING_DIM = parse_embedding_dim(
    os.getenv(
        "OPENROUTER_EMBEDDING_DIM",
        _get_nested(_PARAMS, "embedding", "dimensions", default=1024),
    )
)

# ========================================
# LLM Defaults
# ========================================

LLM_TEMPERATURE = _get_nested(_PARAMS, "llm", "temperature", default=0.0)
LLM_MAX_TOKENS = _get_nested(_PARAMS, "llm", "max_tokens", default=2000)

# ========================================
# Embedding Defaults
# ========================================

EMBEDDING_BATCH_SIZE = _get_nested(_PARAMS, "embedding", "batch_size", default=100)

# ========================================
# Routing
# ========================================

# Hard cap on completed agent turns per routed question.
MAX_AGENT_TURNS = int(_get_nested(_PARAMS, "router", "max_turns", default=5))

# ========================================
# Department Documents
# ========================================

DATA_DIR = _PROJECT_ROOT / _get_nested(_PARAMS, "paths", "data_dir", default="data")

DEPARTMENT_FOLDERS: Dict[str, str] = _get_nested(
    _PARAMS,
    "departments",
    default={"hr": "hr_docs", "tech": "tech_docs", "finance": "finance_docs"},
)

DOCUMENT_EXTENSIONS = tuple(
    _get_nested(_PARAMS, "paths", "extensions", default=[".md", ".txt", ".csv"])
)

# ========================================
# Chunking Configuration
# ========================================

CHUNK_SIZE = _get_nested(_PARAMS, "chunking", "chunk_size", default=250)
CHUNK_OVERLAP = _get_nested(_PARAMS, "chunking", "chunk_overlap", default=40)

# ========================================
# Retrieval Configuration
# ========================================

TOP_K_RESULTS = _get_nested(_PARAMS, "retrieval", "top_k", default=5)
SIMILARITY_THRESHOLD = _get_nested(_PARAMS, "retrieval", "similarity_threshold", default=0.0)

# ========================================
# Qdrant Configuration
# ========================================

QDRANT_API_KEY = os.getenv("QDRANT_API_KEY", None)
QDRANT_URL = os.getenv("QDRANT_URL", None)
VECTOR_NAMESPACE_PREFIX = os.getenv(
    "VECTOR_NAMESPACE_PREFIX",
    _get_nested(_PARAMS, "vector_store", "namespace_prefix", default="dept"),
)
SHOULD_SEED_VECTORS = not _env_flag(
    "VECTOR_SKIP_SEED",
    not _get_nested(_PARAMS, "vector_store", "seed_on_startup", default=True),
)

# ========================================
# Observability
# ========================================

LANGFUSE_TAGS = _get_nested(_PARAMS, "observability", "tags", default=["multi-agent-router"])
SERVICE_NAME = _get_nested(_PARAMS, "observability", "service", default="department-router")
ENVIRONMENT = os.getenv("APP_ENV", "local")

# ========================================
# Helper Functions
# ========================================

def get_api_key(provider: Optional[str] = None) -> Optional[str]:
    """Get API key for the specified provider."""
    provider = provider or PROVIDER
    key_map = {
        "openrouter": "OPENROUTER_API_KEY",
        "openai": "OPENAI_API_KEY",
    }
    env_var = key_map.get(provider, f"{provider.upper()}_API_KEY")
    return os.getenv(env_var)


def validate() -> None:
    """
    Validate configuration before wiring the router.

    Raises:
        ValueError: If required secrets are missing.
    """
    api_key = get_api_key()
    if not api_key:
        key_name = "OPENROUTER_API_KEY" if PROVIDER == "openrouter" else f"{PROVIDER.upper()}_API_KEY"
        raise ValueError(
            f"Missing required secret: {key_name}\n"
            f"Please add it to your .env file."
        )

    if not QDRANT_URL:
        raise ValueError(
            "Vector store configuration missing. Set QDRANT_URL (and QDRANT_API_KEY for Qdrant Cloud)."
        )


def dump() -> None:
    """Log all active non-secret configuration values for debugging."""
    logger.info("=" * 60)
    logger.info("CONFIGURATION (NON-SECRETS ONLY)")
    logger.info("=" * 60)

    logger.info("Provider: {} ({})", PROVIDER, OPENROUTER_BASE_URL)
    logger.info("   Chat Model: {}", CHAT_MODEL)
    logger.info("   Router Model: {}", ROUTER_MODEL)
    logger.info("   Evaluator Model: {}", EVALUATOR_MODEL)
    logger.info("   Embedding Model: {} (dim={})", EMBEDDING_MODEL, EMBEDDING_DIM)

    logger.info("Routing:")
    logger.info("   Max agent turns: {}", MAX_AGENT_TURNS)

    logger.info("Departments:")
    for intent, folder in DEPARTMENT_FOLDERS.items():
        logger.info("   {} -> {}", intent, DATA_DIR / folder)

    logger.info("Chunking: size={} overlap={}", CHUNK_SIZE, CHUNK_OVERLAP)
    logger.info("Retrieval: top_k={}", TOP_K_RESULTS)

    logger.info("Qdrant:")
    logger.info("   Namespace prefix: {}", VECTOR_NAMESPACE_PREFIX)
    logger.info("   Seed on startup: {}", SHOULD_SEED_VECTORS)
    logger.info("   URL: {}", "set" if QDRANT_URL else "not set")
    logger.info("   API Key: {}", "set" if QDRANT_API_KEY else "not set")

    logger.info("=" * 60)


def get_config() -> Dict[str, Any]:
    """Return full config dictionary."""
    return _PARAMS

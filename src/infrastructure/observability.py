"""
Observability layer — Langfuse v3 integration for tracing and prompts.

Provides:
- ``get_langfuse()``             — singleton Langfuse client
- ``fetch_prompt()``             — pull prompts from Langfuse Prompt Management
- ``observe``                    — wrapped decorator for auto-tracing
- ``update_current_trace``       — tag traces with metadata / tags
- ``update_current_observation`` — attach I/O + metadata to the current span
- ``get_langchain_handler()``    — Langfuse callback handler for LangChain runs
- ``build_run_config()``         — ``RunnableConfig`` carrying that handler
- ``flush()``                    — ensure events are sent before process exit

Configuration:
    .env must contain:
        LANGFUSE_SECRET_KEY
        LANGFUSE_PUBLIC_KEY
        LANGFUSE_BASE_URL   (default: https://cloud.langfuse.com)

    config/param.yaml:
        observability:
          enabled: true

    ``OBSERVABILITY_ENABLED=false`` in the environment overrides the YAML.

When disabled every decorator becomes a no-op passthrough, so tracing
can be turned off without touching any code.
"""

from loguru import logger
import os
from typing import Any, Dict, List, Optional

from langchain_core.runnables import RunnableConfig
from langfuse import Langfuse
from langfuse import get_client as _get_lf_client
from langfuse import observe as _lf_observe

from infrastructure.config import (
    ENVIRONMENT,
    LANGFUSE_TAGS,
    SERVICE_NAME,
    _PARAMS,
    _get_nested,
)

# ---------------------------------------------------------------------------
# Config flag
# ---------------------------------------------------------------------------

_ENABLED: Optional[bool] = None


def _is_enabled() -> bool:
    """Check if observability is enabled (env override, then param.yaml)."""
    global _ENABLED
    if _ENABLED is not None:
        return _ENABLED
    raw = os.getenv("OBSERVABILITY_ENABLED")
    if raw is not None:
        _ENABLED = raw.strip().lower() in ("1", "true", "yes", "on")
    else:
        _ENABLED = bool(_get_nested(_PARAMS, "observability", "enabled", default=True))
    return _ENABLED


def _has_keys() -> bool:
    return bool(os.getenv("LANGFUSE_SECRET_KEY") and os.getenv("LANGFUSE_PUBLIC_KEY"))


# ---------------------------------------------------------------------------
# Singleton Langfuse client
# ---------------------------------------------------------------------------

_langfuse_client: Optional[Langfuse] = None
_initialised = False


def get_langfuse() -> Optional[Langfuse]:
    """
    Return a singleton Langfuse client.

    Returns None if observability is disabled or keys are missing.
    """
    global _langfuse_client, _initialised
    if _initialised:
        return _langfuse_client

    _initialised = True

    if not _is_enabled():
        logger.info("Observability disabled via config — Langfuse not initialised.")
        return None

    if not _has_keys():
        logger.warning(
            "Langfuse keys missing (LANGFUSE_SECRET_KEY / LANGFUSE_PUBLIC_KEY). "
            "Tracing disabled."
        )
        return None

    base_url = os.getenv("LANGFUSE_BASE_URL", "https://cloud.langfuse.com")
    _langfuse_client = Langfuse(
        secret_key=os.getenv("LANGFUSE_SECRET_KEY"),
        public_key=os.getenv("LANGFUSE_PUBLIC_KEY"),
        host=base_url,
    )
    logger.info("Langfuse client initialised (host={})", base_url)
    return _langfuse_client


# ---------------------------------------------------------------------------
# Prompt Management - fetch from Langfuse with local fallback
# ---------------------------------------------------------------------------


def fetch_prompt(
    name: str,
    *,
    fallback: str,
    cache_ttl_seconds: int = 300,
    **compile_vars: str,
) -> str:
    """
    Fetch a prompt template from **Langfuse Prompt Management**.

    If the prompt exists in Langfuse it is compiled with ``compile_vars``
    (``{{variable}}`` Mustache syntax).  Otherwise the local ``fallback``
    string is used (Python ``{variable}`` syntax).

    Args:
        name:  Prompt name as registered in Langfuse (e.g. ``"router-classifier-system"``).
        fallback:  Local prompt string used when Langfuse is unavailable
                   or the prompt hasn't been created yet.
        cache_ttl_seconds:  Client-side cache TTL (default 5 min).
        **compile_vars:  Variables to substitute into the template.

    Returns:
        Compiled prompt string ready to send to the LLM.
    """
    client = get_langfuse()

    if client is not None:
        try:
            prompt_obj = client.get_prompt(
                name,
                type="text",
                cache_ttl_seconds=cache_ttl_seconds,
            )
            compiled = prompt_obj.compile(**compile_vars) if compile_vars else prompt_obj.compile()
            logger.debug("Langfuse prompt '{}' loaded (version={})", name, getattr(prompt_obj, "version", "?"))
            return compiled
        except Exception as exc:
            logger.debug(
                "Langfuse prompt '{}' not found or fetch failed: {}. Using local fallback.",
                name,
                exc,
            )

    if compile_vars:
        return fallback.format(**compile_vars)
    return fallback


# ---------------------------------------------------------------------------
# @observe decorator (wraps langfuse v3 ``observe``)
# ---------------------------------------------------------------------------


def observe(
    *,
    name: Optional[str] = None,
    as_type: Optional[str] = None,
):
    """
    Decorator that wraps ``langfuse.observe``.

    Becomes a no-op when observability is disabled in config.

    Args:
        name: Span name (defaults to the function name).
        as_type: One of ``"generation"`` | ``None`` (span).
    """
    def _noop_decorator(fn):
        return fn

    if not _is_enabled():
        return _noop_decorator

    kwargs: Dict[str, Any] = {}
    if name is not None:
        kwargs["name"] = name
    if as_type is not None:
        kwargs["as_type"] = as_type

    return _lf_observe(**kwargs)


# ---------------------------------------------------------------------------
# Trace & Span Update Helpers (v3 API, uses get_client())
# ---------------------------------------------------------------------------


def update_current_trace(
    *,
    metadata: Optional[dict] = None,
    tags: Optional[list] = None,
    session_id: Optional[str] = None,
) -> None:
    """
    Update the current Langfuse trace.

    Safe to call even when tracing is disabled (no-op).
    """
    if not _is_enabled():
        return
    try:
        client = _get_lf_client()
        kwargs: Dict[str, Any] = {}
        if metadata is not None:
            kwargs["metadata"] = metadata
        if tags is not None:
            kwargs["tags"] = tags
        if session_id is not None:
            kwargs["session_id"] = session_id
        client.update_current_trace(**kwargs)
    except Exception as exc:
        logger.debug("update_current_trace failed (non-critical): {}", exc)


def update_current_observation(
    *,
    input: Optional[str] = None,
    output: Optional[str] = None,
    metadata: Optional[dict] = None,
    model: Optional[str] = None,
) -> None:
    """
    Update the current span/generation with I/O and metadata.

    A ``model`` argument marks the observation as a generation update;
    everything else goes through ``update_current_span()``.

    Safe to call even when tracing is disabled (no-op).
    """
    if not _is_enabled():
        return
    kwargs: Dict[str, Any] = {}
    if input is not None:
        kwargs["input"] = input
    if output is not None:
        kwargs["output"] = output
    if metadata is not None:
        kwargs["metadata"] = metadata
    if not kwargs and model is None:
        return
    try:
        client = _get_lf_client()
        if model is not None:
            client.update_current_generation(model=model, **kwargs)
        else:
            client.update_current_span(**kwargs)
    except Exception as exc:
        logger.debug("update_current_observation failed (non-critical): {}", exc)


# ---------------------------------------------------------------------------
# LangChain run context
# ---------------------------------------------------------------------------


def get_langchain_handler():
    """
    Return a Langfuse ``CallbackHandler`` for LangChain runs.

    Tags and metadata travel on the run config (see ``build_run_config``).
    Returns None (tracing disabled) when observability is off or the
    Langfuse keys are not configured.
    """
    if not _is_enabled():
        return None
    if not _has_keys():
        logger.warning("Langfuse keys missing. Tracing disabled.")
        return None

    from langfuse.langchain import CallbackHandler

    get_langfuse()
    handler = CallbackHandler()
    logger.debug("Langfuse callback handler ready")
    return handler


def build_run_config(
    handler: Any = None,
    *,
    metadata: Optional[Dict[str, Any]] = None,
    tags: Optional[List[str]] = None,
) -> Optional[RunnableConfig]:
    """
    Build the run context threaded through classifier and agent calls.

    Returns None when there is no handler to attach.
    """
    if handler is None:
        return None
    merged = {"service": SERVICE_NAME, "environment": ENVIRONMENT}
    merged.update(metadata or {})
    return RunnableConfig(
        callbacks=[handler],
        metadata=merged,
        tags=list(tags or LANGFUSE_TAGS),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def flush() -> None:
    """Flush pending Langfuse events (call before program exit)."""
    if _is_enabled() and _has_keys():
        try:
            _get_lf_client().flush()
            logger.debug("Langfuse flushed.")
        except Exception as exc:
            logger.debug("Langfuse flush failed: {}", exc)

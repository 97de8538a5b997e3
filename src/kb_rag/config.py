"""
Service Configuration

Loads service settings from environment variables.
The CLI loads a .env file (python-dotenv) before this is read.
"""

import os
from dataclasses import dataclass

DEFAULT_OLLAMA_HOST = "http://127.0.0.1:11434"


def _normalize_host(value: str) -> str:
    """Accept ``host:port`` as well as a full URL."""
    value = value.strip().rstrip("/")
    if not value.startswith("http"):
        value = f"http://{value}"
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class ServiceConfig:
    """Configuration for the RAG service.

    Environment Variables:
        OLLAMA_HOST: Base URL of the model server (default: http://127.0.0.1:11434)
        EMBED_MODEL: Embedding model name (default: nomic-embed-text)
        GEN_MODEL: Generation model name (default: tinyllama)
        HOST: Interface the HTTP server binds to (default: 127.0.0.1)
        PORT: Listening port (default: 5000)
        KB_PATH: Snapshot file for the knowledge base (default: ./kb.json)
        REQUEST_TIMEOUT: Seconds before an outbound model call is abandoned (default: 120)
        USE_MOCK_PROVIDERS: Use deterministic in-process models (default: false)
        LOG_LEVEL: Root log level for the CLI (default: INFO)
    """

    ollama_host: str = DEFAULT_OLLAMA_HOST
    embed_model: str = "nomic-embed-text"
    gen_model: str = "tinyllama"
    host: str = "127.0.0.1"
    port: int = 5000
    kb_path: str = "./kb.json"
    request_timeout: float = 120.0
    use_mock_providers: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Load config from environment variables."""
        return cls(
            ollama_host=_normalize_host(os.environ.get("OLLAMA_HOST") or DEFAULT_OLLAMA_HOST),
            embed_model=os.environ.get("EMBED_MODEL") or "nomic-embed-text",
            gen_model=os.environ.get("GEN_MODEL") or "tinyllama",
            host=os.environ.get("HOST") or "127.0.0.1",
            port=_env_int("PORT", 5000),
            kb_path=os.environ.get("KB_PATH") or "./kb.json",
            request_timeout=_env_float("REQUEST_TIMEOUT", 120.0),
            use_mock_providers=os.environ.get("USE_MOCK_PROVIDERS", "false").lower() in ("true", "1", "yes"),
            log_level=(os.environ.get("LOG_LEVEL") or "INFO").upper(),
        )


# Global config singleton
_config: ServiceConfig | None = None


def get_config() -> ServiceConfig:
    """Get the global service config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = ServiceConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None

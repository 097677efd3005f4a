"""Configuration management for the migration assistant chat API."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"

if env_path.exists():
    load_dotenv(env_path)

# Fixed generation policy, not read from the environment.
CHAT_TEMPERATURE = 0.7
RETRIEVAL_TOP_K = 3


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Application configuration loaded from environment variables."""

    # Azure OpenAI (cloud backend)
    AZURE_OPENAI_API_ENDPOINT: str | None = os.getenv("AZURE_OPENAI_API_ENDPOINT")
    AZURE_OPENAI_API_VERSION: str = os.getenv("AZURE_OPENAI_API_VERSION", "2024-06-01")
    AZURE_OPENAI_CHAT_DEPLOYMENT: str = os.getenv(
        "AZURE_OPENAI_CHAT_DEPLOYMENT", "chat"
    )
    AZURE_OPENAI_EMBEDDING_DEPLOYMENT: str = os.getenv(
        "AZURE_OPENAI_EMBEDDING_DEPLOYMENT", "embeddings"
    )

    @classmethod
    def get_azure_openai_api_key(cls) -> str:
        """Get the Azure OpenAI API key from environment variables.

        Returns:
            Azure OpenAI API key or empty string if not set.
        """
        return os.getenv("AZURE_OPENAI_API_KEY", "")

    # Qdrant Cloud (cloud vector store)
    QDRANT_URL: str | None = os.getenv("QDRANT_URL")
    QDRANT_COLLECTION: str = os.getenv("QDRANT_COLLECTION", "vectorSearchContainer")

    @classmethod
    def get_qdrant_api_key(cls) -> str | None:
        """Get the Qdrant API key, or None for an unauthenticated instance."""  # noqa: DOC201
        return os.getenv("QDRANT_API_KEY") or None

    # Ollama (local backend)
    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    OLLAMA_CHAT_MODEL: str = os.getenv("OLLAMA_CHAT_MODEL", "llama3.1:latest")
    OLLAMA_EMBEDDINGS_MODEL: str = os.getenv(
        "OLLAMA_EMBEDDINGS_MODEL", "nomic-embed-text:latest"
    )
    OLLAMA_TIMEOUT: float = float(os.getenv("OLLAMA_TIMEOUT", "120"))

    # Local vector store
    FAISS_STORE_DIR: Path = Path(os.getenv("FAISS_STORE_DIR", ".faiss"))

    # Ingestion
    CHUNK_SIZE: int = int(os.getenv("CHUNK_SIZE", "1500"))
    CHUNK_OVERLAP: int = int(os.getenv("CHUNK_OVERLAP", "100"))

    # Reuse backend clients across requests
    BACKEND_CACHE: bool = _env_flag("BACKEND_CACHE")

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    HTTP_CLIENT_LOG_LEVEL: str = os.getenv("HTTP_CLIENT_LOG_LEVEL", "WARNING").upper()

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    API_URL: str = os.getenv("API_URL", "http://localhost:7071")
    API_USER_AGENT: str = os.getenv("API_USER_AGENT", "migrassist/1.0")

    @classmethod
    def is_cloud(cls) -> bool:
        """Check whether the cloud backend is configured.

        Returns:
            True if an Azure OpenAI endpoint is set.
        """
        return bool(cls.AZURE_OPENAI_API_ENDPOINT)

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration values.

        Only the cloud backend needs credentials; the local backend runs
        against Ollama and the on-disk index without any secrets.

        Raises:
            ValueError: If the cloud backend is selected but incomplete.
        """
        if not cls.is_cloud():
            return
        missing = []
        if not cls.get_azure_openai_api_key():
            missing.append("AZURE_OPENAI_API_KEY")
        if not cls.QDRANT_URL:
            missing.append("QDRANT_URL")
        if missing:
            msg = (
                f"{', '.join(missing)} required when AZURE_OPENAI_API_ENDPOINT "
                "is set. Please set it in .env file or environment."
            )
            raise ValueError(msg)

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment.

        Returns:
            True if environment is development.
        """
        return cls.ENVIRONMENT.lower() == "development"

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment.

        Returns:
            True if environment is production.
        """
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def setup_logging(cls) -> None:
        """Configure logging once at process start.

        Console output, one readable line per record, level taken from
        ``LOG_LEVEL``. HTTP client libraries get their own, quieter level.
        """
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )

        http_level = getattr(logging, cls.HTTP_CLIENT_LOG_LEVEL, logging.WARNING)
        for name in ("httpx", "httpcore", "openai"):
            logging.getLogger(name).setLevel(http_level)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger with the specified name.

        Args:
            name: Logger name (typically __name__)

        Returns:
            Logger instance
        """
        return logging.getLogger(name)

    @classmethod
    def get_api_headers(cls) -> dict[str, str]:
        """Build default headers for outbound API calls.

        Returns:
            Mapping of header names to values used on outbound HTTP requests.
        """
        headers: dict[str, str] = {}
        if cls.API_USER_AGENT:
            headers["User-Agent"] = cls.API_USER_AGENT
        return headers


config = Config()

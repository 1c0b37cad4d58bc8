"""
Configuration for the document vectorization service

Defaults live in DEFAULT_CONFIG and can be overridden from environment
variables (a .env file is honoured) or from a JSON config file.
"""

import copy
import json
import logging
import os
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

# Default configurations
DEFAULT_CONFIG = {
    # Embedding settings
    "embeddings": {
        "model": "sentence-transformers/all-MiniLM-L6-v2",
        "dimension": 384,  # all-MiniLM-L6-v2 output size
        "device": "cpu",
        "normalize": False,
        "max_workers": 1
    },

    # Tokenizer settings; path to a local tokenizer.json, falls back to the model id
    "tokenizer": {
        "path": None
    },

    # Chunking settings
    "chunking": {
        # all-MiniLM-L6-v2 max_seq_length; counted without special tokens, so encode()
        # drops up to two tokens of a full chunk to fit [CLS] and [SEP]
        "max_tokens": 256
    },

    # Vector store settings
    "vector_store": {
        "url": "http://localhost:6333",
        "api_key": None,
        "collection_name": "all_minilm_l6_v2_docs",
        "search_limit": 1
    },

    # HTTP server
    "server": {
        "host": "0.0.0.0",
        "port": 8000
    },

    # Logging
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    }
}

# Environment variable mappings
ENV_MAPPINGS = {
    "EMBEDDING_MODEL": "embeddings.model",
    "EMBEDDING_DIMENSION": "embeddings.dimension",
    "EMBEDDING_DEVICE": "embeddings.device",
    "EMBEDDING_WORKERS": "embeddings.max_workers",
    "TOKENIZER_PATH": "tokenizer.path",
    "MAX_TOKENS_PER_CHUNK": "chunking.max_tokens",
    "QDRANT_URL": "vector_store.url",
    "QDRANT_API_KEY": "vector_store.api_key",
    "QDRANT_COLLECTION": "vector_store.collection_name",
    "SEARCH_LIMIT": "vector_store.search_limit",
    "SERVER_HOST": "server.host",
    "SERVER_PORT": "server.port",
    "LOG_LEVEL": "logging.level"
}


class Config:
    """Configuration manager for the vectorization service"""

    def __init__(self, config_file: Optional[str] = None, load_env: bool = True):
        """
        Initialize configuration

        Args:
            config_file: Optional path to a JSON config file
            load_env: Whether to read overrides from the environment
        """
        self.config = copy.deepcopy(DEFAULT_CONFIG)

        if load_env:
            load_dotenv()
            self._load_from_env()

        # File values win over the environment
        if config_file:
            self._load_from_file(config_file)

    def _load_from_env(self):
        """Load configuration from environment variables"""
        # SERVER_URL keeps the host:port form used by older deployments
        server_url = os.getenv("SERVER_URL")
        if server_url:
            host, _, port = server_url.rpartition(":")
            if not host or not port.isdigit():
                raise ConfigError(f"SERVER_URL must look like host:port, got {server_url!r}")
            self._set_nested_value("server.host", host)
            self._set_nested_value("server.port", port)

        for env_var, config_path in ENV_MAPPINGS.items():
            value = os.getenv(env_var)
            if value is not None:
                self._set_nested_value(config_path, value)

    def _load_from_file(self, config_file: str):
        """Load configuration from a JSON file"""
        try:
            with open(config_file, 'r') as f:
                file_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load config file {config_file}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_file} must contain a JSON object")
        self._merge_config(file_config)
        logger.info(f"Loaded configuration from {config_file}")

    def _set_nested_value(self, path: str, value: Any):
        """Set a nested configuration value"""
        keys = path.split('.')
        current = self.config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        # Convert string values to appropriate types
        if isinstance(value, str):
            if value.lower() in ('true', 'false'):
                value = value.lower() == 'true'
            elif value.isdigit():
                value = int(value)

        current[keys[-1]] = value

    def _merge_config(self, new_config: Dict[str, Any]):
        """Merge new configuration with existing"""
        def merge_dict(d1, d2):
            for key, value in d2.items():
                if key in d1 and isinstance(d1[key], dict) and isinstance(value, dict):
                    merge_dict(d1[key], value)
                else:
                    d1[key] = value

        merge_dict(self.config, new_config)

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get configuration value by path

        Args:
            path: Dot-separated path to configuration value
            default: Default value if path not found

        Returns:
            Configuration value
        """
        keys = path.split('.')
        current = self.config

        try:
            for key in keys:
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def get_embedding_config(self) -> Dict[str, Any]:
        """Get embedding configuration"""
        return self.get("embeddings", {})

    def get_vector_store_config(self) -> Dict[str, Any]:
        """Get vector store configuration"""
        return self.get("vector_store", {})

    def get_server_config(self) -> Dict[str, Any]:
        """Get HTTP server configuration"""
        return self.get("server", {})

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration"""
        return self.get("logging", {})


_config: Optional[Config] = None


def get_config() -> Config:
    """Get the process-wide configuration, loading it on first use"""
    global _config
    if _config is None:
        _config = Config()
    return _config


def setup_logging(config: Optional[Config] = None, level: Optional[str] = None):
    """Configure root logging from the logging section"""
    config = config or get_config()
    level = level or config.get("logging.level", "INFO")
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

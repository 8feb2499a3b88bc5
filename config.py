"""
Process configuration, read from the environment (and a .env file if present)
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from errors import ConfigurationError

DEFAULT_TMDB_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000

SERVER_NAME = "movies-mcp"
SERVER_VERSION = "1.0.0"


@dataclass(frozen=True)
class Settings:
    tmdb_api_key: str
    tmdb_base_url: str = DEFAULT_TMDB_BASE_URL
    # None leaves the timeout to requests
    request_timeout: Optional[float] = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables"""
        load_dotenv()

        api_key = os.getenv('TMDB_API_KEY')
        if not api_key:
            raise ConfigurationError("TMDB_API_KEY must be set in environment variables")

        port = os.getenv('PORT', str(DEFAULT_PORT))
        try:
            port = int(port)
        except ValueError:
            raise ConfigurationError(f"PORT must be an integer, got {port!r}")

        timeout = os.getenv('TMDB_TIMEOUT')
        if timeout:
            try:
                timeout = float(timeout)
            except ValueError:
                raise ConfigurationError(f"TMDB_TIMEOUT must be a number of seconds, got {timeout!r}")
        else:
            timeout = None

        return cls(
            tmdb_api_key=api_key,
            tmdb_base_url=os.getenv('TMDB_BASE_URL', DEFAULT_TMDB_BASE_URL).rstrip('/'),
            request_timeout=timeout,
            host=os.getenv('HOST', DEFAULT_HOST),
            port=port,
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )

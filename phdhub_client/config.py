"""
Client Configuration Management
"""

import os
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass
class ClientConfig:
    """Configuration for talking to the PhD Hub API"""

    # API settings
    api_base_url: str = "http://localhost:8000/api"
    timeout: float = 10.0
    connect_timeout: float = 5.0

    # Authentication (identity-provider session token)
    session_token: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load overrides from PHDHUB_* environment variables"""
        config = cls()
        if os.getenv("PHDHUB_API_URL"):
            config.api_base_url = os.environ["PHDHUB_API_URL"]
        if os.getenv("PHDHUB_SESSION_TOKEN"):
            config.session_token = os.environ["PHDHUB_SESSION_TOKEN"]
        if os.getenv("PHDHUB_TIMEOUT"):
            config.timeout = float(os.environ["PHDHUB_TIMEOUT"])
        return config

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if data["session_token"]:
            data["session_token"] = "***"
        return data

import os
from pathlib import Path
from typing import Optional

import yaml

from repolens_core.errors import ConfigurationError

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "model_name": None,  # None = provider default; REPOLENS_MODEL env var fills it in
    "max_files": 5,
    "max_code_chars": 70000,
    "default_branch": "main",
    "fallback_branch": "master",
}

# Environment variable holding the API key for each review provider.
API_KEY_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def load_config(config_path: str = ".repolens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .repolens.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    if not config.get("model_name"):
        config["model_name"] = os.environ.get("REPOLENS_MODEL") or None

    return config


def require_api_key(config: dict) -> str:
    """Return the API key for the configured provider.

    Raises ConfigurationError when the provider is unknown or its key is unset,
    so a submission can fail before any network call is made.
    """
    model = config.get("model")
    env_var = API_KEY_ENV.get(model)
    if env_var is None:
        raise ConfigurationError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")
    key = config.get(f"{model}_api_key")
    if not key:
        raise ConfigurationError(
            f"{env_var} environment variable is not set. Please configure it to use the AI features."
        )
    return key

"""Supabase environment loader module.

This module handles loading and parsing of the .env.local file that holds the
Supabase project URL and keys. The same file is shared with the web frontend,
so the variable names follow its conventions.

The file uses a simple KEY=VALUE format, with one setting per line.
Comments start with #. Values may be wrapped in single or double quotes.

Required settings:
    - NEXT_PUBLIC_SUPABASE_URL (Supabase project URL)
    - NEXT_PUBLIC_SUPABASE_ANON_KEY (public anonymous key)

Optional settings:
    - SUPABASE_SERVICE_ROLE_KEY (privileged key, admin operations and seeding)
    - SUPABASE_JWT_SECRET (verifies access tokens presented to the API)

Variables set in the process environment take precedence over the file.

Raises:
    EnvConfigError: If the file is unreadable or required settings are missing
"""
import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ['NEXT_PUBLIC_SUPABASE_URL', 'NEXT_PUBLIC_SUPABASE_ANON_KEY']
OPTIONAL_KEYS = ['SUPABASE_SERVICE_ROLE_KEY', 'SUPABASE_JWT_SECRET']

class ConfigValidationError:
    """Helper class to format configuration validation errors"""
    def __init__(self):
        self.missing: List[str] = []
        self.invalid_urls: List[str] = []

    def has_errors(self) -> bool:
        """Check if any errors exist"""
        return bool(self.missing or self.invalid_urls)

    def format_message(self) -> str:
        """Format error message in a clean, readable way"""
        messages = []

        if self.missing:
            messages.append("Missing required settings:")
            messages.extend(f"  - {item}" for item in self.missing)

        if self.invalid_urls:
            if messages:
                messages.append("")
            messages.append("Invalid URLs (must start with http:// or https://):")
            messages.extend(f"  - {item}" for item in self.invalid_urls)

        return "\n".join(messages)

class EnvConfigError(Exception):
    """Raised when there's an error loading the Supabase environment"""
    pass

def parse_value(value: str) -> str:
    """Strip surrounding quotes from a value"""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value

def load_env_conf(
    env_root: str,
    environ: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """
    Load and parse .env.local with strict validation

    Args:
        env_root: Directory containing .env.local
        environ: Environment overrides, defaults to os.environ

    Returns:
        Dictionary containing the Supabase settings

    Raises:
        EnvConfigError: If parsing fails or validation fails
    """
    environ = os.environ if environ is None else environ
    config_path = Path(env_root) / '.env.local'

    config: Dict[str, str] = {}

    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                lines = f.readlines()
        except OSError as e:
            raise EnvConfigError(f"Error reading {config_path}: {str(e)}")

        for line in lines:
            line = line.strip()
            if line and not line.startswith('#'):
                if line.startswith('export '):
                    line = line[len('export '):]
                try:
                    key, value = line.split('=', 1)
                    config[key.strip()] = parse_value(value)
                except ValueError:
                    logger.warning(f"Skipping invalid line in .env.local: {line}")
                    continue
    else:
        logger.info(f"No .env.local at {config_path}, using process environment only")

    for key in REQUIRED_KEYS + OPTIONAL_KEYS:
        if environ.get(key):
            config[key] = environ[key]

    errors = ConfigValidationError()

    for key in REQUIRED_KEYS:
        if not config.get(key):
            errors.missing.append(key)

    url = config.get('NEXT_PUBLIC_SUPABASE_URL')
    if url and not url.startswith(('http://', 'https://')):
        errors.invalid_urls.append(f"NEXT_PUBLIC_SUPABASE_URL: {url}")

    if errors.has_errors():
        raise EnvConfigError(
            "Supabase Environment Validation Failed\n\n" +
            errors.format_message()
        )

    return config

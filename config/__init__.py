"""Configuration module for loading and managing application settings"""
from typing import Dict, Any, Optional
from .lib.load_env_conf import load_env_conf, EnvConfigError
from .lib.load_settings_conf import load_settings_conf, SettingsError

__all__ = ['get_settings', 'reset_settings', 'mask_secret', 'SettingsError', 'EnvConfigError']

# Keys that must never be printed or returned in full
SECRET_KEYS = {'SUPABASE_SERVICE_ROLE_KEY', 'SUPABASE_JWT_SECRET', 'NEXT_PUBLIC_SUPABASE_ANON_KEY'}

_settings: Optional[Dict[str, Any]] = None

def get_settings(settings_path: str = ".") -> Dict[str, Any]:
    """Load settings.conf and the Supabase environment it points to.

    The result is cached after the first successful load.

    Args:
        settings_path: Directory containing settings.conf

    Returns:
        Dictionary with the settings.conf values plus the Supabase keys

    Raises:
        SettingsError: If settings.conf is missing or invalid
        EnvConfigError: If .env.local is missing required values
    """
    global _settings

    if _settings is not None:
        return _settings

    try:
        settings = load_settings_conf(settings_path)
        settings.update(load_env_conf(settings['env_root']))
    except (SettingsError, EnvConfigError) as e:
        # Re-raise the error but provide more context
        raise type(e)(
            f"Configuration Error\n"
            "=================\n\n"
            f"{str(e)}\n\n"
            "Please ensure both settings.conf and .env.local are properly configured.\n"
            "Run `python -m config` to generate example files."
        )

    _settings = settings
    return _settings

def reset_settings() -> None:
    """Forget cached settings so the next call reloads from disk."""
    global _settings
    _settings = None

def mask_secret(value: Optional[str]) -> str:
    """Return a printable form of a secret that keeps only its last characters."""
    if not value:
        return ''
    if len(value) <= 8:
        return '*' * len(value)
    return '*' * 8 + value[-4:]

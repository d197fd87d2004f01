"""
Workshop Settings.

Supports two formats (dict takes priority):

    # Option 1: Dict
    WORKSHOP = {
        "DEFAULT_REORDER_LEVEL": 25,
        "IDENTITY_BACKEND": "myproject.identity.SSOIdentityProvider",
    }

    # Option 2: Flat
    WORKSHOP_DEFAULT_REORDER_LEVEL = 25
    WORKSHOP_IDENTITY_BACKEND = "myproject.identity.SSOIdentityProvider"

All settings have defaults, so no configuration is required.
"""

import threading

from django.conf import settings


# ── Defaults ──

DEFAULTS = {
    "DEFAULT_REORDER_LEVEL": 10,
    "LEDGER_RECENT_LIMIT": 50,
    "CODE_PREFIX": "JOB",
    "IDENTITY_BACKEND": "workshop.adapters.identity.WorkerIdentityProvider",
}


# ── Accessors ──

_sentinel = object()


def get_setting(name, default=_sentinel):
    """
    Get a workshop setting.

    Looks up in order:
    1. WORKSHOP dict (e.g. WORKSHOP = {"CODE_PREFIX": "..."})
    2. Flat setting (e.g. WORKSHOP_CODE_PREFIX = "...")
    3. DEFAULTS
    """
    workshop_dict = getattr(settings, "WORKSHOP", {})
    if name in workshop_dict:
        return workshop_dict[name]

    flat_value = getattr(settings, f"WORKSHOP_{name}", _sentinel)
    if flat_value is not _sentinel:
        return flat_value

    if default is not _sentinel:
        return default

    return DEFAULTS.get(name)


_identity_backend_lock = threading.Lock()
_identity_backend_instance = None


def get_identity_backend():
    """
    Return the configured identity provider instance.

    The identity provider turns an authenticated request user into an
    Actor (id + role). Authentication itself happens outside the workshop.
    """
    global _identity_backend_instance

    if _identity_backend_instance is None:
        with _identity_backend_lock:
            if _identity_backend_instance is None:  # double-checked
                from django.core.exceptions import ImproperlyConfigured
                from django.utils.module_loading import import_string

                path = get_setting("IDENTITY_BACKEND")
                try:
                    _identity_backend_instance = import_string(path)()
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import identity backend '{path}': {e}"
                    ) from e

    return _identity_backend_instance


def reset_identity_backend() -> None:
    """Reset singleton (for tests)."""
    global _identity_backend_instance
    _identity_backend_instance = None

"""
provider.py – Static registry of language-model providers built from configuration.
-------------------------------------------------------------------------------------------------------------------
In the overall data-flow this file sits at the infrastructure layer. It turns the
`llm.providers` entries of config.json plus the process environment into an immutable
tuple of `Provider` records that the selection policy reads on every request.

Why a *registry* built once?
• Credential availability is a capability flag computed at boot, not re-read per call.
  The orchestrator and the selector only ever see `credential_present`, never a secret.
• The tuple is read-only after startup, so no synchronization is needed when several
  requests select providers concurrently.
• Tests can build a registry from an in-memory config dictionary and a fake environment
  without touching the real process environment.

Secrets are resolved separately by `resolve_api_key`, which the adapter factory calls
once when it builds the per-provider adapters.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional, Tuple

from shared.models import Provider, ProviderSpecialty

logger = logging.getLogger(__name__)

SUPPORTED_API_STYLES = ("openai", "anthropic")


def resolve_api_key(entry: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Read the API key for a provider entry from the environment.

    The function never logs or returns anything but the raw value to its caller, so the
    secret stays confined to the adapter that needs it.

    Args:
        entry (Dict[str, Any]): One item of `CONFIG["llm"]["providers"]`.
        environ (Optional[Mapping[str, str]]): Environment mapping; defaults to os.environ.

    Returns:
        str: The key, or an empty string when the variable is unset or blank.
    """
    env = os.environ if environ is None else environ
    var_name = entry.get("api_key_env", "")
    return (env.get(var_name, "") or "").strip() if var_name else ""


def _parse_specialty(raw: Optional[str], provider_name: str) -> Optional[ProviderSpecialty]:
    if not raw:
        return None
    try:
        return ProviderSpecialty(str(raw).strip().lower())
    except ValueError:
        logger.warning("Ignoring unknown specialty %r for provider %s", raw, provider_name)
        return None


def build_provider_registry(
    config: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Tuple[Provider, ...]:
    """
    Build the immutable provider registry from configuration and environment.

    Each entry of `config["llm"]["providers"]` becomes one `Provider`. Entries with an
    unsupported `api_style` raise immediately because that is a deployment mistake,
    whereas a missing API key only marks the provider as unavailable.

    Args:
        config (Dict[str, Any]): The application CONFIG mapping.
        environ (Optional[Mapping[str, str]]): Environment mapping; defaults to os.environ.

    Returns:
        Tuple[Provider, ...]: Providers in configuration order.

    Raises:
        ValueError: If a provider entry declares an unsupported api_style.
    """
    providers = []
    for entry in (config.get("llm", {}) or {}).get("providers", []):
        name = str(entry["name"])
        api_style = str(entry.get("api_style", "openai")).strip().lower()
        if api_style not in SUPPORTED_API_STYLES:
            raise ValueError(f"Unsupported api_style for provider {name}: {api_style}")

        credential_present = bool(resolve_api_key(entry, environ))
        providers.append(Provider(
            name=name,
            credential_present=credential_present,
            endpoint=str(entry["endpoint"]),
            model=str(entry["model"]),
            max_tokens=int(entry.get("max_tokens", 1000)),
            temperature=float(entry.get("temperature", 0.7)),
            priority=int(entry.get("priority", 0)),
            specialty=_parse_specialty(entry.get("specialty"), name),
            api_style=api_style,
        ))
        # Only the variable name is logged, never the value.
        logger.info(
            "Provider %s registered | credential=%s (%s) | priority=%s",
            name, "present" if credential_present else "missing",
            entry.get("api_key_env"), entry.get("priority", 0),
        )

    return tuple(providers)

"""Questionnaire constants shared across the SDK.

Several values can be overridden via environment variables so that
deployments can change defaults without code changes.
"""

import os
from typing import Literal

# The two locales every questionnaire must provide text for.
Locale = Literal["es", "pt"]
SUPPORTED_LOCALES: tuple[str, ...] = ("es", "pt")

# Locale used when a caller does not pick one.
# Overridable via DORA_DEFAULT_LOCALE env var.
DEFAULT_LOCALE: Locale = os.getenv("DORA_DEFAULT_LOCALE", "es")  # type: ignore[assignment]
if DEFAULT_LOCALE not in SUPPORTED_LOCALES:
    raise ValueError(
        f"DORA_DEFAULT_LOCALE must be one of {SUPPORTED_LOCALES}, got {DEFAULT_LOCALE!r}"
    )

# Upper bound (seconds) on a single delivery call.  Empty / unset means the
# pipeline waits for the delivery service indefinitely.
_raw_timeout = os.getenv("DORA_DELIVERY_TIMEOUT", "")
DELIVERY_TIMEOUT: float | None = float(_raw_timeout) if _raw_timeout else None

# Placeholders substituted into question text at render time.
PROVIDER_PLACEHOLDER = "{providerName}"
ENTITY_PLACEHOLDER = "{financialEntityName}"

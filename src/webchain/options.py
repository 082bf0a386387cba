"""Evaluation options for element chains.

Uses stdlib dataclasses only. YAML loading needs PyYAML (optional
dependency); JSON files are read natively.
"""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from webchain.errors import ChainArgumentError

# Environment variable -> ChainOptions field.
_ENV_FIELDS: dict[str, str] = {
    "WEBCHAIN_RETRY_DELAY_MS": "retry_delay_ms",
    "WEBCHAIN_TOTAL_RETRY_TIMEOUT_MS": "total_retry_timeout_ms",
    "WEBCHAIN_PAGE_WAIT_TIMEOUT_MS": "page_wait_timeout_ms",
}


@dataclass(frozen=True)
class ChainOptions:
    """Retry and wait budget for one element chain evaluation.

    Attributes:
        retry_delay_ms: Pause between a failed attempt and the next one.
        total_retry_timeout_ms: Wall-clock deadline for the whole
            evaluation, measured from the start of ``execute``. Attempts
            that block still count against it.
        page_wait_timeout_ms: Budget handed to the browser's page-readiness
            check on every iteration. 0 means "check once, do not wait".
    """

    retry_delay_ms: int = 100
    total_retry_timeout_ms: int = 2000
    page_wait_timeout_ms: int = 0

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ChainArgumentError(
                    f"{f.name} must be a non-negative integer, got {value!r}"
                )

    def to_dict(self) -> dict[str, int]:
        """Serialize to a plain dictionary (JSON-safe)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ChainOptions:
        """Build options from a plain dictionary.

        Unknown keys are ignored so that a host configuration section can
        be passed through as-is. Numeric strings are converted; every other
        value goes to the constructor unchanged and is validated there.
        """
        if not data:
            return cls()
        valid = {f.name for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in valid:
                continue
            if isinstance(value, str):
                try:
                    value = int(value)
                except ValueError:
                    raise ChainArgumentError(
                        f"{key} must be an integer number of milliseconds, got {value!r}"
                    ) from None
            kwargs[key] = value
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: str, section: str | None = None) -> ChainOptions:
        """Load options from a YAML or JSON file.

        Args:
            path: File to read. ``.json`` is parsed natively; anything else
                is treated as YAML and requires PyYAML.
            section: Optional top-level key holding the options mapping.
        """
        file_path = Path(path)

        if file_path.suffix == ".json":
            with open(file_path) as fh:
                data = json.load(fh)
        else:
            try:
                import yaml  # type: ignore[import-untyped]
            except ImportError:
                raise RuntimeError(
                    f"PyYAML is required to load '{file_path.name}'. "
                    "Install with: pip install pyyaml"
                ) from None

            with open(file_path) as fh:
                data = yaml.safe_load(fh) or {}

        if section is not None:
            data = data.get(section) or {}
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, base: ChainOptions | None = None) -> ChainOptions:
        """Overlay ``WEBCHAIN_*`` environment variables onto *base*.

        Recognised variables:
            WEBCHAIN_RETRY_DELAY_MS
            WEBCHAIN_TOTAL_RETRY_TIMEOUT_MS
            WEBCHAIN_PAGE_WAIT_TIMEOUT_MS
        """
        options = base or cls()
        overrides: dict[str, int] = {}
        for env_name, field_name in _ENV_FIELDS.items():
            raw = os.environ.get(env_name)
            if raw is None or raw.strip() == "":
                continue
            try:
                overrides[field_name] = int(raw)
            except ValueError:
                raise ChainArgumentError(
                    f"{env_name} must be an integer number of milliseconds, got {raw!r}"
                ) from None
        if not overrides:
            return options
        return dataclasses.replace(options, **overrides)

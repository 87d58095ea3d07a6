from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

RUBY_ENV = "RUBYAST_RUBY"
TIMEOUT_ENV = "RUBYAST_TIMEOUT"
NUMBERED_PARAMS_ENV = "RUBYAST_NUMBERED_PARAMS"

DEFAULT_TIMEOUT = 60.0
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class FrontendConfig:
    """Settings for the Ripper subprocess and the rewriter."""

    ruby: str = "ruby"
    timeout: Optional[float] = DEFAULT_TIMEOUT
    numbered_params: bool = True

    @classmethod
    def from_env(cls) -> FrontendConfig:
        return cls(
            ruby=_ruby_from_env(),
            timeout=_timeout_from_env(),
            numbered_params=_flag_from_env(NUMBERED_PARAMS_ENV, True),
        )

    def with_overrides(self, **overrides: object) -> FrontendConfig:
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self


def _ruby_from_env() -> str:
    raw = os.getenv(RUBY_ENV)
    if raw is None or not raw.strip():
        return "ruby"
    return raw.strip()


def _timeout_from_env() -> Optional[float]:
    raw = os.getenv(TIMEOUT_ENV)
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw.strip())
    except ValueError:
        return DEFAULT_TIMEOUT
    # 0 disables the limit
    return value if value > 0 else None


def _flag_from_env(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.strip().lower() not in _FALSY

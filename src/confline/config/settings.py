"""Runtime settings for the confline CLI itself.

These settings shape how a service's commands load their configuration; they
are not part of any service configuration file.

Priority chain (highest to lowest):
  1. Init kwargs  : CLI flags passed by Click
  2. Env vars     : ``CONFLINE_*`` prefix
  3. Code defaults
"""

from __future__ import annotations

from typing import Any

from pydantic_settings import BaseSettings


class RuntimeSettings(BaseSettings):
    """Flags and environment knobs shared by every command of a service.

    Attributes:
        override_prefix: Namespace for override keys (``dw.server.port``).
        stdin_marker: Location that means "read the configuration from stdin".
        json_output: Report configuration errors as JSON.
        verbose: Include error codes and source locations in reports.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CONFLINE_",
    }

    override_prefix: str = "dw"
    stdin_marker: str = "-"
    json_output: bool = False
    verbose: bool = False

    @classmethod
    def from_cli(cls, **cli_flags: Any) -> RuntimeSettings:
        """Construct settings from a CLI invocation.

        Flags left at ``None`` fall through to the environment and defaults.
        """
        return cls(**{key: value for key, value in cli_flags.items() if value is not None})

"""Configuration models for ssg-cache."""

from __future__ import annotations

from collections.abc import Mapping
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Serverless builds (Vercel) only allow writes under /tmp
_RESTRICTED_CACHE_DIR = Path("/tmp/.ssg-cache")
_DEFAULT_CACHE_SUBPATH = Path(".cache") / "ssg-cache"


class CacheConfig(BaseModel):
    """Cache behavior configuration.

    Per-instance settings; per-call behavior lives in CacheOptions.
    """

    model_config = ConfigDict(extra="ignore")  # Forward compatibility

    cache_dir: Path | None = Field(
        default=None,
        description="Cache root directory (None = derive from environment)",
    )
    build_id_filename: str = Field(default="BUILD_ID", min_length=1)
    cache_subdir: str = Field(default="cache", min_length=1)

    max_wait_seconds: float = Field(
        default=60.0, gt=0.0, description="Ceiling on waiting for another producer"
    )
    watch_interval_seconds: float = Field(
        default=0.25, gt=0.0, description="Status-file stat polling interval (persistent mode)"
    )
    poll_interval_seconds: float = Field(
        default=0.05, gt=0.0, description="Status polling interval (memory mode)"
    )
    reclaim_stale_pending: bool = Field(
        default=True,
        description="After max_wait_seconds on a PENDING key, produce instead of failing",
    )

    retry_attempts: int = Field(default=5, ge=1, description="Total attempts per get()")
    retry_delay_seconds: float = Field(default=0.1, ge=0.0, description="Delay between attempts")

    use_lock_files: bool = Field(
        default=False, description="Hold a per-key lock file while producing (persistent mode)"
    )
    lock_timeout_seconds: float = Field(
        default=60.0, gt=0.0, description="Ceiling on waiting for another lock holder"
    )
    lock_poll_interval_seconds: float = Field(default=0.05, gt=0.0)

    def resolved_cache_dir(self, env: Mapping[str, str] | None = None) -> Path:
        """Return the absolute cache root.

        Precedence: explicit ``cache_dir``, ``SSG_CACHE_DIR``, ``/tmp`` on
        Vercel (``VERCEL=1``), then ``.cache/ssg-cache`` under the working
        directory.

        Args:
            env: Environment mapping (defaults to os.environ)
        """
        env = os.environ if env is None else env

        if self.cache_dir is not None:
            return Path(self.cache_dir).expanduser().resolve()
        if env.get("SSG_CACHE_DIR"):
            return Path(env["SSG_CACHE_DIR"]).expanduser().resolve()
        if env.get("VERCEL") == "1":
            return _RESTRICTED_CACHE_DIR
        return (Path.cwd() / _DEFAULT_CACHE_SUBPATH).resolve()

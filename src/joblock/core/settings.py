"""Runtime settings loader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from joblock.core.models import JobOptions
from joblock.utils.env import get_str_env


def _default_redis_url() -> str:
    return os.getenv("REDIS_URL", "redis://localhost:6379/0")


class LockSettings(BaseModel):
    redis_url: str = Field(default_factory=_default_redis_url)
    namespace: str = Field(default="lock", min_length=1)
    jobs: Dict[str, JobOptions] = Field(default_factory=dict)

    def options_for(self, job_name: str, override: Optional[JobOptions] = None) -> JobOptions:
        """Options for a job: explicit override, then the settings file, then defaults."""
        if override is not None:
            if "namespace" not in override.model_fields_set:
                return override.model_copy(update={"namespace": self.namespace})
            return override
        if job_name in self.jobs:
            return self.jobs[job_name]
        return JobOptions(namespace=self.namespace)

    @classmethod
    def from_file(cls, path: Path) -> "LockSettings":
        data = yaml.safe_load(path.read_text()) or {}
        namespace = data.get("namespace")
        # Jobs inherit the top-level namespace unless they set their own.
        if namespace:
            for options in (data.get("jobs") or {}).values():
                if isinstance(options, dict):
                    options.setdefault("namespace", namespace)
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid lock settings: {exc}") from exc

    @classmethod
    def from_env(cls) -> "LockSettings":
        return cls(
            redis_url=_default_redis_url(),
            namespace=get_str_env("JOBLOCK_NAMESPACE", default="lock"),
        )

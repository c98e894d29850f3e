"""Lock key derivation.

Keys look like ``lock:<job name>:<identifier>`` and loner keys prefix that
with ``loner:``. A job may override any of the three builders; an identifier
override returning ``None`` (or an empty string) drops the segment so every
instance of the job shares a single lock.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from joblock.core.models import JobType

SEPARATOR = ":"
IDENTIFIER_SEPARATOR = "-"
LONER_PREFIX = "loner"


def _compact_join(parts: Iterable[Optional[str]]) -> str:
    return SEPARATOR.join(part for part in parts if part)


def default_identifier(*args: Any) -> str:
    return IDENTIFIER_SEPARATOR.join(str(arg) for arg in args)


def identifier(job: JobType, *args: Any) -> Optional[str]:
    if job.keys.identifier is not None:
        return job.keys.identifier(*args)
    return default_identifier(*args)


def lock_key(job: JobType, *args: Any) -> str:
    if job.keys.lock_key is not None:
        return str(job.keys.lock_key(*args))
    return _compact_join([job.options.namespace, job.name, identifier(job, *args)])


def loner_key(job: JobType, *args: Any) -> str:
    if job.keys.loner_key is not None:
        return str(job.keys.loner_key(*args))
    return _compact_join([LONER_PREFIX, lock_key(job, *args)])

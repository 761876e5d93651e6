from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Protocol

import orjson
from pydantic import BaseModel, ConfigDict

from snapdiff.context import RunContext
from snapdiff.errors import ReferenceNotFoundError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._\- ]")


def sanitize_filename(name: str) -> str:
    return _UNSAFE_CHARS.sub("", name).replace(" ", "_")


class ReferenceKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    test_name: str
    identifier: str
    viewport: tuple[int, int]

    @property
    def viewport_string(self) -> str:
        return f"{self.viewport[0]}x{self.viewport[1]}"

    @property
    def image_name(self) -> str:
        return f"{self.identifier}---{self.viewport_string}"

    @property
    def file_stem(self) -> str:
        return sanitize_filename(self.image_name)

    def relative_dir(self) -> Path:
        parts = [sanitize_filename(p) for p in re.split(r"[\\/]", self.test_name) if p.strip()]
        return Path(*parts, self.viewport_string)


class ReferenceStore(Protocol):
    def exists(self, key: ReferenceKey) -> bool: ...

    def load(self, key: ReferenceKey) -> bytes: ...

    def save(self, key: ReferenceKey, data: bytes) -> None: ...


class ArtifactSink(Protocol):
    def write_failure(
        self,
        key: ReferenceKey,
        candidate_png: bytes,
        diff_png: bytes | None,
        summary: dict[str, Any],
    ) -> None: ...

    def write_temporary(self, key: ReferenceKey, data: bytes) -> Path: ...

    def purge_temporary(self) -> int: ...


class FilesystemReferenceStore:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, key: ReferenceKey) -> Path:
        return self.root / key.relative_dir() / f"{key.file_stem}.png"

    def exists(self, key: ReferenceKey) -> bool:
        return self.path_for(key).is_file()

    def load(self, key: ReferenceKey) -> bytes:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise ReferenceNotFoundError(f"No reference image at {path}") from e

    def save(self, key: ReferenceKey, data: bytes) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Stored reference image", extra={"path": str(path)})


class FilesystemArtifactSink:
    """Writes failure artifacts under ``root/<run-id>/`` and scratch files under ``root/debug``."""

    def __init__(self, root: str | Path, context: RunContext) -> None:
        self.root = Path(root)
        self.context = context

    @property
    def run_dir(self) -> Path:
        return self.root / self.context.run_id

    @property
    def temp_dir(self) -> Path:
        return self.root / "debug"

    def failure_path(self, key: ReferenceKey, suffix: str = "fail") -> Path:
        return self.run_dir / key.relative_dir() / f"{suffix}.{key.file_stem}.png"

    def summary_path(self, key: ReferenceKey) -> Path:
        return self.run_dir / key.relative_dir() / f"summary.{key.file_stem}.json"

    def temp_path(self, key: ReferenceKey) -> Path:
        name = f"{self.context.run_id}.{key.viewport_string}.{key.file_stem}.png"
        return self.temp_dir / name

    def write_failure(
        self,
        key: ReferenceKey,
        candidate_png: bytes,
        diff_png: bytes | None,
        summary: dict[str, Any],
    ) -> None:
        fail_path = self.failure_path(key, "fail")
        fail_path.parent.mkdir(parents=True, exist_ok=True)
        fail_path.write_bytes(candidate_png)
        if diff_png is not None:
            self.failure_path(key, "diff").write_bytes(diff_png)
        self.summary_path(key).write_bytes(
            orjson.dumps(summary, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)
        )
        logger.info(
            "Wrote failure artifacts for %s",
            key.image_name,
            extra={"run_id": self.context.run_id, "path": str(fail_path.parent)},
        )

    def write_temporary(self, key: ReferenceKey, data: bytes) -> Path:
        path = self.temp_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def purge_temporary(self) -> int:
        if not self.temp_dir.is_dir():
            return 0
        removed = 0
        for path in self.temp_dir.glob(f"{self.context.run_id}.*.png"):
            path.unlink(missing_ok=True)
            removed += 1
        return removed


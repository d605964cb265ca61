"""Core domain models.

The operation modules, the batch executor and the presentation layer all
exchange these types. Pydantic is used for validation at every data boundary
(config file, batch outcomes, process status).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ContentType = Literal["character", "world", "theme", "preset", "template"]

LinkOutcome = Literal["created", "already-linked", "replaced", "skipped"]

LinkPolicy = Literal["replace-all", "skip"]

SUCCESS = "success"


class AdminConfig(BaseModel):
    """Immutable tool configuration, built once at startup and passed around."""

    model_config = ConfigDict(frozen=True)

    st_root: Path
    data_root: Path
    scaffold_dir: Path
    content_dir: Path
    backup_root: Path
    exclude_dirs: tuple[str, ...] = ("default", "_storage")
    server_port: int = 8000
    pm2_name: str = "sillytavern"
    dry_run: bool = False

    @model_validator(mode="before")
    @classmethod
    def _derive_data_paths(cls, data: Any) -> Any:
        """Fill scaffold/content/backup dirs from data_root when absent."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        root = data.get("data_root")
        if root:
            root = Path(root)
            data.setdefault("scaffold_dir", root / "default" / "scaffold")
            data.setdefault("content_dir", root / "default" / "content")
            data.setdefault("backup_root", root / "_admin-backups")
        return data

    @field_validator("st_root", "data_root", "scaffold_dir", "content_dir", "backup_root", mode="before")
    @classmethod
    def _not_empty(cls, value: Any) -> Any:
        if value is None or not str(value).strip():
            raise ValueError("path is required")
        return value


class Skip(BaseModel):
    """Returned by a per-user operation that chose not to act."""

    reason: str


class SkippedUnit(BaseModel):
    handle: str
    reason: str


class FailedUnit(BaseModel):
    handle: str
    error: str


class BatchReport(BaseModel):
    """Classified outcome of one batch run, in processing order."""

    label: str = ""
    succeeded: list[str] = Field(default_factory=list)
    skipped: list[SkippedUnit] = Field(default_factory=list)
    failed: list[FailedUnit] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.skipped) + len(self.failed)


class UserStats(BaseModel):
    character_count: int = 0
    chat_dir_count: int = 0
    world_count: int = 0
    has_settings: bool = False


class ServerStatus(BaseModel):
    status: str = "unknown"
    uptime: str = "unknown"
    restarts: str = "unknown"


class RestartResult(BaseModel):
    success: bool
    message: str

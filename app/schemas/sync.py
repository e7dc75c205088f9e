"""Structured result of one migration sync run."""

from typing import List, Literal

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

SyncMode = Literal["auto", "baseline"]

MAX_ERROR_DETAILS = 5


class SyncReport(BaseModel):
    """Counters for a run; serialized with camelCase keys for trigger callers."""

    success: bool = True
    message: str = ""
    imported: int = 0
    updated: int = 0
    errors: int = 0
    checked: int = 0
    new: int = 0
    skipped_existing: int = 0
    skipped_too_old: int = 0
    slug_conflicts: int = 0
    error_details: List[str] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def add_error(self, detail: str) -> None:
        self.errors += 1
        if len(self.error_details) < MAX_ERROR_DETAILS:
            self.error_details.append(detail)

    def summarize(self) -> str:
        if self.imported > 0:
            return f"Sync completed: imported {self.imported} tokens"
        return (
            f"Sync completed: found {self.new} new tokens but imported 0 "
            f"({self.skipped_existing} already exist, {self.skipped_too_old} too old, {self.errors} errors)"
        )

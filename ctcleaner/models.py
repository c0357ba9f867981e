from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class CleanOptions(BaseModel):
    repair: bool = False
    compact: bool = False
    linear_lua: bool = False
    remove_extra_spaces: bool = False
    remove_signature: bool = False
    remove_structures: bool = False
    remove_user_defined_symbols: bool = False
    no_linear_xml: bool = False

    @classmethod
    def full(cls, **overrides: bool) -> "CleanOptions":
        """Every cleanup except signature removal and indented output."""
        values = {
            "repair": True,
            "compact": True,
            "linear_lua": True,
            "remove_extra_spaces": True,
            "remove_structures": True,
            "remove_user_defined_symbols": True,
        }
        values.update({k: v for k, v in overrides.items() if v})
        return cls(**values)


class CleanedTable(BaseModel):
    sha256: str
    encoding: str = Field(default="utf-8")
    content_b64: str


class ReportSummary(BaseModel):
    ids_renumbered: int = 0
    elements_removed: int = 0
    scripts_linearized: int = 0
    warnings: int = 0
    deterministic: bool = True


class ReportItem(BaseModel):
    element: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str


class CleanReport(BaseModel):
    summary: ReportSummary
    steps: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[ReportItem] = Field(default_factory=list)


class CleanResponse(BaseModel):
    cleaned_table: CleanedTable
    report: CleanReport

class HealthResponse(BaseModel):
    ok: bool = True

"""Generation engine: scan, render, plan and write barrel files.

Modules:
    entities: module/scan value types
    globs: directory and entry-name glob matching
    listing: directory listing capability (os + in-memory)
    scanner: rule expansion and module selection
    naming: namespace identifiers and collision checks
    renderer: barrel text rendering
    header: ownership header
    action: Create/Update/Skip/Conflict actions
    writer: ownership check, diff and write
    cache: persistent scan cache
    extensions: extension mode detection from tsconfig.json
    planner: plan/execute across all rules
    formatter: external formatter detection and invocation
    doctor: project health checks
"""

from .action import Action, Conflict, Create, Skip, Update, match_action
from .entities import ModuleEntry, ScanResult
from .extensions import detect_extension_mode
from .header import HEADER_LINE, is_owned
from .planner import PlanError, PlanResult, execute, plan, plan_with_cache
from .renderer import render_barrel

__all__ = [
    "Action",
    "Conflict",
    "Create",
    "HEADER_LINE",
    "ModuleEntry",
    "PlanError",
    "PlanResult",
    "ScanResult",
    "Skip",
    "Update",
    "detect_extension_mode",
    "execute",
    "is_owned",
    "match_action",
    "plan",
    "plan_with_cache",
    "render_barrel",
]

"""
org-chart-layout: Build, lay out and export organization charts.

This package turns flat employee records into an ordered forest and fits the
rendered chart onto a fixed export canvas.

Main components:
- hierarchy: Ordered forest from employees linked by manager id
- scaling: Fit-to-canvas scale factor for measured content
- layout: Tidy box-per-node layout that measures the chart
- export: SVG and DOT output
- repository: Load/save of settings, levels and employees
- csv_import: Employee lists from CSV files
"""

__version__ = "0.1.0"

# CSV import
from .csv_import import (
    EMPLOYEE_CSV_TEMPLATE,
    CsvImportError,
    EmployeeRow,
    parse_employee_csv,
    resolve_import,
)

# Hierarchy builder
from .hierarchy import (
    ForestStats,
    HiddenEmployeeWarning,
    build_forest,
    forest_stats,
    hidden_employees,
    iter_forest,
    level_order_map,
)

# Layout
from .layout import Connector, NodeBox, OrgChartLayout

# Storage
from .repository import (
    InMemoryRepository,
    JsonFileRepository,
    OrgState,
    Repository,
    RepositoryError,
)

# Fit-to-canvas scaling
from .scaling import (
    DEFAULT_MARGIN,
    SAFETY_FACTOR,
    CanvasFit,
    ChartMeasurement,
    StaleMeasurementError,
    apply_measurement,
    compute_scale,
    fit_to_canvas,
    forest_revision,
    resolve_canvas_size,
)
from .types import (
    CanvasLike,
    CanvasSize,
    Employee,
    EmployeeLike,
    Event,
    EventType,
    Level,
    LevelLike,
    OrgSettings,
    SettingsLike,
    SizeType,
    TreeNode,
)

# Validation utilities
from .validation import (
    InvalidCanvasSizeError,
    InvalidEmployeeError,
    InvalidLevelError,
    InvalidMarginError,
    ValidationError,
    validate_canvas_size,
    validate_employees,
    validate_level_references,
    validate_levels,
    validate_margin,
)

__all__ = [
    # Version
    "__version__",
    # Shared types
    "Level",
    "Employee",
    "TreeNode",
    "OrgSettings",
    "CanvasSize",
    "EventType",
    "Event",
    # Type aliases for API
    "EmployeeLike",
    "LevelLike",
    "SettingsLike",
    "SizeType",
    "CanvasLike",
    # Hierarchy builder
    "build_forest",
    "level_order_map",
    "iter_forest",
    "hidden_employees",
    "forest_stats",
    "ForestStats",
    "HiddenEmployeeWarning",
    # Scaling
    "SAFETY_FACTOR",
    "DEFAULT_MARGIN",
    "compute_scale",
    "fit_to_canvas",
    "resolve_canvas_size",
    "forest_revision",
    "apply_measurement",
    "CanvasFit",
    "ChartMeasurement",
    "StaleMeasurementError",
    # Layout
    "OrgChartLayout",
    "NodeBox",
    "Connector",
    # Storage
    "OrgState",
    "Repository",
    "InMemoryRepository",
    "JsonFileRepository",
    "RepositoryError",
    # CSV import
    "EMPLOYEE_CSV_TEMPLATE",
    "EmployeeRow",
    "parse_employee_csv",
    "resolve_import",
    "CsvImportError",
    # Validation
    "ValidationError",
    "InvalidCanvasSizeError",
    "InvalidMarginError",
    "InvalidEmployeeError",
    "InvalidLevelError",
    "validate_canvas_size",
    "validate_margin",
    "validate_employees",
    "validate_levels",
    "validate_level_references",
]

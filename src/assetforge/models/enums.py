from enum import Enum


class AssetStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    RETIRED = "Retired"


class Criticality(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class Condition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    CRITICAL = "Critical"


class VersionStatus(str, Enum):
    PLANNED = "Planned"
    LIVE = "Live"
    SUPERSEDED = "Superseded"


class MaintenanceStatus(str, Enum):
    CURRENT = "Current"
    DUE_SOON = "Due Soon"
    OVERDUE = "Overdue"


class Transition(str, Enum):
    CREATE_PLANNED = "CreatePlanned"
    ACTIVATE_PLANNED = "ActivatePlanned"
    SUPERSEDE = "Supersede"

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from typing import Optional, List, Literal, get_args

from utils.logger import get_logger

logger = get_logger("models")

VALID_PARENT_TYPES = ("objective", "outcome", "bet")
ROADMAP_STATUSES = ("now", "near", "next")

MetricLevel = Literal["executive", "management", "team"]
MetricType = Literal["business", "product"]
Timeframe = Literal["leading", "lagging"]
ContributionType = Literal["direct", "weighted", "formula"]
MetricStatus = Literal["todo", "in_progress", "done", "blocked"]
RoadmapStatus = Literal["now", "near", "next"]

# Closed vocabularies of the metric fields; values outside them load as None
METRIC_CHOICES = {
    "level": get_args(MetricLevel),
    "metric_type": get_args(MetricType),
    "timeframe": get_args(Timeframe),
    "contribution_type": get_args(ContributionType),
    "status": get_args(MetricStatus),
}

LEVEL_BY_PARENT_TYPE = {
    "objective": "executive",
    "outcome": "management",
    "bet": "team",
}


class Record(BaseModel):
    # Store rows carry columns we don't model
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Team(Record):
    id: str
    name: str
    color: Optional[str] = None


class Objective(Record):
    id: str
    title: str
    description: Optional[str] = None
    team_id: str
    is_public: bool = True
    executive_summary: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class _StagedItem(Record):
    id: str
    title: str
    description: Optional[str] = None
    team_id: str
    status: RoadmapStatus = "now"
    is_public: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        """Unknown or missing statuses fall back to 'now'."""
        status = str(value).lower() if value else "now"
        return status if status in ROADMAP_STATUSES else "now"


class Outcome(_StagedItem):
    objective_id: Optional[str] = None
    management_summary: Optional[str] = None


class Bet(_StagedItem):
    outcome_id: str
    team_summary: Optional[str] = None


class Metric(Record):
    """A quantified measurement attached to a business item and/or a parent metric.

    ``parent_type`` is kept as a free string so malformed ownership survives
    loading and can be reported by the diagnostics rather than rejected.
    ``child_metrics`` and ``parent_metric_id`` are stored independently and
    may disagree.
    """

    id: str
    name: str = ""
    description: Optional[str] = None
    unit: Optional[str] = None
    current_value: Optional[float] = None
    target_value: Optional[float] = None
    level: Optional[MetricLevel] = None
    metric_type: Optional[MetricType] = Field(default=None, alias="metricType")
    timeframe: Optional[Timeframe] = None
    is_north_star: bool = Field(default=False, alias="isNorthStar")
    parent_type: Optional[str] = None
    parent_id: Optional[str] = None
    parent_metric_id: Optional[str] = None
    child_metrics: Optional[List[str]] = None
    contribution_type: Optional[ContributionType] = None
    weight: Optional[float] = None
    formula: Optional[str] = None
    status: Optional[MetricStatus] = None
    team_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, value):
        return "" if value is None else value

    @field_validator(*METRIC_CHOICES, mode="before")
    @classmethod
    def normalize_choice(cls, value, info: ValidationInfo):
        """Unknown vocabulary values are dropped instead of rejecting the row."""
        if value is None or value == "":
            return None
        choice = str(value).lower()
        if choice in METRIC_CHOICES[info.field_name]:
            return choice
        logger.warning(f"Ignoring unknown {info.field_name} {value!r} on metric")
        return None

    @field_validator("current_value", "target_value", "weight", mode="before")
    @classmethod
    def normalize_number(cls, value, info: ValidationInfo):
        if value is None or value == "":
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric {info.field_name} {value!r} on metric")
            return None
        if info.field_name == "weight" and number < 0:
            logger.warning(f"Ignoring negative weight {value!r} on metric")
            return None
        return number

    def field_value(self, field: str) -> Optional[float]:
        if field == "current":
            return self.current_value
        if field == "target":
            return self.target_value
        raise ValueError(f"Unknown metric value field: {field!r}")

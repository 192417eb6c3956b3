from __future__ import annotations

import calendar
import datetime as _dt
from dataclasses import dataclass, field
from typing import Any

import yaml

from .project_models import PROJECT_STATUSES, EngineSettings, PhaseDurationConfig, ScheduledProject
from .scheduling import ProjectValidationError, schedule_project
from .templates import LaunchTemplate, get_template

_WEEKDAYS = {name.lower(): idx for idx, name in enumerate(calendar.day_name)}
_PRIORITIES = {"low", "medium", "high", "critical"}


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable YAML path strings like projects[0].phases[1]."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


@dataclass
class Portfolio:
    """Everything read from a portfolio file: settings, extra templates and scheduled projects."""

    settings: EngineSettings = field(default_factory=EngineSettings)
    templates: dict[str, LaunchTemplate] = field(default_factory=dict)
    projects: list[ScheduledProject] = field(default_factory=list)


def load_portfolio(path: str) -> Portfolio:
    """Load and schedule every project in the YAML file at the given path."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    return parse_portfolio(raw)


def parse_portfolio(data: Any) -> Portfolio:
    path = _Path()
    if not isinstance(data, dict):
        raise ProjectValidationError(f"{path}: expected mapping at top level")
    _assert_allowed_keys(data, {"settings", "templates", "projects"}, path)

    settings = parse_settings(data.get("settings"), path.child("settings"))

    templates_raw = data.get("templates") or []
    if not isinstance(templates_raw, list):
        raise ProjectValidationError(f"{path}.templates: expected list")
    templates: dict[str, LaunchTemplate] = {}
    for idx, template_raw in enumerate(templates_raw):
        template = _parse_template(template_raw, path.child(f"templates[{idx}]"))
        if template.id in templates:
            raise ProjectValidationError(f"{path}.templates[{idx}]: duplicate template id '{template.id}'")
        templates[template.id] = template

    projects_raw = data.get("projects")
    if projects_raw is None:
        raise ProjectValidationError(f"{path}: missing required field 'projects'")
    if not isinstance(projects_raw, list):
        raise ProjectValidationError(f"{path}.projects: expected list")

    ids: set[str] = set()
    projects: list[ScheduledProject] = []
    for idx, project_raw in enumerate(projects_raw):
        projects.append(_parse_project(project_raw, path.child(f"projects[{idx}]"), ids, templates))

    return Portfolio(settings=settings, templates=templates, projects=projects)


def parse_settings(data: Any, path: _Path = _Path(("settings",))) -> EngineSettings:
    """Build EngineSettings from an optional mapping; missing keys keep their defaults."""

    if data is None:
        return EngineSettings()
    if not isinstance(data, dict):
        raise ProjectValidationError(f"{path}: expected mapping")
    _assert_allowed_keys(
        data,
        {
            "week_start",
            "upcoming_horizon_days",
            "timeline_padding_days",
            "min_bar_width_percent",
            "label_stride_days",
        },
        path,
    )

    kwargs: dict[str, Any] = {}
    if "week_start" in data:
        kwargs["week_start"] = parse_weekday(data["week_start"], path.child("week_start"))
    for key in ("upcoming_horizon_days", "timeline_padding_days", "label_stride_days"):
        if key in data:
            kwargs[key] = _require_int(data[key], path.child(key), minimum=0 if key == "timeline_padding_days" else 1)
    if "min_bar_width_percent" in data:
        value = data["min_bar_width_percent"]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ProjectValidationError(f"{path.child('min_bar_width_percent')}: expected non-negative number")
        kwargs["min_bar_width_percent"] = float(value)
    return EngineSettings(**kwargs)


def parse_weekday(value: Any, path: _Path | str = "week_start") -> int:
    """Accept a weekday name ('sunday') or calendar number (MONDAY=0 .. SUNDAY=6)."""
    if isinstance(value, str) and value.strip().lower() in _WEEKDAYS:
        return _WEEKDAYS[value.strip().lower()]
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 6:
        return value
    raise ProjectValidationError(f"{path}: expected weekday name or number 0-6")


def _parse_template(data: Any, path: _Path) -> LaunchTemplate:
    if not isinstance(data, dict):
        raise ProjectValidationError(f"{path}: expected mapping for template")
    _assert_allowed_keys(data, {"id", "name", "description", "phases"}, path)
    template_id = _require_str(data, "id", path)
    name = _require_str(data, "name", path)
    description = _optional_str(data, "description", path)
    phases = _parse_phases(_require_value(data, "phases", path), path)
    return LaunchTemplate(id=template_id, name=name, description=description, phases=tuple(phases))


def _parse_project(
    data: Any, path: _Path, ids: set[str], templates: dict[str, LaunchTemplate]
) -> ScheduledProject:
    if not isinstance(data, dict):
        raise ProjectValidationError(f"{path}: expected mapping for project")

    _assert_allowed_keys(
        data,
        {
            "id",
            "name",
            "anchor_date",
            "status",
            "created_at",
            "client",
            "description",
            "priority",
            "budget",
            "tags",
            "template",
            "phases",
        },
        path,
    )
    project_id = _require_str(data, "id", path)
    if project_id in ids:
        raise ProjectValidationError(f"{path.child('id')}: duplicate project id '{project_id}'")
    ids.add(project_id)

    name = _require_str(data, "name", path)
    anchor_date = _parse_date(_require_value(data, "anchor_date", path), path.child("anchor_date"))

    status = data.get("status", "planning")
    if status not in PROJECT_STATUSES:
        raise ProjectValidationError(f"{path.child('status')}: expected one of {list(PROJECT_STATUSES)}")

    created_at = None
    if data.get("created_at") is not None:
        created_at = _parse_date(data["created_at"], path.child("created_at"))

    priority = data.get("priority")
    if priority is not None and (not isinstance(priority, str) or priority not in _PRIORITIES):
        raise ProjectValidationError(f"{path.child('priority')}: expected one of {sorted(_PRIORITIES)}")

    budget = data.get("budget")
    if budget is not None and (isinstance(budget, bool) or not isinstance(budget, (int, float)) or budget < 0):
        raise ProjectValidationError(f"{path.child('budget')}: expected non-negative number")

    tags_raw = data.get("tags") or []
    if not isinstance(tags_raw, list) or not all(isinstance(tag, str) for tag in tags_raw):
        raise ProjectValidationError(f"{path.child('tags')}: expected list of strings")

    has_template = "template" in data
    has_phases = "phases" in data
    if has_template and has_phases:
        raise ProjectValidationError(f"{path}: choose either template or phases, not both")
    if has_phases:
        phases = _parse_phases(data["phases"], path)
    else:
        template_id = data.get("template", "default")
        if not isinstance(template_id, str):
            raise ProjectValidationError(f"{path.child('template')}: expected string")
        try:
            phases = list(get_template(template_id, templates).phases)
        except KeyError as exc:
            raise ProjectValidationError(f"{path.child('template')}: {exc.args[0]}") from exc

    return schedule_project(
        project_id,
        name,
        anchor_date,
        phases,
        status=status,
        created_at=created_at,
        client=_optional_str(data, "client", path),
        description=_optional_str(data, "description", path),
        priority=priority,
        budget=None if budget is None else float(budget),
        tags=list(tags_raw),
    )


def _parse_phases(data: Any, path: _Path) -> list[PhaseDurationConfig]:
    if not isinstance(data, list):
        raise ProjectValidationError(f"{path}.phases: expected list")

    keys: set[str] = set()
    phases: list[PhaseDurationConfig] = []
    for idx, phase_raw in enumerate(data):
        item_path = path.child(f"phases[{idx}]")
        if not isinstance(phase_raw, dict):
            raise ProjectValidationError(f"{item_path}: expected mapping for phase")
        _assert_allowed_keys(phase_raw, {"key", "name", "duration_days", "color"}, item_path)
        key = _require_str(phase_raw, "key", item_path)
        if key in keys:
            raise ProjectValidationError(f"{item_path.child('key')}: duplicate phase key '{key}'")
        keys.add(key)
        duration_days = _require_value(phase_raw, "duration_days", item_path)
        if isinstance(duration_days, bool) or not isinstance(duration_days, int):
            raise ProjectValidationError(f"{item_path.child('duration_days')}: expected integer")
        phases.append(
            PhaseDurationConfig(
                key=key,
                name=_optional_str(phase_raw, "name", item_path) or key,
                duration_days=duration_days,
                color=_optional_str(phase_raw, "color", item_path),
            )
        )
    return phases


def _assert_allowed_keys(data: dict[str, Any], allowed: set[str], path: _Path) -> None:
    extras = sorted(set(data.keys()) - allowed)
    if extras:
        raise ProjectValidationError(f"{path}: unexpected fields {extras}")


def _require_str(data: dict[str, Any], key: str, path: _Path) -> str:
    value = _require_value(data, key, path)
    if not isinstance(value, str) or not value.strip():
        raise ProjectValidationError(f"{path.child(key)}: expected non-empty string")
    return value


def _optional_str(data: dict[str, Any], key: str, path: _Path) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ProjectValidationError(f"{path.child(key)}: expected string")
    return value


def _require_value(data: dict[str, Any], key: str, path: _Path) -> Any:
    if key not in data:
        raise ProjectValidationError(f"{path}: missing required field '{key}'")
    return data[key]


def _require_int(value: Any, path: _Path, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ProjectValidationError(f"{path}: expected integer >= {minimum}")
    return value


def _parse_date(value: Any, path: _Path) -> _dt.date:
    # PyYAML already turns unquoted YYYY-MM-DD scalars into dates.
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    if not isinstance(value, str):
        raise ProjectValidationError(f"{path}: expected YYYY-MM-DD date")
    try:
        return _dt.date.fromisoformat(value)
    except ValueError as exc:
        raise ProjectValidationError(f"{path}: expected YYYY-MM-DD date") from exc

from __future__ import annotations

from gent.config import Config
from gent.models import Issue, Label

DEFAULT_LABELS: dict[str, list[Label]] = {
    "workflow": [
        Label("ai-ready", "0E8A16", "Issue ready for AI implementation"),
        Label("ai-in-progress", "FFA500", "AI currently working on this"),
        Label("ai-completed", "1D76DB", "AI done, needs human review"),
        Label("ai-blocked", "D93F0B", "AI couldn't complete, needs help"),
    ],
    "priority": [
        Label("priority:critical", "B60205", "Blocking production"),
        Label("priority:high", "D93F0B", "Important features/bugs"),
        Label("priority:medium", "FBCA04", "Nice-to-have improvements"),
        Label("priority:low", "0E8A16", "Minor tweaks"),
    ],
    "risk": [
        Label("risk:low", "C2E0C6", "UI changes, tests, non-critical"),
        Label("risk:medium", "FEF2C0", "API changes, new features"),
        Label("risk:high", "F9D0C4", "Migrations, auth, security"),
    ],
    "type": [
        Label("type:feature", "1D76DB", "New feature"),
        Label("type:fix", "D73A4A", "Bug fix"),
        Label("type:refactor", "5319E7", "Code improvement"),
        Label("type:chore", "FEF2C0", "Maintenance"),
        Label("type:docs", "0075CA", "Documentation"),
        Label("type:test", "D4C5F9", "Testing"),
    ],
    "area": [
        Label("area:ui", "C5DEF5", "User interface"),
        Label("area:api", "D4C5F9", "API/Backend"),
        Label("area:database", "FEF2C0", "Database/Models"),
        Label("area:workers", "F9D0C4", "Background workers"),
        Label("area:shared", "C2E0C6", "Shared libraries"),
        Label("area:testing", "E99695", "Test infrastructure"),
        Label("area:infra", "BFD4F2", "Infrastructure/DevOps"),
    ],
}

# Fallback colors for configured values with no built-in label
_CATEGORY_COLORS = {
    "priority": "FBCA04",
    "risk": "FEF2C0",
    "type": "1D76DB",
    "area": "C5DEF5",
}


def workflow_labels(config: Config) -> dict[str, str]:
    """Workflow status -> configured label name, in status priority order."""
    wf = config.labels.workflow
    return {
        "ready": wf.ready,
        "in-progress": wf.in_progress,
        "completed": wf.completed,
        "blocked": wf.blocked,
    }


def _category_labels(category: str, values: tuple[str, ...]) -> list[Label]:
    defaults = {label.name: label for label in DEFAULT_LABELS[category]}
    labels = []
    for value in values:
        name = f"{category}:{value}"
        labels.append(
            defaults.get(name)
            or Label(name, _CATEGORY_COLORS[category], f"{category.title()}: {value}")
        )
    return labels


def all_labels(config: Config) -> list[Label]:
    """Every label the configured workflow expects to exist on the repo."""
    workflow_defaults = DEFAULT_LABELS["workflow"]
    labels = [
        Label(name, default.color, default.description)
        for name, default in zip(workflow_labels(config).values(), workflow_defaults)
    ]
    labels += _category_labels("priority", config.labels.priorities)
    labels += _category_labels("risk", config.labels.risks)
    labels += _category_labels("type", config.labels.types)
    labels += _category_labels("area", config.labels.areas)
    return labels


def workflow_status(labels: tuple[str, ...] | list[str], config: Config) -> str:
    """First workflow status whose label the issue carries, else "none"."""
    for status, name in workflow_labels(config).items():
        if name in labels:
            return status
    return "none"


def issue_labels(meta: dict[str, str], config: Config) -> list[str]:
    """Labels for a new ticket: the ready label plus each known category value.

    Values the configuration does not list are dropped, so a stray value
    from the assistant never creates an unexpected label.
    """
    allowed = {
        "type": config.labels.types,
        "priority": config.labels.priorities,
        "risk": config.labels.risks,
        "area": config.labels.areas,
    }
    labels = [config.labels.workflow.ready]
    for category, values in allowed.items():
        value = meta.get(category)
        if value in values:
            labels.append(f"{category}:{value}")
    return labels


def sort_by_priority(issues: list[Issue], config: Config) -> list[Issue]:
    """Issues ordered by their priority:* label; unlabelled issues go last."""
    order = {f"priority:{p}": i for i, p in enumerate(config.labels.priorities)}

    def rank(issue: Issue) -> int:
        ranks = [order[label] for label in issue.labels if label in order]
        return min(ranks, default=len(order))

    return sorted(issues, key=rank)

"""
Escalation policy: pure logic module.

Maps a report's ``(noise_level, consecutive_days)`` to the ordered list
of responses an administrator may send, each with the status it moves
the report to and the citizen-facing text.  No database access, no
Django imports; identical inputs always give identical output.

Thresholds
----------
┌──────────┬──────────────────────────────────────────────┐
│ Level    │ ``action_required`` offered when             │
├──────────┼──────────────────────────────────────────────┤
│ red      │ consecutive_days >= 3                        │
│ yellow   │ consecutive_days >= 5                        │
│ green    │ never                                        │
└──────────┴──────────────────────────────────────────────┘

``pending`` is never offered as a response; it is the state before any
response was chosen and may be re-entered as a reset.
"""

from __future__ import annotations

from dataclasses import dataclass

PENDING = "pending"
MONITORING = "monitoring"
ACTION_REQUIRED = "action_required"
RESOLVED = "resolved"

RED = "red"
YELLOW = "yellow"
GREEN = "green"

PENDING_RESPONSE_TEXT = "No response sent yet."
PENDING_LABEL = "Reset to Pending"

#: Consecutive-day count at which ``action_required`` becomes available.
ACTION_THRESHOLDS: dict[str, int] = {
    RED: 3,
    YELLOW: 5,
}

STATUS_LABELS: dict[str, str] = {
    MONITORING: "Monitoring",
    ACTION_REQUIRED: "Action Required",
    RESOLVED: "Resolved",
}


@dataclass(frozen=True)
class ResponseOption:
    """One response an administrator can send for a report."""

    status: str
    label: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"status": self.status, "label": self.label, "message": self.message}


def _monitoring_text(noise_level: str, consecutive_days: int) -> str:
    if noise_level == GREEN:
        return (
            "We have received your report. This minor noise is under "
            "observation. The barangay advises communicating with "
            "neighbors to resolve the issue."
        )
    threshold = ACTION_THRESHOLDS[noise_level]
    return (
        "We have received your report. The barangay is monitoring this "
        f"location. Progress: Day {consecutive_days} of {threshold} "
        f"consecutive reports for {noise_level.upper()} noise."
    )


def _action_required_text(noise_level: str) -> str:
    threshold = ACTION_THRESHOLDS[noise_level]
    return (
        f"The noise has been reported for {threshold} consecutive days. "
        "A barangay officer has been assigned to take action."
    )


def _resolved_text(noise_level: str) -> str:
    if noise_level == RED:
        return (
            "Your noise complaint has been resolved. Appropriate action "
            "has been taken by the barangay."
        )
    if noise_level == YELLOW:
        return "Your noise complaint has been resolved. The barangay has addressed the issue."
    return "Advice has been provided to the involved parties. The matter is now closed."


def get_response_options(noise_level: str, consecutive_days: int) -> tuple[ResponseOption, ...]:
    """
    Return the ordered response options for a report.

    Unknown noise levels yield an empty tuple.
    """
    if noise_level not in (RED, YELLOW, GREEN):
        return ()

    options = [
        ResponseOption(
            status=MONITORING,
            label=STATUS_LABELS[MONITORING],
            message=_monitoring_text(noise_level, consecutive_days),
        ),
    ]
    threshold = ACTION_THRESHOLDS.get(noise_level)
    if threshold is not None and consecutive_days >= threshold:
        options.append(
            ResponseOption(
                status=ACTION_REQUIRED,
                label=STATUS_LABELS[ACTION_REQUIRED],
                message=_action_required_text(noise_level),
            )
        )
    options.append(
        ResponseOption(
            status=RESOLVED,
            label=STATUS_LABELS[RESOLVED],
            message=_resolved_text(noise_level),
        )
    )
    return tuple(options)


def allowed_statuses(noise_level: str, consecutive_days: int) -> tuple[str, ...]:
    """Statuses a transition may target: every option plus the pending reset."""
    options = get_response_options(noise_level, consecutive_days)
    return tuple(option.status for option in options) + (PENDING,)


def response_text_for(noise_level: str, consecutive_days: int, status: str) -> str:
    """Citizen-facing text for ``status``; pending (or unknown) gets the placeholder."""
    for option in get_response_options(noise_level, consecutive_days):
        if option.status == status:
            return option.message
    return PENDING_RESPONSE_TEXT


def label_for(status: str) -> str:
    return STATUS_LABELS.get(status, PENDING_LABEL)

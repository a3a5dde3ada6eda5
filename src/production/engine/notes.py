"""Audit notes written to the order log on production milestones."""

from production.outbound.note_port import NotePriority, NoteType, ProductionNote


def step_completed_note(step_title: str, notes: str | None = None) -> ProductionNote:
    content = f'Production step "{step_title}" completed successfully.'
    if notes:
        content += f" Notes: {notes}"
    return ProductionNote(
        note_type=NoteType.PRODUCTION.value,
        title=f"Completed: {step_title}",
        content=content,
        is_internal=True,
    )


def step_blocked_note(step_title: str, reason: str) -> ProductionNote:
    return ProductionNote(
        note_type=NoteType.URGENCY.value,
        title=f"Production Blocked: {step_title}",
        content=f"Production step blocked. Reason: {reason}",
        is_internal=True,
        priority=NotePriority.HIGH.value,
    )


def step_skipped_note(step_title: str, reason: str) -> ProductionNote:
    return ProductionNote(
        note_type=NoteType.PRODUCTION.value,
        title=f"Skipped: {step_title}",
        content=f'Production step "{step_title}" skipped. Reason: {reason}',
        is_internal=True,
    )


def quality_issue_note(description: str) -> ProductionNote:
    return ProductionNote(
        note_type=NoteType.QUALITY.value,
        title="Quality Issue Reported",
        content=description,
        is_internal=True,
        priority=NotePriority.HIGH.value,
    )


def workflow_abandoned_note(reason: str) -> ProductionNote:
    return ProductionNote(
        note_type=NoteType.URGENCY.value,
        title="Production Abandoned",
        content=f"Production stopped before completion. Reason: {reason}",
        is_internal=True,
        priority=NotePriority.HIGH.value,
    )

"""
Celery tasks for the LumaProd production pipeline.

Notification Tasks:
- send_creator_assignment_email: Batched "new scripts assigned" email
- send_creator_rejection_email: "Video needs re-recording" email

Generation Tasks:
- generate_avatar_videos_for_month: Bulk HeyGen submission
- reconcile_generation_logs: Periodic sweep of unsettled attempts

Scheduling Tasks:
- auto_assign_next_month: Monthly auto-assignment for every mode
"""

from lumaprod.workers.tasks.assignment import auto_assign_next_month
from lumaprod.workers.tasks.generation import (
    generate_avatar_videos_for_month,
    reconcile_generation_logs,
)
from lumaprod.workers.tasks.notifications import (
    send_creator_assignment_email,
    send_creator_rejection_email,
)

__all__ = [
    # Notification tasks
    "send_creator_assignment_email",
    "send_creator_rejection_email",
    # Generation tasks
    "generate_avatar_videos_for_month",
    "reconcile_generation_logs",
    # Scheduling tasks
    "auto_assign_next_month",
]

# Supabase tables: tasks (reminder_sent flag), notifications
# This file documents the expected database schema

"""
The reminder batch reads and flips tasks.reminder_sent (see tasks/models.py).

notifications (written by the inbox reminder channel):
- id: uuid (primary key)
- user_id: uuid (not null) - recipient
- content: text (not null)
- type: text (not null) - values: mention, comment, task_assignment, task_update, team_invite
- is_read: boolean (default: false)
- related_task_id: uuid (nullable)
- related_comment_id: uuid (nullable)
- related_team_id: uuid (nullable)
- actor_id: uuid (nullable)
- created_at: timestamp (default: now())
"""

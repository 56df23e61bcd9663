# Supabase table: task_history
# This file documents the expected database schema
# Rows are written by database triggers on tasks; this service only reads them

"""
Expected Supabase table structure:

task_history:
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, not null, on delete cascade)
- team_id: uuid (nullable) - copied from the task for team activity feeds
- user_id: uuid (not null) - who made the change
- action_type: text (not null) - values: create, update, delete
- field_name: text (nullable) - changed column for updates
- old_value: text (nullable)
- new_value: text (nullable)
- change_type: text (nullable) - e.g. 'assignment'
- assigned_to: uuid (nullable) - new assignee for assignment entries
- details: jsonb (nullable)
- created_at: timestamp (default: now())
"""

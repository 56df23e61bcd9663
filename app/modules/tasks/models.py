# Supabase table: tasks
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

tasks:
- id: uuid (primary key)
- title: text (not null)
- description: text (nullable)
- status: text (not null, default: 'todo') - values: todo, in_progress, done
- priority: text (nullable) - values: low, medium, high, urgent
- due_date: timestamptz (nullable)
- reminder_sent: boolean (default: false) - flips to true once, never back
- user_id: uuid (not null) - creator
- team_id: uuid (foreign key to teams.id, nullable, on delete cascade) - null for personal tasks
- assigned_to: uuid (nullable) - references users.id
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""

# Supabase tables: teams, team_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

teams:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- created_by: uuid (not null) - owner; holds admin rights without a team_members row
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

team_members:
- id: uuid (primary key)
- team_id: uuid (foreign key to teams.id, not null, on delete cascade)
- user_id: uuid (not null)
- role: text (not null, default: 'member') - values: admin, member, viewer
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- unique constraint on (team_id, user_id)
"""

# Deleting a team deletes only the teams row; its team_members, tasks and
# (through tasks) comments and task_history rows go with it by FK cascade.

# Supabase table: comments
# This file documents the expected database schema

"""
Expected Supabase table structure:

comments:
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, not null, on delete cascade)
- user_id: uuid (not null) - author
- content: text (not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""

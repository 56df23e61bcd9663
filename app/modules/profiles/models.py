# Supabase table: users (public profile mirror of auth.users)
# This file documents the expected database schema
# Profile data lives outside the domain tables and cannot be joined to them;
# see enrichment.py for how views are rebuilt

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id)
- email: text (not null)
- name: text (nullable)
- full_name: text (nullable) - legacy display name
- avatar_url: text (nullable)
- created_at: timestamp (default: now())
"""

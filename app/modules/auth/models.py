# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles registration,
# sign-in, sessions and JWT issuing.

"""
This service only consumes Supabase Auth:
- auth.get_user(jwt) - resolve the bearer token of a request into a principal

Sign-up, sign-in and password flows stay with the frontend and Supabase.
Profile data for display lives in the public users table (see profiles module).
"""

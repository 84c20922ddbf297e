# Supabase tables: profiles, auth.users
# Admin user management combines the profiles table with Supabase Auth's
# admin API (auth.admin.*), which requires the service_role key.

"""
Expected Supabase table structure:

profiles: see portal/modules/auth/models.py

auth.users (managed by Supabase Auth):
- id, email, created_at, last_sign_in_at
- app_metadata.disabled: boolean - true when an admin deactivated the account
"""

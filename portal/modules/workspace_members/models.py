# Supabase tables: workspace_users, licenses
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

workspace_users:
- id: uuid (primary key)
- workspace_id: uuid (foreign key to workspaces.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- role: text ('owner', 'admin' or 'user')
- status: text ('active', 'invited' or 'disabled')
- unique (workspace_id, user_id)

licenses:
- id: uuid (primary key)
- type: text ('basic', 'premium' or 'enterprise')
- max_users: integer
- features: text[]
- expires_at: timestamp

companies.license_id references licenses.id; the license of a workspace is the
license of its company (workspaces.company_id).
"""

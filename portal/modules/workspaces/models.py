# Supabase tables: workspaces, workspace_companies
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

workspaces:
- id: uuid (primary key)
- name: text (unique, not null)
- description: text (nullable)
- owner: text (nullable) - display name of the responsible person
- owner_id: uuid (nullable, foreign key to auth.users.id)
- company_id: uuid (nullable, foreign key to companies.id) - company holding the license
- settings: jsonb (nullable) - allowUserInvite, allowDashboardSharing, allowExport
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

workspace_companies:
- workspace_id: uuid (foreign key to workspaces.id, not null)
- company_id: uuid (foreign key to companies.id, not null)

Links are replaced wholesale (delete all rows of the workspace, then insert the
new set). The two statements are not atomic.
"""

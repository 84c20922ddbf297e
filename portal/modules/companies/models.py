# Supabase tables: companies, workspace_companies
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

companies:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- logo_url: text (nullable) - external URL or public URL of an uploaded logo
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

user_count is derived: number of profiles with company_id = companies.id and is_active = true.
A company cannot be deleted while any profile references it.
"""

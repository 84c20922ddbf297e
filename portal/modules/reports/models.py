# Supabase table: powerbi_reports
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

powerbi_reports:
- id: uuid (primary key)
- name: text (not null)
- embed_url: text (not null)
- type: text ('report' or 'dashboard')
- thumbnail_url: text (nullable)
- description: text (nullable)
- workspace_id: text (nullable)
- workspace_name: text (nullable)
- created_at: timestamp (default: now())

Visibility for non-admin users comes from profiles.permissions (text[]):
'report:{id}', 'workspace:{workspace_id}' or 'reports:all'.
"""

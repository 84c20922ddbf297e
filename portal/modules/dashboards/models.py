# Supabase tables: dashboards, dashboard_workspaces, user_favorites
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

dashboards:
- id: uuid (primary key)
- title: text (not null)
- description: text (nullable)
- category: text (nullable)
- type: text (nullable)
- embed_url: text (not null) - embeddable report URL
- thumbnail: text (nullable)
- is_new: boolean (default: false)
- is_favorite: boolean (legacy column, always written as false; favorites live in user_favorites)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

dashboard_workspaces:
- dashboard_id: uuid (foreign key to dashboards.id, not null)
- workspace_id: uuid (foreign key to workspaces.id, not null)

user_favorites:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- dashboard_id: uuid (foreign key to dashboards.id, not null)
- created_at: timestamp (default: now())

A user sees the dashboards linked to any workspace linked to the user's company:
profiles.company_id -> workspace_companies -> dashboard_workspaces -> dashboards
"""

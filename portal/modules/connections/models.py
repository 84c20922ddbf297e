# Supabase table: connections
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

connections:
- id: uuid (primary key)
- name: text (not null)
- type: text (not null) - data source type, also names the bundled fallback logo
- description: text (nullable)
- status: text ('active', 'pending' or 'failed'; new connections start as 'pending')
- config: jsonb (default: {})
- logo_url: text (nullable) - external URL, or a storage path under 'connections/' in the logos bucket
- last_sync: timestamp (nullable) - stamped when the status becomes 'active'
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""

# Supabase table: chatbot_messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

chatbot_messages:
- id: uuid (primary key)
- user_id: text (auth user id, or 'anonymous' for visitors without a session)
- message: text (not null)
- is_from_user: boolean - false for bot replies
- session_id: text - X-Session-Id request header, or the ISO timestamp of the request
- created_at: timestamp (default: now())
"""

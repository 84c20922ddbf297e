# Supabase tables: support_tickets, support_ticket_messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

support_tickets:
- id: text (primary key) - 'TICKET-' followed by the last six digits of the epoch-millisecond clock
- user_id: uuid (foreign key to auth.users.id, not null)
- title: text (not null)
- description: text (not null)
- category: text (not null)
- priority: text ('low', 'medium', 'high' or 'urgent'; default 'medium')
- status: text ('open', 'inProgress' or 'closed'; default 'open')
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

support_ticket_messages:
- id: uuid (primary key)
- ticket_id: text (foreign key to support_tickets.id, not null)
- user_id: uuid (nullable)
- content: text (not null)
- sent_by: text ('user' or 'support')
- created_at: timestamp (default: now())
"""

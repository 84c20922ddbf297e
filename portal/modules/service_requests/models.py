# Supabase tables: service_requests, service_attachments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

service_requests:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- name: text (not null)
- email: text (not null)
- phone: text (default: '')
- service_type: text (not null)
- description: text (not null)
- urgency: text (default: 'normal')
- status: text (default: 'pending')
- created_at: timestamp (default: now())

service_attachments:
- id: uuid (primary key)
- service_request_id: uuid (foreign key to service_requests.id, not null)
- file_name: text - original upload name
- file_path: text - '{service_request_id}/{epoch millis}-{file_name}' in the attachments bucket
- file_size: integer
- file_type: text - MIME type

Storage: attachments live in the SERVICE_ATTACHMENTS_BUCKET bucket (default 'service_attachments').
"""

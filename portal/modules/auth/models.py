# Supabase Auth + profiles
# Authentication is handled by Supabase Auth (auth.users table); the portal
# layers an application profile over each auth user.

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (not null)
- name: text (nullable)
- company: text (nullable) - free-text company label shown in the admin UI
- company_id: uuid (nullable, foreign key to companies.id)
- phone: text (nullable)
- role: text (not null, default: 'user') - values: admin, user
- is_active: boolean (default: true)
- permissions: text[] (nullable) - report grants, e.g. report:<id>, workspace:<id>, reports:all
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

auth.users.app_metadata.disabled = true marks a deactivated account. It is set
server-side and wins over profiles.is_active when both are present.
"""

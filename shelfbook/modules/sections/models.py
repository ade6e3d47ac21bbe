# Supabase table: sections
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

sections:
- id: uuid (primary key, default gen_random_uuid())
- profile_id: uuid (not null, references profiles.id on delete cascade)
- title: text (not null)
- type: text (not null, check type in ('text_list', 'links', 'gallery'))
- content: jsonb (not null, default '{}')
    text_list -> {"items": ["...", ...]}
    links     -> {"links": [{"title": "...", "url": "..."}, ...]}
    gallery   -> {"images": [{"url": "...", "caption": "..."}, ...]}
- position: integer (not null, default 0) - display order, not unique
- visible: boolean (not null, default true)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Row level security: anyone may select visible sections; the owner of the
parent profile may select, insert, update and delete.
"""

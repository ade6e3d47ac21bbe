# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (unique, not null, references auth.users.id)
- username: text (unique, not null) - always stored lowercase
- display_name: text (nullable)
- bio: text (nullable)
- avatar_url: text (nullable)
- banner_url: text (nullable)
- theme: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Row level security: a user may select any profile and insert/update only the
row whose user_id = auth.uid().

RPC create_profile_for_user(p_user_id uuid, p_username text, p_display_name text)
returns uuid: SECURITY DEFINER function inserting the profile row, so a profile
can be created right after sign-up, before the user has a confirmed session.
"""

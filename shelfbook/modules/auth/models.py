# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table)
# - Login, session management and JWT issuance
# - Email confirmation (a sign-up may return a user without a session)

"""
Supabase Auth calls used here:
- auth.sign_up() - register a new user, then provision the profile row
- auth.sign_in_with_password() - authenticate
- auth.get_user(jwt=...) - resolve the identity behind a bearer token
- auth.sign_out() - logout

The profile row is created by ProfileService.create_profile with the new
user's id passed explicitly, since no session exists until the email is
confirmed.
"""

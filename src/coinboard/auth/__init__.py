"""Auth session and profile credential storage."""

from .supabase import AuthEvent, ProfileStore, Session, SupabaseAuthClient, User

__all__ = ["AuthEvent", "ProfileStore", "Session", "SupabaseAuthClient", "User"]

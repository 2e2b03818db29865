from infrastructure.auth.supabase_auth import SupabaseAuthGateway, SupabaseIdentityProvider

__all__ = [
    "SupabaseAuthGateway",
    "SupabaseIdentityProvider",
]

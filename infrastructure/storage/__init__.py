from infrastructure.storage.supabase_storage import SupabaseFileStore

__all__ = ["SupabaseFileStore"]

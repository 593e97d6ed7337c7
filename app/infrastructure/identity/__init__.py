from .handle_cache import ActorHandleCache, close_handle_cache, get_handle_cache

__all__ = ["ActorHandleCache", "close_handle_cache", "get_handle_cache"]

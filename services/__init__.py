from .scripture_repository import ScriptureRepository

__all__ = ['ScriptureRepository']

from . import calculations, status

__all__ = ["calculations", "status"]

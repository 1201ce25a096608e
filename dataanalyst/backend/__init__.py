from .backend_groq import query

__all__ = ["query"]

"""Service layer — compilation, caching, and the public mapping facade.

Services may import from domain and config.
They must never import from commands or output.
"""

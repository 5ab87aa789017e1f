"""Domain layer — type shapes, binding plans, and errors.

This layer depends only on stdlib.
It must never import from services, config, commands, or output.
"""

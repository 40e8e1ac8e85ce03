"""Domain layer — approval, declared types, and the binding engine.

This layer depends only on stdlib and pydantic.
It must never import from services, commands, config, output, or plugins.
"""

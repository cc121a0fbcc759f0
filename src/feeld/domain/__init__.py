"""Domain layer: rule translation, fields, messages and the registry.

This layer depends only on stdlib, pydantic and the template loader.
It must never import from services, commands, output, config or plugins.
"""

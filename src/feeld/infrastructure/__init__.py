"""Infrastructure layer: template loading and form definition files.

This layer depends on stdlib and third-party libs (Jinja2, ruamel.yaml).
It must never import from services, commands, or output.
The service layer bridges between definition files and the domain registry.
"""

"""FastAPI surface for ColorIA.

``create_app`` builds the application: the generation proxy, the public
``/assets`` mount, a health check, and (optionally) the Gradio UI mounted
at ``/``.
"""

from coloria.api.main import create_app, main

__all__ = ["create_app", "main"]

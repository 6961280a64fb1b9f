"""WSGI entrypoint for the recipe manager API.

The Flask development server is intentionally not started from this module so
that deployments rely on a WSGI server such as Gunicorn. Local development can
still use ``RECIPE_STORAGE=memory flask --app main run`` which imports the
``app`` object defined below.
"""

from recipe_manager import configure_logging, create_app

configure_logging()

app = create_app()


__all__ = ["app"]

"""API routers mounted by :func:`wildhorizons.api.app.create_app`."""

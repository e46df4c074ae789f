"""WSGI config for the editorsite project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "editorsite.settings")

application = get_wsgi_application()

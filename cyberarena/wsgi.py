"""WSGI config for the CyberArena scoreboard."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'cyberarena.settings')

application = get_wsgi_application()

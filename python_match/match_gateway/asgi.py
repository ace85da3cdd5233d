"""
ASGI config for match_gateway project.
"""
import os
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'match_gateway.settings')
application = get_asgi_application()

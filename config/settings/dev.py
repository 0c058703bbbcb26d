"""Development settings for the Podeli backend.

This module extends the base settings with development specific
configuration, such as enabling debug, allowing all hosts, human readable
logs and console e-mail. Do not use these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Use console email backend during development
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Notifications go to the log unless explicitly switched to e-mail
NOTIFICATION_SINK = os.environ.get('NOTIFICATION_SINK', 'log')

LOGGING['handlers']['console']['formatter'] = 'console'  # noqa: F405
LOGGING['loggers']['apps']['level'] = 'DEBUG'  # noqa: F405

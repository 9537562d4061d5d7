# foodlink/views/__init__.py

# Import all views from the separated files
from .auth_views import *
from .user_views import *
from .donation_views import *
from .pickup_views import *
from .notification_views import *
from .analytics_views import *
from .impact_views import *

"""
Main URL mapping configuration file.

Include other URLConfs from external apps using method `include()`.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Apps:
    path('api/', include('drive.apps.files.urls', namespace='files')),
    path(
        'api/auth/',
        include('drive.apps.accounts.urls', namespace='accounts'),
    ),

    # django-admin:
    path('admin/', admin.site.urls),
]

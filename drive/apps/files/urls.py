"""URL configuration for files API.

Routes are mounted under ``/api/`` and carry no trailing slash.
"""

from django.urls import path

from drive.apps.files import views

app_name = 'files'

urlpatterns = [
    path('files', views.FileListView.as_view(), name='list'),
    path('files/upload', views.FileUploadView.as_view(), name='upload'),
    path('files/stats', views.FileStatsView.as_view(), name='stats'),
    path(
        'files/delete-batch',
        views.FileBatchDeleteView.as_view(),
        name='delete-batch',
    ),
    path('files/<str:file_id>', views.FileDetailView.as_view(), name='detail'),
    path(
        'files/<str:file_id>/download',
        views.FileDownloadView.as_view(),
        name='download',
    ),
]

"""URL configuration for accounts API."""

from django.urls import path

from drive.apps.accounts import views

app_name = 'accounts'

urlpatterns = [
    path('register', views.RegisterView.as_view(), name='register'),
    path('login', views.LoginView.as_view(), name='login'),
    path('me', views.MeView.as_view(), name='me'),
    path('logout', views.LogoutView.as_view(), name='logout'),
]

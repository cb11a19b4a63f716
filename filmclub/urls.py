from django.contrib import admin
from django.urls import include, path

from filmclub import views

urlpatterns = [
    path('health/', views.health_view, name='health'),
    path('admin/', admin.site.urls),
    path('', include('weekly.urls')),
]

# config/urls.py

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # Aplicações principais
    path('', include('apps.core.urls')),
    path('', include('apps.board.urls')),
]

# Customizar títulos do admin
admin.site.site_header = 'Kanboard Admin'
admin.site.site_title = 'Kanboard'
admin.site.index_title = 'Administração do Sistema'

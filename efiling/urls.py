from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('efiling/', include('routing.urls')),
    path('efiling/', include('filing.urls')),
]

from django.urls import path
from . import views

app_name = 'filing'

urlpatterns = [
    path('files/<int:file_id>/status/', views.FileStatusView.as_view(), name='file_status'),

    # API
    path('api/check_status/', views.CheckFileStatusView.as_view(), name='check_file_status'),
]

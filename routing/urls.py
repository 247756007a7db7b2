from django.urls import path
from . import views

app_name = 'routing'

urlpatterns = [
    path('files/<int:file_id>/mark-to/', views.MarkToView.as_view(), name='mark_to'),
    path('files/<int:file_id>/marking-recipients/', views.MarkingRecipientsView.as_view(), name='marking_recipients'),
    path('files/<int:file_id>/movements/', views.FileMovementsView.as_view(), name='movements'),
    path('files/<int:file_id>/sla/', views.SLAStatusView.as_view(), name='sla_status'),
    path('files/<int:file_id>/sla/pause/', views.SLAPauseView.as_view(), name='sla_pause'),
    path('files/<int:file_id>/sla/resume/', views.SLAResumeView.as_view(), name='sla_resume'),
]

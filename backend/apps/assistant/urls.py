"""
Assistant URLs
"""
from django.urls import path

from . import views

urlpatterns = [
    # Async endpoints; csrf_exempt is applied on the views themselves
    path('messages/', views.post_message, name='assistant-messages'),
    path('sessions/<str:session_id>/', views.session_detail, name='assistant-session'),
    path('tools/', views.list_tools, name='assistant-tools'),
    path('health/', views.health, name='assistant-health'),
]

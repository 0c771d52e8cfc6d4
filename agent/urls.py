from django.urls import path
from . import views

app_name = "agent"

urlpatterns = [
    path("chat/", views.chat, name="chat"),
    path("tools/", views.list_tools, name="tool-list"),
    path("tools/<str:name>/", views.run_tool, name="tool-run"),
    path("conversations/<str:session_id>/", views.expire_conversation, name="conversation-expire"),
]

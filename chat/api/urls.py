from django.urls import path
from .views import ConversationListAPIView, TaskMessageListCreateAPIView

urlpatterns = [
    path("conversations/", ConversationListAPIView.as_view(), name="conversation-list"),
    path("tasks/<int:pk>/messages/", TaskMessageListCreateAPIView.as_view(), name="task-messages"),
]

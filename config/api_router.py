from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from vibesync.messaging.api.views import ConversationViewSet
from vibesync.messaging.api.views import MessageViewSet
from vibesync.notifications.api.views import NotificationViewSet
from vibesync.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet)
router.register("messages", MessageViewSet, basename="messages")
router.register("conversations", ConversationViewSet, basename="conversations")
router.register("notifications", NotificationViewSet, basename="notifications")


app_name = "api"
urlpatterns = router.urls

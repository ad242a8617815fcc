# urls.py
from rest_framework.routers import DefaultRouter
from .views import GameViewSet, MenuItemViewSet

router = DefaultRouter()
router.register('games', GameViewSet)
router.register('menu-items', MenuItemViewSet)

urlpatterns = router.urls

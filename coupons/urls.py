"""Coupon URL routes (v1)."""

from rest_framework.routers import SimpleRouter

from .views import CouponViewSet

app_name = "coupons"

router = SimpleRouter()
router.register(r"", CouponViewSet, basename="coupon")

urlpatterns = router.urls

from django.urls import path

from .views import MovementListView, RestockView

urlpatterns = [
    path("movements/", MovementListView.as_view(), name="movement-list"),
    path("adjustments/", RestockView.as_view(), name="stock-adjust"),
]

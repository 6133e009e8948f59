from django.urls import path

from . import views

urlpatterns = [
    path("tyres/", views.inventory, name="inventory"),
    path("tyres/add/", views.add_tyre, name="add_tyre"),
    path("tyres/<int:record_id>/remove/", views.remove_tyre, name="remove_tyre"),
    path(
        "tyres/<int:record_id>/removal-quantity/",
        views.set_removal_quantity,
        name="set_removal_quantity",
    ),
]

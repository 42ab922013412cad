# domains/shipments/signals.py
from django.db.models.signals import post_save
from django.dispatch import receiver

from domains.orders.models import Order

from .models import Shipping


@receiver(post_save, sender=Order, dispatch_uid="shipments.create_shipping_for_order")
def create_shipping_for_order(sender, instance: Order, created: bool, raw: bool = False, **kwargs):
    # every order starts with an empty shipping record
    if created and not raw:
        Shipping.objects.get_or_create(order=instance)

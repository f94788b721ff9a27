# store/signals.py
import logging

from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils.text import slugify

from slot_configuration.gateway import provision_default_layouts

from .models import Store

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Store)
def provision_layouts_on_store_create(sender, instance, created, **kwargs):
    if not created:
        return  # only on new store creation

    if not instance.slug:
        Store.objects.filter(pk=instance.pk).update(slug=slugify(instance.name))

    provisioned = provision_default_layouts(instance)
    logger.info(f"Provisioned {len(provisioned)} default layouts for store {instance.pk}")

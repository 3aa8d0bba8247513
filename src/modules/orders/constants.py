"""Order domain constants.

Any status may follow any other: the shop moves orders back and forth
freely.  Only two edges carry side effects, entering ``CANCELLED`` and
entering ``FINALIZED``, and each fires at most once per order.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    OPEN = "OPEN", "Aberto"
    IN_PRODUCTION = "IN_PRODUCTION", "Em produção"
    READY = "READY", "Pronto"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY", "Saiu para entrega"
    FINALIZED = "FINALIZED", "Finalizado"
    CANCELLED = "CANCELLED", "Cancelado"


ORDER_NUMBER_MAX_RETRIES = 5

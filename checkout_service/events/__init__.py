from .producer import CheckoutEventProducer, event_producer

__all__ = ["CheckoutEventProducer", "event_producer"]

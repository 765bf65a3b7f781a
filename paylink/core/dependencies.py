"""
Dependency injection for FastAPI application.

Provides factory functions for the collaborators of the collection
workflow. Each is built once per process from the application settings.
"""

from functools import lru_cache

from paylink.core.config import get_settings
from paylink.services.notification_service import EmailNotificationService
from paylink.services.orchestrator import CollectionOrchestrator
from paylink.services.payment_api import PaymentApiClient
from paylink.services.session_store import InMemorySessionStore
from paylink.utils.links import LinkBuilder


@lru_cache()
def get_session_store() -> InMemorySessionStore:
    """Get the process-wide session store."""
    settings = get_settings()
    return InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)


@lru_cache()
def get_payment_api_client() -> PaymentApiClient:
    """Get the open-banking API client."""
    return PaymentApiClient.from_settings(get_settings())


@lru_cache()
def get_notification_service() -> EmailNotificationService:
    """Get the email notification service."""
    return EmailNotificationService.from_settings(get_settings())


@lru_cache()
def get_link_builder() -> LinkBuilder:
    """Get the Tink Link URL builder."""
    return LinkBuilder.from_settings(get_settings())


@lru_cache()
def get_orchestrator() -> CollectionOrchestrator:
    """
    Get the collection orchestrator with all dependencies injected.

    Returns:
        Configured CollectionOrchestrator instance
    """
    return CollectionOrchestrator(
        session_store=get_session_store(),
        api_client=get_payment_api_client(),
        notifier=get_notification_service(),
        links=get_link_builder(),
    )

"""Core providers-domain exports."""

from ticketbridge.core.providers.factory import ClientFactory, create_client
from ticketbridge.core.providers.jira import JiraClient

__all__ = ["ClientFactory", "JiraClient", "create_client"]

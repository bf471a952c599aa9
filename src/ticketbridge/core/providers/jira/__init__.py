from ticketbridge.core.providers.jira.client import JiraClient

__all__ = ["JiraClient"]

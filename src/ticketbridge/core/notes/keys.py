"""Frontmatter keys written and read by the bridge."""

ISSUE_ID_KEY = "issue_id"
ISSUE_LINK_KEY = "issue_link"
STATUS_KEY = "status"
SYNC_STATUS_KEY = "jira_sync_status"
SYNCED_AT_KEY = "jira_synced_at"

UNLINKED = "unlinked"

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

PAGE_LIMIT = 50

TODO_MARKER = '<!-- This file is automatically generated by "dlc-build update_todo" -->'


def fetch_issues(
    base_url: str,
    repo: str,
    *,
    token: Optional[str] = None,
    verify: bool = True,
    timeout: float = 30.0,
    client: Optional[httpx.Client] = None,
) -> List[Dict[str, Any]]:
    """Return all open issues of ``owner/repo`` from a Gitea instance."""

    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"token {token}"

    url = f"{base_url.rstrip('/')}/api/v1/repos/{repo}/issues"
    own_client = client is None
    c = client or httpx.Client(headers=headers, verify=verify, timeout=timeout)

    issues: List[Dict[str, Any]] = []
    try:
        page = 1
        while True:
            resp = c.get(
                url,
                params={"state": "open", "type": "issues", "page": page, "limit": PAGE_LIMIT},
                headers=headers,
            )
            resp.raise_for_status()
            batch = resp.json()
            if not isinstance(batch, list):
                raise ValueError(f"Unexpected issues payload from {url}: {type(batch).__name__}")
            if not batch:
                break
            issues.extend(batch)
            # the server may cap page size below PAGE_LIMIT (MAX_RESPONSE_ITEMS)
            total = resp.headers.get("X-Total-Count")
            if total is not None and total.isdigit() and len(issues) >= int(total):
                break
            page += 1
    finally:
        if own_client:
            c.close()

    logger.info("Fetched %d open issues from %s", len(issues), repo)
    return issues


def format_issue(issue: Dict[str, Any]) -> str:
    milestone = (issue.get("milestone") or {}).get("title") or "-"
    labels = ",".join(lbl.get("name", "") for lbl in (issue.get("labels") or []) if lbl.get("name"))
    line = f"- #{issue['number']} - {issue['title']} - **`{milestone}`**"
    if labels:
        line += f" `{labels}`"
    return line


def render_todo(repo: str, issues: List[Dict[str, Any]]) -> str:
    lines = [TODO_MARKER, "", f"### {repo}", ""]
    lines += [format_issue(i) for i in issues]
    return "\n".join(lines) + "\n"

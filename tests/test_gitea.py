from __future__ import annotations

import httpx
import pytest

from dlc_build.lib.gitea import PAGE_LIMIT, TODO_MARKER, fetch_issues, format_issue, render_todo


def _issue(n, title="Fix it", milestone=None, labels=()):
    return {
        "number": n,
        "title": title,
        "milestone": {"title": milestone} if milestone else None,
        "labels": [{"name": lbl} for lbl in labels],
    }


def test_format_issue() -> None:
    assert format_issue(_issue(12, "Add xfce theme", "3.1.0", ["enhancement", "doc"])) == (
        "- #12 - Add xfce theme - **`3.1.0`** `enhancement,doc`"
    )
    assert format_issue(_issue(3, "Bug")) == "- #3 - Bug - **`-`**"


def test_render_todo() -> None:
    text = render_todo("baron/debian-live-config", [_issue(1), _issue(2)])
    assert text.splitlines()[:4] == [TODO_MARKER, "", "### baron/debian-live-config", ""]
    assert text.endswith("- #2 - Fix it - **`-`**\n")


def test_fetch_issues_paginates_and_authenticates() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        page = int(request.url.params["page"])
        if page == 1:
            return httpx.Response(200, json=[_issue(i) for i in range(PAGE_LIMIT)])
        if page == 2:
            return httpx.Response(200, json=[_issue(100)])
        return httpx.Response(200, json=[])

    client = httpx.Client(transport=httpx.MockTransport(handler))
    issues = fetch_issues("https://git.example.org/", "baron/dlc", token="s3cret", client=client)

    assert len(issues) == PAGE_LIMIT + 1
    assert len(seen) == 3
    assert seen[0].url.path == "/api/v1/repos/baron/dlc/issues"
    assert seen[0].url.params["state"] == "open"
    assert seen[0].headers["Authorization"] == "token s3cret"


def test_fetch_issues_http_error() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(404, json={"message": "no"})))
    with pytest.raises(httpx.HTTPStatusError):
        fetch_issues("https://git.example.org", "baron/dlc", client=client)


def test_fetch_issues_unexpected_payload() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"message": "no"})))
    with pytest.raises(ValueError):
        fetch_issues("https://git.example.org", "baron/dlc", client=client)


def test_fetch_issues_server_caps_page_size() -> None:
    all_issues = [_issue(i) for i in range(1, 46)]
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        seen.append(page)
        # MAX_RESPONSE_ITEMS = 30 on the server, whatever limit the client asks for
        batch = all_issues[(page - 1) * 30 : page * 30]
        return httpx.Response(200, json=batch, headers={"X-Total-Count": str(len(all_issues))})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    issues = fetch_issues("https://git.example.org", "baron/dlc", client=client)

    assert [i["number"] for i in issues] == list(range(1, 46))
    assert seen == [1, 2]


def test_fetch_issues_without_total_header_stops_on_empty_page() -> None:
    all_issues = [_issue(i) for i in range(1, 46)]

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        return httpx.Response(200, json=all_issues[(page - 1) * 30 : page * 30])

    client = httpx.Client(transport=httpx.MockTransport(handler))
    assert len(fetch_issues("https://git.example.org", "baron/dlc", client=client)) == 45

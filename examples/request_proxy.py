#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.9"
# dependencies = [
#     "ajaxreplay",
# ]
#
# [tool.uv.sources]
# ajaxreplay = { path = "../", editable = true }
# ///

from ajaxreplay import AjaxReplay, InMemoryStore, RequestProxy

replay = AjaxReplay(store=InMemoryStore())


def print_response(request: RequestProxy) -> None:
    print(f"🔄 From Cache: {request.from_cache}")
    print(f"📍 Status: {request.status}")
    print(f"🚀 Body: {len(request.response_text)} characters")


def fetch(url: str) -> None:
    print(f"\n➡ Sending request to {url}...")
    request = replay.request()
    request.on_ready_state_change = print_response
    request.setup("GET", url, False)
    request.dispatch()


if __name__ == "__main__":
    url = "https://example.com/"
    fetch(url)
    fetch(url)
    replay.clear_cache()

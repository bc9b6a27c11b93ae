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

import sqlite3

import httpx

from ajaxreplay import ReplayOptions, SQLiteStore
from ajaxreplay.httpx import ReplayTransport

transport = ReplayTransport(
    store=SQLiteStore(connection=sqlite3.connect(":memory:")),
    options=ReplayOptions(refresh=False),
)

with httpx.Client(transport=transport) as client:
    client.get("https://example.com/")
    response = client.get("https://example.com/")
    print(response.extensions)

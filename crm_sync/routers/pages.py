"""Static landing page."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"])

LANDING_PAGE = """\
<!doctype html>
<html>
<head><meta charset="utf-8"><title>amoCRM &rarr; Google Sheets sync</title></head>
<body>
  <h1>amoCRM &rarr; Google Sheets sync</h1>
  <p>The service is running.</p>
  <ul>
    <li><a href="/test">GET /test</a> &ndash; check the spreadsheet connection</li>
    <li><code>POST /add-test-email</code> with <code>{"email": "..."}</code> &ndash; add one email by hand</li>
    <li><code>POST /webhook/amocrm</code> &ndash; amoCRM webhook target</li>
    <li><a href="/health">GET /health</a> &ndash; ingestion counters</li>
  </ul>
</body>
</html>
"""


@router.get("/", response_class=HTMLResponse)
async def landing_page() -> str:
    return LANDING_PAGE

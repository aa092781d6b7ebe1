from __future__ import annotations

from order_workflow.bootstrap import create_asgi_app

app = create_asgi_app()

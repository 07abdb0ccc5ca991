"""Example: Starlette app that only accepts signed requests.

Try it with the draft's Default Test request:

    curl -X POST localhost:8000/inbox \\
      -H 'Date: Sun, 05 Jan 2014 21:31:40 GMT' \\
      -H 'Signature: keyId="Test",algorithm="rsa-sha256",signature="SjWJ..."' \\
      -d '{"hello": "world"}'
"""

import json
from pathlib import Path

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from httpsign import HTTPSignatureMiddleware

VECTORS = Path(__file__).resolve().parent.parent / "test_vectors" / "draft_cavage_09.json"

# keyId -> public key (PEM) or shared secret. Look these up however you like.
KEYS = {
    "Test": json.loads(VECTORS.read_text())["public_key_pem"],
}


async def inbox(request: Request):
    """Accept a message - the signature was already checked."""
    outcome = request.state.http_signature
    data = await request.json()
    return JSONResponse({"status": "ok", "received": data, "verified": outcome.ok})


app = Starlette(routes=[Route("/inbox", inbox, methods=["POST"])])
app.add_middleware(HTTPSignatureMiddleware, key_resolver=KEYS.get)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

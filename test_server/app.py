from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

APP_TITLE = "networker echo server"
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]

app = FastAPI(title=APP_TITLE)


@app.api_route("/echo/{rest:path}", methods=ALL_METHODS)
@app.api_route("/echo", methods=ALL_METHODS)
async def echo(request: Request) -> JSONResponse:
    """
    Returns everything the server received:
      - "query": list of [name, value] pairs in wire order (duplicates kept)
      - "headers": names lower-cased, as seen by the app code
      - "body": the raw request body decoded as latin-1, so bytes survive one-to-one
    """
    body = await request.body()
    return JSONResponse(
        {
            "method": request.method,
            "path": request.url.path,
            "raw_query": request.url.query,
            "query": [[k, v] for k, v in request.query_params.multi_items()],
            "headers": {k.lower(): v for k, v in request.headers.items()},
            "cookies": dict(request.cookies),
            "body": body.decode("latin-1"),
        },
        status_code=200,
    )


@app.get("/status/{code}")
async def status(code: int) -> Response:
    """Empty answer with the requested status code."""
    return Response(status_code=code)


@app.get("/set-cookie")
async def set_cookie(name: str, value: str) -> JSONResponse:
    """Sets one cookie from the query parameters."""
    resp = JSONResponse({"ok": True}, status_code=200)
    resp.set_cookie(key=name, value=value, path="/", httponly=True, samesite="strict")
    return resp


@app.get("/text")
async def text() -> Response:
    """Plain text in a non-default charset."""
    return Response(
        content="naïve".encode("latin-1"),
        media_type="text/plain; charset=latin-1",
    )

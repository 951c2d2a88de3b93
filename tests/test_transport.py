"""
Reference transport (http/transport.py, http/request.py, http/response.py)
"""

import httpx
import pytest

from arbor.http import AsgiTransport, Request, Response, ResponseAlreadySent, Transport, compile_path
from tests.conftest import RecordingTransport, dispatch


# ============================================================================
# Path compilation
# ============================================================================

class TestCompilePath:

    def test_static_path(self):
        pattern = compile_path("/users")
        assert pattern.match("/users")
        assert pattern.match("/users/")
        assert not pattern.match("/users/1")

    def test_named_params(self):
        pattern = compile_path("/users/:id/posts/:post_id")
        match = pattern.match("/users/7/posts/42")
        assert match.groupdict() == {"id": "7", "post_id": "42"}
        assert not pattern.match("/users/7/posts")

    def test_star_matches_everything(self):
        pattern = compile_path("*")
        assert pattern.match("/")
        assert pattern.match("/deeply/nested/path")

    def test_root(self):
        assert compile_path("/").match("/")


# ============================================================================
# Dispatch
# ============================================================================

class TestDispatch:

    def test_satisfies_protocol(self):
        assert isinstance(AsgiTransport(), Transport)
        assert isinstance(RecordingTransport(), Transport)

    @pytest.mark.asyncio
    async def test_params_and_handler_arity(self, transport):
        def show(request, response):
            response.json({"id": request.params["id"]})

        transport.get("/users/:id", show)

        response = await dispatch(transport, "GET", "/users/9")
        assert response.body == b'{"id": "9"}'
        assert response.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_route_middleware_runs_in_order(self, transport):
        order = []

        async def first(request, response, next):
            order.append("first")
            request.state["user"] = "jane"
            await next()

        async def handler(request, response, next):
            order.append("handler")
            response.send(request.state["user"])

        transport.post("/login", first, handler)

        response = await dispatch(transport, "POST", "/login")
        assert order == ["first", "handler"]
        assert response.body == b"jane"

    @pytest.mark.asyncio
    async def test_first_match_wins(self, transport):
        transport.get("/same", lambda request, response: response.send("first"))
        transport.get("/same", lambda request, response: response.send("second"))

        response = await dispatch(transport, "GET", "/same")
        assert response.body == b"first"

    @pytest.mark.asyncio
    async def test_method_must_match(self, transport):
        transport.put("/items/:id", lambda request, response: response.send("put"))
        transport.delete("/items/:id", lambda request, response: response.send("deleted"))

        assert (await dispatch(transport, "DELETE", "/items/1")).body == b"deleted"
        assert (await dispatch(transport, "PUT", "/items/1")).body == b"put"
        response = await dispatch(transport, "GET", "/items/1")
        assert response.status_code == 404
        assert response.body == b"Cannot GET /items/1"

    @pytest.mark.asyncio
    async def test_use_with_prefix(self, transport):
        async def admin_only(request, response, next):
            response.status(401).send("login required")

        transport.use(admin_only, path="/admin")
        transport.get("/admin/users", lambda request, response: response.send("users"))
        transport.get("/public", lambda request, response: response.send("public"))

        assert (await dispatch(transport, "GET", "/admin/users")).status_code == 401
        assert (await dispatch(transport, "GET", "/administrator")).status_code == 404
        assert (await dispatch(transport, "GET", "/public")).body == b"public"

    @pytest.mark.asyncio
    async def test_next_error_skips_ordinary_stages(self, transport):
        skipped = []

        async def fail(request, response, next):
            response.status(400)
            await next(ValueError("bad input"))

        async def never(request, response, next):
            skipped.append(True)

        async def on_error(error, request, response, next):
            response.send(f"error: {error}")

        transport.get("/x", fail)
        transport.all(never)
        transport.use_error(on_error)

        response = await dispatch(transport, "GET", "/x")
        assert skipped == []
        assert response.status_code == 400
        assert response.body == b"error: bad input"

    @pytest.mark.asyncio
    async def test_exception_becomes_500(self, transport):
        async def crash(request, response, next):
            raise RuntimeError("secret detail")

        transport.get("/crash", crash)

        response = await dispatch(transport, "GET", "/crash")
        assert response.status_code == 500
        assert response.body == b"Internal Server Error"

    @pytest.mark.asyncio
    async def test_exception_keeps_error_status(self, transport):
        async def crash(request, response, next):
            response.status(418)
            raise RuntimeError("teapot")

        transport.get("/tea", crash)

        response = await dispatch(transport, "GET", "/tea")
        assert response.status_code == 418

    @pytest.mark.asyncio
    async def test_error_handler_may_raise(self, transport):
        async def crash(request, response, next):
            raise RuntimeError("first")

        async def broken_page(error, request, response, next):
            raise RuntimeError("second")

        transport.get("/crash", crash)
        transport.use_error(broken_page)

        response = await dispatch(transport, "GET", "/crash")
        assert response.status_code == 500

    def test_route_without_handler(self, transport):
        with pytest.raises(TypeError):
            transport.get("/empty")


# ============================================================================
# Request / Response
# ============================================================================

class TestRequestResponse:

    def test_request_normalizes(self):
        request = Request("post", "", headers={"X-Token": "abc"}, body=b"a=1&b=2")
        assert request.method == "POST"
        assert request.path == "/"
        assert request.header("x-token") == "abc"
        assert request.form() == {"a": "1", "b": "2"}

    def test_request_json(self):
        assert Request("POST", "/", body=b'{"a": 1}').json() == {"a": 1}
        assert Request("POST", "/").json() is None

    def test_response_send_once(self):
        response = Response().send("hello")
        assert response.headers_sent
        assert response.headers["Content-Type"] == "text/html; charset=utf-8"
        with pytest.raises(ResponseAlreadySent):
            response.send("again")
        with pytest.raises(ResponseAlreadySent):
            response.status(500)

    def test_redirect(self):
        response = Response().redirect("/login")
        assert response.status_code == 302
        assert response.headers["Location"] == "/login"

    def test_render_overlays_locals(self):
        class Echo:
            def render(self, template_name, params):
                return f"{template_name}:{params['author']}:{params['title']}"

        response = Response(renderer=Echo())
        response.locals.update({"author": "Jane", "title": "Default"})
        response.render("base", {"title": "Home"})
        assert response.body == b"base:Jane:Home"

    def test_render_without_renderer(self):
        with pytest.raises(RuntimeError):
            Response().render("base", {})


# ============================================================================
# ASGI
# ============================================================================

class TestAsgi:

    @pytest.mark.asyncio
    async def test_served_over_asgi(self, transport):
        async def echo(request, response, next):
            response.json({
                "method": request.method,
                "q": request.query.get("q"),
                "body": request.json(),
                "agent": request.header("x-agent"),
            })

        transport.post("/echo", echo)

        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=transport), base_url="http://testserver",
        ) as client:
            response = await client.post(
                "/echo?q=search", json={"a": 1}, headers={"X-Agent": "tests"},
            )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"method": "POST", "q": "search", "body": {"a": 1}, "agent": "tests"}

    @pytest.mark.asyncio
    async def test_unanswered_request_over_asgi(self, transport):
        async def silent(request, response, next):
            response.status(204)

        transport.get("/silent", silent)

        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=transport), base_url="http://testserver",
        ) as client:
            missing = await client.get("/missing")
            silent_response = await client.get("/silent")

        assert missing.status_code == 404
        assert missing.text == "Cannot GET /missing"
        assert silent_response.status_code == 204
        assert silent_response.content == b""

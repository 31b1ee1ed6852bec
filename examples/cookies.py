"""Cookie and connection usage examples for pyhttpmod.

Run directly:
    python -m examples.cookies

The connection examples use an in-memory transport, no network access is needed.
"""

import sys
from typing import Any

import orjson

from pyhttpmod.http.cookie import Cookie, SameSite, escape, unescape
from pyhttpmod.module import HttpModule, ModuleContext
from pyhttpmod.request import Request
from pyhttpmod.response import Response


def demo_transport(request: Request) -> Response:
    """Transport answering like a small API server."""
    if request.url.endswith("/login"):
        return Response(200, (("Set-Cookie", "session=abc123; Path=/; HttpOnly; SameSite=Lax"),))
    body = orjson.dumps({"path": request.url.rsplit("/", 1)[-1], "cookie": request.header("Cookie")})
    return Response(200, (("Content-Type", "application/json"),), body)


def example_set_cookie() -> None:
    """Example 1: Build a Set-Cookie header"""
    cookie = Cookie("id", escape("a b;c"))
    cookie.path = "/"
    cookie.max_age = 3600
    cookie.secure = True
    cookie.http_only = True
    cookie.same_site = SameSite.STRICT
    print({"example": "set_cookie", "header": str(cookie), "value": unescape(cookie.value)})


def example_parse() -> None:
    """Example 2: Parse a Set-Cookie header"""
    cookie = Cookie.parse("id=7; Path=/; Secure; Priority=High")
    print({"example": "parse", "name": cookie.name, "value": cookie.value, "path": cookie.path, "secure": cookie.secure})


def example_module_session() -> None:
    """Example 3: Module with shared cookie store"""
    context = ModuleContext()
    context.register("http", HttpModule())
    context.load_all()
    context.deploy_settings('{"http": {"user_agent": "pyhttpmod-example/1.0"}}')
    module = context.get("http")

    login = module.new_connection(demo_transport)
    login.set_url("http://api.example.com/login")
    login.exec()

    received: list[Any] = []
    me = module.new_connection(demo_transport)
    me.set_url("http://api.example.com/me")
    me.on_json(received.append)
    me.exec()
    print({"example": "module_session", "json": received})


if __name__ == "__main__":  # pragma: no cover
    from ._utils import run_examples

    run_examples(sys.modules[__name__])

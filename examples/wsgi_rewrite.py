from __future__ import annotations

from wsgiref.simple_server import make_server

from genro_rewrite import Router

router = Router(
    {
        "global": {
            "/": "/home",
            "/[type]/[id:\\d+]": "/category/[type]/[id]",
            "/user/(\\w+)": "/user/id/$1",
        },
        "get": {
            "/comment/hot/[uid]": "/blog/comment/type/hot/user/[uid]",
        },
    },
    plugins=("logging", "limits"),
    limits_max_length=512,
)


def app(environ, start_response):
    path, match = router.parse_environ(environ)
    body = f"target: /{path}\nrule: {match.rule if match else '-'}\nargs: {match.args if match else '-'}\n"
    start_response("200 OK", [("Content-Type", "text/plain; charset=utf-8")])
    return [body.encode()]


if __name__ == "__main__":
    router.validate()
    with make_server("127.0.0.1", 8000, app) as server:
        print("Serving on http://127.0.0.1:8000")
        server.serve_forever()

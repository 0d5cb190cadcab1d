import unittest

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from technurture.middleware.security_middleware import (
    BodySizeLimitMiddleware,
    PayloadTooLargeError,
    SecurityHeadersMiddleware,
    payload_too_large_response,
)


def make_app(max_bytes: int) -> FastAPI:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=max_bytes)

    async def too_large(request: Request, exc: PayloadTooLargeError):
        return payload_too_large_response()

    app.add_exception_handler(PayloadTooLargeError, too_large)

    @app.post("/echo")
    async def echo(request: Request):
        body = await request.body()
        return {"size": len(body)}

    return app


class BodySizeLimitTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(make_app(max_bytes=16))

    def test_small_body_passes(self):
        response = self.client.post("/echo", content=b"x" * 16)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"size": 16})

    def test_declared_length_over_limit(self):
        response = self.client.post("/echo", content=b"x" * 17)
        self.assertEqual(response.status_code, 413)
        self.assertEqual(response.json()["error"], "PAYLOAD_TOO_LARGE")
        self.assertFalse(response.json()["success"])

    def test_streamed_body_over_limit(self):
        def chunks():
            yield b"x" * 10
            yield b"x" * 10

        response = self.client.post("/echo", content=chunks())
        self.assertEqual(response.status_code, 413)
        self.assertIn("upload images separately", response.json()["message"])

    def test_security_headers_on_every_response(self):
        response = self.client.get("/missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.headers["X-Content-Type-Options"], "nosniff")
        self.assertEqual(response.headers["Referrer-Policy"], "strict-origin-when-cross-origin")


if __name__ == "__main__":
    unittest.main()

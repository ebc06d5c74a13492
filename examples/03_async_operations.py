#!/usr/bin/env python3
"""Async Operations — ResultAsync, try_catch_async and wrap_err_async.

Run this example:
    python examples/03_async_operations.py
"""
import asyncio

from errchain import (
    AppError,
    NetworkError,
    NotFoundError,
    ResultAsync,
    TimeoutError,
    log_error,
    try_catch_async,
    wrap_err_async,
)


class HTTPStatusError(Exception):
    def __init__(self, url: str, status: int):
        super().__init__(f"HTTP {status}")
        self.url = url
        self.status = status


async def http_get(url: str) -> dict:
    await asyncio.sleep(0.01)
    if url.endswith("/missing"):
        raise HTTPStatusError(url, 404)
    if url.endswith("/slow"):
        raise asyncio.TimeoutError()
    return {"id": url.rsplit("/", 1)[-1], "name": "Alice"}


def to_app_error(url: str):
    def map_error(exc: Exception) -> AppError:
        if isinstance(exc, HTTPStatusError) and exc.status == 404:
            return NotFoundError("User", url.rsplit("/", 1)[-1], cause=NetworkError(url, exc.status))
        if isinstance(exc, asyncio.TimeoutError):
            return TimeoutError(f"GET {url}", 5000)
        return NetworkError(url, message=str(exc))

    return map_error


def fetch_user(url: str) -> ResultAsync[dict, AppError]:
    return wrap_err_async(f"Failed to fetch user from {url}")(
        try_catch_async(lambda: http_get(url), to_app_error(url))
    )


async def main():
    urls = [
        "https://api.example.com/users/1",
        "https://api.example.com/users/missing",
        "https://api.example.com/users/slow",
    ]
    results = await asyncio.gather(*(fetch_user(url).map(lambda user: user["name"]) for url in urls))

    for url, result in zip(urls, results):
        print(f"\n{url}")
        message = result.match(
            lambda name: f"  ok: {name}",
            lambda error: f"  err: {error.chain()}",
        )
        print(message)
        if result.is_err():
            print(f"  not found: {result.error.is_kind(NotFoundError)}  timeout: {result.error.is_kind(TimeoutError)}")

    failed = await fetch_user(urls[1])
    log_error(failed.unwrap_err(), "fetch_user_failed", url=urls[1])


if __name__ == "__main__":
    asyncio.run(main())

"""
FastAPI dependencies.

The store and uploader are created once in the app lifespan and kept on
`app.state`; each request borrows a repository scope from the store.
"""
from typing import AsyncIterator

from fastapi import Depends, Request
from fastapi.concurrency import contextmanager_in_threadpool

from wishboard.services.uploads import ObjectStoreUploader
from wishboard.stores.base import BoardRepository, BoardStore


def get_store(request: Request) -> BoardStore:
    return request.app.state.store


async def get_repository(store: BoardStore = Depends(get_store)) -> AsyncIterator[BoardRepository]:
    # Queue on the event loop; the repository scope itself opens and closes
    # in the threadpool (file reads, session setup).
    async with store.guard():
        async with contextmanager_in_threadpool(store.repository()) as repo:
            yield repo


def get_uploader(request: Request) -> ObjectStoreUploader:
    return request.app.state.uploader

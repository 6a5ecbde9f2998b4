"""
Index fixtures
Ready-made setup recipes for integration tests and bootstrap scripts.
Every recipe is a setup pipeline, so the index is only handed back
once all of its tasks succeeded.
"""

import logging
from functools import partial
from typing import Any, Dict, Iterable, List, Optional

from .client import SearchClient
from .operations import IndexOperations
from .pipeline import SetupPipeline
from .waiter import TaskWaiter

logger = logging.getLogger(__name__)

Documents = List[Dict[str, Any]]


class IndexFixture:
    """Builds indexes in known states on a search service."""

    def __init__(
        self,
        client: SearchClient,
        *,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        waiter: Optional[TaskWaiter] = None,
    ) -> None:
        self.client = client
        self.waiter = waiter or TaskWaiter(
            client, timeout=timeout, interval=interval
        )
        self.operations = IndexOperations(client, self.waiter)

    def pipeline(self) -> SetupPipeline:
        return SetupPipeline(self.waiter)

    async def set_up_empty_index(
        self, uid: str, primary_key: Optional[str] = None
    ) -> str:
        await self.pipeline().then(
            f"create index '{uid}'",
            partial(self.operations.create_index, uid, primary_key),
        ).run()
        return uid

    async def set_up_basic_index(self, uid: str, documents: Documents) -> str:
        await self.pipeline().then(
            f"add documents to '{uid}'",
            partial(self.operations.add_documents, uid, documents),
        ).run()
        return uid

    async def set_up_index_for_faceting(
        self,
        uid: str,
        documents: Documents,
        filterable: Iterable[str] = ("genre",),
    ) -> str:
        await (
            self.pipeline()
            .then(
                f"add documents to '{uid}'",
                partial(self.operations.add_documents, uid, documents),
            )
            .then(
                f"update settings of '{uid}'",
                partial(
                    self.operations.update_settings,
                    uid,
                    {"filterableAttributes": list(filterable)},
                ),
            )
            .run()
        )
        return uid

    async def set_up_index_for_nested_search(
        self, uid: str, documents: Documents
    ) -> str:
        return await self.set_up_basic_index(uid, documents)

    async def set_up_index_for_distinct_products_search(
        self, uid: str, products: Documents
    ) -> str:
        await (
            self.pipeline()
            .then(
                f"add products to '{uid}'",
                partial(
                    self.operations.add_documents,
                    uid,
                    products,
                    primary_key="id",
                ),
            )
            .then(
                f"update settings of '{uid}'",
                partial(
                    self.operations.update_settings,
                    uid,
                    {"filterableAttributes": ["product_id"]},
                ),
            )
            .run()
        )
        return uid

    async def set_up_index_for_similar_search(
        self, uid: str, products: Documents
    ) -> str:
        # Experimental features are toggled synchronously, no task involved
        await self.client.update_experimental_features({"vectorStore": True})
        return await self.set_up_index_for_distinct_products_search(
            uid, products
        )

    async def delete_all_indexes(self) -> List[str]:
        indexes = await self.client.get_indexes()
        uids = [index["uid"] for index in indexes.get("results", [])]
        pipeline = self.pipeline()
        for uid in uids:
            pipeline.then(
                f"delete index '{uid}'",
                partial(self.operations.delete_index, uid),
            )
        await pipeline.run()
        logger.info("Deleted %d index(es)", len(uids))
        return uids

    async def dispose(self) -> None:
        """Leave a clean service behind, then close the client."""
        try:
            await self.delete_all_indexes()
        finally:
            await self.client.aclose()

    async def __aenter__(self) -> "IndexFixture":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.dispose()

from typing import List, Optional
from qdrant_client.http import models
from qdrant_client import AsyncQdrantClient
from fastembed import SparseTextEmbedding
from fastapi.concurrency import run_in_threadpool

from services.llm_client import LLMClient
from core.config import QdrantSettings

import logging
logger = logging.getLogger(__name__)

class DocumentQuery:
    """
    Wrapper around Qdrant for retrieving document chunks using dense or sparse embeddings.

    The collection is built out-of-band; this class only reads it.

    Provides two retrieval modes:
      - Dense search: Uses LLM-generated embeddings for semantic similarity.
      - Sparse search: Uses BM25-style sparse embeddings for keyword-based retrieval.

    Attributes:
        client (AsyncQdrantClient): Qdrant client for interacting with the vector database.
        collection_name (str): Name of the Qdrant collection holding the chunks.
        mode (str): Default retrieval mode, "sparse" or "dense".
        text_key (str): Payload field holding the chunk text.
        sparse_model (Optional[SparseTextEmbedding]): BM25 sparse embedding generator.
        dense_k (int): Default number of top results for dense search.
        sparse_k (int): Default number of top results for sparse search.
        llm_client (Optional[LLMClient]): LLM client used for dense embeddings.
    """

    def __init__(
        self,
        settings: QdrantSettings = QdrantSettings(),
        llm_client: Optional[LLMClient] = None,
    ):
        """
        Initialize a DocumentQuery instance.

        Args:
            settings (QdrantSettings, optional): Configuration for connecting to Qdrant
                (URL, API key, collection name, retrieval mode, top_k defaults).
            llm_client (Optional[LLMClient]): LLM client used to generate dense
                embeddings. Required for dense search.

        Raises:
            ValueError: If the retrieval mode is unknown, or dense mode has no LLM client.
        """
        if settings.retrieval_mode not in ("sparse", "dense"):
            raise ValueError(f"Unknown retrieval mode: {settings.retrieval_mode}")
        if settings.retrieval_mode == "dense" and llm_client is None:
            raise ValueError("Dense retrieval requires an LLM client")

        self.client = AsyncQdrantClient(url=settings.url, api_key=settings.api_key)
        self.collection_name = settings.collection_name
        self.mode = settings.retrieval_mode
        self.text_key = settings.text_key
        self.sparse_model = SparseTextEmbedding(model_name="Qdrant/bm25") if self.mode == "sparse" else None
        self.dense_k = settings.dense_top_k
        self.sparse_k = settings.sparse_top_k
        self.llm_client = llm_client

    async def dense_search(self, query_text: str, top_k: Optional[int] = None) -> List[models.ScoredPoint]:
        """
        Perform a dense embedding search over the document chunks.

        Args:
            query_text (str): The raw user query.
            top_k (Optional[int], optional): Number of top results to return.
                Defaults to self.dense_k if not provided.

        Returns:
            List[models.ScoredPoint]: A list of matching Qdrant points with scores.
        """
        query_emb = (await self.llm_client.embed(query_text))[0]
        logger.info(f"Embedding length: {len(query_emb)}")
        results = await self.client.query_points(
            collection_name=self.collection_name,
            query=query_emb,
            using="dense",
            limit=top_k or self.dense_k,
        )
        return results.points

    def _sparse_embed(self, query_text: str) -> list:
        return list(self.sparse_model.query_embed(query_text))

    async def sparse_search(self, query_text: str, top_k: Optional[int] = None) -> List[models.ScoredPoint]:
        """
        Perform a sparse BM25 embedding search over the document chunks.

        Args:
            query_text (str): The raw user query.
            top_k (Optional[int], optional): Number of top results to return.
                Defaults to self.sparse_k if not provided.

        Returns:
            List[models.ScoredPoint]: A list of matching Qdrant points with scores.
        """
        sparse_vec = (await run_in_threadpool(self._sparse_embed, query_text))[0]

        sparse_qdrant = models.SparseVector(
            indices=sparse_vec.indices.tolist(),
            values=sparse_vec.values.tolist(),
        )

        results = await self.client.query_points(
            collection_name=self.collection_name,
            query=sparse_qdrant,
            using="sparse",
            limit=top_k or self.sparse_k,
        )
        return results.points

    async def retrieve(self, query_text: str, top_k: Optional[int] = None) -> List[str]:
        """
        Retrieve the text of the best-matching chunks with the configured mode.

        Points without the text payload field are skipped.

        Returns:
            List[str]: Chunk texts, best match first.
        """
        if self.mode == "dense":
            points = await self.dense_search(query_text, top_k)
        else:
            points = await self.sparse_search(query_text, top_k)
        passages = [
            str(p.payload[self.text_key])
            for p in points
            if p.payload and p.payload.get(self.text_key)
        ]
        logger.info(f"Retrieved {len(passages)} passages ({self.mode})")
        return passages

    async def aclose(self):
        await self.client.close()

"""Shared fixtures."""

from collections.abc import AsyncIterator

from chromadb.api.types import Documents, EmbeddingFunction, Embeddings
import pytest

from carsonrent.services.factory import ApplicationContext, create_test_application_context


class FakeEmbeddingFunction(EmbeddingFunction[Documents]):
    """Deterministic embedding function for testing.

    Generates embeddings based on document length to produce
    consistent, predictable vectors without downloading a model.
    """

    def __init__(self, dim: int = 16) -> None:
        self.dim = dim

    def __call__(self, input: Documents) -> Embeddings:
        embeddings: Embeddings = []
        for doc in input:
            seed = len(doc) * 0.001
            embedding = [seed + (i * 0.0001) for i in range(self.dim)]
            embeddings.append(embedding)
        return embeddings


@pytest.fixture
def fake_embedding_function() -> FakeEmbeddingFunction:
    """Create a fake embedding function for testing."""
    return FakeEmbeddingFunction()


@pytest.fixture
def test_context(fake_embedding_function: FakeEmbeddingFunction) -> ApplicationContext:
    """Create an uninitialized in-memory application context."""
    return create_test_application_context(embedding_function=fake_embedding_function)


@pytest.fixture
async def initialized_context(test_context: ApplicationContext) -> AsyncIterator[ApplicationContext]:
    """Create an in-memory application context with tables and collections ready."""
    await test_context.initialize()
    yield test_context
    await test_context.close()

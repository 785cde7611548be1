"""
Helium — Movie Service Unit Tests
===================================

What we test:
    ✅ Create then get round-trip
    ✅ Replace keeps the stored id and partition key, rejects mismatched ids
    ✅ Replace / delete of unknown movies raise NotFoundError
    ✅ Validation failures short-circuit before any store write
    ✅ Upserting the same document twice leaves one document
    ✅ Persisted movies keep textSearch equal to the lowercased title
"""

from unittest.mock import AsyncMock

import pytest

from helium.exceptions import NotFoundError, StoreError, ValidationError


class TestMovieServiceCreate:

    @pytest.mark.asyncio
    async def test_create_then_get(self, services, sample_movie):
        created = await services.movies.create_movie(sample_movie)
        fetched = await services.movies.get_movie("m1")

        assert created["title"] == "X"
        assert fetched["title"] == "X"
        assert fetched["year"] == 1994

    @pytest.mark.asyncio
    async def test_create_is_idempotent(self, services, memory_store, sample_movie):
        await services.movies.create_movie(sample_movie)
        await services.movies.create_movie(sample_movie)

        assert len(memory_store.documents) == 1
        assert len(await services.movies.list_movies()) == 1

    @pytest.mark.asyncio
    async def test_validation_failure_skips_store(self, services, memory_store):
        memory_store.upsert_document = AsyncMock()

        with pytest.raises(ValidationError):
            await services.movies.create_movie({"type": "Movie", "title": "X"})

        memory_store.upsert_document.assert_not_awaited()


class TestMovieServiceReplace:

    @pytest.mark.asyncio
    async def test_replace_keeps_id_and_key(self, services, memory_store, sample_movie):
        memory_store.add(dict(sample_movie, id="doc42", key="5"))

        payload = dict(sample_movie, title="Y", textSearch="y")
        result = await services.movies.replace_movie("m1", payload)

        assert result["id"] == "doc42"
        assert result["key"] == "5"
        assert result["title"] == "Y"
        assert len(memory_store.documents) == 1
        assert (await services.movies.get_movie("m1"))["textSearch"] == "y"

    @pytest.mark.asyncio
    async def test_replace_rejects_mismatched_movie_id(self, services, memory_store, sample_movie):
        memory_store.add(dict(sample_movie, key="0"))

        with pytest.raises(ValidationError) as exc_info:
            await services.movies.replace_movie("m2", sample_movie)

        assert exc_info.value.messages == ['"movieId" must be equal to "m2"']
        assert memory_store.upserts == []

    @pytest.mark.asyncio
    async def test_replace_unknown_movie(self, services, memory_store, sample_movie):
        with pytest.raises(NotFoundError):
            await services.movies.replace_movie("m1", sample_movie)
        assert memory_store.upserts == []

    @pytest.mark.asyncio
    async def test_invalid_replace_never_looks_up(self, services, memory_store):
        with pytest.raises(ValidationError):
            await services.movies.replace_movie("m1", {"movieId": "m1"})
        assert memory_store.queries == []


class TestMovieServiceDelete:

    @pytest.mark.asyncio
    async def test_delete_then_get_is_not_found(self, services, memory_store, sample_movie):
        await services.movies.create_movie(sample_movie)

        await services.movies.delete_movie("m1")

        assert memory_store.documents == {}
        with pytest.raises(NotFoundError):
            await services.movies.get_movie("m1")

    @pytest.mark.asyncio
    async def test_delete_unknown_movie(self, services):
        with pytest.raises(NotFoundError) as exc_info:
            await services.movies.delete_movie("m404")
        assert exc_info.value.resource == "Movie"

    @pytest.mark.asyncio
    async def test_delete_race_reports_movie_not_found(self, services, memory_store, sample_movie):
        memory_store.add(dict(sample_movie, key="0"))
        memory_store.delete_document = AsyncMock(
            side_effect=NotFoundError(resource="document", resource_id="m1")
        )

        with pytest.raises(NotFoundError) as exc_info:
            await services.movies.delete_movie("m1")
        assert exc_info.value.resource == "Movie"
        memory_store.delete_document.assert_awaited_once_with("0", "m1")

    @pytest.mark.asyncio
    async def test_delete_store_error(self, services, memory_store, sample_movie):
        memory_store.add(dict(sample_movie, key="0"))
        memory_store.delete_document = AsyncMock(side_effect=StoreError("500: boom"))

        with pytest.raises(StoreError):
            await services.movies.delete_movie("m1")


# Mixed case, accents, spaces and special casings
VARIED_TITLES = [
    "The Matrix",
    "AMÉLIE",
    "Die Straße",
    "mIxEd CaSe TiTlE",
    "Crouching Tiger,  Hidden Dragon",
    "Ça Ira",
    "İstanbul Hatırası",
    "ΣΩΚΡΆΤΗΣ",
    "Léon: The Professional",
]


class TestPersistedTextSearch:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("index,title", list(enumerate(VARIED_TITLES)))
    async def test_create_stores_lowercased_title(
        self, services, memory_store, sample_movie, index, title
    ):
        movie_id = f"tt{index:07d}"
        payload = dict(
            sample_movie, id=movie_id, movieId=movie_id, title=title, textSearch=title.lower()
        )

        await services.movies.create_movie(payload)

        stored = memory_store.upserts[-1]
        assert stored["textSearch"] == stored["title"].lower()
        assert stored["textSearch"] == title.lower()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", VARIED_TITLES)
    async def test_replace_stores_lowercased_title(
        self, services, memory_store, sample_movie, title
    ):
        memory_store.add(dict(sample_movie, key="0"))

        await services.movies.replace_movie(
            "m1", dict(sample_movie, title=title, textSearch=title.lower())
        )

        assert memory_store.upserts[-1]["textSearch"] == title.lower()

"""Tests for ProfilesService."""

import pytest
import pytest_asyncio

from folio.profiles import Profile


ALICE = "user:Alice"
BOB = "user:Bob"
GHOST = "user:NonExistent"
SCIFI, FANTASY, MYSTERY = "genre:SciFi", "genre:Fantasy", "genre:Mystery"
DUNE, LOTR, FOUNDATION = "book:Dune", "book:LOTR", "book:Foundation"


@pytest_asyncio.fixture
async def alice(profiles):
    """Profiles service with Alice's empty profile created."""
    await profiles.create_profile(owner=ALICE)
    return profiles


class TestCreateProfile:
    @pytest.mark.asyncio
    async def test_creates_empty_profile(self, profiles):
        assert await profiles.create_profile(owner=ALICE) == {}

        result = await profiles.get_profile(owner=ALICE)
        assert result == {"profile": Profile(owner=ALICE)}

    @pytest.mark.asyncio
    async def test_duplicate(self, alice):
        result = await alice.create_profile(owner=ALICE)

        assert result == {"error": f"Profile for user {ALICE} already exists."}

    @pytest.mark.asyncio
    async def test_missing_profile_is_none(self, profiles):
        assert await profiles.get_profile(owner=GHOST) == {"profile": None}


class TestMissingProfile:
    """Every action and list query needs an existing profile."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("operation", "kwargs"),
        [
            ("add_genre", {"genre": SCIFI}),
            ("remove_genre", {"genre": SCIFI}),
            ("add_current_book", {"book": DUNE}),
            ("remove_current_book", {"book": DUNE}),
            ("add_finished_book", {"book": DUNE}),
            ("get_genres", {}),
            ("get_current_books", {}),
            ("get_finished_books", {}),
        ],
    )
    async def test_not_found(self, profiles, operation, kwargs):
        result = await getattr(profiles, operation)(owner=GHOST, **kwargs)

        assert result == {"error": f"Profile for user {GHOST} not found."}


class TestGenres:
    @pytest.mark.asyncio
    async def test_add_genres_in_order(self, alice):
        assert await alice.add_genre(owner=ALICE, genre=SCIFI) == {}
        await alice.add_genre(owner=ALICE, genre=FANTASY)

        assert await alice.get_genres(owner=ALICE) == {"genres": [SCIFI, FANTASY]}

    @pytest.mark.asyncio
    async def test_add_duplicate_genre(self, alice):
        await alice.add_genre(owner=ALICE, genre=FANTASY)

        result = await alice.add_genre(owner=ALICE, genre=FANTASY)

        assert result == {
            "error": f"Genre {FANTASY} is already in user {ALICE}'s profile."
        }

    @pytest.mark.asyncio
    async def test_remove_genre(self, alice):
        await alice.add_genre(owner=ALICE, genre=SCIFI)
        await alice.add_genre(owner=ALICE, genre=FANTASY)

        assert await alice.remove_genre(owner=ALICE, genre=SCIFI) == {}

        assert await alice.get_genres(owner=ALICE) == {"genres": [FANTASY]}

    @pytest.mark.asyncio
    async def test_remove_missing_genre(self, alice):
        result = await alice.remove_genre(owner=ALICE, genre=MYSTERY)

        assert result == {"error": f"Genre {MYSTERY} is not in user {ALICE}'s profile."}


class TestBooks:
    @pytest.mark.asyncio
    async def test_add_current_book(self, alice):
        assert await alice.add_current_book(owner=ALICE, book=DUNE) == {}

        assert await alice.get_current_books(owner=ALICE) == {"current_books": [DUNE]}

    @pytest.mark.asyncio
    async def test_add_current_duplicate(self, alice):
        await alice.add_current_book(owner=ALICE, book=LOTR)

        result = await alice.add_current_book(owner=ALICE, book=LOTR)

        assert result == {
            "error": f"Book {LOTR} is already in user {ALICE}'s current books."
        }

    @pytest.mark.asyncio
    async def test_add_current_already_finished(self, alice):
        await alice.add_current_book(owner=ALICE, book=FOUNDATION)
        await alice.add_finished_book(owner=ALICE, book=FOUNDATION)

        result = await alice.add_current_book(owner=ALICE, book=FOUNDATION)

        assert result == {
            "error": f"Book {FOUNDATION} is already in user {ALICE}'s finished books."
        }

    @pytest.mark.asyncio
    async def test_remove_current_book(self, alice):
        await alice.add_current_book(owner=ALICE, book=DUNE)
        await alice.add_current_book(owner=ALICE, book=LOTR)

        assert await alice.remove_current_book(owner=ALICE, book=DUNE) == {}

        assert await alice.get_current_books(owner=ALICE) == {"current_books": [LOTR]}

    @pytest.mark.asyncio
    async def test_remove_missing_current_book(self, alice):
        result = await alice.remove_current_book(owner=ALICE, book=DUNE)

        assert result == {
            "error": f"Book {DUNE} is not in user {ALICE}'s current books."
        }

    @pytest.mark.asyncio
    async def test_finish_moves_book(self, alice):
        """Test a finished book leaves current books."""
        await alice.add_current_book(owner=ALICE, book=DUNE)

        assert await alice.add_finished_book(owner=ALICE, book=DUNE) == {}

        assert await alice.get_current_books(owner=ALICE) == {"current_books": []}
        assert await alice.get_finished_books(owner=ALICE) == {"finished_books": [DUNE]}

    @pytest.mark.asyncio
    async def test_finish_requires_current(self, alice):
        result = await alice.add_finished_book(owner=ALICE, book=DUNE)

        assert result == {
            "error": f"Book {DUNE} is not in user {ALICE}'s current books, "
            "cannot mark as finished."
        }


class TestPrinciple:
    @pytest.mark.asyncio
    async def test_profile_tracks_interests_and_history(self, profiles):
        """Create a profile, then record genres and reading history."""
        await profiles.create_profile(owner=BOB)
        await profiles.add_genre(owner=BOB, genre=SCIFI)
        await profiles.add_genre(owner=BOB, genre=FANTASY)
        await profiles.add_current_book(owner=BOB, book=DUNE)
        await profiles.add_current_book(owner=BOB, book=LOTR)
        await profiles.add_finished_book(owner=BOB, book=DUNE)

        profile = (await profiles.get_profile(owner=BOB))["profile"]

        assert profile.genres == [SCIFI, FANTASY]
        assert profile.current_books == [LOTR]
        assert profile.finished_books == [DUNE]

"""Tests for the viewer HTTP API."""

import pytest
from httpx import ASGITransport, AsyncClient

from binderview.api.deps import get_session
from binderview.main import app
from binderview.models.card import CatalogCard
from binderview.services.notifications import NotificationChannel
from binderview.services.preferences import MemoryStore, PersistenceError, PreferenceStore
from binderview.services.viewer import ViewerSession


class ReadOnlyStore(MemoryStore):
    def set(self, key: str, value: str) -> None:
        raise PersistenceError(key, "storage is read-only")


def _session(storage: MemoryStore | None = None) -> ViewerSession:
    channel = NotificationChannel()
    return ViewerSession(
        PreferenceStore(storage or MemoryStore(), channel), channel, page_size=2
    )


@pytest.fixture
def viewer(sample_cards: list[CatalogCard]) -> ViewerSession:
    session = _session()
    session.load_cards(sample_cards)
    return session


@pytest.fixture
async def client(viewer: ViewerSession):
    """Provide an async test client bound to the test viewer session."""
    app.dependency_overrides[get_session] = lambda: viewer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


class TestGetCards:
    async def test_first_batch(self, client: AsyncClient) -> None:
        response = await client.get("/cards")

        assert response.status_code == 200
        data = response.json()
        assert [card["id"] for card in data["cards"]] == ["bolt", "ragavan_foil"]
        assert data["has_more"] is True
        assert data["cursor"] == 2
        assert data["total_cards"] == 5
        assert data["filtered_count"] == 14

    async def test_cards_use_catalog_field_names(self, client: AsyncClient) -> None:
        response = await client.get("/cards")

        card = response.json()["cards"][0]
        assert card["set"] == "lea"
        assert card["myPrice"] == 382.5
        assert card["isFavorite"] is False
        assert card["isIgnored"] is False
        assert card["currentQuantity"] == 4

    async def test_batches_until_exhausted(self, client: AsyncClient) -> None:
        sizes = []
        for _ in range(4):
            data = (await client.get("/cards")).json()
            sizes.append(len(data["cards"]))

        assert sizes == [2, 2, 1, 0]
        assert data["has_more"] is False


class TestQueryCards:
    async def test_filter_and_sort(self, client: AsyncClient) -> None:
        await client.get("/cards")

        response = await client.post(
            "/cards/query",
            json={"criteria": {"foil_only": True, "etched_only": True}, "sort": "name_asc"},
        )

        assert response.status_code == 200
        data = response.json()
        assert [card["id"] for card in data["cards"]] == ["ragavan_foil", "sword_etched"]
        assert data["cursor"] == 2
        assert data["has_more"] is False
        assert data["filtered_count"] == 3

    async def test_unknown_sort_keeps_filter_order(self, client: AsyncClient) -> None:
        response = await client.post(
            "/cards/query", json={"criteria": {"rarity": "rare"}, "sort": "by_color"}
        )

        assert [card["id"] for card in response.json()["cards"]] == [
            "sword_etched",
            "command_promo",
        ]

    async def test_invalid_criteria(self, client: AsyncClient) -> None:
        response = await client.post("/cards/query", json={"criteria": {"search_mode": "fuzzy"}})

        assert response.status_code == 422


class TestCardPreferences:
    async def test_toggle_favorite(self, client: AsyncClient, viewer: ViewerSession) -> None:
        await client.post("/cards/bolt/ignored")

        response = await client.post("/cards/bolt/favorite")

        assert response.status_code == 200
        assert response.json() == {
            "card_id": "bolt",
            "favorite": True,
            "ignored": False,
            "warning": None,
        }
        assert viewer.is_favorite("bolt")

    async def test_unknown_card(self, client: AsyncClient) -> None:
        response = await client.post("/cards/nope/favorite")

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["kind"] == "not_found"
        assert "nope" in detail["message"]

    async def test_ignore_and_unignore(self, client: AsyncClient) -> None:
        first = await client.post("/cards/goblin_token/ignored")
        second = await client.post("/cards/goblin_token/ignored")
        removed = await client.delete("/cards/goblin_token/ignored")

        assert first.json()["changed"] is True
        assert second.json()["changed"] is False
        assert removed.json() == {
            "card_id": "goblin_token",
            "ignored": False,
            "changed": True,
            "favorite": False,
            "warning": None,
        }

    async def test_set_quantity(self, client: AsyncClient) -> None:
        response = await client.put("/cards/bolt/quantity", json={"quantity": -5})

        assert response.status_code == 200
        assert response.json()["quantity"] == 0

    async def test_quantity_shows_in_batches(self, client: AsyncClient) -> None:
        await client.put("/cards/bolt/quantity", json={"quantity": 10})

        data = (await client.post("/cards/query", json={})).json()

        assert data["cards"][0]["currentQuantity"] == 10
        assert data["filtered_count"] == 20

    async def test_write_failure_returns_warning(self, sample_cards: list[CatalogCard]) -> None:
        session = _session(ReadOnlyStore())
        session.load_cards(sample_cards)
        app.dependency_overrides[get_session] = lambda: session

        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.post("/cards/bolt/favorite")
                current = await client.get("/notifications/current")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json()["favorite"] is True
        assert "favorites" in response.json()["warning"]
        assert current.json()["severity"] == "warning"


class TestFavoritesEndpoints:
    async def test_export_empty(self, client: AsyncClient) -> None:
        response = await client.get("/favorites/export")

        assert response.status_code == 204

    async def test_export(self, client: AsyncClient) -> None:
        await client.post("/cards/bolt/favorite")

        response = await client.get("/favorites/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0].startswith("id,Name,Set,Collector Number")
        assert lines[1].startswith("bolt,Lightning Bolt,LEA,161")

    async def test_import(self, client: AsyncClient) -> None:
        response = await client.post(
            "/favorites/import", json={"text": "ID\nbolt\ncommand_promo\nmissing\n"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "imported": 2,
            "total_rows": 3,
            "not_found": 1,
            "warning": None,
        }

    async def test_import_empty_csv(self, client: AsyncClient) -> None:
        response = await client.post("/favorites/import", json={"text": ""})

        assert response.status_code == 400

    async def test_clear_lists(self, client: AsyncClient) -> None:
        await client.post("/cards/bolt/favorite")
        await client.post("/cards/goblin_token/ignored")
        await client.post("/cards/sword_etched/ignored")

        favorites = await client.delete("/favorites")
        ignored = await client.delete("/ignored")

        assert favorites.json()["cleared"] == 1
        assert ignored.json()["cleared"] == 2


class TestNotificationsEndpoint:
    async def test_no_notification(self, client: AsyncClient) -> None:
        response = await client.get("/notifications/current")

        assert response.status_code == 200
        assert response.json() is None

    async def test_current_and_dismiss(self, client: AsyncClient) -> None:
        await client.delete("/favorites")

        current = await client.get("/notifications/current")
        dismissed = await client.delete("/notifications/current")
        after = await client.get("/notifications/current")

        assert current.json()["severity"] == "info"
        assert current.json()["message"] == "Favorite list is already empty."
        assert dismissed.status_code == 204
        assert after.json() is None


class TestCatalogUnavailable:
    async def test_cards_return_503(self) -> None:
        session = _session()
        app.dependency_overrides[get_session] = lambda: session

        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.get("/cards")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 503
        assert response.json()["detail"]["kind"] == "catalog_unavailable"
        assert response.json()["detail"]["suggestion"]

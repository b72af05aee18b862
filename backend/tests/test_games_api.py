"""
Game Catalog API — HTTP Endpoint Tests
========================================

What:  End-to-end tests through the FastAPI app with the in-memory backend.
How:   ``test_client`` routes requests to the app over ASGITransport and
       points the repository dependency at the per-test ``memory_repo``.
"""

import uuid

import pytest


async def seed(repo, *games):
    return [await repo.insert(game) for game in games]


class TestRootAndHealth:

    @pytest.mark.asyncio
    async def test_banner(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.text == "Video Game API is running"

    @pytest.mark.asyncio
    async def test_health_with_memory_backend(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "not_used"
        assert body["storage_backend"] == "memory"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/", headers={"X-Request-ID": "trace-42"})
        assert response.headers["X-Request-ID"] == "trace-42"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        response = await test_client.get("/")
        assert len(response.headers["X-Request-ID"]) == 8


class TestListGames:

    @pytest.mark.asyncio
    async def test_empty_catalog(self, test_client):
        response = await test_client.get("/api/games")
        assert response.status_code == 200
        assert response.json() == {
            "games": [],
            "totalPages": 0,
            "currentPage": 1,
            "totalCount": 0,
        }

    @pytest.mark.asyncio
    async def test_pagination(self, test_client, memory_repo, make_game):
        await seed(memory_repo, *(make_game(title=f"Game {i}") for i in range(5)))

        body = (await test_client.get("/api/games", params={"page": 2, "limit": 2})).json()
        assert [g["title"] for g in body["games"]] == ["Game 2", "Game 3"]
        assert body["totalPages"] == 3
        assert body["currentPage"] == 2
        assert body["totalCount"] == 5

    @pytest.mark.asyncio
    async def test_pagination_clamping(self, test_client, memory_repo, make_game):
        await seed(memory_repo, *(make_game(title=f"Game {i}") for i in range(3)))

        body = (await test_client.get("/api/games?page=0&limit=1000")).json()
        assert body["currentPage"] == 1
        assert body["totalPages"] == 1
        assert len(body["games"]) == 3

        body = (await test_client.get("/api/games?page=abc&limit=-1")).json()
        assert body["currentPage"] == 1
        assert len(body["games"]) == 3

        response = await test_client.get("/api/games?page=99999999999999999999999")
        assert response.status_code == 200
        assert response.json()["currentPage"] == 1_000_000
        assert response.json()["games"] == []

    @pytest.mark.asyncio
    async def test_platform_and_genre_filters(self, test_client, memory_repo, make_game):
        await seed(
            memory_repo,
            make_game(title="PC RPG", platforms=["PC"], genre=["RPG"]),
            make_game(title="Xbox Shooter", platforms=["Xbox"], genre=["FPS"]),
            make_game(title="Switch RPG", platforms=["Nintendo"], genre=["RPG"]),
        )

        body = (await test_client.get("/api/games?platform=PC,Xbox")).json()
        assert [g["title"] for g in body["games"]] == ["PC RPG", "Xbox Shooter"]

        body = (await test_client.get("/api/games?platform=PC,Nintendo&genre=RPG")).json()
        assert body["totalCount"] == 2

    @pytest.mark.asyncio
    async def test_sort(self, test_client, memory_repo, make_game):
        await seed(
            memory_repo,
            make_game(title="Mid", price={"amount": 30}),
            make_game(title="Cheap", price={"amount": 5}),
            make_game(title="Dear", price={"amount": 70}),
        )
        body = (await test_client.get("/api/games?sort=-price")).json()
        assert [g["title"] for g in body["games"]] == ["Dear", "Mid", "Cheap"]

    @pytest.mark.asyncio
    async def test_games_are_normalized(self, test_client, memory_repo, sample_game_data):
        await seed(memory_repo, sample_game_data)
        game = (await test_client.get("/api/games")).json()["games"][0]
        assert game["releaseDate"] == "2023-05-12"
        assert game["coverImage"] == "https://images.example.com/covers/totk.jpg"


class TestSearch:

    @pytest.mark.asyncio
    async def test_min_rating_is_inclusive_lower_bound(self, test_client, memory_repo, make_game):
        await seed(
            memory_repo,
            make_game(title="Good", rating=7.9),
            make_game(title="Great", rating=8.0),
            make_game(title="Unrated", rating=None),
        )
        response = await test_client.get("/api/games/search?minRating=8")
        assert response.status_code == 200
        assert [g["title"] for g in response.json()] == ["Great"]

    @pytest.mark.asyncio
    async def test_combined_criteria(self, test_client, memory_repo, make_game):
        await seed(
            memory_repo,
            make_game(title="Zelda Classic", developer="Nintendo EPD", price={"amount": 19.99}),
            make_game(title="ZELDA Deluxe", developer="Nintendo EPD", price={"amount": 59.99}),
            make_game(title="Mario", developer="Nintendo EPD", price={"amount": 9.99}),
        )
        response = await test_client.get(
            "/api/games/search", params={"title": "zelda", "developer": "epd", "maxPrice": "19.99"}
        )
        assert [g["title"] for g in response.json()] == ["Zelda Classic"]

    @pytest.mark.asyncio
    async def test_genre_and_empty_search(self, test_client, memory_repo, make_game):
        await seed(
            memory_repo,
            make_game(title="A", genre=["RPG", "Action"]),
            make_game(title="B", genre=["Puzzle"]),
        )
        genre = (await test_client.get("/api/games/search?genre=RPG")).json()
        assert [g["title"] for g in genre] == ["A"]
        everything = (await test_client.get("/api/games/search")).json()
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_malformed_numbers_are_ignored(self, test_client, memory_repo, sample_game_data):
        await seed(memory_repo, sample_game_data)
        response = await test_client.get("/api/games/search?minRating=lots&maxPrice=cheap")
        assert len(response.json()) == 1


class TestPlatformAndDlcQueries:

    @pytest.mark.asyncio
    async def test_platform(self, test_client, memory_repo, make_game):
        await seed(
            memory_repo,
            make_game(title="Switch", platforms=["Nintendo"]),
            make_game(title="Phone", platforms=["Mobile", "PC"]),
        )
        body = (await test_client.get("/api/games/platform/Mobile")).json()
        assert [g["title"] for g in body] == ["Phone"]
        assert (await test_client.get("/api/games/platform/Dreamcast")).json() == []

    @pytest.mark.asyncio
    async def test_with_dlc(self, test_client, memory_repo, make_game):
        await seed(memory_repo, make_game(title="Expanded"), make_game(title="Base", dlc=None))
        body = (await test_client.get("/api/games/with-dlc")).json()
        assert [g["title"] for g in body] == ["Expanded"]


class TestCreateAndRead:

    @pytest.mark.asyncio
    async def test_create_then_get(self, test_client, sample_game_data):
        created = await test_client.post("/api/games", json=sample_game_data)
        assert created.status_code == 201
        game = created.json()
        uuid.UUID(game["_id"])

        fetched = await test_client.get(f"/api/games/{game['_id']}")
        assert fetched.status_code == 200
        assert fetched.json() == game
        assert game["title"] == sample_game_data["title"]
        assert game["releaseDate"] == "2023-05-12"

    @pytest.mark.asyncio
    async def test_price_string_and_cover_extension(self, test_client, make_game):
        payload = make_game(price={"amount": "19.99"}, coverImage="http://x/img")
        game = (await test_client.post("/api/games", json=payload)).json()
        assert game["price"] == {"amount": 19.99, "currency": "USD"}
        assert game["coverImage"] == "http://x/img.jpg"

    @pytest.mark.asyncio
    async def test_create_invalid_game(self, test_client, make_game):
        response = await test_client.post("/api/games", json=make_game(platforms=["Sega"]))
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"].startswith("Game validation failed")
        assert body["details"]["errors"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["Infinity", "-Infinity", "NaN"])
    async def test_create_rejects_non_finite_price(self, test_client, make_game, amount):
        response = await test_client.post("/api/games", json=make_game(price={"amount": amount}))
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert (await test_client.get("/api/games")).json()["totalCount"] == 0

    @pytest.mark.asyncio
    async def test_release_date_renders_as_utc_day(self, test_client, make_game):
        payload = make_game(releaseDate="2020-01-01T23:00:00-05:00")
        game = (await test_client.post("/api/games", json=payload)).json()
        assert game["releaseDate"] == "2020-01-02"

    @pytest.mark.asyncio
    async def test_create_with_malformed_json(self, test_client):
        response = await test_client.post(
            "/api/games", content="{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_with_fields(self, test_client, memory_repo, sample_game_data):
        [game] = await seed(memory_repo, sample_game_data)
        response = await test_client.get(f"/api/games/{game['_id']}?fields=title,price")
        assert response.json() == {
            "_id": game["_id"],
            "title": sample_game_data["title"],
            "price": {"amount": 69.99, "currency": "USD"},
        }

    @pytest.mark.asyncio
    async def test_get_unknown_game(self, test_client):
        response = await test_client.get(f"/api/games/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["message"] == "Game not found"

    @pytest.mark.asyncio
    async def test_get_malformed_id_is_a_server_error(self, test_client):
        response = await test_client.get("/api/games/not-an-id")
        assert response.status_code == 500
        assert "Cast to UUID failed" in response.json()["message"]


class TestUpdateAndDelete:

    @pytest.mark.asyncio
    async def test_patch_merges_fields(self, test_client, memory_repo, sample_game_data):
        [game] = await seed(memory_repo, sample_game_data)
        response = await test_client.patch(f"/api/games/{game['_id']}", json={"rating": 8.0})
        assert response.status_code == 200
        body = response.json()
        assert body["rating"] == 8.0
        assert body["title"] == sample_game_data["title"]
        assert body["dlc"] == game["dlc"]

    @pytest.mark.asyncio
    async def test_patch_runs_validators(self, test_client, memory_repo, sample_game_data):
        [game] = await seed(memory_repo, sample_game_data)
        response = await test_client.patch(f"/api/games/{game['_id']}", json={"rating": 11})
        assert response.status_code == 400
        stored = await memory_repo.find_by_id(game["_id"])
        assert stored["rating"] == 9.6

    @pytest.mark.asyncio
    async def test_patch_malformed_id(self, test_client):
        response = await test_client.patch("/api/games/123", json={"rating": 5})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid ID format"

    @pytest.mark.asyncio
    async def test_patch_unknown_game(self, test_client):
        response = await test_client.patch(f"/api/games/{uuid.uuid4()}", json={"rating": 5})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_put_replaces_document(self, test_client, memory_repo, sample_game_data, make_game):
        [game] = await seed(memory_repo, sample_game_data)
        replacement = make_game(title="Replaced", dlc=None)
        response = await test_client.put(f"/api/games/{game['_id']}", json=replacement)
        assert response.status_code == 200
        body = response.json()
        assert body["_id"] == game["_id"]
        assert body["title"] == "Replaced"
        assert "dlc" not in body

    @pytest.mark.asyncio
    async def test_put_incomplete_document(self, test_client, memory_repo, sample_game_data):
        [game] = await seed(memory_repo, sample_game_data)
        response = await test_client.put(f"/api/games/{game['_id']}", json={"title": "Only"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_put_malformed_id(self, test_client, sample_game_data):
        response = await test_client.put("/api/games/123", json=sample_game_data)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_put_unknown_game(self, test_client, sample_game_data):
        response = await test_client.put(f"/api/games/{uuid.uuid4()}", json=sample_game_data)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, test_client, memory_repo, sample_game_data):
        [game] = await seed(memory_repo, sample_game_data)
        response = await test_client.delete(f"/api/games/{game['_id']}")
        assert response.status_code == 200
        assert response.json() == {"message": "Game deleted successfully"}

        again = await test_client.delete(f"/api/games/{game['_id']}")
        assert again.status_code == 404
        assert (await test_client.get(f"/api/games/{game['_id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_malformed_id(self, test_client):
        response = await test_client.delete("/api/games/123")
        assert response.status_code == 500


class TestAccessors:

    @pytest.mark.asyncio
    async def test_dedicated_sub_resources(self, test_client, memory_repo, sample_game_data):
        [game] = await seed(memory_repo, sample_game_data)
        base = f"/api/games/{game['_id']}"

        assert (await test_client.get(f"{base}/platforms")).json() == ["Nintendo"]
        assert (await test_client.get(f"{base}/developer")).json() == {"developer": "Nintendo EPD"}
        assert (await test_client.get(f"{base}/screenshots")).json() == sample_game_data["screenshots"]
        requirements = (await test_client.get(f"{base}/requirements")).json()
        assert requirements == {"minimum": {"os": "Switch OS", "storage": "16 GB"}}

        dlc = (await test_client.get(f"{base}/dlc")).json()
        assert dlc["_id"] == game["_id"]
        assert dlc["title"] == sample_game_data["title"]
        assert dlc["dlc"][0]["title"] == "Expansion Pass"

    @pytest.mark.asyncio
    async def test_missing_screenshots(self, test_client, memory_repo, make_game):
        [game] = await seed(memory_repo, make_game(screenshots=None))
        response = await test_client.get(f"/api/games/{game['_id']}/screenshots")
        assert response.status_code == 404
        assert response.json()["message"] == "No screenshots found for this game"

    @pytest.mark.asyncio
    async def test_missing_dlc(self, test_client, memory_repo, make_game):
        [game] = await seed(memory_repo, make_game(dlc=None))
        response = await test_client.get(f"/api/games/{game['_id']}/dlc")
        assert response.status_code == 404
        assert response.json()["message"] == "No DLC found for this game"

    @pytest.mark.asyncio
    async def test_generic_property(self, test_client, memory_repo, make_game):
        [game] = await seed(memory_repo, make_game(rating=8.5, coverImage=None))
        base = f"/api/games/{game['_id']}"

        assert (await test_client.get(f"{base}/rating")).json() == 8.5
        assert (await test_client.get(f"{base}/publisher")).json() == "Nintendo"
        assert (await test_client.get(f"{base}/price")).json() == {"amount": 69.99, "currency": "USD"}
        missing = await test_client.get(f"{base}/coverImage")
        assert missing.status_code == 200
        assert missing.json() is None

    @pytest.mark.asyncio
    async def test_property_outside_allowlist(self, test_client):
        response = await test_client.get(f"/api/games/{uuid.uuid4()}/internalNotes")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid property requested"

    @pytest.mark.asyncio
    async def test_property_of_unknown_game(self, test_client):
        response = await test_client.get(f"/api/games/{uuid.uuid4()}/title")
        assert response.status_code == 404

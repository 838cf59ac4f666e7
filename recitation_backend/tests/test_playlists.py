from datetime import datetime

from sqlalchemy import func, select

from src.api.models import Comment, Like, Playlist, Track

from helpers import add_track, create_playlist


def _titles(resp):
    assert resp.status_code == 200, resp.text
    return [p["title"] for p in resp.json()]


def test_create_playlist_applies_defaults(client, alice):
    playlist = create_playlist(client, alice["headers"], title="Night Prayers")

    assert playlist["title"] == "Night Prayers"
    assert playlist["visibility"] == "public"
    assert playlist["cover_image"] == "https://picsum.photos/seed/quran/400/400"
    assert playlist["created_by"] == alice["user"]["id"]


def test_create_playlist_requires_auth(client):
    resp = client.post("/api/playlists", json={"title": "Night Prayers"})
    assert resp.status_code == 401


def test_create_playlist_validates_title_and_visibility(client, alice):
    short = client.post("/api/playlists", json={"title": "ab"}, headers=alice["headers"])
    assert short.status_code == 400
    assert short.json()["error"][0]["loc"][-1] == "title"

    bad_visibility = client.post(
        "/api/playlists",
        json={"title": "Night Prayers", "visibility": "friends"},
        headers=alice["headers"],
    )
    assert bad_visibility.status_code == 400


def test_list_returns_public_playlists_only(client, alice):
    create_playlist(client, alice["headers"], title="Open Playlist")
    create_playlist(client, alice["headers"], title="Hidden Playlist", visibility="private")

    assert _titles(client.get("/api/playlists")) == ["Open Playlist"]


def test_list_rows_carry_creator_and_counters(client, alice, bob):
    playlist = create_playlist(client, alice["headers"], title="Juz Amma")
    add_track(client, alice["headers"], playlist["id"])
    add_track(client, alice["headers"], playlist["id"])
    client.post(f"/api/playlists/{playlist['id']}/like", headers=bob["headers"])

    (row,) = client.get("/api/playlists").json()
    assert row["creator_name"] == "Alice"
    assert row["creator_avatar"] == alice["user"]["avatar"]
    assert row["tracks_count"] == 2
    assert row["likes_count"] == 1


def test_list_filters_by_exact_category(client, alice):
    create_playlist(client, alice["headers"], title="Before Sleep", category="Sleep")
    create_playlist(client, alice["headers"], title="Sleepy Mornings", category="Sleeping")
    create_playlist(client, alice["headers"], title="Sunrise", category="Morning")

    assert _titles(client.get("/api/playlists", params={"category": "Sleep"})) == ["Before Sleep"]


def test_list_search_is_case_insensitive_on_title_or_description(client, alice):
    create_playlist(client, alice["headers"], title="Morning Azkar")
    create_playlist(client, alice["headers"], title="Fajr Set", description="Recitations for the MORNING commute")
    create_playlist(client, alice["headers"], title="Sleep Protection", description="Al-Mulk before bed")

    titles = _titles(client.get("/api/playlists", params={"search": "morning"}))
    assert sorted(titles) == ["Fajr Set", "Morning Azkar"]


def test_list_search_treats_wildcards_literally(client, alice):
    create_playlist(client, alice["headers"], title="Top 10% Recitations")
    create_playlist(client, alice["headers"], title="Top 10 Recitations")

    assert _titles(client.get("/api/playlists", params={"search": "10%"})) == ["Top 10% Recitations"]


def test_list_default_sort_is_newest_first(client, alice):
    for title in ("First One", "Second One", "Third One"):
        create_playlist(client, alice["headers"], title=title)

    assert _titles(client.get("/api/playlists")) == ["Third One", "Second One", "First One"]


def test_list_sort_by_likes(client, alice, bob):
    quiet = create_playlist(client, alice["headers"], title="Quiet One")
    popular = create_playlist(client, alice["headers"], title="Popular One")
    create_playlist(client, alice["headers"], title="Unliked One")

    client.post(f"/api/playlists/{popular['id']}/like", headers=alice["headers"])
    client.post(f"/api/playlists/{popular['id']}/like", headers=bob["headers"])
    client.post(f"/api/playlists/{quiet['id']}/like", headers=bob["headers"])

    titles = _titles(client.get("/api/playlists", params={"sort": "likes"}))
    assert titles == ["Popular One", "Quiet One", "Unliked One"]


def test_detail_not_found(client):
    resp = client.get("/api/playlists/999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Playlist not found"}


def test_detail_includes_tracks_comments_and_owner(client, alice, bob):
    playlist = create_playlist(client, alice["headers"], title="Full Detail")
    add_track(client, alice["headers"], playlist["id"], surah="Surah Al-Ikhlas")
    add_track(client, alice["headers"], playlist["id"], surah="Surah Al-Falaq")
    client.post(f"/api/playlists/{playlist['id']}/comments", json={"text": "first"}, headers=bob["headers"])
    client.post(f"/api/playlists/{playlist['id']}/comments", json={"text": "second"}, headers=alice["headers"])

    resp = client.get(f"/api/playlists/{playlist['id']}")
    body = resp.json()
    assert body["creator"]["id"] == alice["user"]["id"]
    assert set(body["creator"]) == {"id", "name", "role", "avatar"}
    assert "alice@example.com" not in resp.text
    assert body["creator_name"] == "Alice"
    assert [t["surah_name"] for t in body["tracks"]] == ["Surah Al-Ikhlas", "Surah Al-Falaq"]
    assert [t["order_index"] for t in body["tracks"]] == [1, 2]
    assert [c["text"] for c in body["comments"]] == ["second", "first"]
    assert body["comments"][1]["user_name"] == "Bob"
    assert body["likes_count"] == 0
    assert body["isLiked"] is False


def test_detail_reports_is_liked_for_requesting_user(client, alice, bob):
    playlist = create_playlist(client, alice["headers"])
    client.post(f"/api/playlists/{playlist['id']}/like", headers=bob["headers"])
    url = f"/api/playlists/{playlist['id']}"

    assert client.get(url, headers=bob["headers"]).json()["isLiked"] is True
    assert client.get(url, headers=alice["headers"]).json()["isLiked"] is False
    assert client.get(url).json()["isLiked"] is False


def test_detail_ignores_invalid_token(client, alice):
    playlist = create_playlist(client, alice["headers"])

    resp = client.get(f"/api/playlists/{playlist['id']}", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 200
    assert resp.json()["isLiked"] is False


def test_non_owner_cannot_delete_playlist(client, db, alice, bob):
    playlist = create_playlist(client, alice["headers"])

    resp = client.delete(f"/api/playlists/{playlist['id']}", headers=bob["headers"])
    assert resp.status_code == 403
    assert resp.json() == {"error": "Unauthorized"}
    assert db.get(Playlist, playlist["id"]) is not None


def test_admin_can_delete_any_playlist(client, db, alice, admin):
    playlist = create_playlist(client, alice["headers"])

    resp = client.delete(f"/api/playlists/{playlist['id']}", headers=admin["headers"])
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert db.get(Playlist, playlist["id"]) is None


def test_delete_missing_playlist(client, alice):
    assert client.delete("/api/playlists/404", headers=alice["headers"]).status_code == 404


def test_delete_cascades_to_tracks_likes_and_comments(client, db, alice, bob):
    playlist = create_playlist(client, alice["headers"])
    other = create_playlist(client, alice["headers"], title="Survivor")
    pid = playlist["id"]
    add_track(client, alice["headers"], pid)
    add_track(client, alice["headers"], pid)
    add_track(client, alice["headers"], other["id"])
    client.post(f"/api/playlists/{pid}/like", headers=bob["headers"])
    client.post(f"/api/playlists/{pid}/comments", json={"text": "lovely"}, headers=bob["headers"])

    resp = client.delete(f"/api/playlists/{pid}", headers=alice["headers"])
    assert resp.status_code == 200

    for model in (Track, Like, Comment):
        remaining = db.execute(select(func.count()).select_from(model).where(model.playlist_id == pid)).scalar_one()
        assert remaining == 0, model.__name__
    assert db.execute(select(func.count()).select_from(Track)).scalar_one() == 1


def test_timestamps_carry_utc_offset(client, alice):
    playlist = create_playlist(client, alice["headers"])
    detail = client.get(f"/api/playlists/{playlist['id']}").json()
    listed = client.get("/api/playlists").json()[0]

    for value in (playlist["created_at"], detail["created_at"], listed["created_at"]):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        assert parsed.utcoffset().total_seconds() == 0

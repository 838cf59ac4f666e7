def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, name, email, password="secret123"):
    resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    body["headers"] = auth_headers(body["token"])
    return body


def login(client, email, password):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    body["headers"] = auth_headers(body["token"])
    return body


def create_playlist(client, headers, **fields):
    payload = {"title": "Evening Recitations"}
    payload.update(fields)
    resp = client.post("/api/playlists", json=payload, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def add_track(client, headers, playlist_id, surah="Surah Al-Fatiha"):
    resp = client.post(
        "/api/tracks",
        json={
            "playlist_id": playlist_id,
            "surah_name": surah,
            "reciter": "Mishary Rashid Alafasy",
            "audio_url": "https://server8.mp3quran.net/afs/001.mp3",
            "duration": 60,
        },
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()

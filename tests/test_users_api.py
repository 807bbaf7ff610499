from io import BytesIO

from PIL import Image

from factories import auth_headers, make_video, png_bytes

BASE_URL = "http://localhost:9000/tubeshare-test"


async def test_avatar_upload_is_resized_and_shown_on_videos(client, db_session, alice, fake_s3):
    video = await make_video(db_session, alice)
    alice_id, video_id = alice.id, video.id

    response = await client.patch(
        "/users/avatar",
        files={"avatar": ("me.png", png_bytes(), "image/png")},
        headers=auth_headers(alice_id),
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Avatar image updated successfully"
    avatar_url = response.json()["data"]["avatar"]
    assert avatar_url.startswith(f"{BASE_URL}/avatars/me_")
    _, stored, content_type = fake_s3.objects[avatar_url[len(BASE_URL) + 1:]]
    assert content_type == "image/jpeg"
    width, height = Image.open(BytesIO(stored)).size
    assert width <= 512 and height <= 512

    view = await client.get(f"/videos/{video_id}")
    assert view.json()["data"]["owner"]["avatar"] == avatar_url


async def test_new_avatar_replaces_old_object(client, alice, fake_s3):
    headers = auth_headers(alice.id)
    first = await client.patch("/users/avatar", files={"avatar": ("a.png", png_bytes(), "image/png")}, headers=headers)
    second = await client.patch("/users/avatar", files={"avatar": ("b.png", png_bytes(), "image/png")}, headers=headers)

    old_key = first.json()["data"]["avatar"][len(BASE_URL) + 1:]
    new_key = second.json()["data"]["avatar"][len(BASE_URL) + 1:]
    assert fake_s3.removed == [old_key]
    assert list(fake_s3.objects) == [new_key]


async def test_cover_image_upload(client, alice, fake_s3):
    response = await client.patch(
        "/users/cover-image",
        files={"cover_image": ("banner.png", png_bytes((4000, 1000)), "image/png")},
        headers=auth_headers(alice.id),
    )

    assert response.status_code == 200
    cover_url = response.json()["data"]["cover_image"]
    assert cover_url.startswith(f"{BASE_URL}/covers/banner_")
    _, stored, _ = fake_s3.objects[cover_url[len(BASE_URL) + 1:]]
    assert Image.open(BytesIO(stored)).size == (2048, 512)


async def test_profile_image_must_be_an_image(client, alice, fake_s3):
    response = await client.patch(
        "/users/avatar",
        files={"avatar": ("me.png", b"plain text", "text/plain")},
        headers=auth_headers(alice.id),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "File is not a supported image"
    assert fake_s3.objects == {}


async def test_profile_images_require_login(client, fake_s3):
    response = await client.patch("/users/avatar", files={"avatar": ("me.png", png_bytes(), "image/png")})
    assert response.status_code == 401

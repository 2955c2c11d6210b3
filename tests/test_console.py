# tests/test_console.py
import os
from urllib.parse import parse_qs, urlparse

from vgosti import models
from vgosti.config import settings

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32

CABIN_FORM = {
    "name": "Домик у маяка",
    "description": "Вид на маяк",
    "price_per_night": "7300",
    "location": "Мыс",
    "bedrooms": "2",
    "bathrooms": "1",
    "max_guests": "4",
    "amenities": "Wi-Fi\nКамин\n\nWi-Fi",
    "images": "https://example.com/a.jpg\n",
    "featured": "on",
}


def query(response):
    return parse_qs(urlparse(response.headers["location"]).query)


def test_logged_out_console_shows_login(client):
    response = client.get("/admin")
    assert response.status_code == 200
    assert 'action="/admin/login"' in response.text
    assert 'name="password"' in response.text


def test_other_single_segment_is_not_the_console(client):
    response = client.get("/dashboard")
    assert response.status_code == 404


def test_console_login_rejects_bad_password(client):
    response = client.post("/admin/login", data={"username": "admin", "password": "wrong"})
    assert response.status_code == 401
    assert "Неверный логин или пароль" in response.text
    assert "admin_token" not in client.cookies


def test_console_login_on_wrong_path(client):
    response = client.post("/elsewhere/login", data={"username": "admin", "password": "admin123"})
    assert response.status_code == 404


def test_console_renders_every_tab(console):
    for tab, marker in [
        ("cabins", "Новый домик"),
        ("gallery", 'name="gallery_images"'),
        ("content", 'name="feature_title"'),
        ("settings", 'name="site_name"'),
        ("reviews", "Отзывов пока нет"),
        ("identity", 'name="password_confirm"'),
    ]:
        response = console.get("/admin", params={"tab": tab})
        assert response.status_code == 200, tab
        assert marker in response.text, tab


def test_console_posts_require_login(client):
    response = client.post("/admin/cabins", data=CABIN_FORM, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/admin"
    assert len(client.get("/api/cabins").json()) == 2


def test_console_posts_on_wrong_path(console):
    response = console.post("/not-admin/cabins", data=CABIN_FORM, follow_redirects=False)
    assert response.status_code == 404


def test_create_cabin(console):
    response = console.post("/admin/cabins", data=CABIN_FORM, follow_redirects=False)
    assert response.status_code == 303
    assert query(response)["notice"] == ["Домик добавлен"]

    cabin = console.get("/api/cabins").json()[0]
    assert cabin["name"] == "Домик у маяка"
    assert cabin["pricePerNight"] == 7300
    assert cabin["amenities"] == ["Wi-Fi", "Камин"]
    assert cabin["images"] == ["https://example.com/a.jpg"]
    assert cabin["featured"] is True


def test_create_cabin_with_uploaded_photo(console):
    response = console.post(
        "/admin/cabins",
        data={**CABIN_FORM, "images": ""},
        files=[("new_images", ("lighthouse.png", PNG_BYTES, "image/png"))],
        follow_redirects=False,
    )
    assert response.status_code == 303
    images = console.get("/api/cabins").json()[0]["images"]
    assert len(images) == 1
    assert images[0].startswith("/uploads/image-")
    assert os.path.exists(os.path.join(settings.UPLOAD_DIR, os.path.basename(images[0])))


def test_create_cabin_rejects_non_image_upload(console):
    response = console.post(
        "/admin/cabins",
        data=CABIN_FORM,
        files=[("new_images", ("notes.txt", b"text", "text/plain"))],
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert query(response)["error"] == ["Only image files are allowed!"]
    assert len(console.get("/api/cabins").json()) == 2


def test_create_cabin_validation_error(console):
    response = console.post("/admin/cabins", data={**CABIN_FORM, "name": " ", "price_per_night": "-5"},
                            follow_redirects=False)
    assert response.status_code == 303
    assert "error" in query(response)
    assert len(console.get("/api/cabins").json()) == 2


def test_edit_form_is_prefilled(console):
    cabin = console.get("/api/cabins").json()[0]
    response = console.get("/admin", params={"tab": "cabins", "edit": cabin["id"]})
    assert f"Редактирование: {cabin['name']}" in response.text
    assert f'action="/admin/cabins/{cabin["id"]}"' in response.text


def test_update_cabin(console):
    cabin = console.get("/api/cabins").json()[0]
    response = console.post(f"/admin/cabins/{cabin['id']}", data={**CABIN_FORM, "featured": ""},
                            follow_redirects=False)
    assert response.status_code == 303
    updated = console.get(f"/api/cabins/{cabin['id']}").json()
    assert updated["name"] == "Домик у маяка"
    assert updated["featured"] is False


def test_update_unknown_cabin(console):
    response = console.post("/admin/cabins/9999", data=CABIN_FORM, follow_redirects=False)
    assert response.status_code == 404


def test_delete_cabin(console):
    cabin = console.get("/api/cabins").json()[0]
    response = console.post(f"/admin/cabins/{cabin['id']}/delete", follow_redirects=False)
    assert response.status_code == 303
    assert console.get(f"/api/cabins/{cabin['id']}").status_code == 404
    assert console.post(f"/admin/cabins/{cabin['id']}/delete").status_code == 404


def test_save_gallery(console):
    response = console.post(
        "/admin/gallery",
        data={"gallery_images": "/uploads/one.jpg\n/uploads/two.jpg"},
        files=[("new_images", ("three.png", PNG_BYTES, "image/png"))],
        follow_redirects=False,
    )
    assert response.status_code == 303
    gallery = console.get("/api/settings").json()["galleryImages"]
    assert gallery[:2] == ["/uploads/one.jpg", "/uploads/two.jpg"]
    assert gallery[2].startswith("/uploads/image-")

def stored_uploads():
    return set(os.listdir(settings.UPLOAD_DIR))


def test_mixed_batch_writes_no_files(console):
    before = stored_uploads()
    response = console.post(
        "/admin/cabins",
        data=CABIN_FORM,
        files=[
            ("new_images", ("a.png", PNG_BYTES, "image/png")),
            ("new_images", ("notes.txt", b"text", "text/plain")),
        ],
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert query(response)["error"] == ["Only image files are allowed!"]
    assert stored_uploads() == before
    assert len(console.get("/api/cabins").json()) == 2


def test_invalid_form_with_photo_writes_no_files(console):
    before = stored_uploads()
    response = console.post(
        "/admin/cabins",
        data={**CABIN_FORM, "name": " "},
        files=[("new_images", ("a.png", PNG_BYTES, "image/png"))],
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert "error" in query(response)
    assert stored_uploads() == before


def test_photo_for_unknown_cabin_is_discarded(console):
    before = stored_uploads()
    response = console.post(
        "/admin/cabins/9999",
        data=CABIN_FORM,
        files=[("new_images", ("a.png", PNG_BYTES, "image/png"))],
        follow_redirects=False,
    )
    assert response.status_code == 404
    assert stored_uploads() == before


def test_gallery_mixed_batch_writes_no_files(console):
    before = stored_uploads()
    response = console.post(
        "/admin/gallery",
        data={"gallery_images": "/uploads/one.jpg"},
        files=[
            ("new_images", ("a.png", PNG_BYTES, "image/png")),
            ("new_images", ("notes.txt", b"text", "text/plain")),
        ],
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert query(response)["error"] == ["Only image files are allowed!"]
    assert stored_uploads() == before
    assert "galleryImages" not in console.get("/api/settings").json()



def test_save_content(console):
    response = console.post(
        "/admin/content",
        data={
            "feature_title": ["Тишина", ""],
            "feature_description": ["Никаких соседей", ""],
            "about_title": "Кто мы",
            "about_values": "Честность\nЗабота",
        },
        follow_redirects=False,
    )
    assert response.status_code == 303
    stored = console.get("/api/settings").json()
    assert stored["whyChooseUs"] == [{"title": "Тишина", "description": "Никаких соседей"}]
    assert stored["aboutContent"]["title"] == "Кто мы"
    assert stored["aboutContent"]["values"] == ["Честность", "Забота"]
    assert stored["aboutContent"]["mission"]  # untouched fields keep their copy
    assert "Кто мы" in console.get("/about").text


def test_save_site_settings(console):
    response = console.post(
        "/admin/settings",
        data={
            "site_name": "Дом у моря",
            "phone": "+7 (900) 111-22-33",
            "email": "hello@dom.ru",
            "telegram": "@dom",
            "accommodation_rules": "Тишина после 23:00\nБез курения",
        },
        follow_redirects=False,
    )
    assert response.status_code == 303
    stored = console.get("/api/settings").json()
    assert stored["siteName"] == "Дом у моря"
    assert stored["contactInfo"]["phone"] == "+7 (900) 111-22-33"
    assert stored["contactInfo"]["telegram"] == "@dom"
    assert stored["accommodationRules"] == ["Тишина после 23:00", "Без курения"]

    cabin = console.get("/api/cabins").json()[0]
    detail = console.get(f"/cabin/{cabin['id']}").text
    assert "phone=79001112233" in detail
    assert "Без курения" in detail


def test_moderate_reviews(console, db):
    review_id = console.post("/api/reviews", json={
        "name": "Ольга", "email": "olga@mail.ru", "rating": 5, "comment": "Прекрасно",
    }).json()["id"]
    assert "olga@mail.ru" in console.get("/admin", params={"tab": "reviews"}).text

    console.post(f"/admin/reviews/{review_id}/approve")
    assert [r["id"] for r in console.get("/api/reviews").json()] == [review_id]

    console.post(f"/admin/reviews/{review_id}/delete")
    assert db.query(models.Review).count() == 0
    assert console.post(f"/admin/reviews/{review_id}/delete").status_code == 404


def test_change_credentials(console):
    mismatch = console.post(
        "/admin/credentials",
        data={"username": "host", "password": "one", "password_confirm": "two"},
        follow_redirects=False,
    )
    assert query(mismatch)["error"] == ["Пароли не совпадают"]

    response = console.post(
        "/admin/credentials",
        data={"username": "host", "password": "n3w", "password_confirm": "n3w"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert console.post("/api/admin/login", json={"username": "host", "password": "n3w"}).status_code == 200
    assert console.post("/api/admin/login", json={"username": "admin", "password": "admin123"}).status_code == 401


def test_change_console_path(console):
    response = console.post("/admin/path", data={"path": "backstage"}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"].startswith("/backstage?")
    assert console.get("/api/admin/path").json() == {"path": "backstage"}

    assert console.get("/admin").status_code == 404
    assert "Панель управления" in console.get("/backstage").text


def test_change_console_path_rejects_reserved(console):
    response = console.post("/admin/path", data={"path": "cabins"}, follow_redirects=False)
    assert "error" in query(response)
    assert console.get("/api/admin/path").json() == {"path": "admin"}


def test_logout(console):
    response = console.post("/admin/logout", follow_redirects=False)
    assert response.status_code == 303
    assert "admin_token" not in console.cookies
    assert 'name="password"' in console.get("/admin").text

# tests/test_settings.py
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from vgosti import database, models
from vgosti.site_content import (
    DEFAULT_ACCOMMODATION_RULES,
    DEFAULT_FEATURES,
    build_site_content,
    load_site_content,
    read_settings,
    save_settings,
)


def test_settings_start_empty(client):
    response = client.get("/api/settings")
    assert response.status_code == 200
    assert response.json() == {}


def test_update_requires_admin(client):
    assert client.put("/api/settings", json={"siteName": "X"}).status_code == 401


def test_roundtrip_keeps_json_types(client, admin_headers):
    values = {
        "siteName": "В гости",
        "galleryImages": ["/uploads/a.jpg", "/uploads/b.jpg"],
        "contactInfo": {"phone": "+7 900 000-00-00", "socialMedia": {"vk": "https://vk.com/x"}},
        "maintenance": False,
    }
    response = client.put("/api/settings", json=values, headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Settings updated successfully"}
    assert client.get("/api/settings").json() == values


def test_update_overwrites_only_given_keys(client, admin_headers):
    client.put("/api/settings", json={"siteName": "Old", "phone": "1"}, headers=admin_headers)
    client.put("/api/settings", json={"siteName": "New"}, headers=admin_headers)
    assert client.get("/api/settings").json() == {"siteName": "New", "phone": "1"}


def test_update_rejects_non_object_body(client, admin_headers):
    response = client.put("/api/settings", json=["not", "a", "mapping"], headers=admin_headers)
    assert response.status_code == 422


def test_raw_string_values_pass_through(db):
    db.add(models.SiteSetting(key="legacy", value="not json at all"))
    db.commit()
    assert read_settings(db) == {"legacy": "not json at all"}


def test_batch_is_all_or_nothing(db):
    save_settings(db, {"a": 1})
    with pytest.raises(TypeError):
        save_settings(db, {"a": 2, "b": {1, 2}})
    assert read_settings(db) == {"a": 1}


def test_empty_batch_is_a_no_op(db):
    save_settings(db, {})
    assert read_settings(db) == {}


def test_defaults_when_nothing_stored():
    content = build_site_content({})
    assert content.site.site_name == "В гости"
    assert content.features == DEFAULT_FEATURES
    assert content.accommodation_rules == DEFAULT_ACCOMMODATION_RULES
    assert content.contact.whatsapp == "79654111555"


def test_stored_values_override_defaults():
    content = build_site_content({
        "siteName": "Дом у моря",
        "heroTitle": "Отдыхайте",
        "whyChooseUs": [{"title": "Тишина", "description": "Никаких соседей"}],
        "accommodationRules": ["Тишина после 23:00"],
    })
    assert content.site.site_name == "Дом у моря"
    assert content.hero.title == "Отдыхайте"
    assert content.hero.subtitle  # default kept
    assert [f.title for f in content.features] == ["Тишина"]
    assert content.accommodation_rules == ["Тишина после 23:00"]


def test_malformed_values_fall_back_per_key():
    content = build_site_content({
        "siteName": 42,
        "whyChooseUs": [{"title": "no description"}],
        "galleryImages": "one.jpg",
        "aboutContent": {"stats": {"happyGuests": "many"}},
        "heroTitle": "Работает",
    })
    assert content.site.site_name == "В гости"
    assert content.features == DEFAULT_FEATURES
    assert len(content.gallery_images) == 5
    assert content.about.stats.happy_guests == 1200
    assert content.hero.title == "Работает"


def test_partial_nested_object_is_merged():
    content = build_site_content({"contactInfo": {"telegram": "@sea"}, "aboutContent": {"title": "Кто мы"}})
    assert content.contact.telegram == "@sea"
    assert content.contact.email == "info@vgosti.ru"
    assert content.about.title == "Кто мы"
    assert len(content.about.team) == 2


def test_top_level_contacts_win_over_contact_info():
    content = build_site_content({"phone": "+7 (111) 222-33-44", "contactInfo": {"phone": "+7 000"}})
    assert content.contact.phone == "+7 (111) 222-33-44"
    assert content.contact.whatsapp == "71112223344"


def test_load_site_content_reads_store(db):
    save_settings(db, {"heroSubtitle": "Море рядом"})
    assert load_site_content(db).hero.subtitle == "Море рядом"


def test_load_site_content_survives_missing_table(db):
    models.SiteSetting.__table__.drop(bind=db.get_bind())
    content = load_site_content(db)
    assert content.site.site_name == "В гости"


def test_last_hero_title_wins(client, admin_headers):
    client.put("/api/settings", json={"heroTitle": "X"}, headers=admin_headers)
    client.put("/api/settings", json={"heroTitle": "Y"}, headers=admin_headers)
    assert client.get("/api/settings").json()["heroTitle"] == "Y"


def test_repeated_upsert_is_idempotent(db):
    save_settings(db, {"phone": "+7 900"})
    save_settings(db, {"phone": "+7 900"})
    assert read_settings(db) == {"phone": "+7 900"}
    assert db.query(models.SiteSetting).count() == 1


def test_concurrent_first_writes_of_a_key(db):
    writers = 8
    start = threading.Barrier(writers)

    def write(n):
        session = database.SessionLocal()
        try:
            start.wait()
            save_settings(session, {"heroTitle": f"title {n}"})
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=writers) as pool:
        list(pool.map(write, range(writers)))

    assert db.query(models.SiteSetting).filter(models.SiteSetting.key == "heroTitle").count() == 1
    assert read_settings(db)["heroTitle"] in {f"title {n}" for n in range(writers)}

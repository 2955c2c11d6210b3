# tests/test_database.py
import pytest
from sqlalchemy import inspect, text

from vgosti import auth, database, models, seed
from vgosti.database import Base, build_engine, init_db


def test_init_creates_schema_and_indexes():
    inspector = inspect(database.engine)
    tables = set(inspector.get_table_names())
    assert {"cabins", "site_settings", "admin_credentials", "admin_path", "reviews"} <= tables
    cabin_indexes = {ix["name"] for ix in inspector.get_indexes("cabins")}
    assert {"idx_cabins_featured", "idx_cabins_created_at"} <= cabin_indexes
    assert "idx_reviews_approved" in {ix["name"] for ix in inspector.get_indexes("reviews")}


def test_seed_defaults(db):
    credential = db.query(models.AdminCredential).one()
    assert credential.username == "admin"
    assert auth.verify_password("admin123", credential.password_hash)
    assert db.query(models.AdminPath).one().path == "admin"
    prices = sorted(c.price_per_night for c in db.query(models.Cabin).all())
    assert prices == [5000, 8500]


def test_init_is_idempotent(db):
    init_db(database.engine)
    init_db(database.engine)
    assert db.query(models.Cabin).count() == 2
    assert db.query(models.AdminCredential).count() == 1
    assert db.query(models.AdminPath).count() == 1


def test_seed_leaves_existing_data_alone(db):
    db.query(models.Cabin).delete()
    db.add(models.Cabin(name="Единственный", price_per_night=100))
    db.commit()
    init_db(database.engine)
    assert [c.name for c in db.query(models.Cabin).all()] == ["Единственный"]


def test_failed_init_rolls_back(monkeypatch, tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'broken.sqlite'}")

    def explode(session):
        session.add(models.AdminPath(path="half-done"))
        session.flush()
        raise RuntimeError("seed failed")

    monkeypatch.setattr(seed, "seed_defaults", explode)
    with pytest.raises(RuntimeError):
        init_db(engine)
    # DDL rolled back together with the seed rows
    assert inspect(engine).get_table_names() == []
    engine.dispose()


def test_list_columns_tolerate_garbage(db):
    cabin = db.query(models.Cabin).first()
    db.execute(text("UPDATE cabins SET amenities = 'not json', images = NULL WHERE id = :id"), {"id": cabin.id})
    db.commit()
    db.expire_all()
    reloaded = db.query(models.Cabin).filter(models.Cabin.id == cabin.id).one()
    assert (reloaded.amenities, reloaded.images) == ([], [])


def test_metadata_matches_models():
    assert set(Base.metadata.tables) == {
        "cabins", "site_settings", "admin_credentials", "admin_path", "reviews",
    }

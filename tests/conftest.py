"""
translated_select Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v

Fixture data (SQLite file database per test):

    tl_colors (reference table, one row per pid + lang)
        id  pid  lang  name    alias   sorting  published
        1   1    en    Red     red     30       1
        2   1    de    Rot     rot     5        1
        3   2    en    Green   green   10       1
        4   3    de    Blau    blau    20       1
        5   4    en    Black   black   40       0
        6   5    en    White   white   50       1

    tl_color_master (sort override, keyed by pid)
        id  position
        1   1
        2   3
        3   2
        4   4
        5   5

    mm_products (owning model, color stores a pid)
        id  title    color
        1   Shirt    1
        2   Jacket   2
        3   Scarf    3
        4   Socks    1
        5   Hat      NULL
        6   Boots    4
"""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine

from translated_select.attribute.context import MetaModel
from translated_select.attribute.source import ReferenceSource
from translated_select.db.base import ReferenceStore
from translated_select.engine.config import AttributeConfig


# ---------------------------------------------------------------------------
# Global state: reset singletons between tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset global singletons between tests."""
    import translated_select.db.session as session_mod
    import translated_select.engine.config as cfg_mod
    import translated_select.engine.logging as log_mod

    cfg_mod._settings = None
    yield
    log_mod.shutdown_logging()
    logging.getLogger("translated_select").setLevel(logging.NOTSET)
    session_mod.close_store()
    cfg_mod._settings = None


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

def _create_schema(engine) -> None:
    metadata = MetaData()
    colors = Table(
        "tl_colors", metadata,
        Column("id", Integer, primary_key=True),
        Column("pid", Integer, nullable=False),
        Column("lang", String(5), nullable=False),
        Column("name", String(64), nullable=False),
        Column("alias", String(64), nullable=False),
        Column("sorting", Integer, nullable=False),
        Column("published", Integer, nullable=False),
    )
    master = Table(
        "tl_color_master", metadata,
        Column("id", Integer, primary_key=True),
        Column("position", Integer, nullable=False),
    )
    products = Table(
        "mm_products", metadata,
        Column("id", Integer, primary_key=True),
        Column("title", String(64), nullable=False),
        Column("color", Integer, nullable=True),
    )
    metadata.create_all(engine)

    with engine.begin() as conn:
        conn.execute(colors.insert(), [
            {"id": 1, "pid": 1, "lang": "en", "name": "Red", "alias": "red", "sorting": 30, "published": 1},
            {"id": 2, "pid": 1, "lang": "de", "name": "Rot", "alias": "rot", "sorting": 5, "published": 1},
            {"id": 3, "pid": 2, "lang": "en", "name": "Green", "alias": "green", "sorting": 10, "published": 1},
            {"id": 4, "pid": 3, "lang": "de", "name": "Blau", "alias": "blau", "sorting": 20, "published": 1},
            {"id": 5, "pid": 4, "lang": "en", "name": "Black", "alias": "black", "sorting": 40, "published": 0},
            {"id": 6, "pid": 5, "lang": "en", "name": "White", "alias": "white", "sorting": 50, "published": 1},
        ])
        conn.execute(master.insert(), [
            {"id": 1, "position": 1},
            {"id": 2, "position": 3},
            {"id": 3, "position": 2},
            {"id": 4, "position": 4},
            {"id": 5, "position": 5},
        ])
        conn.execute(products.insert(), [
            {"id": 1, "title": "Shirt", "color": 1},
            {"id": 2, "title": "Jacket", "color": 2},
            {"id": 3, "title": "Scarf", "color": 3},
            {"id": 4, "title": "Socks", "color": 1},
            {"id": 5, "title": "Hat", "color": None},
            {"id": 6, "title": "Boots", "color": 4},
        ])


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'metamodels.db'}"


@pytest.fixture
def engine(db_url):
    engine = create_engine(db_url)
    _create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return ReferenceStore(engine)


@pytest.fixture
def mock_store():
    """A store that records calls; used to prove no query was issued."""
    return MagicMock(spec=ReferenceStore)


# ---------------------------------------------------------------------------
# Attribute configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def config():
    return AttributeConfig(
        col_name="color",
        source_table="tl_colors",
        id_column="pid",
        alias_column="alias",
        value_column="name",
        language_column="lang",
        sort_column="sorting",
    )


@pytest.fixture
def override_config(config):
    return config.model_copy(update={
        "sort_override_table": "tl_color_master",
        "sort_override_column": "position",
    })


@pytest.fixture
def published_config(config):
    return config.model_copy(update={"additional_where": "published = 1"})


@pytest.fixture
def qualified_config(config):
    """Additional predicate written against the reference table's own name."""
    return config.model_copy(update={"additional_where": "tl_colors.published = 1"})


@pytest.fixture
def unconfigured():
    return AttributeConfig(col_name="color")


@pytest.fixture
def metamodel():
    return MetaModel(table_name="mm_products", active_language="de", fallback_language="en")


@pytest.fixture
def make_source(store):
    """Build a ReferenceSource for any config against the fixture store."""
    def _make(cfg, backing_store=None):
        return ReferenceSource(cfg, "mm_products", backing_store or store)
    return _make

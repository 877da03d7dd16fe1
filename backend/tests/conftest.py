"""
Pytest configuration and shared fixtures for the SiteOps backend tests.

Every test gets a fresh application bound to an in-memory SQLite database.
"""
from datetime import timedelta
from types import SimpleNamespace

import pytest

from app import create_app
from config.db import db
from models import (
    Boq,
    BoqItem,
    Item,
    Manpower,
    ManpowerSupplier,
    Site,
    Unit,
    User,
)
from utils.authentication import generate_access_token

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "SECRET_KEY": "test-secret-key",
    "RATELIMIT_ENABLED": False,
}


@pytest.fixture
def app():
    """Application with a freshly created schema."""
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    user = User(email="engineer@test.com", full_name="Site Engineer", role="site_engineer")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_headers(user):
    """Bearer header for the active test user."""
    return {"Authorization": f"Bearer {generate_access_token(user)}"}


@pytest.fixture
def expired_headers(user):
    token = generate_access_token(user, expires_in=timedelta(seconds=-10))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def seed(app):
    """
    Two sites, one labour supplier, four workers, three stock items and a
    BOQ with a group heading plus two priced items. A second BOQ exists
    so cross-BOQ item references can be tested.
    """
    main_site = Site(site="Main Tower", short_name="MT")
    annex_site = Site(site="Annex Block", short_name="AB")
    db.session.add_all([main_site, annex_site])

    supplier = ManpowerSupplier(supplier_name="Alpha Labour")
    db.session.add(supplier)

    bag = Unit(unit_name="bag")
    cum = Unit(unit_name="cum")
    db.session.add_all([bag, cum])
    db.session.flush()

    mason = Manpower(first_name="Ravi", last_name="Kumar", supplier_id=supplier.supplier_id,
                     category="skilled", skill_set="Mason", is_assigned=True,
                     current_site_id=main_site.site_id)
    helper = Manpower(first_name="Ali", middle_name="", last_name="Khan", supplier_id=supplier.supplier_id,
                      category="unskilled", skill_set="Helper", is_assigned=True,
                      current_site_id=main_site.site_id)
    carpenter = Manpower(first_name="Joseph", middle_name="P", last_name="Mathew",
                         supplier_id=supplier.supplier_id, category="unskilled", skill_set="Carpenter",
                         is_assigned=True, current_site_id=annex_site.site_id)
    unassigned = Manpower(first_name="Sam", last_name="Idle", supplier_id=supplier.supplier_id,
                          category="skilled", skill_set="Mason", is_assigned=False,
                          current_site_id=main_site.site_id)
    db.session.add_all([mason, helper, carpenter, unassigned])

    cement = Item(item_code="CEM-01", item="Cement OPC 53", unit_id=bag.unit_id)
    steel = Item(item_code="STL-01", item="TMT Steel 12mm", unit_id=None)
    sand = Item(item_code="SND-01", item="River Sand", unit_id=cum.unit_id)
    db.session.add_all([cement, steel, sand])

    boq = Boq(boq_no="BOQ-001", work_name="Foundation works", site_id=main_site.site_id)
    other_boq = Boq(boq_no="BOQ-002", work_name="Finishing works", site_id=annex_site.site_id)
    db.session.add_all([boq, other_boq])
    db.session.flush()

    heading = BoqItem(boq_id=boq.boq_id, item="Earth work", is_group=True)
    excavation = BoqItem(boq_id=boq.boq_id, item="Excavation", unit_id=cum.unit_id,
                         qty=100.5, rate=50, amount=5025)
    concrete = BoqItem(boq_id=boq.boq_id, item="PCC 1:4:8", unit_id=cum.unit_id,
                       qty=20, rate=120.5, amount=2410)
    painting = BoqItem(boq_id=other_boq.boq_id, item="Painting", qty=10, rate=15, amount=150)
    db.session.add_all([heading, excavation, concrete, painting])
    db.session.commit()

    return SimpleNamespace(
        main_site_id=main_site.site_id,
        annex_site_id=annex_site.site_id,
        supplier_id=supplier.supplier_id,
        mason_id=mason.manpower_id,
        helper_id=helper.manpower_id,
        carpenter_id=carpenter.manpower_id,
        unassigned_id=unassigned.manpower_id,
        cement_id=cement.item_id,
        steel_id=steel.item_id,
        sand_id=sand.item_id,
        boq_id=boq.boq_id,
        other_boq_id=other_boq.boq_id,
        heading_id=heading.boq_item_id,
        excavation_id=excavation.boq_item_id,
        concrete_id=concrete.boq_item_id,
        painting_id=painting.boq_item_id,
    )

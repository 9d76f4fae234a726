import pytest
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient

from backend.app import app as fastapi_app
from backend.basket import Basket, Product, default_pool
from backend.basket import repository

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def product_a() -> Product:
    return Product(id="A", name="Finale 100m", price=Decimal("10.00"), vat_rate=Decimal("20"))

@pytest.fixture
def product_b() -> Product:
    return Product(id="B", name="Pass Famille", price=Decimal("5.00"), vat_rate=Decimal("10"))

@pytest.fixture
def product_sub() -> Product:
    return Product(id="S", name="Abonnement", price=Decimal("7.50"), recurrent_payment=True)

@pytest.fixture
def basket() -> Basket:
    return Basket(product_pool=default_pool())

# Catalogue en mémoire isolé pour chaque test
@pytest.fixture(autouse=True)
def catalog(product_a, product_b, product_sub):
    repository.clear_products()
    for p in (product_a, product_b, product_sub):
        repository.register_product(p)
    yield repository
    repository.clear_products()

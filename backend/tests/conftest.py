# backend/tests/conftest.py

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from dotenv import load_dotenv

# Load the test environment before any callscript import so Settings sees it.
load_dotenv(dotenv_path=Path(__file__).resolve().parent.parent / ".env.test")

from callscript.main import app  # noqa: E402
from callscript.models.script import AttendanceConfig, AttendanceType, PersonType, Product  # noqa: E402
from callscript.navigation.session import NavigationSession  # noqa: E402
from callscript.services.product_resolver import InMemoryProductResolver  # noqa: E402
from callscript.services.session_service import OperatorSessionRegistry  # noqa: E402
from callscript.services.step_store import InMemoryStepStore  # noqa: E402
from callscript.utils.dependencies import (  # noqa: E402
    get_product_resolver, get_session_registry, get_step_store,
)
from script_factory import BROKEN_ID, CARTAO_ID, HABITACIONAL_ID, make_step  # noqa: E402


@pytest.fixture
def script_steps():
    return [
        make_step(
            "hab_abordagem", "Abordagem",
            [("É O CLIENTE", "hab_identificacao")],
            content="Olá, meu nome é [Nome do operador]. Falo com [Primeiro nome do cliente]?",
        ),
        make_step(
            "hab_identificacao", "Identificação do Cliente",
            [
                ("CONFIRMOU", "hab_motivo"),
                ("VOLTAR AO INÍCIO", "hab_abordagem"),
                ("TELA REMOVIDA", "hab_inexistente"),
                ("FINALIZAR", None),
            ],
        ),
        make_step("hab_motivo", "Motivo do Contato", [("FINALIZAR", None)]),
        make_step("car_inicio", "Abertura Cartão", [("SEGUIR", "car_oferta")], product_id=CARTAO_ID),
        make_step("car_oferta", "Oferta Cartão", [("FINALIZAR", None)], product_id=CARTAO_ID),
    ]


@pytest.fixture
def products():
    return [
        Product(
            id=HABITACIONAL_ID,
            name="HABITACIONAL",
            script_id="hab_abordagem",
            attendance_types={AttendanceType.ATIVO},
            person_types={PersonType.FISICA},
        ),
        Product(
            id=CARTAO_ID,
            name="CARTÃO",
            script_id="car_inicio",
            attendance_types={AttendanceType.ATIVO, AttendanceType.RECEPTIVO},
            person_types={PersonType.FISICA, PersonType.JURIDICA},
        ),
        Product(id=BROKEN_ID, name="QUEBRADO", script_id="nao_existe"),
    ]


@pytest.fixture
def step_store(script_steps):
    return InMemoryStepStore(script_steps)


@pytest.fixture
def product_resolver(products):
    return InMemoryProductResolver(products)


@pytest.fixture
def session(step_store, product_resolver):
    return NavigationSession(step_store, product_resolver, session_id="test-session")


@pytest.fixture
def habitacional_config():
    return AttendanceConfig(
        attendance_type=AttendanceType.ATIVO,
        person_type=PersonType.FISICA,
        product_id=HABITACIONAL_ID,
    )


@pytest.fixture
def registry(step_store, product_resolver):
    return OperatorSessionRegistry(step_store, product_resolver)


@pytest.fixture(scope="function")
def test_client(step_store, product_resolver, registry):
    """
    Provides a TestClient wired to the per-test stores instead of the
    module-level instances.
    """
    app.dependency_overrides[get_step_store] = lambda: step_store
    app.dependency_overrides[get_product_resolver] = lambda: product_resolver
    app.dependency_overrides[get_session_registry] = lambda: registry
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()

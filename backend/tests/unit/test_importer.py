# backend/tests/unit/test_importer.py

import pytest

from callscript.navigation.definitions import (
    HABITACIONAL_PRODUCT,
    HABITACIONAL_SCRIPT,
    HABITACIONAL_START_STEP,
    HABITACIONAL_TABULATIONS,
)
from callscript.navigation.importer import (
    ScriptImportError,
    import_script,
    parse_script_payload,
    product_id_for,
)
from callscript.navigation.validator import validate_script_graph
from callscript.services.product_resolver import InMemoryProductResolver
from callscript.services.step_store import InMemoryStepStore


def _payload(**products):
    return {"marcas": products}


def test_product_id_is_derived_from_name():
    assert product_id_for("HABITACIONAL") == "prod-habitacional"
    assert product_id_for("  Cartão  Crédito ") == "prod-cartão-crédito"


@pytest.mark.parametrize("payload", [None, [], {}, {"marcas": []}, {"produtos": {}}])
def test_payload_without_marcas_mapping_is_rejected(payload):
    with pytest.raises(ScriptImportError):
        parse_script_payload(payload)


def test_first_step_becomes_product_entry_point():
    result = parse_script_payload(_payload(CONSIGNADO={
        "inicio": {"id": "con_inicio", "title": "Início", "body": "Olá", "buttons": [
            {"label": "SEGUIR", "next": "con_fim", "primary": True},
        ]},
        "fim": {"id": "con_fim", "title": "Encerramento", "body": "Tchau", "buttons": [
            {"label": "FINALIZAR", "next": "fim"},
        ]},
    }))

    assert [product.id for product in result.products] == ["prod-consignado"]
    product = result.products[0]
    assert product.script_id == "con_inicio"
    assert product.name == "CONSIGNADO"
    assert result.step_count == 2
    assert [step.order for step in result.steps] == [1, 2]
    assert all(step.product_id == "prod-consignado" for step in result.steps)


def test_buttons_are_converted_with_terminal_marker():
    result = parse_script_payload(_payload(CONSIGNADO={
        "inicio": {"id": "con_inicio", "title": "Início", "buttons": [
            {"label": "SEGUIR", "next": "con_oferta", "primary": True},
            {"label": "VOLTAR", "next": "con_inicio"},
            {"label": "ENCERRAR", "next": "fim"},
        ]},
    }))

    buttons = result.steps[0].buttons
    assert [button.id for button in buttons] == ["con_inicio-btn-0", "con_inicio-btn-1", "con_inicio-btn-2"]
    assert [button.order for button in buttons] == [1, 2, 3]
    assert buttons[0].primary is True
    assert buttons[1].variant == "secondary"
    assert buttons[2].next_step_id is None
    assert buttons[2].is_terminal is True


def test_malformed_entries_are_quarantined():
    result = parse_script_payload(_payload(CONSIGNADO={
        "inicio": {"id": "con_inicio", "title": "Início", "buttons": []},
        "sem_titulo": {"id": "con_x", "title": "  ", "buttons": []},
        "botao_ruim": {"id": "con_y", "title": "Y", "buttons": [{"label": "IR"}]},
        "repetido": {"id": "con_inicio", "title": "Outro início", "buttons": []},
        "texto": "não é um objeto",
    }))

    assert [step.id for step in result.steps] == ["con_inicio"]
    codes = {entry.key: entry.error_code for entry in result.rejected}
    assert codes == {
        "sem_titulo": "EMPTY_STEP_TITLE",
        "botao_ruim": "EMPTY_BUTTON_TARGET",
        "repetido": "DUPLICATE_STEP_ID",
        "texto": "STEP_NOT_OBJECT",
    }


def test_product_without_valid_steps_is_skipped():
    result = parse_script_payload(_payload(
        VAZIO={"x": {"title": "Sem id"}},
        LISTA=["não", "é", "mapa"],
    ))

    assert result.products == []
    assert {entry.error_code for entry in result.rejected} == {"EMPTY_STEP_ID", "PRODUCT_NOT_OBJECT"}


def test_tabulations_are_attached_by_step_id():
    result = parse_script_payload(
        _payload(CONSIGNADO={"inicio": {"id": "con_inicio", "title": "Início", "buttons": []}}),
        tabulations={"con_inicio": {"name": "Recado Deixado", "description": "Retornar depois"}},
    )

    assert result.steps[0].tabulation_info.name == "Recado Deixado"


@pytest.mark.asyncio
async def test_import_writes_stores_and_counts_new_products_only():
    store = InMemoryStepStore()
    resolver = InMemoryProductResolver()
    listener_calls = []
    store.subscribe(lambda: listener_calls.append("steps"))

    first = import_script(HABITACIONAL_SCRIPT, store, resolver, HABITACIONAL_TABULATIONS)
    second = import_script(HABITACIONAL_SCRIPT, store, resolver, HABITACIONAL_TABULATIONS)

    assert first.product_count == 1
    assert second.product_count == 0
    assert first.rejected == []
    assert len(store) == first.step_count
    assert listener_calls == ["steps", "steps"]

    product = resolver.find_by_name(HABITACIONAL_PRODUCT)
    assert product.script_id == HABITACIONAL_START_STEP
    entry = await store.get_step_by_id(HABITACIONAL_START_STEP, product.id)
    assert entry.title == "Abordagem"


def test_bundled_script_is_a_consistent_graph():
    result = parse_script_payload(HABITACIONAL_SCRIPT, HABITACIONAL_TABULATIONS)
    report = validate_script_graph(result.steps, result.products)

    assert result.rejected == []
    assert report["is_valid"] is True
    assert report["dangling_references"] == []
    assert report["unreachable_steps"] == []


def test_import_error_is_counted(mocker):
    counter = mocker.patch("callscript.navigation.importer.script_import_counter")

    with pytest.raises(ScriptImportError):
        import_script({"wrong": True}, InMemoryStepStore(), InMemoryProductResolver())

    counter.labels.assert_called_once_with(status="invalid")

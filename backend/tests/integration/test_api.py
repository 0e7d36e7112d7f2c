# backend/tests/integration/test_api.py

from callscript.config.settings import settings
from script_factory import CARTAO_ID, HABITACIONAL_ID

API_PREFIX = f"/api/{settings.api_version}"
OPERATOR = f"{API_PREFIX}/operator/sessions/op-1"


def _start(test_client, product_id=HABITACIONAL_ID, **overrides):
    body = {
        "attendance_type": "ativo",
        "person_type": "fisica",
        "product_id": product_id,
        "operator_name": "Maria Souza",
    }
    body.update(overrides)
    return test_client.post(f"{OPERATOR}/start", json=body)


# --- Public endpoints ---

def test_root_endpoint(test_client):
    response = test_client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "callscript"
    assert data["environment"] == "test"


def test_health_check(test_client):
    response = test_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readiness_reports_loaded_steps(test_client):
    response = test_client.get("/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "steps": 5}


def test_metrics_endpoint(test_client):
    _start(test_client)
    response = test_client.get("/metrics")
    assert response.status_code == 200
    assert "navigation_transitions_total" in response.text
    assert "X-Process-Time" in response.headers


# --- Operator endpoints ---

def test_list_eligible_products(test_client):
    response = test_client.get(
        f"{API_PREFIX}/operator/products", params={"attendance_type": "receptivo", "person_type": "juridica"}
    )
    assert response.status_code == 200
    ids = [product["id"] for product in response.json()["data"]["products"]]
    assert HABITACIONAL_ID not in ids
    assert CARTAO_ID in ids


def test_list_products_rejects_unknown_type(test_client):
    response = test_client.get(
        f"{API_PREFIX}/operator/products", params={"attendance_type": "presencial", "person_type": "fisica"}
    )
    assert response.status_code == 422


def test_start_renders_entry_step(test_client):
    response = _start(test_client)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["is_active"] is True
    assert data["history"] == ["hab_abordagem"]
    assert data["can_go_back"] is False
    assert data["attendance_config"] == {
        "attendance_type": "ativo",
        "person_type": "fisica",
        "product_id": HABITACIONAL_ID,
    }
    step = data["current_step"]
    assert "[Nome do operador]" in step["content"]
    assert "<strong>Maria</strong>" in step["rendered_content"]
    assert "<strong>Cliente</strong>" in step["rendered_content"]
    assert [button["label"] for button in step["buttons"]] == ["É O CLIENTE"]


def test_start_with_incomplete_selection_is_rejected(test_client):
    response = _start(test_client, person_type="")
    assert response.status_code == 422
    assert response.json()["detail"]["message"] == "Por favor, complete todas as seleções antes de iniciar"


def test_start_with_unknown_product_is_rejected(test_client):
    response = _start(test_client, product_id="prod-inexistente")
    assert response.status_code == 422
    assert "Produto não encontrado" in response.json()["detail"]["message"]


def test_start_with_broken_entry_point_is_rejected(test_client):
    response = _start(test_client, product_id="prod-quebrado")
    assert response.status_code == 422
    assert "Script não encontrado" in response.json()["detail"]["message"]


def test_navigation_flow(test_client):
    _start(test_client)

    response = test_client.post(f"{OPERATOR}/advance", json={"next_step_id": "hab_identificacao"})
    assert response.json()["message"] == "Step changed"
    assert response.json()["data"]["history"] == ["hab_abordagem", "hab_identificacao"]
    assert response.json()["data"]["can_go_back"] is True

    response = test_client.post(f"{OPERATOR}/advance", json={"next_step_id": "hab_inexistente"})
    assert response.status_code == 200
    assert response.json()["message"] == "Transition ignored"
    assert response.json()["data"]["current_step"]["id"] == "hab_identificacao"

    response = test_client.post(f"{OPERATOR}/back")
    assert response.json()["message"] == "Went back"
    assert response.json()["data"]["current_step"]["id"] == "hab_abordagem"

    response = test_client.post(f"{OPERATOR}/back")
    assert response.json()["message"] == "Transition ignored"


def test_terminal_button_finishes_attendance(test_client):
    _start(test_client)
    test_client.post(f"{OPERATOR}/customer", json={"first_name": "João"})

    response = test_client.post(f"{OPERATOR}/advance", json={"next_step_id": None})

    assert response.json()["message"] == "Attendance finished"
    data = response.json()["data"]
    assert data["is_active"] is False
    assert data["current_step"] is None
    assert data["attendance_config"] is None


def test_search_jump_highlights_title(test_client):
    _start(test_client)

    response = test_client.post(f"{OPERATOR}/search", json={"query": "motivo"})

    assert response.json()["message"] == "Step found"
    data = response.json()["data"]
    assert data["current_step"]["id"] == "hab_motivo"
    assert data["current_step"]["highlighted_title"] == "<mark>Motivo</mark> do Contato"
    assert data["history"] == ["hab_abordagem"]
    assert data["search_query"] == "motivo"

    response = test_client.post(f"{OPERATOR}/search", json={"query": "xyz"})
    assert response.json()["message"] == "No results"


def test_customer_names_are_rendered(test_client):
    _start(test_client)

    response = test_client.post(f"{OPERATOR}/customer", json={"first_name": "João", "full_name": "João da Silva"})

    assert "<strong>João</strong>" in response.json()["data"]["current_step"]["rendered_content"]


def test_reset_returns_to_configuration(test_client):
    _start(test_client)
    test_client.post(f"{OPERATOR}/advance", json={"next_step_id": "hab_identificacao"})

    response = test_client.post(f"{OPERATOR}/reset")

    assert response.status_code == 200
    assert response.json()["data"]["is_active"] is False
    assert response.json()["data"]["history"] == []


def test_product_shortcut(test_client):
    _start(test_client)

    response = test_client.post(f"{OPERATOR}/product", json={"product_id": CARTAO_ID})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["current_step"]["id"] == "car_inicio"
    assert data["attendance_config"]["product_id"] == CARTAO_ID


def test_get_session_refreshes_current_step(test_client, step_store):
    _start(test_client)
    step = step_store._steps["hab_abordagem"]
    step_store.upsert_steps([step.model_copy(update={"title": "Abordagem Inicial"})])

    response = test_client.get(OPERATOR)

    assert response.json()["data"]["current_step"]["title"] == "Abordagem Inicial"


def test_unknown_operator_session_returns_404(test_client):
    assert test_client.get(f"{API_PREFIX}/operator/sessions/ninguem").status_code == 404
    response = test_client.post(f"{API_PREFIX}/operator/sessions/ninguem/advance", json={"next_step_id": "x"})
    assert response.status_code == 404


# --- Admin endpoints ---

def test_import_script(test_client, product_resolver):
    payload = {"marcas": {"CONSIGNADO": {
        "inicio": {"id": "con_inicio", "title": "Início", "body": "Olá", "buttons": [
            {"label": "FINALIZAR", "next": "fim"},
        ]},
        "quebrado": {"id": "con_quebrado", "title": ""},
    }}}

    response = test_client.post(f"{API_PREFIX}/admin/scripts/import", json=payload)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["product_count"] == 1
    assert data["step_count"] == 1
    assert data["products"] == ["prod-consignado"]
    assert data["rejected"][0]["error_code"] == "EMPTY_STEP_TITLE"
    assert product_resolver.find_by_name("CONSIGNADO") is not None


def test_import_invalid_format(test_client):
    response = test_client.post(f"{API_PREFIX}/admin/scripts/import", json={"produtos": {}})
    assert response.status_code == 400


def test_validate_scripts(test_client):
    response = test_client.get(f"{API_PREFIX}/admin/scripts/validate")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert len(body["data"]["entry_errors"]) == 1
    assert body["data"]["dangling_references"][0]["next_step_id"] == "hab_inexistente"


def test_admin_sessions_and_force_logout(test_client):
    _start(test_client)

    response = test_client.get(f"{API_PREFIX}/admin/sessions")
    assert response.json()["data"] == {"total": 1, "active": 1}

    response = test_client.post(f"{API_PREFIX}/admin/sessions/op-1/force-logout")
    assert response.status_code == 200
    assert test_client.get(OPERATOR).status_code == 404

    response = test_client.post(f"{API_PREFIX}/admin/sessions/op-1/force-logout")
    assert response.status_code == 404

from datetime import date

import pytest

from core.api import fetchers
from core.api.errors import QueryError


def test_fetch_operators(graphql_client):
    client = graphql_client({"GetUsuarios": {"data": {"usuarios": [
        {"id": "1", "numero": " A01 ", "nombre": "Ana"},
        {"id": "2", "numero": "B07", "nombre": "Beto"},
        None,
    ]}}})
    operators = fetchers.fetch_operators(client)
    assert [(op.id, op.code, op.name) for op in operators] == [("1", "A01", "Ana"), ("2", "B07", "Beto")]


def test_fetch_operator_day(graphql_client, make_assignment):
    client = graphql_client({"GetUsuario": {"data": {"usuario": {
        "id": "1",
        "nombre": "Ana",
        "procesosAsignados": [make_assignment(start=0, end=30), None],
    }}}})
    operator_day = fetchers.fetch_operator_day(client, "A01", date(2025, 3, 3))

    assert client.sent[0]["body"]["variables"] == {"numero": "A01", "fecha": "2025-03-03"}
    assert operator_day.name == "Ana"
    assert len(operator_day.assignments) == 1
    assert operator_day.assignments[0].machine_name == "CNC-1"


def test_fetch_operator_day_unknown_operator(graphql_client):
    client = graphql_client({"GetUsuario": {"data": {"usuario": None}}})
    assert fetchers.fetch_operator_day(client, "Z99") is None
    assert client.sent[0]["body"]["variables"]["fecha"] is None


def test_fetch_operator_day_rejects_invalid_code_before_sending(graphql_client):
    client = graphql_client({})
    with pytest.raises(ValueError):
        fetchers.fetch_operator_day(client, "A01; DROP")
    assert client.sent == []


def test_fetch_operator_day_propagates_query_errors(graphql_client):
    client = graphql_client({"GetUsuario": {"data": None, "errors": [{"message": "fecha inválida"}]}})
    with pytest.raises(QueryError, match="fecha inválida"):
        fetchers.fetch_operator_day(client, "A01")


def test_fetch_operation_processes_drops_null_records(graphql_client, make_process_record):
    client = graphql_client({"GetProcesosOperacion": {"data": {"procesosOperacion": [
        make_process_record(), None,
    ]}}})
    assert len(fetchers.fetch_operation_processes(client)) == 1


def test_fetch_project_operations(graphql_client, make_operation):
    client = graphql_client({"GetAvanceProyectos": {"data": {"operaciones": [
        make_operation(quantity=10, steps=[("Corte", 10), ("CNC", 3)]),
    ]}}})
    operations = fetchers.fetch_project_operations(client)
    assert operations[0].order_quantity == 10
    assert [s.current_count for s in operations[0].steps] == [10, 3]


def test_create_project_sends_input(graphql_client):
    client = graphql_client({"AgregarNuevoProyecto": {"data": {"crearProyecto": {"id": "9", "proyecto": "Gamma"}}}})
    created = fetchers.create_project(client, "  Gamma ", "Línea nueva")
    assert created["id"] == "9"
    assert client.sent[0]["body"]["variables"] == {"input": {"proyecto": "Gamma", "descripcion": "Línea nueva"}}


def test_create_project_requires_a_name(graphql_client):
    client = graphql_client({})
    with pytest.raises(ValueError, match="cannot be empty"):
        fetchers.create_project(client, "   ")


def test_delete_mutations_send_their_keys(graphql_client):
    client = graphql_client({
        "EliminarProyecto": {"data": {"eliminarProyectoPorNombre": True}},
        "EliminarUsuario": {"data": {"eliminarUsuarioPorNumero": True}},
        "EliminarMaquina": {"data": {"eliminarMaquinaPorNombre": True}},
        "EliminarWorkOrder": {"data": {"eliminarWorkorder": True}},
    })
    assert fetchers.delete_project(client, "Gamma") is True
    assert fetchers.delete_user(client, "A01") is True
    assert fetchers.delete_machine(client, "CNC-1") is True
    assert fetchers.delete_work_order(client, "WO-55") is True

    sent = [entry["body"]["variables"] for entry in client.sent]
    assert sent == [{"proyecto": "Gamma"}, {"numero": "A01"}, {"nombre": "CNC-1"}, {"workorder": "WO-55"}]


def test_create_user_and_machine(graphql_client):
    client = graphql_client({
        "AgregarNuevoUsuario": {"data": {"crearUsuario": {"id": "3"}}},
        "AgregarNuevaMaquina": {"data": {"crearMaquina": {"id": "4"}}},
    })
    assert fetchers.create_user(client, "C12", "Carla") == {"id": "3"}
    assert fetchers.create_machine(client, "Prensa 2") == {"id": "4"}
    assert client.sent[0]["body"]["variables"] == {"input": {"numero": "C12", "nombre": "Carla"}}
    assert client.sent[1]["body"]["variables"] == {"input": {"nombre": "Prensa 2"}}


def test_shutdown_active_sessions(graphql_client):
    client = graphql_client({"ManualShutdown": {"data": {"shutdownSesionesActivas": 7}}})
    assert fetchers.shutdown_active_sessions(client) == 7

"""
Data Fetching Module

Runs the dashboard's GraphQL queries and mutations against the tracking API
and converts the payloads into typed records. Query failures propagate as
QueryError so the page can show a blocking error panel.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from core.api.client import GraphQLClient
from core.api.queries import (
    GET_OPERATION_PROCESSES,
    GET_OPERATORS,
    GET_PROJECT_PROGRESS,
    SHUTDOWN_ACTIVE_SESSIONS,
    query_builder,
)
from core.models import Operation, Operator, OperatorDay, to_int

logger = logging.getLogger(__name__)


def fetch_operators(client: GraphQLClient) -> List[Operator]:
    """Fetch every operator (id, code, name)."""
    logger.info("Fetching operators")
    data = client.execute(GET_OPERATORS, operation_name="GetUsuarios")
    operators = [Operator.from_payload(u) for u in data.get("usuarios") or [] if u]
    logger.info(f"Successfully fetched {len(operators)} operators")
    return operators


def fetch_operator_day(
    client: GraphQLClient,
    operator_code: str,
    day: Optional[date] = None
) -> Optional[OperatorDay]:
    """
    Fetch one operator's process assignments for a day.

    Args:
        client: GraphQL client
        operator_code: Operator number
        day: Date to report on, or None for the server default

    Returns:
        OperatorDay, or None if the server knows no such operator
    """
    query, variables = query_builder.build_operator_day_query(operator_code, day)
    data = client.execute(query, variables, operation_name="GetUsuario")

    payload = data.get("usuario")
    if not payload:
        logger.warning(f"No operator found for code {operator_code}")
        return None

    operator_day = OperatorDay.from_payload(payload)
    logger.info(
        f"Fetched {len(operator_day.assignments)} assignments for operator "
        f"{operator_code} on {variables['fecha']}"
    )
    return operator_day


def fetch_operation_processes(client: GraphQLClient) -> List[Dict[str, Any]]:
    """
    Fetch the live operation-process feed.

    Records are returned raw; the machine board filters and maps them.
    """
    logger.info("Fetching live operation processes")
    data = client.execute(GET_OPERATION_PROCESSES, operation_name="GetProcesosOperacion")
    records = [r for r in data.get("procesosOperacion") or [] if r]
    logger.info(f"Successfully fetched {len(records)} operation-process records")
    return records


def fetch_project_operations(client: GraphQLClient) -> List[Operation]:
    """Fetch operations with project, work-order quantity and ordered steps."""
    logger.info("Fetching project operations")
    data = client.execute(GET_PROJECT_PROGRESS, operation_name="GetAvanceProyectos")
    operations = [Operation.from_payload(op) for op in data.get("operaciones") or [] if op]
    logger.info(f"Successfully fetched {len(operations)} operations")
    return operations


# Administration mutations

def create_project(client: GraphQLClient, name: str, description: str = "") -> Dict[str, Any]:
    """Create a project; returns the created record."""
    query, variables = query_builder.build_create_project(name, description)
    data = client.execute(query, variables, operation_name="AgregarNuevoProyecto")
    logger.info(f"Created project '{variables['input']['proyecto']}'")
    return data.get("crearProyecto") or {}


def delete_project(client: GraphQLClient, name: str) -> Any:
    """Delete a project by name; returns the server's result value."""
    query, variables = query_builder.build_delete_project(name)
    data = client.execute(query, variables, operation_name="EliminarProyecto")
    logger.info(f"Deleted project '{variables['proyecto']}'")
    return data.get("eliminarProyectoPorNombre")


def create_user(client: GraphQLClient, operator_code: str, name: str) -> Dict[str, Any]:
    """Create an operator account; returns the created record."""
    query, variables = query_builder.build_create_user(operator_code, name)
    data = client.execute(query, variables, operation_name="AgregarNuevoUsuario")
    logger.info(f"Created user {variables['input']['numero']}")
    return data.get("crearUsuario") or {}


def delete_user(client: GraphQLClient, operator_code: str) -> Any:
    query, variables = query_builder.build_delete_user(operator_code)
    data = client.execute(query, variables, operation_name="EliminarUsuario")
    logger.info(f"Deleted user {variables['numero']}")
    return data.get("eliminarUsuarioPorNumero")


def create_machine(client: GraphQLClient, name: str) -> Dict[str, Any]:
    query, variables = query_builder.build_create_machine(name)
    data = client.execute(query, variables, operation_name="AgregarNuevaMaquina")
    logger.info(f"Created machine '{variables['input']['nombre']}'")
    return data.get("crearMaquina") or {}


def delete_machine(client: GraphQLClient, name: str) -> Any:
    query, variables = query_builder.build_delete_machine(name)
    data = client.execute(query, variables, operation_name="EliminarMaquina")
    logger.info(f"Deleted machine '{variables['nombre']}'")
    return data.get("eliminarMaquinaPorNombre")


def delete_work_order(client: GraphQLClient, work_order: str) -> Any:
    query, variables = query_builder.build_delete_work_order(work_order)
    data = client.execute(query, variables, operation_name="EliminarWorkOrder")
    logger.info(f"Deleted work order '{variables['workorder']}'")
    return data.get("eliminarWorkorder")


def shutdown_active_sessions(client: GraphQLClient) -> int:
    """
    Close every active work session on the plant.

    Returns:
        Number of sessions that were ended
    """
    data = client.execute(SHUTDOWN_ACTIVE_SESSIONS, operation_name="ManualShutdown")
    closed = to_int(data.get("shutdownSesionesActivas"))
    logger.warning(f"Manual shutdown ended {closed} active sessions")
    return closed

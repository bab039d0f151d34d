"""Shared fixtures: a fixed clock and builders for tracking API payloads."""

import json
from datetime import datetime, timedelta

import httpx
import pytest
import pytz

from core.api.client import GraphQLClient

NOW = datetime(2025, 3, 3, 17, 0, tzinfo=pytz.UTC)


def iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_assignment():
    """Build a `procesosAsignados` item; start/end are minute offsets from 08:00 UTC."""
    day_start = datetime(2025, 3, 3, 8, 0, tzinfo=pytz.UTC)

    def _make(start=None, end=None, actual=None, estimate=None,
              operation="OP-100", project="Proyecto A", machine="CNC-1",
              process="Corte"):
        return {
            "proceso": {"nombre": process},
            "tiempoEstimado": estimate,
            "horaInicio": iso(day_start + timedelta(minutes=start)) if start is not None else None,
            "horaFin": iso(day_start + timedelta(minutes=end)) if end is not None else None,
            "tiempoRealCalculado": actual,
            "operacion": {
                "operacion": operation,
                "proyecto": {"proyecto": project} if project is not None else None,
            },
            "maquina": {"nombre": machine} if machine is not None else None,
        }

    return _make


@pytest.fixture
def make_process_record():
    """Build a `procesosOperacion` item for the machine board."""

    def _make(record_id="1", state="in_progress", machine="CNC-1", started_minutes_ago=10,
              estimate=30, operator="Ana", piece="Corte", operation="OP-100"):
        started = NOW - timedelta(minutes=started_minutes_ago) if started_minutes_ago is not None else None
        return {
            "id": record_id,
            "operacion": {"operacion": operation} if operation is not None else None,
            "maquina": {"nombre": machine} if machine is not None else None,
            "usuario": {"nombre": operator} if operator is not None else None,
            "proceso": {"nombre": piece} if piece is not None else None,
            "estado": state,
            "tiempoEstimado": estimate,
            "horaInicio": iso(started) if started else None,
        }

    return _make


@pytest.fixture
def make_operation():
    """Build an `operaciones` item; steps is a list of (name, count) pairs."""

    def _make(project_id="1", project="Proyecto A", quantity=10, steps=(), name="OP-100"):
        return {
            "id": name,
            "operacion": name,
            "workorder": {"cantidad": quantity} if quantity is not None else None,
            "proyecto": {"id": project_id, "proyecto": project} if project_id is not None else None,
            "procesos": [
                {
                    "id": f"{name}-{i}",
                    "estado": "in_progress",
                    "conteoActual": count,
                    "proceso": {"nombre": step_name},
                    "horaInicio": None,
                    "tiempoEstimado": None,
                }
                for i, (step_name, count) in enumerate(steps)
            ],
        }

    return _make


@pytest.fixture
def graphql_client():
    """
    Build a GraphQLClient whose HTTP layer answers from a dict of
    operationName -> response body. Sent requests are recorded in `.sent`.
    """
    clients = []

    def _make(responses, auth=None):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            sent.append({"body": body, "headers": dict(request.headers)})
            reply = responses[body.get("operationName")]
            if isinstance(reply, httpx.Response):
                return reply
            return httpx.Response(200, json=reply)

        client = GraphQLClient(
            url="http://api.test/graphql/",
            auth=auth,
            transport=httpx.MockTransport(handler),
        )
        client.sent = sent
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()

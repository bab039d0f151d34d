"""
GraphQL Query Builder Module

Holds the GraphQL documents used by the dashboard and builds validated
(document, variables) pairs for them. Values always travel as GraphQL
variables, never interpolated into the document text.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)


GET_OPERATORS = """
  query GetUsuarios {
    usuarios {
      id
      numero
      nombre
    }
  }
"""

GET_OPERATOR_DAY = """
  query GetUsuario($numero: String!, $fecha: Date) {
    usuario(numero: $numero, fecha: $fecha) {
      id
      nombre
      procesosAsignados {
        proceso {
          nombre
        }
        tiempoEstimado
        horaInicio
        horaFin
        tiempoRealCalculado
        operacion {
          operacion
          proyecto {
            proyecto
          }
        }
        maquina {
          nombre
        }
      }
    }
  }
"""

GET_OPERATION_PROCESSES = """
  query GetProcesosOperacion {
    procesosOperacion {
      id
      operacion {
        operacion
      }
      maquina {
        nombre
      }
      usuario {
        nombre
      }
      proceso {
        nombre
      }
      estado
      tiempoEstimado
      horaInicio
    }
  }
"""

GET_PROJECT_PROGRESS = """
  query GetAvanceProyectos {
    operaciones {
      id
      operacion
      workorder {
        cantidad
      }
      proyecto {
        id
        proyecto
      }
      procesos {
        id
        estado
        conteoActual
        proceso {
          nombre
        }
        horaInicio
        tiempoEstimado
      }
    }
  }
"""

CREATE_PROJECT = """
  mutation AgregarNuevoProyecto($input: CrearProyectoInput!) {
    crearProyecto(input: $input) {
      id
      proyecto
      descripcion
    }
  }
"""

DELETE_PROJECT = """
  mutation EliminarProyecto($proyecto: String!) {
    eliminarProyectoPorNombre(proyecto: $proyecto)
  }
"""

CREATE_USER = """
  mutation AgregarNuevoUsuario($input: CrearUsuarioInput!) {
    crearUsuario(input: $input) {
      id
      numero
      nombre
    }
  }
"""

DELETE_USER = """
  mutation EliminarUsuario($numero: String!) {
    eliminarUsuarioPorNumero(numero: $numero)
  }
"""

CREATE_MACHINE = """
  mutation AgregarNuevaMaquina($input: CrearMaquinaInput!) {
    crearMaquina(input: $input) {
      id
      nombre
    }
  }
"""

DELETE_MACHINE = """
  mutation EliminarMaquina($nombre: String!) {
    eliminarMaquinaPorNombre(nombre: $nombre)
  }
"""

DELETE_WORK_ORDER = """
  mutation EliminarWorkOrder($workorder: String!) {
    eliminarWorkorder(workorder: $workorder)
  }
"""

SHUTDOWN_ACTIVE_SESSIONS = """
  mutation ManualShutdown {
    shutdownSesionesActivas
  }
"""

MAX_NAME_LENGTH = 255
OPERATOR_CODE_PATTERN = re.compile(r'^[A-Za-z0-9_-]{1,32}$')


class QueryBuilder:
    """Builds (document, variables) pairs with input validation."""

    @staticmethod
    def validate_operator_code(code: str) -> bool:
        """
        Validate operator code format.

        Args:
            code: Operator number as entered in the tracking system

        Returns:
            bool: True if valid code format
        """
        if not code:
            return False
        return bool(OPERATOR_CODE_PATTERN.match(str(code).strip()))

    @staticmethod
    def clean_name(value: Optional[str], field_name: str) -> str:
        """
        Strip and validate a free-text name field.

        Raises:
            ValueError: If the value is empty or too long
        """
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError(f"{field_name} cannot be empty")
        if len(cleaned) > MAX_NAME_LENGTH:
            raise ValueError(f"{field_name} is too long (max {MAX_NAME_LENGTH} characters)")
        return cleaned

    @staticmethod
    def format_query_date(day: Optional[Union[date, datetime]]) -> Optional[str]:
        """Format a date as the API's `Date` scalar (YYYY-MM-DD)."""
        if day is None:
            return None
        return day.strftime("%Y-%m-%d")

    def build_operator_day_query(
        self,
        operator_code: str,
        day: Optional[Union[date, datetime]] = None
    ) -> Tuple[str, Dict[str, Any]]:
        """
        Build the operator-day query.

        Args:
            operator_code: Operator number
            day: Date to report on; None lets the server pick its default

        Returns:
            Tuple[str, Dict[str, Any]]: (document, variables)

        Raises:
            ValueError: If the operator code is invalid
        """
        if not self.validate_operator_code(operator_code):
            raise ValueError(f"Invalid operator code: {operator_code!r}")

        variables = {
            "numero": str(operator_code).strip(),
            "fecha": self.format_query_date(day),
        }
        logger.info(f"Built operator-day query for {variables['numero']} on {variables['fecha']}")
        return GET_OPERATOR_DAY, variables

    def build_create_project(self, name: str, description: str = "") -> Tuple[str, Dict[str, Any]]:
        variables = {
            "input": {
                "proyecto": self.clean_name(name, "Project name"),
                "descripcion": (description or "").strip(),
            }
        }
        return CREATE_PROJECT, variables

    def build_delete_project(self, name: str) -> Tuple[str, Dict[str, Any]]:
        return DELETE_PROJECT, {"proyecto": self.clean_name(name, "Project name")}

    def build_create_user(self, operator_code: str, name: str) -> Tuple[str, Dict[str, Any]]:
        if not self.validate_operator_code(operator_code):
            raise ValueError(f"Invalid operator code: {operator_code!r}")
        variables = {
            "input": {
                "numero": str(operator_code).strip(),
                "nombre": self.clean_name(name, "User name"),
            }
        }
        return CREATE_USER, variables

    def build_delete_user(self, operator_code: str) -> Tuple[str, Dict[str, Any]]:
        if not self.validate_operator_code(operator_code):
            raise ValueError(f"Invalid operator code: {operator_code!r}")
        return DELETE_USER, {"numero": str(operator_code).strip()}

    def build_create_machine(self, name: str) -> Tuple[str, Dict[str, Any]]:
        return CREATE_MACHINE, {"input": {"nombre": self.clean_name(name, "Machine name")}}

    def build_delete_machine(self, name: str) -> Tuple[str, Dict[str, Any]]:
        return DELETE_MACHINE, {"nombre": self.clean_name(name, "Machine name")}

    def build_delete_work_order(self, work_order: str) -> Tuple[str, Dict[str, Any]]:
        return DELETE_WORK_ORDER, {"workorder": self.clean_name(work_order, "Work order")}


# Global instance for convenience
query_builder = QueryBuilder()
